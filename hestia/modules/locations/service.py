"""
Location sharing: per-user settings, the latest sample, pairwise
permissions and the visibility resolver that joins them.
"""

from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from hestia.core.db import transaction
from hestia.core.errors import Forbidden, InvalidCoordinates, ValidationError
from hestia.core.sharing_config import DEFAULT_SHARING_MODE, TIMED_SHARING_DEFAULT_MINUTES
from hestia.modules.connections import service as connections
from hestia.modules.connections.models import Connection
from hestia.modules.notifications.service import notify
from hestia.modules.users.models import User
from hestia.schemas.enums import NotificationType, SharingMode
from hestia.services.media import encode_picture
from .models import LocationPermission, LocationSample, LocationSetting


def _now() -> datetime:
    return datetime.utcnow()


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------

def get_settings(db: Session, username: str) -> tuple[bool, SharingMode]:
    setting = db.get(LocationSetting, username)
    if not setting:
        return False, SharingMode.off
    return setting.is_enabled, SharingMode(setting.sharing_mode)


def update_settings(
    db: Session,
    username: str,
    is_enabled: bool,
    sharing_mode: SharingMode,
    duration_minutes: int | None = None,
) -> LocationSetting:
    sharing_mode = SharingMode(sharing_mode)
    now = _now()

    if not is_enabled:
        sharing_mode = SharingMode.off
    elif sharing_mode == SharingMode.off:
        # an enabled row always carries a visible mode
        sharing_mode = DEFAULT_SHARING_MODE

    sharing_until = None
    if sharing_mode == SharingMode.timed:
        sharing_until = now + timedelta(minutes=duration_minutes or TIMED_SHARING_DEFAULT_MINUTES)

    with transaction(db):
        setting = db.get(LocationSetting, username)
        if not setting:
            setting = LocationSetting(username=username)
            db.add(setting)

        setting.is_enabled = is_enabled
        setting.sharing_mode = sharing_mode.value
        setting.sharing_until = sharing_until
        setting.updated_at = now

        if not is_enabled:
            # stop broadcasting immediately
            sample = db.get(LocationSample, username)
            if sample:
                db.delete(sample)

    logger.info(
        f"Location settings | user={username} enabled={is_enabled} "
        f"mode={sharing_mode.value} until={sharing_until}"
    )
    return setting


# ------------------------------------------------------------------
# Samples
# ------------------------------------------------------------------

def validate_coordinates(latitude: float, longitude: float) -> None:
    if latitude is None or longitude is None:
        raise ValidationError("Missing location coordinates")
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise InvalidCoordinates()


def _ensure_self_permission(db: Session, username: str) -> None:
    row = (
        db.query(LocationPermission)
        .filter(
            LocationPermission.requester_username == username,
            LocationPermission.target_username == username,
        )
        .first()
    )
    if row:
        row.is_approved = True
        return

    db.add(
        LocationPermission(
            requester_username=username,
            target_username=username,
            is_approved=True,
        )
    )


def update_location(
    db: Session,
    username: str,
    latitude: float,
    longitude: float,
    accuracy: float | None = None,
) -> LocationSample:
    validate_coordinates(latitude, longitude)
    now = _now()

    with transaction(db):
        old = db.get(LocationSample, username)
        if old:
            db.delete(old)
            # the delete must reach the table before the insert reuses the key
            db.flush()

        sample = LocationSample(
            username=username,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            timestamp=now,
        )
        db.add(sample)

        setting = db.get(LocationSetting, username)
        if not setting:
            db.add(
                LocationSetting(
                    username=username,
                    is_enabled=True,
                    sharing_mode=DEFAULT_SHARING_MODE.value,
                    updated_at=now,
                )
            )
        elif not setting.is_enabled:
            setting.is_enabled = True
            if setting.sharing_mode == SharingMode.off.value:
                setting.sharing_mode = DEFAULT_SHARING_MODE.value
            setting.updated_at = now

        _ensure_self_permission(db, username)

    logger.debug(f"Location updated | user={username} lat={latitude} lng={longitude}")
    return sample


# ------------------------------------------------------------------
# Permissions
# ------------------------------------------------------------------

def set_location_permission(db: Session, owner: str, viewer: str, approved: bool) -> LocationPermission:
    if owner == viewer:
        raise ValidationError("Cannot change your own location permission")

    if not connections.are_connected(db, owner, viewer):
        raise Forbidden("Location can only be shared with connections")

    with transaction(db):
        row = (
            db.query(LocationPermission)
            .filter(
                LocationPermission.requester_username == viewer,
                LocationPermission.target_username == owner,
            )
            .first()
        )
        if not row:
            row = LocationPermission(requester_username=viewer, target_username=owner)
            db.add(row)
        row.is_approved = approved

        if approved:
            notify(db, viewer, owner, f"{owner} is sharing their location with you", NotificationType.location_shared)
        else:
            notify(db, viewer, owner, f"{owner} stopped sharing their location with you", NotificationType.location_revoked)

    logger.info(f"Location permission | owner={owner} viewer={viewer} approved={approved}")
    return row


def list_location_permissions(db: Session, owner: str) -> list[dict]:
    rows = (
        db.query(LocationPermission)
        .filter(
            LocationPermission.target_username == owner,
            LocationPermission.requester_username != owner,
        )
        .order_by(LocationPermission.requester_username.asc())
        .all()
    )
    return [{"username": r.requester_username, "is_approved": r.is_approved} for r in rows]


# ------------------------------------------------------------------
# Visibility
# ------------------------------------------------------------------

def connected_locations(db: Session, viewer: str) -> list[dict]:
    """
    Latest samples the viewer may read: their own, plus every connection
    that approved the viewer and is currently sharing.
    """
    now = _now()
    owner = LocationSample.username

    is_connected = (
        select(Connection.id)
        .where(
            or_(
                and_(Connection.user_low == viewer, Connection.user_high == owner),
                and_(Connection.user_low == owner, Connection.user_high == viewer),
            )
        )
        .exists()
    )

    is_approved = (
        select(LocationPermission.id)
        .where(
            LocationPermission.requester_username == viewer,
            LocationPermission.target_username == owner,
            LocationPermission.is_approved.is_(True),
        )
        .exists()
    )

    is_sharing = and_(
        LocationSetting.is_enabled.is_(True),
        or_(
            LocationSetting.sharing_mode == SharingMode.always.value,
            and_(
                LocationSetting.sharing_mode == SharingMode.timed.value,
                LocationSetting.sharing_until > now,
            ),
        ),
    )

    rows = (
        db.query(LocationSample, User.profile_pic, LocationSetting.sharing_mode)
        .join(User, User.username == owner)
        .outerjoin(LocationSetting, LocationSetting.username == owner)
        .filter(or_(owner == viewer, and_(is_approved, is_sharing, is_connected)))
        .order_by(owner.asc())
        .all()
    )

    return [
        {
            "username": sample.username,
            "latitude": sample.latitude,
            "longitude": sample.longitude,
            "accuracy": sample.accuracy,
            "timestamp": sample.timestamp,
            "profile_pic": encode_picture(pic),
            "sharing_mode": mode or SharingMode.off.value,
        }
        for sample, pic, mode in rows
    ]
