from datetime import datetime

from loguru import logger
from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session

from hestia.core.db import transaction
from hestia.core.errors import Forbidden, NotFound, UserNotFound, ValidationError
from hestia.modules.locations.models import LocationPermission
from hestia.modules.notifications import service as notifications
from hestia.modules.users.models import User
from hestia.schemas.enums import ConnectionStatus, NotificationType
from hestia.services.media import encode_picture
from .models import Connection, Message


# ---------- PAIR HELPERS ----------

def pair_low_high(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a < b else (b, a)


def _pair_filter(a: str, b: str):
    low, high = pair_low_high(a, b)
    return and_(Connection.user_low == low, Connection.user_high == high)


def _involving(username: str):
    return or_(Connection.user_low == username, Connection.user_high == username)


def _ensure_user(db: Session, username: str) -> None:
    exists = db.query(db.query(User).filter(User.username == username).exists()).scalar()
    if not exists:
        raise UserNotFound()


# ---------- QUERIES ----------

def are_connected(db: Session, a: str, b: str) -> bool:
    if a == b:
        return False
    return db.query(db.query(Connection).filter(_pair_filter(a, b)).exists()).scalar()


def count_connections(db: Session, username: str) -> int:
    return db.query(Connection).filter(_involving(username)).count()


def list_connection_usernames(db: Session, username: str) -> list[str]:
    rows = db.query(Connection.user_low, Connection.user_high).filter(_involving(username)).all()
    return sorted(high if low == username else low for low, high in rows)


def list_connections(db: Session, username: str) -> list[dict]:
    others = list_connection_usernames(db, username)
    if not others:
        return []

    pics = dict(
        db.query(User.username, User.profile_pic)
        .filter(User.username.in_(others))
        .all()
    )
    return [{"username": u, "profile_pic": encode_picture(pics.get(u))} for u in others]


def connection_status(db: Session, viewer: str, target: str) -> ConnectionStatus:
    if are_connected(db, viewer, target):
        return ConnectionStatus.connected

    if notifications.pending_request_exists(db, viewer, target):
        return ConnectionStatus.requested

    return ConnectionStatus.none


# ---------- CONNECTION LIFECYCLE ----------

def request_connection(db: Session, requester: str, target: str) -> None:
    if requester == target:
        raise ValidationError("Cannot connect to self")

    _ensure_user(db, target)

    # Re-requesting is allowed; each request is its own notification.
    if notifications.pending_request_exists(db, requester, target):
        logger.warning(f"Duplicate connection request | {requester} -> {target}")

    with transaction(db):
        notifications.notify(
            db,
            target,
            requester,
            f"{requester} has requested to connect with you",
            NotificationType.connection_request,
        )

    logger.info(f"Connection requested | {requester} -> {target}")


def respond_to_connection(db: Session, responder: str, requester: str, accepted: bool) -> None:
    if responder == requester:
        raise ValidationError("Cannot respond to your own request")

    if not notifications.pending_request_exists(db, requester, responder):
        raise NotFound("No pending connection request")

    outcome = NotificationType.connection_accepted if accepted else NotificationType.connection_declined
    verb = "accepted" if accepted else "declined"

    with transaction(db):
        notifications.delete_connection_requests(db, requester, responder)

        if accepted and not are_connected(db, responder, requester):
            low, high = pair_low_high(responder, requester)
            db.add(Connection(user_low=low, user_high=high))

        notifications.notify(
            db,
            responder,
            responder,
            f"You {verb} {requester}'s connection request",
            outcome,
        )
        notifications.notify(
            db,
            requester,
            responder,
            f"{responder} {verb} your connection request",
            outcome,
        )

    logger.info(f"Connection {verb} | {requester} -> {responder}")


def disconnect(db: Session, requester: str, target: str) -> None:
    if requester == target:
        raise ValidationError("Cannot disconnect from self")

    with transaction(db):
        removed = db.query(Connection).filter(_pair_filter(requester, target)).delete(synchronize_session="fetch")

        notifications.delete_connection_requests(db, requester, target, both_directions=True)

        # location visibility is only granted between connections
        db.query(LocationPermission).filter(
            or_(
                and_(
                    LocationPermission.requester_username == requester,
                    LocationPermission.target_username == target,
                ),
                and_(
                    LocationPermission.requester_username == target,
                    LocationPermission.target_username == requester,
                ),
            )
        ).delete(synchronize_session="fetch")

    logger.info(f"Disconnected | {requester} x {target} removed={removed}")


# ---------- MESSAGING ----------

def _require_connection(db: Session, a: str, b: str) -> None:
    if not are_connected(db, a, b):
        raise Forbidden("Users are not connected")


def send_message(db: Session, sender: str, recipient: str, body: str) -> Message:
    if sender == recipient:
        raise ValidationError("Cannot message yourself")

    _require_connection(db, sender, recipient)

    with transaction(db):
        msg = Message(
            sender_username=sender,
            recipient_username=recipient,
            message_text=body,
            timestamp=datetime.utcnow(),
        )
        db.add(msg)
        notifications.notify(
            db,
            recipient,
            sender,
            f"New message from {sender}",
            NotificationType.new_message,
        )

    logger.info(f"Message sent | {sender} -> {recipient} id={msg.id}")
    return msg


def list_messages(db: Session, viewer: str, other: str) -> list[dict]:
    """Conversation between two connected users, oldest first."""
    _require_connection(db, viewer, other)

    rows = (
        db.query(Message)
        .filter(
            or_(
                and_(Message.sender_username == viewer, Message.recipient_username == other),
                and_(Message.sender_username == other, Message.recipient_username == viewer),
            )
        )
        .order_by(Message.timestamp.asc(), Message.id.asc())
        .all()
    )

    return [
        {
            "id": m.id,
            "sender_username": m.sender_username,
            "message_text": m.message_text,
            "timestamp": m.timestamp,
            "is_sender": m.sender_username == viewer,
        }
        for m in rows
    ]


def list_chats(db: Session, username: str) -> list[dict]:
    """Everyone the user has exchanged messages with, most recent first."""
    exchanged = (
        db.query(
            case(
                (Message.sender_username == username, Message.recipient_username),
                else_=Message.sender_username,
            ).label("other"),
            Message.timestamp.label("timestamp"),
        )
        .filter(or_(Message.sender_username == username, Message.recipient_username == username))
        .subquery()
    )
    last = func.max(exchanged.c.timestamp)

    rows = (
        db.query(exchanged.c.other, last)
        .group_by(exchanged.c.other)
        .order_by(last.desc(), exchanged.c.other.asc())
        .all()
    )
    return [{"username": u, "last_message_time": t} for u, t in rows]
