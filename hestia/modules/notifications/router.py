from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from hestia.core.auth import get_current_username
from hestia.core.db import get_db, transaction
from hestia.core.errors import Forbidden, UserNotFound, ValidationError
from hestia.modules.users.models import User
from hestia.schemas.base import SuccessResponse
from hestia.schemas.enums import NotificationType
from hestia.schemas.notifications import NotificationCreateRequest, NotificationOut
from .service import list_notifications, notify

router = APIRouter(prefix="/api/notifications", tags=["notifications"])

# written only by the connection lifecycle
RESERVED_ACTION_TYPES = {
    NotificationType.connection_request.value,
    NotificationType.connection_accepted.value,
    NotificationType.connection_declined.value,
}


@router.get("", response_model=list[NotificationOut])
def my_notifications(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return list_notifications(db, username)


@router.get("/{recipient}", response_model=list[NotificationOut])
def user_notifications(
    recipient: str,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    if recipient != username:
        raise Forbidden("Cannot read another user's notifications")
    return list_notifications(db, username)


@router.post("", response_model=SuccessResponse, status_code=201)
def create_notification(
    payload: NotificationCreateRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    if payload.action_type in RESERVED_ACTION_TYPES:
        raise ValidationError(f"Reserved notification type: {payload.action_type}")

    if not db.query(User).filter(User.username == payload.recipient).first():
        raise UserNotFound()

    with transaction(db):
        notify(db, payload.recipient, username, payload.message, payload.action_type)

    logger.info(f"Notification created | {username} -> {payload.recipient} type={payload.action_type}")
    return {"success": True, "message": "Notification created successfully"}
