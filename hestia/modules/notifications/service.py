from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from hestia.modules.users.models import User
from hestia.services.media import encode_picture
from hestia.schemas.enums import NotificationType
from .models import Notification


# ---------- WRITES (caller commits) ----------

def notify(db: Session, recipient: str, sender: str, message: str, action_type: str) -> Notification:
    if isinstance(action_type, NotificationType):
        action_type = action_type.value

    note = Notification(
        recipient_username=recipient,
        sender_username=sender,
        message=message,
        action_type=action_type,
    )
    db.add(note)
    return note


def delete_connection_requests(db: Session, sender: str, recipient: str, both_directions: bool = False) -> int:
    pair = and_(
        Notification.sender_username == sender,
        Notification.recipient_username == recipient,
    )
    if both_directions:
        pair = or_(
            pair,
            and_(
                Notification.sender_username == recipient,
                Notification.recipient_username == sender,
            ),
        )

    return (
        db.query(Notification)
        .filter(pair, Notification.action_type == NotificationType.connection_request.value)
        .delete(synchronize_session="fetch")
    )


# ---------- READS ----------

def pending_request_exists(db: Session, sender: str, recipient: str) -> bool:
    return db.query(
        db.query(Notification)
        .filter(
            Notification.sender_username == sender,
            Notification.recipient_username == recipient,
            Notification.action_type == NotificationType.connection_request.value,
        )
        .exists()
    ).scalar()


def list_notifications(db: Session, recipient: str) -> list[dict]:
    rows = (
        db.query(Notification, User.profile_pic)
        .outerjoin(User, User.username == Notification.sender_username)
        .filter(Notification.recipient_username == recipient)
        .order_by(Notification.timestamp.desc(), Notification.id.desc())
        .all()
    )

    return [
        {
            "id": n.id,
            "sender_username": n.sender_username,
            "message": n.message,
            "timestamp": n.timestamp,
            "action_type": n.action_type,
            "profile_pic": encode_picture(pic),
        }
        for n, pic in rows
    ]
