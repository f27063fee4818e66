from loguru import logger
from sqlalchemy import or_
from sqlalchemy.orm import Session

from hestia.core.db import transaction
from hestia.core.errors import NotFound, Unauthenticated, UserNotFound, ValidationError
from hestia.core.security import hash_password, verify_password
from hestia.modules.connections import service as connections
from hestia.modules.notifications.service import notify
from hestia.schemas.enums import NotificationType
from hestia.services.media import resize_profile_picture
from .models import User


# ---------- LOOKUPS ----------

def get_user(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def require_user(db: Session, username: str) -> User:
    user = get_user(db, username)
    if not user:
        raise UserNotFound()
    return user


def search_user(db: Session, fragment: str) -> str | None:
    user = (
        db.query(User)
        .filter(User.username.ilike(f"%{fragment}%"))
        .order_by(User.username.asc())
        .first()
    )
    return user.username if user else None


# ---------- ACCOUNTS ----------

def register(db: Session, email: str, username: str, password: str, confirm_password: str) -> User:
    if password != confirm_password:
        raise ValidationError("Passwords do not match")

    taken = db.query(User).filter(or_(User.username == username, User.email == email)).first()
    if taken:
        raise ValidationError("Username or email already registered")

    user = User(
        email=email,
        username=username,
        password_hash=hash_password(password),
    )
    with transaction(db):
        db.add(user)

    logger.info(f"User registered | username={username}")
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    user = get_user(db, username)
    if not user or not verify_password(user.password_hash, password):
        raise Unauthenticated("Invalid Username or Password")
    return user


# ---------- PROFILE ----------

def get_profile(db: Session, username: str) -> dict:
    user = require_user(db, username)
    return {
        "username": user.username,
        "name": user.name or "",
        "connections": connections.count_connections(db, username),
        "intro": user.intro,
    }


def update_profile(
    db: Session,
    username: str,
    name: str | None,
    intro: str | None,
    picture: bytes | None = None,
) -> User:
    user = require_user(db, username)

    # resize before touching the row so a bad upload changes nothing
    resized = resize_profile_picture(picture) if picture else None

    with transaction(db):
        user.name = name or ""
        user.intro = intro or ""
        if resized:
            user.profile_pic = resized

        for other in connections.list_connection_usernames(db, username):
            notify(
                db,
                other,
                username,
                f"{username} has updated their profile",
                NotificationType.profile_update,
            )

        notify(db, username, username, "You updated your profile", NotificationType.profile_update)

    logger.info(f"Profile updated | username={username} picture={'yes' if resized else 'no'}")
    return user


def get_profile_picture(db: Session, username: str) -> bytes:
    user = get_user(db, username)
    if not user or not user.profile_pic:
        raise NotFound("Profile picture not found")
    return user.profile_pic
