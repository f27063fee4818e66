from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

from fastapi import Header
from jose import jwt, JWTError
from loguru import logger

from hestia.core.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES
from hestia.core.errors import Unauthenticated


ALGORITHM = "HS256"


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _get_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthenticated("Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthenticated("Invalid Authorization header format")

    token = parts[1].strip()
    if not token:
        raise Unauthenticated("Missing bearer token")

    return token


# ------------------------------------------------------------
# Issue / Verify
# ------------------------------------------------------------
def create_access_token(username: str, expires_minutes: int | None = None) -> str:
    """
    Sign a token whose `sub` claim is the username.
    """
    minutes = expires_minutes if expires_minutes is not None else ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)

    return jwt.encode(
        {"sub": username, "exp": expire},
        SECRET_KEY,
        algorithm=ALGORITHM,
    )


def _verify_jwt_hs256(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        raise Unauthenticated("Invalid or expired token")


# ------------------------------------------------------------
# Main Dependency
# ------------------------------------------------------------
def get_current_username(
    authorization: Optional[str] = Header(default=None),
) -> str:

    token = _get_bearer_token(authorization)
    payload = _verify_jwt_hs256(token)

    sub = payload.get("sub")
    if not sub:
        raise Unauthenticated("Token missing sub claim")

    logger.debug(f"[auth] username={sub}")

    return sub
