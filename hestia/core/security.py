"""Password hashing shared by registration and login."""

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

PASSWORD_HASHER = PasswordHasher()


def hash_password(password: str) -> str:
    return PASSWORD_HASHER.hash(password)


def verify_password(hash: str, password: str) -> bool:
    """Return True when `password` matches `hash`."""
    try:
        return PASSWORD_HASHER.verify(hash, password)
    except (VerificationError, InvalidHashError):
        return False
