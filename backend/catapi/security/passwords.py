"""Password hashing and verification using bcrypt."""

from __future__ import annotations

import bcrypt

from catapi.config import settings


def hash_password(password: str) -> str:
    """Hash a plaintext password with a freshly generated bcrypt salt."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Return True if password matches the stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False
