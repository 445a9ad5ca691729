"""JWT access token creation and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from catapi.config import settings
from catapi.security.principal import Principal


def create_access_token(principal: Principal, expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT carrying the principal's identity and role."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(principal.id),
        "user_name": principal.user_name,
        "email": principal.email,
        "role": principal.role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Principal:
    """
    Decode and verify a token, returning the Principal it was issued for.

    Raises:
        jwt.PyJWTError: bad signature, expired token or malformed payload.
    """
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    try:
        return Principal(
            id=UUID(payload["sub"]),
            user_name=payload["user_name"],
            email=payload["email"],
            role=payload["role"],
        )
    except (KeyError, ValueError) as exc:
        raise jwt.InvalidTokenError("Malformed token payload") from exc
