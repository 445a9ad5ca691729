"""FastAPI dependencies resolving the request's Principal."""

from __future__ import annotations

import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catapi.exceptions import AuthenticationError
from catapi.security.principal import Principal
from catapi.security.tokens import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """Principal from `Authorization: Bearer <token>`, or None when absent or invalid."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    """Principal for routes that require authentication; 401 otherwise."""
    if principal is None:
        raise AuthenticationError("token not valid")
    return principal
