"""
CatAPI Backend — User Route Handlers
======================================

What:  /api/v1/users endpoints: registration, listing, self-service update
       and delete, and the token check used by clients on startup.

/users/token is declared before /users/{user_id} so "token" is not parsed
as an id. It uses the optional principal: an absent or invalid token is
answered by UserService with 403 "token not valid", not the 401 of the
other protected routes.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.schemas.common import ErrorResponse, MessageResponse
from catapi.schemas.user import UserCreate, UserResponse, UserSummary, UserUpdate
from catapi.security.deps import get_current_principal, get_optional_principal
from catapi.security.principal import Principal
from catapi.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("", response_model=List[UserResponse], summary="List users")
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse[UserSummary],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[UserSummary]:
    return await user_service.create_user(db, data)


@router.put(
    "",
    response_model=MessageResponse[UserResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Update the current user",
)
async def update_current_user(
    data: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[UserResponse]:
    return await user_service.update_current_user(db, principal, data)


@router.delete(
    "",
    response_model=MessageResponse[UserResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Delete the current user and their cats",
)
async def delete_current_user(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse[UserResponse]:
    return await user_service.delete_current_user(db, principal)


@router.get(
    "/token",
    response_model=UserResponse,
    responses={403: {"description": "Token not valid", "model": ErrorResponse}},
    summary="Check the bearer token",
)
async def check_token(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> UserResponse:
    return user_service.check_token(principal)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by id",
)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db_session)) -> UserResponse:
    return await user_service.get_user(db, user_id)
