"""Login route: POST /api/v1/auth/login."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.database import get_db_session
from catapi.schemas.common import ErrorResponse
from catapi.schemas.user import LoginRequest, LoginResponse
from catapi.services.auth_service import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Incorrect username/password", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, credentials)
