"""Login: exchange email and password for a signed access token."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from catapi.exceptions import AuthenticationError, CatApiError, InternalError
from catapi.repositories.user_repository import UserRepository
from catapi.schemas.user import LoginRequest, LoginResponse, UserResponse
from catapi.security.passwords import verify_password
from catapi.security.principal import Principal
from catapi.security.tokens import create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    async def login(self, db: AsyncSession, credentials: LoginRequest) -> LoginResponse:
        """
        Verify credentials and issue a token.

        Unknown email and wrong password fail with the same message.

        Raises:
            AuthenticationError: "Incorrect username/password" (→ 401)
        """
        try:
            user = await UserRepository(db).get_by_email(credentials.username)
            if user is None or not verify_password(credentials.password, user.password):
                logger.warning("Failed login for %s", credentials.username)
                raise AuthenticationError("Incorrect username/password")

            principal = Principal.from_user(user)
            logger.info("User %s logged in", user.id)
            return LoginResponse(
                message="Login successful",
                token=create_access_token(principal),
                user=UserResponse.model_validate(user),
            )
        except CatApiError:
            raise
        except Exception as e:
            logger.error("Unexpected error in login: %s", str(e), exc_info=True)
            raise InternalError(context={"operation": "login", "error_type": type(e).__name__})


auth_service = AuthService()
