"""
CatAPI Backend — User Service (Resource Controller)
=====================================================

What:  Account operations: check-token, get, list, register, update self
       and delete self.
How:   Same shape as CatService: optional authorization decision, one
       repository call, then a projection without `password` and `role`.
Who:   Called by routes/users.py.

Projection rules:
    - Reads return UserResponse {id, user_name, email}
    - Registration returns UserSummary {user_name, email}
    - `role` is never taken from client input; registration stores `user`
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.exceptions import (
    CatApiError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from catapi.models.user import ROLE_USER, User
from catapi.repositories.cat_repository import CatRepository
from catapi.repositories.user_repository import UserRepository
from catapi.schemas.common import MessageResponse
from catapi.schemas.user import UserCreate, UserResponse, UserSummary, UserUpdate
from catapi.security.passwords import hash_password
from catapi.security.principal import Principal
from catapi.services.authorization import Action, require

logger = logging.getLogger(__name__)


def _internal_error(operation: str, error: Exception) -> InternalError:
    logger.error("Unexpected error in %s: %s", operation, str(error), exc_info=True)
    return InternalError(context={"operation": operation, "error_type": type(error).__name__})


class UserService:
    """Business logic for user accounts."""

    def check_token(self, principal: Optional[Principal]) -> UserResponse:
        """
        Echo the identity carried by the token. No database access.

        Raises:
            ForbiddenError: "token not valid" when no principal was resolved
        """
        if principal is None:
            raise ForbiddenError("token not valid")
        return UserResponse(id=principal.id, user_name=principal.user_name, email=principal.email)

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserResponse:
        try:
            user = await UserRepository(db).get(user_id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(user_id))
            return UserResponse.model_validate(user)
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("get_user", e)

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            users = await UserRepository(db).list_all()
            return [UserResponse.model_validate(u) for u in users]
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("list_users", e)

    async def create_user(self, db: AsyncSession, data: UserCreate) -> MessageResponse[UserSummary]:
        """
        Register an account.

        The password is hashed with a new random salt, so two accounts with
        the same password store different hashes.

        Raises:
            ConflictError: the email is already registered (→ 409)
        """
        try:
            repo = UserRepository(db)
            if await repo.get_by_email(data.email) is not None:
                raise ConflictError(
                    "Email is already registered: email",
                    context={"email": data.email},
                )
            user = await repo.add(
                User(
                    user_name=data.user_name,
                    email=data.email,
                    password=hash_password(data.password),
                    role=ROLE_USER,
                )
            )
            logger.info("User %s registered", user.id)
            return MessageResponse[UserSummary](
                message="User created",
                data=UserSummary.model_validate(user),
            )
        except CatApiError:
            raise
        except IntegrityError:
            raise ConflictError("Email is already registered: email", context={"email": data.email})
        except Exception as e:
            raise _internal_error("create_user", e)

    async def update_current_user(
        self,
        db: AsyncSession,
        principal: Principal,
        data: UserUpdate,
    ) -> MessageResponse[UserResponse]:
        """
        Update the principal's own account. Only fields that were sent change;
        a new password is hashed before it is stored.

        Raises:
            NotFoundError: the account behind the token no longer exists
            ConflictError: the new email belongs to another account
        """
        try:
            repo = UserRepository(db)
            user = await repo.get(principal.id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(principal.id))
            require(principal, Action.UPDATE_SELF, user)

            values = data.model_dump(exclude_unset=True, exclude_none=True)
            if "email" in values and values["email"] != user.email:
                existing = await repo.get_by_email(values["email"])
                if existing is not None and existing.id != user.id:
                    raise ConflictError("Email is already registered: email")
            if "password" in values:
                values["password"] = hash_password(values["password"])

            user = await repo.update(principal.id, values)
            logger.info("User %s updated fields %s", principal.id, sorted(values))
            return MessageResponse[UserResponse](
                message="User updated",
                data=UserResponse.model_validate(user),
            )
        except CatApiError:
            raise
        except IntegrityError:
            raise ConflictError("Email is already registered: email")
        except Exception as e:
            raise _internal_error("update_current_user", e)

    async def delete_current_user(
        self,
        db: AsyncSession,
        principal: Principal,
    ) -> MessageResponse[UserResponse]:
        """
        Delete the principal's own account together with the cats it owns.

        Raises:
            NotFoundError: the account behind the token no longer exists
        """
        try:
            repo = UserRepository(db)
            user = await repo.get(principal.id)
            if user is None:
                raise NotFoundError(resource="user", resource_id=str(principal.id))
            require(principal, Action.DELETE_SELF, user)

            removed_cats = await CatRepository(db).delete_by_owner(principal.id)
            deleted = await repo.delete(principal.id)
            logger.info("User %s deleted (%d cats removed)", principal.id, removed_cats)
            return MessageResponse[UserResponse](
                message="User deleted",
                data=UserResponse.model_validate(deleted),
            )
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("delete_current_user", e)


user_service = UserService()
