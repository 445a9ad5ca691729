"""Repository for user rows."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catapi.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[User]:
        result = await self._session.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def get(self, user_id: UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def add(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        return user

    async def update(self, user_id: UUID, values: Mapping[str, Any]) -> User | None:
        """Apply `values` to the user and flush. None if the user does not exist."""
        user = await self.get(user_id)
        if user is None:
            return None
        for key, value in values.items():
            setattr(user, key, value)
        await self._session.flush()
        return user

    async def delete(self, user_id: UUID) -> User | None:
        """Delete and return the user; None if it did not exist."""
        user = await self.get(user_id)
        if user is None:
            return None
        await self._session.delete(user)
        await self._session.flush()
        return user
