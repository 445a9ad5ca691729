"""The authenticated identity a request acts as."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from catapi.models.user import ROLE_ADMIN

if TYPE_CHECKING:
    from catapi.models.user import User


@dataclass(frozen=True)
class Principal:
    """
    Identity resolved from the bearer token.

    Routes receive it from the auth dependency and hand it to service
    methods as an explicit argument; services never read request state.
    """

    id: UUID
    user_name: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user: "User") -> "Principal":
        return cls(id=user.id, user_name=user.user_name, email=user.email, role=user.role)
