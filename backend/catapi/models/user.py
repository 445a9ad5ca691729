"""
CatAPI Backend — User SQLAlchemy Model
========================================

What:  ORM model for the `users` table.
Who:   Used by UserRepository, CatRepository (owner join) and Alembic.

Column notes:
    - password holds a bcrypt hash, never plaintext; no schema ever outputs it
    - role is `user` or `admin`; registration always stores `user`
    - email is unique and is the login identifier
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catapi.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    """A registered account that can own cats."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ROLE_USER,
        comment="Authorization role: user, admin",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, user_name='{self.user_name}', role='{self.role}')>"
