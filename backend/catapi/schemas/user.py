"""
CatAPI Backend — User Request/Response Schemas
================================================

What:  The API contract for user accounts and login.

Projection rules:
    - No output schema has a `password` or `role` field, so neither can leak
      through serialization.
    - Input schemas ignore unknown keys; a client sending `role` has it
      silently dropped, never stored.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """Registration payload for POST /api/v1/users."""
    user_name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=5, max_length=128)

    model_config = ConfigDict(extra="ignore")


class UserUpdate(BaseModel):
    """Partial update of the current user. Only fields sent are changed."""
    user_name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=5, max_length=128)

    model_config = ConfigDict(extra="ignore")


class LoginRequest(BaseModel):
    username: EmailStr = Field(description="Email address the account was registered with")
    password: str


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Public projection of a user: never includes password or role."""
    id: uuid.UUID
    user_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Reduced projection returned after registration."""
    user_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
