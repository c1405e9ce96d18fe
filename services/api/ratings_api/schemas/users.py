"""Schemas for user accounts (/api/signup, /api/users)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ratings_api.schemas.common import Address, Email, Name, Password

UserRole = Literal["admin", "user"]


class SignupRequest(BaseModel):
    """Self-service signup; always creates a normal user."""

    name: Name
    email: Email
    password: Password
    address: Address


class UserCreate(SignupRequest):
    """Admin-created account; may be an administrator."""

    role: UserRole = "user"


class UserUpdate(BaseModel):
    """Partial update of a user account. Omitted fields stay unchanged."""

    name: Name | None = None
    email: Email | None = None
    password: Password | None = None
    address: Address | None = None
    role: UserRole | None = None


class UserOut(BaseModel):
    """Public view of a user (never includes the password hash)."""

    id: str
    name: str
    email: str
    address: str
    role: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True, "from_attributes": True}


class UserResponse(BaseModel):
    message: str
    user: UserOut


class UserListResponse(BaseModel):
    message: str
    users: list[UserOut]
