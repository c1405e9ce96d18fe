"""Schemas for login, session and password endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from ratings_api.schemas.common import Password


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class PasswordUpdateRequest(BaseModel):
    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: Password = Field(alias="newPassword")

    model_config = {"populate_by_name": True}


class PrincipalOut(BaseModel):
    """The logged-in actor: a user (admin/user) or a store owner (store)."""

    id: str
    name: str
    email: str
    address: str
    role: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}


class PrincipalResponse(BaseModel):
    message: str
    user: PrincipalOut
