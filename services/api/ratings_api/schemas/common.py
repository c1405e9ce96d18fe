"""Common schemas and field rules used across the API."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, StrictInt

from ratings_api.services.passwords import check_password_policy


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "message": str, "errors": { field: [str, ...] } | null }
    """

    message: str
    errors: dict[str, list[str]] | None = None


class MessageResponse(BaseModel):
    """Response carrying only a human-readable message."""

    message: str


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    if len(value) > 60:
        raise ValueError("Name must not exceed 60 characters")
    return value


def _check_address(value: str) -> str:
    value = value.strip()
    if len(value) > 400:
        raise ValueError("Address must not exceed 400 characters")
    return value


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_rating(value: int) -> int:
    if value < 1:
        raise ValueError("Rating must be at least 1")
    if value > 5:
        raise ValueError("Rating must not exceed 5")
    return value


Name = Annotated[str, AfterValidator(_check_name)]
Address = Annotated[str, AfterValidator(_check_address)]
Email = Annotated[EmailStr, AfterValidator(_normalize_email)]
Password = Annotated[str, AfterValidator(check_password_policy)]
RatingValue = Annotated[StrictInt, AfterValidator(_check_rating)]
