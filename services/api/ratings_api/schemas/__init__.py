"""Pydantic schemas for API request/response validation."""

from ratings_api.schemas.admin import StatsOut, StatsResponse
from ratings_api.schemas.auth import LoginRequest, PasswordUpdateRequest, PrincipalOut, PrincipalResponse
from ratings_api.schemas.common import ErrorResponse, MessageResponse
from ratings_api.schemas.ratings import (
    RatingOut,
    RatingResponse,
    RatingSubmit,
    RatingUpdate,
    StoreRatingEntry,
    StoreRatingsResponse,
    UserRatingEntry,
    UserRatingsResponse,
)
from ratings_api.schemas.stores import (
    StoreCreate,
    StoreListResponse,
    StoreOut,
    StoreResponse,
    StoreUpdate,
    StoreWithRating,
    StoreWithRatingListResponse,
)
from ratings_api.schemas.users import (
    SignupRequest,
    UserCreate,
    UserListResponse,
    UserOut,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "LoginRequest",
    "PasswordUpdateRequest",
    "PrincipalOut",
    "PrincipalResponse",
    "RatingOut",
    "RatingResponse",
    "RatingSubmit",
    "RatingUpdate",
    "StoreRatingEntry",
    "StoreRatingsResponse",
    "UserRatingEntry",
    "UserRatingsResponse",
    "StoreCreate",
    "StoreListResponse",
    "StoreOut",
    "StoreResponse",
    "StoreUpdate",
    "StoreWithRating",
    "StoreWithRatingListResponse",
    "SignupRequest",
    "UserCreate",
    "UserListResponse",
    "UserOut",
    "UserResponse",
    "UserUpdate",
    "StatsOut",
    "StatsResponse",
]
