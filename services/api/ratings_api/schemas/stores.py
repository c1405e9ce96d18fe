"""Schemas for stores (/api/stores, /api/stores-with-ratings)."""

from datetime import datetime

from pydantic import BaseModel, Field

from ratings_api.schemas.common import Address, Email, Name, Password


class StoreCreate(BaseModel):
    """Admin-created store with owner login credentials."""

    name: Name
    email: Email
    password: Password
    address: Address


class StoreUpdate(BaseModel):
    """Partial update of a store. Omitted fields stay unchanged."""

    name: Name | None = None
    email: Email | None = None
    password: Password | None = None
    address: Address | None = None


class StoreOut(BaseModel):
    """Public view of a store (never includes the password hash)."""

    id: str
    name: str
    email: str
    address: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True, "from_attributes": True}


class StoreWithRating(StoreOut):
    """Store listing entry with its derived average rating.

    user_rating is the caller's own rating when the request is authenticated
    as a user, otherwise null.
    """

    average_rating: float = Field(alias="averageRating", ge=0, le=5)
    total_ratings: int = Field(alias="totalRatings", ge=0)
    user_rating: int | None = Field(alias="userRating", default=None)


class StoreResponse(BaseModel):
    message: str
    store: StoreOut


class StoreListResponse(BaseModel):
    message: str
    stores: list[StoreOut]


class StoreWithRatingListResponse(BaseModel):
    message: str
    stores: list[StoreWithRating]
