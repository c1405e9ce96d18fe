"""Schemas for ratings (/api/ratings and the per-store / per-user views)."""

from datetime import datetime

from pydantic import BaseModel, Field

from ratings_api.schemas.common import RatingValue


class RatingSubmit(BaseModel):
    """Create or replace the caller's rating for a store."""

    store_id: str = Field(alias="storeId", min_length=1)
    rating: RatingValue

    model_config = {"populate_by_name": True}


class RatingUpdate(BaseModel):
    rating: RatingValue


class RatingOut(BaseModel):
    id: str
    user_id: str = Field(alias="userId")
    store_id: str = Field(alias="storeId")
    rating: int = Field(ge=1, le=5)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"populate_by_name": True, "from_attributes": True}


class StoreRatingEntry(RatingOut):
    """Rating as seen by the rated store: who rated and when."""

    user_name: str = Field(alias="userName")
    user_email: str = Field(alias="userEmail")


class UserRatingEntry(RatingOut):
    """Rating as seen by the rater: which store."""

    store_name: str = Field(alias="storeName")
    store_address: str = Field(alias="storeAddress")


class RatingResponse(BaseModel):
    message: str
    rating: RatingOut | None


class StoreRatingsResponse(BaseModel):
    message: str
    store_id: str = Field(alias="storeId")
    average_rating: float = Field(alias="averageRating", ge=0, le=5)
    total_ratings: int = Field(alias="totalRatings", ge=0)
    ratings: list[StoreRatingEntry]

    model_config = {"populate_by_name": True}


class UserRatingsResponse(BaseModel):
    message: str
    ratings: list[UserRatingEntry]
