"""Rating endpoints.

POST /api/ratings                                  - Submit (create or replace) a rating
PUT  /api/ratings/{id}                             - Change a rating by id
GET  /api/stores/{id}/ratings                      - Ratings a store received
GET  /api/users/{userId}/ratings                   - Ratings a user gave
GET  /api/users/{userId}/stores/{storeId}/rating   - One user's rating of one store
"""

from fastapi import APIRouter, HTTPException, Response, status

from ratings_api.routes.deps import CurrentPrincipal, RaterPrincipal, ensure_self_or_admin
from ratings_api.schemas import (
    RatingOut,
    RatingResponse,
    RatingSubmit,
    RatingUpdate,
    StoreRatingEntry,
    StoreRatingsResponse,
    UserRatingEntry,
    UserRatingsResponse,
)
from ratings_api.services import ratings as rating_service
from ratings_api.services.auth import AdminUser, StoreOwner
from ratings_api.services.stores import StoreNotFoundError, get_store
from ratings_api.services.users import UserNotFoundError

router = APIRouter()


def _forbidden() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied: insufficient permissions",
    )


@router.post("/ratings", response_model=RatingResponse, status_code=status.HTTP_201_CREATED)
async def submit_rating(body: RatingSubmit, principal: RaterPrincipal, response: Response) -> RatingResponse:
    """Rate a store as the logged-in user.

    Returns 201 when a new rating was created and 200 when the caller's
    existing rating for the store was replaced.
    """
    try:
        rating, created = await rating_service.submit_rating(principal.id, body.store_id, body.rating)
    except StoreNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Store not found: {body.store_id}")
    except UserNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if created:
        return RatingResponse(message="Rating submitted successfully", rating=RatingOut.model_validate(rating))

    response.status_code = status.HTTP_200_OK
    return RatingResponse(message="Rating updated successfully", rating=RatingOut.model_validate(rating))


@router.put("/ratings/{rating_id}", response_model=RatingResponse)
async def update_rating(rating_id: str, body: RatingUpdate, principal: CurrentPrincipal) -> RatingResponse:
    """Change a rating's value. Only its author or an admin may do so."""
    existing = await rating_service.get_rating(rating_id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rating not found: {rating_id}")
    if not isinstance(principal, AdminUser) and existing.user_id != principal.id:
        raise _forbidden()

    rating = await rating_service.update_rating(rating_id, body.rating)
    if rating is None:
        # Deleted between the ownership check and the update.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rating not found: {rating_id}")
    return RatingResponse(message="Rating updated successfully", rating=RatingOut.model_validate(rating))


@router.get("/stores/{store_id}/ratings", response_model=StoreRatingsResponse)
async def list_store_ratings(store_id: str, principal: CurrentPrincipal) -> StoreRatingsResponse:
    """Ratings received by a store. Visible to admins and to the store's owner."""
    is_owner = isinstance(principal, StoreOwner) and principal.id == store_id
    if not (is_owner or isinstance(principal, AdminUser)):
        raise _forbidden()

    if await get_store(store_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Store not found: {store_id}")

    rows = await rating_service.list_store_ratings(store_id)
    average = await rating_service.get_store_average_rating(store_id)

    return StoreRatingsResponse(
        message="Ratings retrieved successfully",
        store_id=store_id,
        average_rating=average,
        total_ratings=len(rows),
        ratings=[
            StoreRatingEntry(
                id=row.rating.id,
                user_id=row.rating.user_id,
                store_id=row.rating.store_id,
                rating=row.rating.rating,
                created_at=row.rating.created_at,
                updated_at=row.rating.updated_at,
                user_name=row.user_name,
                user_email=row.user_email,
            )
            for row in rows
        ],
    )


@router.get("/users/{user_id}/ratings", response_model=UserRatingsResponse)
async def list_user_ratings(user_id: str, principal: CurrentPrincipal) -> UserRatingsResponse:
    ensure_self_or_admin(principal, user_id)

    rows = await rating_service.list_user_ratings(user_id)
    return UserRatingsResponse(
        message="Ratings retrieved successfully",
        ratings=[
            UserRatingEntry(
                id=row.rating.id,
                user_id=row.rating.user_id,
                store_id=row.rating.store_id,
                rating=row.rating.rating,
                created_at=row.rating.created_at,
                updated_at=row.rating.updated_at,
                store_name=row.store_name,
                store_address=row.store_address,
            )
            for row in rows
        ],
    )


@router.get("/users/{user_id}/stores/{store_id}/rating", response_model=RatingResponse)
async def get_user_store_rating(user_id: str, store_id: str, principal: CurrentPrincipal) -> RatingResponse:
    """The user's rating of a store, or null if they have not rated it yet."""
    ensure_self_or_admin(principal, user_id)

    rating = await rating_service.get_user_store_rating(user_id, store_id)
    if rating is None:
        return RatingResponse(message="No rating found", rating=None)
    return RatingResponse(message="Rating retrieved successfully", rating=RatingOut.model_validate(rating))
