"""Store endpoints.

GET    /api/stores               - List stores (public)
GET    /api/stores-with-ratings  - Stores with averages and the caller's rating
GET    /api/stores/{id}          - Store details (public)
POST   /api/stores               - Create store (admin)
PUT    /api/stores/{id}          - Partial update (admin)
DELETE /api/stores/{id}          - Delete store and its ratings (admin)
"""

from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status

from ratings_api.routes.deps import AdminPrincipal, OptionalPrincipal
from ratings_api.schemas import (
    MessageResponse,
    StoreCreate,
    StoreListResponse,
    StoreOut,
    StoreResponse,
    StoreUpdate,
    StoreWithRating,
    StoreWithRatingListResponse,
)
from ratings_api.services import stores as store_service
from ratings_api.services.auth import StoreOwner
from ratings_api.services.users import EmailTakenError

router = APIRouter()


def _not_found(store_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Store not found: {store_id}")


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Store with this email already exists",
    )


@router.get("/stores", response_model=StoreListResponse)
async def list_stores(
    search: str | None = Query(default=None, max_length=400, description="Name or address substring"),
    sort_by: Literal["name", "email", "address", "createdAt"] = Query(default="name", alias="sortBy"),
    order: Literal["asc", "desc"] = Query(default="asc"),
) -> StoreListResponse:
    stores = await store_service.list_stores(search=search, sort_by=sort_by, order=order)
    return StoreListResponse(
        message="Stores retrieved successfully",
        stores=[StoreOut.model_validate(s) for s in stores],
    )


@router.get("/stores-with-ratings", response_model=StoreWithRatingListResponse)
async def list_stores_with_ratings(
    principal: OptionalPrincipal,
    search: str | None = Query(default=None, max_length=400, description="Name or address substring"),
) -> StoreWithRatingListResponse:
    """List stores with average rating; includes the caller's own rating when logged in as a user."""
    user_id = principal.id if principal is not None and not isinstance(principal, StoreOwner) else None
    summaries = await store_service.list_stores_with_ratings(user_id=user_id, search=search)

    return StoreWithRatingListResponse(
        message="Stores retrieved successfully",
        stores=[
            StoreWithRating(
                id=s.store.id,
                name=s.store.name,
                email=s.store.email,
                address=s.store.address,
                created_at=s.store.created_at,
                average_rating=s.average_rating,
                total_ratings=s.total_ratings,
                user_rating=s.user_rating,
            )
            for s in summaries
        ],
    )


@router.get("/stores/{store_id}", response_model=StoreResponse)
async def get_store(store_id: str) -> StoreResponse:
    store = await store_service.get_store(store_id)
    if store is None:
        raise _not_found(store_id)
    return StoreResponse(message="Store retrieved successfully", store=StoreOut.model_validate(store))


@router.post("/stores", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(body: StoreCreate, _: AdminPrincipal) -> StoreResponse:
    try:
        store = await store_service.create_store(
            name=body.name,
            email=body.email,
            password=body.password,
            address=body.address,
        )
    except EmailTakenError:
        raise _email_taken()
    return StoreResponse(message="Store created successfully", store=StoreOut.model_validate(store))


@router.put("/stores/{store_id}", response_model=StoreResponse)
async def update_store(store_id: str, body: StoreUpdate, _: AdminPrincipal) -> StoreResponse:
    try:
        store = await store_service.update_store(
            store_id,
            name=body.name,
            email=body.email,
            password=body.password,
            address=body.address,
        )
    except EmailTakenError:
        raise _email_taken()
    if store is None:
        raise _not_found(store_id)
    return StoreResponse(message="Store updated successfully", store=StoreOut.model_validate(store))


@router.delete("/stores/{store_id}", response_model=MessageResponse)
async def delete_store(store_id: str, _: AdminPrincipal) -> MessageResponse:
    if not await store_service.delete_store(store_id):
        raise _not_found(store_id)
    return MessageResponse(message="Store deleted successfully")
