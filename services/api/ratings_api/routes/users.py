"""User management endpoints (admin only).

GET    /api/users        - List users (filter + sort)
GET    /api/users/{id}   - User details
POST   /api/users        - Create user or admin
PUT    /api/users/{id}   - Partial update
DELETE /api/users/{id}   - Delete user and their ratings
"""

from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status

from ratings_api.routes.deps import AdminPrincipal
from ratings_api.schemas import MessageResponse, UserCreate, UserListResponse, UserOut, UserResponse, UserUpdate
from ratings_api.services import users as user_service
from ratings_api.services.users import EmailTakenError

router = APIRouter()


def _not_found(user_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User not found: {user_id}")


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="User with this email already exists",
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    _: AdminPrincipal,
    name: str | None = Query(default=None, max_length=60),
    email: str | None = Query(default=None, max_length=255),
    address: str | None = Query(default=None, max_length=400),
    role: Literal["admin", "user"] | None = Query(default=None),
    sort_by: Literal["name", "email", "address", "role", "createdAt"] = Query(default="name", alias="sortBy"),
    order: Literal["asc", "desc"] = Query(default="asc"),
) -> UserListResponse:
    users = await user_service.list_users(
        name=name,
        email=email,
        address=address,
        role=role,
        sort_by=sort_by,
        order=order,
    )
    return UserListResponse(
        message="Users retrieved successfully",
        users=[UserOut.model_validate(u) for u in users],
    )


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, _: AdminPrincipal) -> UserResponse:
    user = await user_service.get_user(user_id)
    if user is None:
        raise _not_found(user_id)
    return UserResponse(message="User retrieved successfully", user=UserOut.model_validate(user))


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, _: AdminPrincipal) -> UserResponse:
    try:
        user = await user_service.create_user(
            name=body.name,
            email=body.email,
            password=body.password,
            address=body.address,
            role=body.role,
        )
    except EmailTakenError:
        raise _email_taken()
    return UserResponse(message="User created successfully", user=UserOut.model_validate(user))


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, body: UserUpdate, _: AdminPrincipal) -> UserResponse:
    try:
        user = await user_service.update_user(
            user_id,
            name=body.name,
            email=body.email,
            password=body.password,
            address=body.address,
            role=body.role,
        )
    except EmailTakenError:
        raise _email_taken()
    if user is None:
        raise _not_found(user_id)
    return UserResponse(message="User updated successfully", user=UserOut.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, _: AdminPrincipal) -> MessageResponse:
    if not await user_service.delete_user(user_id):
        raise _not_found(user_id)
    return MessageResponse(message="User deleted successfully")
