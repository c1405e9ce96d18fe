"""API routes."""

from fastapi import APIRouter

from ratings_api.routes import admin, auth, ratings, stores, users
from ratings_api.schemas import ErrorResponse

api_router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Insufficient permissions"},
        404: {"model": ErrorResponse, "description": "Not found"},
    }
)

# Signup, login, logout, password
api_router.include_router(auth.router, prefix="/api", tags=["auth"])

# User management (admin)
api_router.include_router(users.router, prefix="/api", tags=["users"])

# Stores (public read, admin write)
api_router.include_router(stores.router, prefix="/api", tags=["stores"])

# Ratings
api_router.include_router(ratings.router, prefix="/api", tags=["ratings"])

# Admin dashboard
api_router.include_router(admin.router, prefix="/api", tags=["admin"])
