"""Admin dashboard endpoints.

GET /api/stats - Totals for users, stores and ratings
"""

from fastapi import APIRouter

from ratings_api.routes.deps import AdminPrincipal
from ratings_api.schemas import StatsOut, StatsResponse
from ratings_api.services.stats import get_stats

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
async def stats(_: AdminPrincipal) -> StatsResponse:
    totals = await get_stats()
    return StatsResponse(
        message="Stats retrieved successfully",
        stats=StatsOut(
            total_users=totals.total_users,
            total_stores=totals.total_stores,
            total_ratings=totals.total_ratings,
        ),
    )
