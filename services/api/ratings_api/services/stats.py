"""Admin dashboard statistics."""

from dataclasses import dataclass

from ratings_api.services.ratings import count_ratings
from ratings_api.services.stores import count_stores
from ratings_api.services.users import count_users


@dataclass(frozen=True)
class Stats:
    total_users: int
    total_stores: int
    total_ratings: int


async def get_stats() -> Stats:
    """Count users, stores and ratings."""
    return Stats(
        total_users=await count_users(),
        total_stores=await count_stores(),
        total_ratings=await count_ratings(),
    )
