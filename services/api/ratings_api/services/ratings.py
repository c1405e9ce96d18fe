"""Rating service.

Submitting a rating is an upsert keyed by (user_id, store_id):
1. Look up the existing row for the pair
2. If found, overwrite its value and updated_at
3. Otherwise insert a new row

The pair is UNIQUE in the database. If two submissions for the same pair race
and the insert loses, the submission is replayed once; the replay finds the
winning row and updates it, so the pair never ends up with two rows.
"""

from dataclasses import dataclass
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from ratings_api.models import Rating, Store, User
from ratings_api.models.base import utcnow
from ratings_api.services.stores import StoreNotFoundError
from ratings_api.services.users import UserNotFoundError
from ratings_api.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

MIN_RATING = 1
MAX_RATING = 5


class RatingValueError(ValueError):
    pass


@dataclass
class StoreRatingRow:
    """A rating of one store, with the rater's contact details."""

    rating: Rating
    user_name: str
    user_email: str


@dataclass
class UserRatingRow:
    """A rating given by one user, with the rated store's details."""

    rating: Rating
    store_name: str
    store_address: str


def validate_rating_value(value: int) -> int:
    """Reject anything that is not an integer in [1, 5]."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise RatingValueError(f"Rating must be an integer, got {value!r}")
    if not MIN_RATING <= value <= MAX_RATING:
        raise RatingValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {value}")
    return value


async def _upsert_rating(user_id: str, store_id: str, value: int) -> tuple[Rating, bool]:
    async with get_session() as session:
        if await session.get(Store, store_id) is None:
            raise StoreNotFoundError(store_id)
        if await session.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

        result = await session.execute(
            select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
        )
        existing = result.scalar_one_or_none()
        now = utcnow()

        if existing is not None:
            existing.rating = value
            existing.updated_at = now
            await session.flush()
            return existing, False

        rating = Rating(
            user_id=user_id,
            store_id=store_id,
            rating=value,
            created_at=now,
            updated_at=now,
        )
        session.add(rating)
        await session.flush()
        return rating, True


async def submit_rating(user_id: str, store_id: str, value: int) -> tuple[Rating, bool]:
    """Create or replace a user's rating for a store.

    Args:
        user_id: Rating user.
        store_id: Rated store.
        value: Star rating, 1-5.

    Returns:
        (rating, created) where created is False when an existing row was updated.

    Raises:
        RatingValueError: If value is outside [1, 5].
        StoreNotFoundError: If the store does not exist.
        UserNotFoundError: If the user does not exist.
    """
    validate_rating_value(value)

    try:
        rating, created = await _upsert_rating(user_id, store_id, value)
    except IntegrityError:
        logger.info(
            "[ratings] concurrent insert for user_id=%s store_id=%s, retrying as update",
            user_id,
            store_id,
        )
        rating, created = await _upsert_rating(user_id, store_id, value)

    logger.info(
        "[ratings] %s rating_id=%s user_id=%s store_id=%s value=%s",
        "created" if created else "updated",
        rating.id,
        user_id,
        store_id,
        value,
    )
    return rating, created


async def get_rating(rating_id: str) -> Rating | None:
    async with get_session() as session:
        return await session.get(Rating, rating_id)


async def update_rating(rating_id: str, value: int) -> Rating | None:
    """Change the value of an existing rating by id. Returns None if missing."""
    validate_rating_value(value)

    async with get_session() as session:
        rating = await session.get(Rating, rating_id)
        if rating is None:
            return None
        rating.rating = value
        rating.updated_at = utcnow()
        await session.flush()

    logger.info("[ratings] updated rating_id=%s value=%s", rating_id, value)
    return rating


async def get_store_average_rating(store_id: str) -> float:
    """Arithmetic mean of the store's ratings; 0.0 when it has none."""
    async with get_session() as session:
        result = await session.execute(
            select(func.avg(Rating.rating)).where(Rating.store_id == store_id)
        )
        average = result.scalar_one_or_none()
    return float(average) if average is not None else 0.0


async def list_store_ratings(store_id: str) -> list[StoreRatingRow]:
    """All ratings of a store with rater name/email, most recently updated first."""
    query = (
        select(Rating, User.name, User.email)
        .join(User, User.id == Rating.user_id)
        .where(Rating.store_id == store_id)
        .order_by(Rating.updated_at.desc(), Rating.id)
    )
    async with get_session() as session:
        rows = (await session.execute(query)).all()

    return [
        StoreRatingRow(rating=rating, user_name=name, user_email=email)
        for rating, name, email in rows
    ]


async def list_user_ratings(user_id: str) -> list[UserRatingRow]:
    """All ratings given by a user with store name/address, sorted by store name."""
    query = (
        select(Rating, Store.name, Store.address)
        .join(Store, Store.id == Rating.store_id)
        .where(Rating.user_id == user_id)
        .order_by(Store.name.asc(), Rating.id)
    )
    async with get_session() as session:
        rows = (await session.execute(query)).all()

    return [
        UserRatingRow(rating=rating, store_name=name, store_address=address)
        for rating, name, address in rows
    ]


async def get_user_store_rating(user_id: str, store_id: str) -> Rating | None:
    async with get_session() as session:
        result = await session.execute(
            select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
        )
        return result.scalar_one_or_none()


async def count_ratings() -> int:
    async with get_session() as session:
        result = await session.execute(select(func.count()).select_from(Rating))
        return int(result.scalar_one())
