"""Store service.

CRUD over the stores table plus the store listing with derived averages.
Averages are computed per read with SQL AVG; nothing is cached.
"""

from dataclasses import dataclass
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from ratings_api.models import Rating, Store
from ratings_api.services.passwords import hash_password
from ratings_api.services.users import EmailTakenError, email_in_use
from ratings_api.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

STORE_SORT_COLUMNS = {
    "name": Store.name,
    "email": Store.email,
    "address": Store.address,
    "createdAt": Store.created_at,
}


class StoreNotFoundError(Exception):
    pass


@dataclass
class StoreSummary:
    """A store with its rating aggregates and, optionally, the caller's rating."""

    store: Store
    average_rating: float
    total_ratings: int
    user_rating: int | None = None


def _search_filter(search: str):
    return or_(
        Store.name.icontains(search, autoescape=True),
        Store.address.icontains(search, autoescape=True),
    )


async def list_stores(
    *,
    search: str | None = None,
    sort_by: str = "name",
    order: str = "asc",
) -> list[Store]:
    """List stores, optionally filtered by name/address substring and sorted."""
    query = select(Store)
    if search:
        query = query.where(_search_filter(search))

    column = STORE_SORT_COLUMNS.get(sort_by, Store.name)
    query = query.order_by(column.desc() if order == "desc" else column.asc(), Store.id)

    async with get_session() as session:
        result = await session.execute(query)
        return list(result.scalars().all())


async def list_stores_with_ratings(
    *,
    user_id: str | None = None,
    search: str | None = None,
) -> list[StoreSummary]:
    """List stores with average rating, rating count and the user's own rating.

    Args:
        user_id: When given, each summary carries that user's rating (or None).
        search: Case-insensitive substring of the store name or address.

    Returns:
        Summaries sorted by store name.
    """
    query = (
        select(Store, func.avg(Rating.rating), func.count(Rating.id))
        .outerjoin(Rating, Rating.store_id == Store.id)
        .group_by(Store.id)
        .order_by(Store.name.asc(), Store.id)
    )
    if search:
        query = query.where(_search_filter(search))

    async with get_session() as session:
        rows = (await session.execute(query)).all()

        own: dict[str, int] = {}
        if user_id:
            own_result = await session.execute(
                select(Rating.store_id, Rating.rating).where(Rating.user_id == user_id)
            )
            own = {store_id: value for store_id, value in own_result.all()}

    return [
        StoreSummary(
            store=store,
            average_rating=float(average) if average is not None else 0.0,
            total_ratings=int(count),
            user_rating=own.get(store.id),
        )
        for store, average, count in rows
    ]


async def get_store(store_id: str) -> Store | None:
    async with get_session() as session:
        return await session.get(Store, store_id)


async def create_store(*, name: str, email: str, password: str, address: str) -> Store:
    """Create a store with owner credentials.

    Raises:
        EmailTakenError: If the email belongs to a user or another store.
    """
    password_hash = await hash_password(password)

    async with get_session() as session:
        if await email_in_use(session, email):
            raise EmailTakenError(email)

        store = Store(name=name, email=email, password=password_hash, address=address)
        session.add(store)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent create for the same email.
            raise EmailTakenError(email) from exc

    logger.info("[stores] created store_id=%s", store.id)
    return store


async def update_store(
    store_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    address: str | None = None,
) -> Store | None:
    """Apply a partial update. Returns None if the store does not exist.

    Raises:
        EmailTakenError: If the new email belongs to a user or another store.
    """
    password_hash = await hash_password(password) if password else None

    async with get_session() as session:
        store = await session.get(Store, store_id)
        if store is None:
            return None

        if email is not None and email != store.email:
            if await email_in_use(session, email, exclude_store_id=store_id):
                raise EmailTakenError(email)
            store.email = email
        if name is not None:
            store.name = name
        if address is not None:
            store.address = address
        if password_hash is not None:
            store.password = password_hash
        try:
            await session.flush()
        except IntegrityError as exc:
            raise EmailTakenError(store.email) from exc

    logger.info("[stores] updated store_id=%s", store_id)
    return store


async def delete_store(store_id: str) -> bool:
    """Delete a store; its ratings go with it (ON DELETE CASCADE)."""
    async with get_session() as session:
        store = await session.get(Store, store_id)
        if store is None:
            return False
        await session.delete(store)

    logger.info("[stores] deleted store_id=%s", store_id)
    return True


async def count_stores() -> int:
    async with get_session() as session:
        result = await session.execute(select(func.count()).select_from(Store))
        return int(result.scalar_one())
