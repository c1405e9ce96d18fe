"""User account service.

CRUD over the users table. Email addresses are unique across users and
stores, because login resolves an email against both tables.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ratings_api.models import Store, User
from ratings_api.services.passwords import hash_password
from ratings_api.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

USER_SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "address": User.address,
    "role": User.role,
    "createdAt": User.created_at,
}


class EmailTakenError(Exception):
    """Raised when an email already belongs to a user or a store."""

    def __init__(self, email: str):
        super().__init__(f"Email already in use: {email}")
        self.email = email


class UserNotFoundError(Exception):
    pass


async def email_in_use(
    session: AsyncSession,
    email: str,
    *,
    exclude_user_id: str | None = None,
    exclude_store_id: str | None = None,
) -> bool:
    """Check whether any user or store (other than the excluded one) has this email."""
    user_query = select(User.id).where(User.email == email)
    if exclude_user_id:
        user_query = user_query.where(User.id != exclude_user_id)
    if (await session.execute(user_query.limit(1))).first() is not None:
        return True

    store_query = select(Store.id).where(Store.email == email)
    if exclude_store_id:
        store_query = store_query.where(Store.id != exclude_store_id)
    return (await session.execute(store_query.limit(1))).first() is not None


async def list_users(
    *,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
    role: str | None = None,
    sort_by: str = "name",
    order: str = "asc",
) -> list[User]:
    """List users, optionally filtered (case-insensitive substring) and sorted.

    Args:
        name: Substring of the user's name.
        email: Substring of the user's email.
        address: Substring of the user's address.
        role: Exact role ("admin" or "user").
        sort_by: One of USER_SORT_COLUMNS keys.
        order: "asc" or "desc".
    """
    query = select(User)
    if name:
        query = query.where(User.name.icontains(name, autoescape=True))
    if email:
        query = query.where(User.email.icontains(email, autoescape=True))
    if address:
        query = query.where(User.address.icontains(address, autoescape=True))
    if role:
        query = query.where(User.role == role)

    column = USER_SORT_COLUMNS.get(sort_by, User.name)
    query = query.order_by(column.desc() if order == "desc" else column.asc(), User.id)

    async with get_session() as session:
        result = await session.execute(query)
        return list(result.scalars().all())


async def get_user(user_id: str) -> User | None:
    async with get_session() as session:
        return await session.get(User, user_id)


async def get_user_by_email(email: str) -> User | None:
    async with get_session() as session:
        result = await session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()


async def create_user(
    *,
    name: str,
    email: str,
    password: str,
    address: str,
    role: str = "user",
) -> User:
    """Create a user account from a plaintext password.

    Raises:
        EmailTakenError: If the email belongs to another user or store.
    """
    password_hash = await hash_password(password)

    async with get_session() as session:
        if await email_in_use(session, email):
            raise EmailTakenError(email)

        user = User(
            name=name,
            email=email,
            password=password_hash,
            address=address,
            role=role,
        )
        session.add(user)
        try:
            await session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent create for the same email.
            raise EmailTakenError(email) from exc

    logger.info("[users] created user_id=%s role=%s", user.id, user.role)
    return user


async def update_user(
    user_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
    address: str | None = None,
    role: str | None = None,
) -> User | None:
    """Apply a partial update. Returns None if the user does not exist.

    Raises:
        EmailTakenError: If the new email belongs to another user or store.
    """
    password_hash = await hash_password(password) if password else None

    async with get_session() as session:
        user = await session.get(User, user_id)
        if user is None:
            return None

        if email is not None and email != user.email:
            if await email_in_use(session, email, exclude_user_id=user_id):
                raise EmailTakenError(email)
            user.email = email
        if name is not None:
            user.name = name
        if address is not None:
            user.address = address
        if role is not None:
            user.role = role
        if password_hash is not None:
            user.password = password_hash
        try:
            await session.flush()
        except IntegrityError as exc:
            raise EmailTakenError(user.email) from exc

    logger.info("[users] updated user_id=%s", user_id)
    return user


async def delete_user(user_id: str) -> bool:
    """Delete a user; their ratings go with them (ON DELETE CASCADE)."""
    async with get_session() as session:
        user = await session.get(User, user_id)
        if user is None:
            return False
        await session.delete(user)

    logger.info("[users] deleted user_id=%s", user_id)
    return True


async def count_users() -> int:
    async with get_session() as session:
        result = await session.execute(select(func.count()).select_from(User))
        return int(result.scalar_one())
