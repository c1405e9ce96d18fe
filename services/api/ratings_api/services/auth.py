"""Authentication and server-side session service.

Principals:
- AdminUser / RegularUser: rows of the users table (role "admin" / "user")
- StoreOwner: rows of the stores table (synthetic role "store")

Login flow:
1. Resolve the email against users, then stores
2. Verify the password against the stored bcrypt hash
3. Destroy any session id the client already holds (session fixation)
4. Issue a fresh random session id and store {userId, role} in Redis
"""

from dataclasses import dataclass
from enum import Enum
import logging
import secrets
from typing import Any, ClassVar

from sqlalchemy import select

from ratings_api.models import Store, User
from ratings_api.services.passwords import burn_verification, hash_password, verify_password
from ratings_api.stores.postgres import get_session
from ratings_api.stores.redis import delete_session_data, get_session_data, set_session_data

logger = logging.getLogger("uvicorn.error")


class Role(str, Enum):
    """Principal role as stored in the session."""

    ADMIN = "admin"
    USER = "user"
    STORE = "store"


@dataclass(frozen=True)
class AdminUser:
    id: str
    role: ClassVar[Role] = Role.ADMIN


@dataclass(frozen=True)
class RegularUser:
    id: str
    role: ClassVar[Role] = Role.USER


@dataclass(frozen=True)
class StoreOwner:
    id: str
    role: ClassVar[Role] = Role.STORE


Principal = AdminUser | RegularUser | StoreOwner

_PRINCIPAL_BY_ROLE: dict[Role, type[AdminUser] | type[RegularUser] | type[StoreOwner]] = {
    Role.ADMIN: AdminUser,
    Role.USER: RegularUser,
    Role.STORE: StoreOwner,
}


class InvalidCredentialsError(Exception):
    """Email unknown or password wrong. Deliberately does not say which."""


class PrincipalNotFoundError(Exception):
    """The session refers to an account that no longer exists."""


def make_principal(principal_id: str, role: str) -> Principal:
    """Build the principal variant for a role string.

    Raises:
        ValueError: If role is not one of admin/user/store.
    """
    return _PRINCIPAL_BY_ROLE[Role(role)](id=principal_id)


def principal_from_session(data: dict[str, Any] | None) -> Principal | None:
    """Decode a session record; None for missing or malformed records."""
    if not data:
        return None
    principal_id = data.get("userId")
    role = data.get("role")
    if not isinstance(principal_id, str) or not principal_id:
        return None
    try:
        return make_principal(principal_id, str(role))
    except ValueError:
        logger.warning("[auth] session with unknown role=%r ignored", role)
        return None


def session_payload(principal: Principal) -> dict[str, str]:
    return {"userId": principal.id, "role": principal.role.value}


async def authenticate(email: str, password: str) -> tuple[Principal, User | Store]:
    """Resolve credentials to a principal and its account row.

    Raises:
        InvalidCredentialsError: If no account matches or the password is wrong.
    """
    email = email.strip().lower()

    async with get_session() as session:
        user = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
        account: User | Store | None = user
        if account is None:
            account = (
                await session.execute(select(Store).where(Store.email == email))
            ).scalar_one_or_none()

    if account is None:
        await burn_verification()
        raise InvalidCredentialsError()

    if not await verify_password(password, account.password):
        raise InvalidCredentialsError()

    if isinstance(account, User):
        principal = make_principal(account.id, account.role)
    else:
        principal = StoreOwner(id=account.id)
    return principal, account


async def start_session(principal: Principal, previous_session_id: str | None = None) -> str:
    """Issue a fresh session id for a principal, destroying the previous one."""
    if previous_session_id:
        await delete_session_data(previous_session_id)

    session_id = secrets.token_urlsafe(32)
    await set_session_data(session_id, session_payload(principal))
    return session_id


async def end_session(session_id: str) -> None:
    await delete_session_data(session_id)


async def load_principal(session_id: str) -> Principal | None:
    """Look up the principal behind a session id, if the session is alive.

    The account row is authoritative: a deleted account yields None and a
    changed role takes effect on the next request.
    """
    principal = principal_from_session(await get_session_data(session_id))
    if principal is None:
        return None

    account = await get_account(principal)
    if account is None:
        logger.info("[auth] session for deleted account principal_id=%s ignored", principal.id)
        return None
    if isinstance(account, User) and account.role != principal.role.value:
        return make_principal(account.id, account.role)
    return principal


async def get_account(principal: Principal) -> User | Store | None:
    """Load the users/stores row a principal refers to."""
    model = Store if isinstance(principal, StoreOwner) else User
    async with get_session() as session:
        return await session.get(model, principal.id)


async def update_password(principal: Principal, current_password: str, new_password: str) -> None:
    """Replace a principal's password after re-verifying the current one.

    The new password must already satisfy the password policy.

    Raises:
        PrincipalNotFoundError: If the account no longer exists.
        InvalidCredentialsError: If current_password does not match.
    """
    model = Store if isinstance(principal, StoreOwner) else User

    async with get_session() as session:
        account = await session.get(model, principal.id)
        if account is None:
            raise PrincipalNotFoundError(principal.id)

        if not await verify_password(current_password, account.password):
            raise InvalidCredentialsError()

        account.password = await hash_password(new_password)

    logger.info("[auth] password updated principal_id=%s role=%s", principal.id, principal.role.value)
