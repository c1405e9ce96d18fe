"""Shared fixtures: SQLite database, in-memory session store, HTTP clients."""

from collections.abc import AsyncIterator, Awaitable, Callable
import itertools

import pytest
from httpx import ASGITransport, AsyncClient

from ratings_api.main import app
from ratings_api.models import Store, User
from ratings_api.services.stores import create_store
from ratings_api.services.users import create_user
from ratings_api.settings import get_settings
from ratings_api.stores import postgres
from ratings_api.stores import redis as redis_store

ADMIN_PASSWORD = "Admin123!"
USER_PASSWORD = "User1234!"
STORE_PASSWORD = "Store123!"


class InMemoryRedis:
    """The subset of the redis.asyncio client the session store uses."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.values[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


@pytest.fixture(autouse=True)
def settings_env(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a throwaway SQLite file and cheap bcrypt."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("SESSION_COOKIE_SECURE", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def db() -> AsyncIterator[None]:
    await postgres.init_db()
    await postgres.create_tables()
    yield
    await postgres.close_db()


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> InMemoryRedis:
    fake = InMemoryRedis()
    monkeypatch.setattr(redis_store, "_redis", fake)
    return fake


@pytest.fixture
def make_user(db) -> Callable[..., Awaitable[User]]:
    counter = itertools.count(1)

    async def _make(
        *,
        role: str = "user",
        password: str = USER_PASSWORD,
        name: str | None = None,
        email: str | None = None,
        address: str = "1 Test Street, Testville",
    ) -> User:
        n = next(counter)
        return await create_user(
            name=name or f"Test User {n}",
            email=email or f"{role}{n}@example.com",
            password=password,
            address=address,
            role=role,
        )

    return _make


@pytest.fixture
def make_store(db) -> Callable[..., Awaitable[Store]]:
    counter = itertools.count(1)

    async def _make(
        *,
        password: str = STORE_PASSWORD,
        name: str | None = None,
        email: str | None = None,
        address: str = "99 Market Road, Testville",
    ) -> Store:
        n = next(counter)
        return await create_store(
            name=name or f"Test Store {n}",
            email=email or f"store{n}@example.com",
            password=password,
            address=address,
        )

    return _make


@pytest.fixture
async def client_factory(db, fake_redis) -> AsyncIterator[Callable[..., Awaitable[AsyncClient]]]:
    """Build HTTP clients, optionally logged in with the given credentials."""
    clients: list[AsyncClient] = []

    async def _make(email: str | None = None, password: str | None = None) -> AsyncClient:
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        if email is not None:
            response = await ac.post("/api/login", json={"email": email, "password": password})
            assert response.status_code == 200, response.text
        return ac

    yield _make

    for ac in clients:
        await ac.aclose()


@pytest.fixture
async def client(client_factory) -> AsyncClient:
    """Anonymous client."""
    return await client_factory()


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(role="admin", password=ADMIN_PASSWORD, name="Site Admin")


@pytest.fixture
async def admin_client(client_factory, admin: User) -> AsyncClient:
    return await client_factory(admin.email, ADMIN_PASSWORD)


@pytest.fixture
async def user(make_user) -> User:
    return await make_user(name="Regular Rater")


@pytest.fixture
async def user_client(client_factory, user: User) -> AsyncClient:
    return await client_factory(user.email, USER_PASSWORD)


@pytest.fixture
async def store(make_store) -> Store:
    return await make_store(name="Corner Bakery")


@pytest.fixture
async def store_client(client_factory, store: Store) -> AsyncClient:
    return await client_factory(store.email, STORE_PASSWORD)
