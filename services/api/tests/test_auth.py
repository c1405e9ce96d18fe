"""Tests for login, sessions, role gates and password updates."""

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from ratings_api.routes.deps import require_role
from ratings_api.services.auth import (
    AdminUser,
    RegularUser,
    Role,
    StoreOwner,
    principal_from_session,
    session_payload,
)
from ratings_api.services.users import delete_user, update_user
from ratings_api.settings import get_settings

from conftest import ADMIN_PASSWORD, STORE_PASSWORD, USER_PASSWORD


def test_principal_round_trips_through_session_payload():
    for principal in (AdminUser(id="a"), RegularUser(id="u"), StoreOwner(id="s")):
        assert principal_from_session(session_payload(principal)) == principal


def test_principal_from_malformed_session_is_none():
    assert principal_from_session(None) is None
    assert principal_from_session({}) is None
    assert principal_from_session({"userId": "x", "role": "superuser"}) is None
    assert principal_from_session({"role": "admin"}) is None


@pytest.mark.asyncio
async def test_require_role_rejects_other_roles():
    gate = require_role(Role.ADMIN)

    assert await gate(principal=AdminUser(id="a")) == AdminUser(id="a")
    with pytest.raises(HTTPException) as exc_info:
        await gate(principal=StoreOwner(id="s"))
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_signup_creates_normal_user(client: AsyncClient):
    response = await client.post(
        "/api/signup",
        json={
            "name": "New Person",
            "email": "New.Person@Example.com",
            "password": "Welcome#2024",
            "address": "5 Elm Street",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == "new.person@example.com"
    assert body["user"]["role"] == "user"
    assert "createdAt" in body["user"]
    assert "password" not in body["user"]


@pytest.mark.asyncio
async def test_signup_validation_errors_are_per_field(client: AsyncClient):
    response = await client.post(
        "/api/signup",
        json={"name": "A", "email": "not-an-email", "password": "short", "address": "x"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    assert set(body["errors"]) == {"name", "email", "password"}
    assert body["errors"]["name"] == ["Name must be at least 2 characters"]
    assert body["errors"]["password"] == ["Password must be at least 8 characters"]


@pytest.mark.asyncio
async def test_signup_rejects_email_of_existing_user_or_store(client: AsyncClient, user, store):
    for email in (user.email, store.email):
        response = await client.post(
            "/api/signup",
            json={"name": "Copy Cat", "email": email, "password": "Welcome#2024", "address": "x"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User with this email already exists"


@pytest.mark.asyncio
async def test_login_as_user_sets_http_only_session_cookie(client: AsyncClient, user, fake_redis):
    response = await client.post("/api/login", json={"email": user.email, "password": USER_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == user.id
    assert body["user"]["role"] == "user"
    assert "password" not in body["user"]

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("sid=")
    assert "httponly" in set_cookie.lower()

    session_id = client.cookies.get("sid")
    key = f"session:{session_id}"
    assert key in fake_redis.values
    assert fake_redis.ttls[key] == get_settings().session_ttl_seconds


@pytest.mark.asyncio
async def test_login_as_store_gets_store_role(client: AsyncClient, store):
    response = await client.post("/api/login", json={"email": store.email, "password": STORE_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "store"
    assert response.json()["user"]["id"] == store.id


@pytest.mark.asyncio
async def test_login_as_admin_gets_admin_role(client: AsyncClient, admin):
    response = await client.post("/api/login", json={"email": admin.email, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(client: AsyncClient, user):
    unknown = await client.post("/api/login", json={"email": "nobody@example.com", "password": USER_PASSWORD})
    wrong = await client.post("/api/login", json={"email": user.email, "password": "Wrong#Pass1"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {"message": "Invalid email or password"}
    assert "sid" not in client.cookies


@pytest.mark.asyncio
async def test_login_regenerates_session_id(client_factory, user, fake_redis):
    ac = await client_factory(user.email, USER_PASSWORD)
    first = ac.cookies.get("sid")

    response = await ac.post("/api/login", json={"email": user.email, "password": USER_PASSWORD})
    assert response.status_code == 200
    second = ac.cookies.get("sid")

    assert first != second
    assert f"session:{first}" not in fake_redis.values
    assert f"session:{second}" in fake_redis.values

    stale = await client_factory()
    stale.cookies.set("sid", first)
    assert (await stale.get("/api/me")).status_code == 401


@pytest.mark.asyncio
async def test_me_requires_session(client: AsyncClient):
    response = await client.get("/api/me")
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}


@pytest.mark.asyncio
async def test_me_returns_current_principal(store_client: AsyncClient, store):
    response = await store_client.get("/api/me")
    assert response.status_code == 200
    assert response.json()["user"] == {
        "id": store.id,
        "name": store.name,
        "email": store.email,
        "address": store.address,
        "role": "store",
        "createdAt": response.json()["user"]["createdAt"],
    }


@pytest.mark.asyncio
async def test_logout_destroys_session(user_client: AsyncClient, fake_redis):
    session_id = user_client.cookies.get("sid")

    response = await user_client.post("/api/logout")
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
    assert f"session:{session_id}" not in fake_redis.values

    user_client.cookies.set("sid", session_id)
    assert (await user_client.get("/api/me")).status_code == 401


@pytest.mark.asyncio
async def test_update_password_requires_auth(client: AsyncClient):
    response = await client.put(
        "/api/update-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "Brand#New1"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_password_rejects_wrong_current_password(client_factory, user_client: AsyncClient, user):
    response = await user_client.put(
        "/api/update-password",
        json={"currentPassword": "Wrong#Pass1", "newPassword": "Brand#New1"},
    )
    assert response.status_code == 401
    assert response.json() == {"message": "Current password is incorrect"}

    # Old password still works.
    await client_factory(user.email, USER_PASSWORD)


@pytest.mark.asyncio
async def test_update_password_enforces_policy(user_client: AsyncClient):
    response = await user_client.put(
        "/api/update-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "nouppercase1!"},
    )
    assert response.status_code == 400
    assert response.json()["errors"]["newPassword"] == ["Password must contain at least one uppercase letter"]


@pytest.mark.asyncio
async def test_update_password_then_login_with_new_password(client: AsyncClient, user_client: AsyncClient, user):
    response = await user_client.put(
        "/api/update-password",
        json={"currentPassword": USER_PASSWORD, "newPassword": "Brand#New1"},
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Password updated successfully"}

    old = await client.post("/api/login", json={"email": user.email, "password": USER_PASSWORD})
    assert old.status_code == 401
    new = await client.post("/api/login", json={"email": user.email, "password": "Brand#New1"})
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_store_owner_can_update_password(client: AsyncClient, store_client: AsyncClient, store):
    response = await store_client.put(
        "/api/update-password",
        json={"currentPassword": STORE_PASSWORD, "newPassword": "Shop#Keeper9"},
    )
    assert response.status_code == 200

    login = await client.post("/api/login", json={"email": store.email, "password": "Shop#Keeper9"})
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "store"


@pytest.mark.asyncio
async def test_session_of_deleted_admin_is_rejected(client_factory, make_user):
    other_admin = await make_user(role="admin", password=ADMIN_PASSWORD)
    other_client = await client_factory(other_admin.email, ADMIN_PASSWORD)
    assert (await other_client.get("/api/users")).status_code == 200

    assert await delete_user(other_admin.id) is True

    response = await other_client.get("/api/users")
    assert response.status_code == 401
    assert response.json() == {"message": "Authentication required"}


@pytest.mark.asyncio
async def test_demoted_admin_loses_admin_access_immediately(admin_client: AsyncClient, client_factory, make_user):
    other_admin = await make_user(role="admin", password=ADMIN_PASSWORD)
    other_client = await client_factory(other_admin.email, ADMIN_PASSWORD)
    assert (await other_client.get("/api/users")).status_code == 200

    response = await admin_client.put(f"/api/users/{other_admin.id}", json={"role": "user"})
    assert response.status_code == 200

    response = await other_client.get("/api/users")
    assert response.status_code == 403
    assert response.json() == {"message": "Access denied: insufficient permissions"}


@pytest.mark.asyncio
async def test_promoted_user_gains_admin_access(user_client: AsyncClient, user):
    assert (await user_client.get("/api/stats")).status_code == 403

    await update_user(user.id, role="admin")

    assert (await user_client.get("/api/stats")).status_code == 200
