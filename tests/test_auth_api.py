"""Auth API tests.

Learn: Tests cover:
1. Registration + duplicate prevention + validation
2. Login → access token in body, refresh token in an HttpOnly cookie
3. Refresh → rotated pair with identical claims
4. Logout clears the cookie
5. /me and change-password
"""

import pytest

from conftest import PASSWORD, login, register, unique_email
from inkwell.auth.roles import Role
from inkwell.services.user_service import UserService


def _refresh_cookie(response) -> str:
    token = response.cookies.get("refresh_token")
    assert token, response.headers.get("set-cookie")
    return token


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    email = unique_email("reg")
    user = await register(client, email=email, first_name="Ada", last_name="Lovelace")
    assert user["email"] == email
    assert user["first_name"] == "Ada"
    assert user["role"] == "user"
    assert "password" not in user
    assert "password_hash" not in user


@pytest.mark.asyncio
async def test_register_normalizes_email(client):
    user = await register(client, email="Mixed.Case@Example.COM")
    assert user["email"] == "mixed.case@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Can't register with the same email twice, in any letter case."""
    email = unique_email("dup")
    await register(client, email=email)

    r = await client.post(
        "/api/v1/auth/register",
        json={"first_name": "Again", "email": email.upper(), "password": PASSWORD},
    )
    assert r.status_code == 409
    body = r.json()
    assert body == {"status": False, "statusCode": 409, "message": "Email already registered"}


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"first_name": "Short", "email": unique_email(), "password": "abc"},
    )
    assert r.status_code == 400
    body = r.json()
    assert body["status"] is False
    assert isinstance(body["message"], list)
    assert any("password" in m for m in body["message"])


@pytest.mark.asyncio
async def test_register_invalid_email(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"first_name": "Nope", "email": "not-an-email", "password": PASSWORD},
    )
    assert r.status_code == 400


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success_sets_refresh_cookie(client):
    email = unique_email("login")
    await register(client, email=email)

    r = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"
    assert "refresh_token" not in body

    set_cookie = r.headers["set-cookie"].lower()
    assert "refresh_token=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie
    assert "max-age=2592000" in set_cookie
    # Development environment: no Secure flag
    assert "secure" not in set_cookie


@pytest.mark.asyncio
async def test_login_token_claims_match_user(client):
    email = unique_email("claims")
    user = await register(client, email=email)
    account = await login(client, email)

    r = await client.get("/api/v1/auth/me", headers=account["headers"])
    assert r.status_code == 200
    assert r.json() == {"id": user["id"], "email": email, "role": "user"}


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    email = unique_email("wrong")
    await register(client, email=email)

    r = await client.post("/api/v1/auth/login", json={"email": email, "password": "wrong-pass"})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert "refresh_token" not in r.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    """Unknown email gets exactly the same answer as a wrong password."""
    r = await client.post(
        "/api/v1/auth/login", json={"email": unique_email("ghost"), "password": PASSWORD}
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid credentials"


# ═══════════════════════════════════════════════════════════
# Current user
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_requires_token(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client):
    r = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 401
    assert r.json()["message"].startswith("Invalid token")


@pytest.mark.asyncio
async def test_me_rejects_refresh_token_as_access(client):
    email = unique_email("swap")
    await register(client, email=email)
    r = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    refresh_token = _refresh_cookie(r)

    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh_token}"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Refresh
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_refresh_rotates_tokens_with_same_claims(client):
    email = unique_email("refresh")
    await register(client, email=email)
    r = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    old_access = r.json()["access_token"]
    refresh_token = _refresh_cookie(r)

    client.cookies.clear()
    r = await client.post(
        "/api/v1/auth/refresh", headers={"Cookie": f"refresh_token={refresh_token}"}
    )
    assert r.status_code == 200
    new_access = r.json()["access_token"]
    assert _refresh_cookie(r)

    old_me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {old_access}"})
    new_me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert old_me.json() == new_me.json()


@pytest.mark.asyncio
async def test_refresh_without_cookie(client):
    client.cookies.clear()
    r = await client.post("/api/v1/auth/refresh")
    assert r.status_code == 401
    assert r.json()["message"] == "Refresh token missing"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, user):
    client.cookies.clear()
    r = await client.post(
        "/api/v1/auth/refresh", headers={"Cookie": f"refresh_token={user['token']}"}
    )
    assert r.status_code == 401


async def _login_for_refresh(client, email) -> str:
    r = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200
    client.cookies.clear()
    return _refresh_cookie(r)


@pytest.mark.asyncio
async def test_refresh_after_user_deleted_is_401(client, admin):
    email = unique_email("leaver")
    account = await register(client, email=email)
    refresh_token = await _login_for_refresh(client, email)

    r = await client.delete(f"/api/v1/users/{account['id']}", headers=admin["headers"])
    assert r.status_code == 200

    r = await client.post(
        "/api/v1/auth/refresh", headers={"Cookie": f"refresh_token={refresh_token}"}
    )
    assert r.status_code == 401
    assert "refresh_token=" not in r.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_refresh_after_demotion_drops_admin(client, session_factory):
    email = unique_email("demoted")
    await register(client, email=email)
    async with session_factory() as session:
        await UserService(session).set_role(email, Role.ADMIN)
    refresh_token = await _login_for_refresh(client, email)

    async with session_factory() as session:
        await UserService(session).set_role(email, Role.USER)

    r = await client.post(
        "/api/v1/auth/refresh", headers={"Cookie": f"refresh_token={refresh_token}"}
    )
    assert r.status_code == 200
    headers = {"Authorization": f"Bearer {r.json()['access_token']}"}

    me = await client.get("/api/v1/auth/me", headers=headers)
    assert me.json()["role"] == "user"
    r = await client.get("/api/v1/users", headers=headers)
    assert r.status_code == 403


# ═══════════════════════════════════════════════════════════
# Logout
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_logout_clears_cookie(client, user):
    r = await client.post("/api/v1/auth/logout", headers=user["headers"])
    assert r.status_code == 200
    assert r.json() == {"message": "Logged out successfully"}
    set_cookie = r.headers["set-cookie"]
    assert "refresh_token=" in set_cookie
    assert "Max-Age=0" in set_cookie


@pytest.mark.asyncio
async def test_logout_requires_token(client):
    r = await client.post("/api/v1/auth/logout")
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Change password
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_change_password(client, user):
    r = await client.post(
        "/api/v1/auth/change-password",
        json={"old_password": PASSWORD, "new_password": "brand-new-pass"},
        headers=user["headers"],
    )
    assert r.status_code == 200

    r = await client.post(
        "/api/v1/auth/login", json={"email": user["email"], "password": PASSWORD}
    )
    assert r.status_code == 401
    r = await client.post(
        "/api/v1/auth/login", json={"email": user["email"], "password": "brand-new-pass"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_old_password(client, user):
    r = await client.post(
        "/api/v1/auth/change-password",
        json={"old_password": "not-my-password", "new_password": "brand-new-pass"},
        headers=user["headers"],
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Current password is incorrect"


@pytest.mark.asyncio
async def test_change_password_same_as_old(client, user):
    r = await client.post(
        "/api/v1/auth/change-password",
        json={"old_password": PASSWORD, "new_password": PASSWORD},
        headers=user["headers"],
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_change_password_requires_token(client):
    r = await client.post(
        "/api/v1/auth/change-password",
        json={"old_password": PASSWORD, "new_password": "brand-new-pass"},
    )
    assert r.status_code == 401
