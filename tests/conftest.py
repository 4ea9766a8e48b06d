"""Test fixtures — a fresh in-memory SQLite database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI without a server:

1. Each test gets its own engine on "sqlite+aiosqlite:///:memory:".
   StaticPool hands every session the SAME connection, so the in-memory
   database survives across sessions (a new connection would see an
   empty database).
2. Base.metadata.create_all builds the schema; the engine is disposed
   after the test, and with it the whole database.
3. get_db is overridden so every request opens a session on that engine.
   Auth is NOT overridden: tests register, log in, and send real tokens.

ASGITransport doesn't run the lifespan, so Redis is never initialized
and rate limiting is skipped unless a test installs a fake.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from inkwell.auth import password as password_module
from inkwell.auth.roles import Role
from inkwell.db.engine import get_db
from inkwell.db.models import Base
from inkwell.main import app
from inkwell.services.user_service import UserService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "secret-pass-123"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """bcrypt at cost 12 is ~250ms per hash; tests don't need that."""
    monkeypatch.setattr(password_module, "BCRYPT_ROUNDS", 4)


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for arranging data directly, bypassing the API."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client with get_db pointed at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ═══════════════════════════════════════════════════════════
# Account helpers
# ═══════════════════════════════════════════════════════════


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


async def register(client, email=None, password=PASSWORD, first_name="Test", last_name="User"):
    email = email or unique_email()
    r = await client.post(
        "/api/v1/auth/register",
        json={
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "password": password,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


async def login(client, email, password=PASSWORD) -> dict:
    """Log in and return {"id", "email", "token", "headers"}."""
    r = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]
    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    return {
        "id": me.json()["id"],
        "email": email,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


async def make_account(client, session_factory, role: Role = Role.USER, prefix="user") -> dict:
    email = unique_email(prefix)
    await register(client, email=email)
    if role != Role.USER:
        async with session_factory() as session:
            await UserService(session).set_role(email, role)
    return await login(client, email)


@pytest_asyncio.fixture()
async def user(client, session_factory):
    return await make_account(client, session_factory, prefix="alice")


@pytest_asyncio.fixture()
async def other_user(client, session_factory):
    return await make_account(client, session_factory, prefix="bob")


@pytest_asyncio.fixture()
async def admin(client, session_factory):
    return await make_account(client, session_factory, role=Role.ADMIN, prefix="admin")
