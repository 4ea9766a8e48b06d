"""
Shared helpers for Inkwell examples.

Handles the health check and authentication (register + login) so each
example can focus on its own workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"
PASSWORD = "demo-password-123"


def check_backend() -> None:
    """Verify the backend is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  inkwell serve --reload")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {health['database']}")
    print(f"  Redis:    {health['redis']}")

    if health["database"] != "ok":
        print("\nERROR: Database is not connected. Check INKWELL_DATABASE_URL.")
        sys.exit(1)


def authenticate(first_name: str = "Demo") -> tuple[str, httpx.Cookies]:
    """Register a fresh user and log in.

    Returns the access token and the cookies holding the refresh token.
    Uses a unique email per run so examples are repeatable.
    """
    email = f"demo-{uuid.uuid4().hex[:8]}@example.com"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={"first_name": first_name, "last_name": "User", "email": email, "password": PASSWORD},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = httpx.post(
        f"{BASE}/auth/login",
        json={"email": email, "password": PASSWORD},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    return resp.json()["access_token"], resp.cookies


def create_client(first_name: str = "Demo") -> httpx.Client:
    """Check backend, authenticate, and return an httpx Client with auth headers."""
    check_backend()
    token, cookies = authenticate(first_name)
    print("  Auth:     ✓ (JWT + refresh cookie)")
    return httpx.Client(
        base_url=BASE,
        timeout=10,
        headers={"Authorization": f"Bearer {token}"},
        cookies=cookies,
    )
