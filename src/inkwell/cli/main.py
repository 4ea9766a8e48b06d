"""Inkwell CLI — bootstrap accounts, run the server, peek at the API.

Usage:
    inkwell create-user ada@example.com --first-name Ada --admin
    inkwell set-role ada@example.com user
    inkwell serve --reload
    inkwell blogs --limit 5                    # Published blogs via the API
    inkwell health                             # Hit /api/v1/health

create-user and set-role talk to the database directly: they're how the
first admin gets made, before there's anyone who could call the API.
blogs and health go over HTTP like any other client.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from inkwell import __version__
from inkwell.auth.roles import Role
from inkwell.db.engine import async_session_factory
from inkwell.errors import AppError
from inkwell.schemas.user import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from inkwell.services.user_service import UserService

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("INKWELL_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Inkwell API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. CliRunner inside an async test)
    by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table. columns: (header, dict_key, width)."""
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "-")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
def main():
    """Inkwell — blog platform backend."""


# ---------------------------------------------------------------------------
# Accounts (direct database access)
# ---------------------------------------------------------------------------


@main.command("create-user")
@click.argument("email")
@click.option("--first-name", "-f", required=True, help="First name")
@click.option("--last-name", "-l", default=None, help="Last name")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password (prompted if omitted)",
)
@click.option("--admin", is_flag=True, help="Give the account the admin role")
def create_user(email: str, first_name: str, last_name: Optional[str],
                password: str, admin: bool):
    """Create an account. The way to bootstrap the first admin."""
    if not PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN:
        _fail(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters")

    role = Role.ADMIN if admin else Role.USER
    try:
        user = _run(_create_user(email, first_name, last_name, password, role))
    except AppError as e:
        _fail(e.message)
    click.secho(f"Created {user['email']} ({user['role']}) id={user['id']}", fg="green")


async def _create_user(email, first_name, last_name, password, role) -> dict:
    async with async_session_factory() as db:
        user = await UserService(db).create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=role,
        )
        return {"id": str(user.id), "email": user.email, "role": user.role}


@main.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice([r.value for r in Role]))
def set_role(email: str, role: str):
    """Change an existing account's role."""
    try:
        user = _run(_set_role(email, Role(role)))
    except AppError as e:
        _fail(e.message)
    click.secho(f"{user['email']} is now {user['role']}", fg="green")


async def _set_role(email: str, role: Role) -> dict:
    async with async_session_factory() as db:
        user = await UserService(db).set_role(email, role)
        return {"email": user.email, "role": user.role}


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: INKWELL_HOST)")
@click.option("--port", "-p", type=int, default=None, help="Port (default: INKWELL_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (dev only)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from inkwell.config import settings

    uvicorn.run(
        "inkwell.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# API client commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--tag", "-t", default=None, help="Filter by tag slug")
@click.option("--limit", "-l", default=20, help="Max results")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def blogs(tag: Optional[str], limit: int, as_json: bool):
    """List published blogs."""
    rows = _run(_blogs(tag, limit))
    if as_json:
        click.echo(json.dumps(rows, indent=2, default=str))
        return
    if not rows:
        click.echo("No blogs found.")
        return
    _print_table(rows, [
        ("SLUG", "slug", 32),
        ("TITLE", "title", 40),
        ("VIEWS", "view_count", 6),
        ("PUBLISHED", "published_at", 20),
    ])


async def _blogs(tag: Optional[str], limit: int) -> list[dict]:
    params: dict = {"limit": limit}
    if tag:
        params["tag"] = tag
    async with _client() as c:
        r = await c.get("/api/v1/blogs", params=params)
        r.raise_for_status()
        return r.json()


@main.command()
def health():
    """Check the API's health endpoint."""
    try:
        data = _run(_health())
    except httpx.HTTPError as e:
        _fail(f"API unreachable at {_api_url()}: {e}")
    color = "green" if data.get("status") == "healthy" else "yellow"
    click.secho(data.get("status", "unknown"), fg=color, bold=True)
    for key in ("database", "redis", "version"):
        click.echo(f"  {key}: {data.get(key)}")


async def _health() -> dict:
    async with _client() as c:
        r = await c.get("/api/v1/health")
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    main()
