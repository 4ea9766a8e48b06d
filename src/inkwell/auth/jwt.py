"""JWT token creation, verification and rotation.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived (15min), used for API calls
- Refresh token: long-lived (30 days), used to get new access tokens

Both carry the same claims (sub, email, role) but are signed with
DIFFERENT secrets. A leaked access token expires quickly, and an access
token can never pass as a refresh token (wrong secret AND wrong "type").

Nothing here reads settings: the issuer and rotator are built from an
explicit TokenConfig (see inkwell.config.Settings.token_config).
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

import jwt

ACCESS = "access"
REFRESH = "refresh"

_WRONG_TYPE = {ACCESS: "Not an access token", REFRESH: "Not a refresh token"}


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class TokenConfig:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=30)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _encode(
    sub: str, email: str, role: str, token_type: str, secret: str,
    ttl: timedelta, algorithm: str,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "email": email,
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def _decode(token: str, secret: str, algorithm: str, token_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != token_type:
        raise TokenError(_WRONG_TYPE[token_type])
    return payload


class TokenIssuer:
    """Mints access and refresh tokens with identical claims."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def create_access_token(self, sub: str, email: str, role: str) -> str:
        c = self.config
        return _encode(sub, email, role, ACCESS, c.access_secret, c.access_ttl, c.algorithm)

    def create_refresh_token(self, sub: str, email: str, role: str) -> str:
        c = self.config
        return _encode(sub, email, role, REFRESH, c.refresh_secret, c.refresh_ttl, c.algorithm)

    async def issue(self, sub: str, email: str, role: str) -> TokenPair:
        """Sign both tokens concurrently.

        Learn: The two signatures are independent, so they run side by side
        in worker threads rather than one after the other on the event loop.
        """
        access_token, refresh_token = await asyncio.gather(
            asyncio.to_thread(self.create_access_token, sub, email, role),
            asyncio.to_thread(self.create_refresh_token, sub, email, role),
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Decode an access token. Raises TokenError on failure."""
        c = self.config
        return _decode(token, c.access_secret, c.algorithm, ACCESS)


class TokenRotator:
    """Exchanges a valid refresh token for a fresh token pair.

    Policy: refresh ALWAYS rotates both tokens (same as login), so the
    refresh cookie is re-issued on every refresh.

    `lookup` maps the token's sub to the account's CURRENT (email, role)
    and raises TokenError if the account is gone. Without it the old
    claims carry over unchanged.
    """

    def __init__(self, issuer: TokenIssuer):
        self.issuer = issuer

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Decode a refresh token. Raises TokenError on failure."""
        c = self.issuer.config
        return _decode(token, c.refresh_secret, c.algorithm, REFRESH)

    async def rotate(
        self,
        refresh_token: str,
        lookup: Optional[Callable[[str], Awaitable[tuple[str, str]]]] = None,
    ) -> TokenPair:
        payload = self.verify_refresh_token(refresh_token)
        sub = payload["sub"]
        if lookup is None:
            email, role = payload.get("email", ""), payload.get("role", "")
        else:
            email, role = await lookup(sub)
        return await self.issuer.issue(sub, email, role)
