"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current caller from the request.

- get_current_user_optional → CurrentUser or None (public endpoints
  that behave differently for signed-in readers)
- get_current_user → CurrentUser or 401
- require_roles(Role.ADMIN) → per-endpoint role declaration, checked
  by the RoleAuthorizer

The caller identity comes straight from the verified access token claims;
there is no per-request user lookup.
"""

import uuid
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from inkwell.auth.jwt import TokenError, TokenIssuer, TokenRotator
from inkwell.auth.roles import Role, RoleAuthorizer
from inkwell.config import settings
from inkwell.errors import ForbiddenError, UnauthorizedError


class CurrentUser:
    """The verified caller, built from access token claims."""

    def __init__(self, id: str, email: str, role: str):
        self.id = id
        self.email = email
        self.role = role

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.id)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def claims(self) -> dict:
        return {"id": self.id, "email": self.email, "role": self.role}


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(settings.token_config())


def get_token_rotator(issuer: TokenIssuer = Depends(get_token_issuer)) -> TokenRotator:
    return TokenRotator(issuer)


def get_current_user_optional(
    authorization: Optional[str] = Header(None),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Optional[CurrentUser]:
    """Extract the caller (optional — returns None if no Bearer token).

    A token that IS presented but fails verification is still a 401:
    a bad token is never silently downgraded to anonymous.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization[7:]
    try:
        payload = issuer.verify_access_token(token)
    except TokenError as e:
        raise UnauthorizedError(str(e))

    try:
        uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise UnauthorizedError("Invalid token payload")

    return CurrentUser(
        id=payload["sub"],
        email=payload.get("email", ""),
        role=payload.get("role", ""),
    )


def get_current_user(
    user: Optional[CurrentUser] = Depends(get_current_user_optional),
) -> CurrentUser:
    """Extract the caller (required — 401 if no auth)."""
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


def require_roles(*roles: Role):
    """Declare the roles an endpoint needs.

    Usage:
        @router.post("/categories", dependencies=[Depends(require_roles(Role.ADMIN))])

    No caller → 401; caller whose role doesn't satisfy the authorizer → 403.
    """
    authorizer = RoleAuthorizer(roles)

    def check_roles(
        user: Optional[CurrentUser] = Depends(get_current_user_optional),
    ) -> Optional[CurrentUser]:
        if authorizer.is_allowed(user.role if user else None):
            return user
        if user is None:
            raise UnauthorizedError("Authentication required")
        raise ForbiddenError("Insufficient role")

    return check_roles
