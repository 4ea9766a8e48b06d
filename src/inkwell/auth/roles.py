"""Roles and the Role Authorizer.

Learn: An endpoint declares the roles it needs (require_roles in
dependencies.py); the authorizer decides whether the caller's role claim
satisfies that declaration. The rules are checked in a FIXED order:

1. No roles required        → allow
2. No verified caller       → deny
3. Caller is admin          → allow (admin passes every role check)
4. Caller role in required  → allow, otherwise deny

The authorizer is pure — it never touches the database or the request.
"""

from enum import Enum
from typing import Iterable, Optional


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class RoleAuthorizer:
    """Decides whether a caller role satisfies a required-role set."""

    def __init__(self, required: Iterable[Role | str] = ()):
        self.required = frozenset(Role(r) for r in required)

    def is_allowed(self, caller_role: Optional[str]) -> bool:
        """caller_role is None when there is no verified caller."""
        if not self.required:
            return True
        if caller_role is None:
            return False
        if caller_role == Role.ADMIN.value:
            return True
        return caller_role in {r.value for r in self.required}
