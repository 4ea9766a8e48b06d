"""Credential Validator — email + password → user, or nothing.

Learn: Fails closed. Unknown email, soft-deleted account and wrong password
all return None; the caller turns that into ONE generic 401 so responses
don't reveal which accounts exist. For the same reason an unknown email
is still checked against a dummy bcrypt hash (same ~100ms either way).
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.password import DUMMY_HASH, verify_password
from inkwell.db.models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialValidator:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def validate(self, email: str, password: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(
                User.email == normalize_email(email),
                User.deleted_at.is_(None),
            )
        )
        user = result.scalars().first()

        if user is None:
            verify_password(password, DUMMY_HASH)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user
