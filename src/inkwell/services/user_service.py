"""User service — registration, admin management, password changes.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.
Errors are raised as inkwell.errors exceptions; the app's exception
handlers turn them into JSON responses.

Email uniqueness is checked up front for a friendly message AND enforced
by the unique index. An IntegrityError on commit (two registrations
racing) becomes the same Conflict.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.credentials import normalize_email
from inkwell.auth.password import hash_password, verify_password
from inkwell.auth.roles import Role
from inkwell.db.models import User
from inkwell.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError

logger = structlog.get_logger()


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create(
        self,
        first_name: str,
        email: str,
        password: str,
        last_name: Optional[str] = None,
        role: Role = Role.USER,
    ) -> User:
        email = normalize_email(email)
        # Soft-deleted rows still hold their email (unique index), so they count.
        if await self._email_taken(email):
            raise ConflictError("Email already registered")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password),
            role=Role(role).value,
        )
        self.db.add(user)
        await self._commit_or_conflict("Email already registered")
        await self.db.refresh(user)

        logger.info("user.created", user_id=str(user.id), role=user.role)
        return user

    # ─── Read ────────────────────────────────────────────

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(
                User.email == normalize_email(email),
                User.deleted_at.is_(None),
            )
        )
        return result.scalars().first()

    async def get(self, user_id: uuid.UUID) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        user = result.scalars().first()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def list_users(self, limit: int = 100, offset: int = 0) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.deleted_at.is_(None))
            .order_by(User.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update(
        self,
        user_id: uuid.UUID,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> User:
        user = await self.get(user_id)

        if email is not None:
            email = normalize_email(email)
            if email != user.email:
                if await self._email_taken(email):
                    raise ConflictError("Email already registered")
                user.email = email
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        if role is not None:
            user.role = Role(role).value

        await self._commit_or_conflict("Email already registered")
        await self.db.refresh(user)
        return user

    async def set_role(self, email: str, role: Role) -> User:
        user = await self.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        return await self.update(user.id, role=role)

    async def change_password(
        self, user_id: uuid.UUID, old_password: str, new_password: str
    ) -> None:
        user = await self.get(user_id)
        if not verify_password(old_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")
        if old_password == new_password:
            raise BadRequestError("New password must differ from the current password")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("user.password_changed", user_id=str(user.id))

    async def upgrade_hash(self, user: User, password: str) -> None:
        """Re-hash with the current bcrypt cost after a successful login."""
        user.password_hash = hash_password(password)
        await self.db.commit()

    # ─── Delete ──────────────────────────────────────────

    async def remove(self, user_id: uuid.UUID) -> None:
        """Soft delete: the row stays, login and lookups stop seeing it."""
        user = await self.get(user_id)
        user.deleted_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("user.deleted", user_id=str(user_id))

    # ─── Helpers ─────────────────────────────────────────

    async def _email_taken(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.first() is not None

    async def _commit_or_conflict(self, message: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(message)
