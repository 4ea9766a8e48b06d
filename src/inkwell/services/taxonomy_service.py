"""Category and tag services.

Learn: Both are admin-curated lookup tables with the same shape:
unique name, unique slug derived from the name, soft delete.
A slug collision here is a Conflict (unlike blog slugs, which retry):
two categories called "Python" and "python!" would be indistinguishable
in URLs.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.db.models import Category, Tag
from inkwell.errors import ConflictError, NotFoundError
from inkwell.services.slugs import slugify

logger = structlog.get_logger()


class CategoryService:
    """Business logic for categories."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, description: Optional[str] = None) -> Category:
        slug = slugify(name, fallback="category")
        if await self._find_clash(name, slug):
            raise ConflictError("Category with this name or slug already exists")

        category = Category(name=name, slug=slug, description=description)
        self.db.add(category)
        await self._commit()
        await self.db.refresh(category)
        logger.info("category.created", category_id=str(category.id), slug=slug)
        return category

    async def list_categories(self) -> list[Category]:
        result = await self.db.execute(
            select(Category)
            .where(Category.deleted_at.is_(None))
            .order_by(Category.name)
        )
        return list(result.scalars().all())

    async def get(self, category_id: uuid.UUID) -> Category:
        result = await self.db.execute(
            select(Category).where(
                Category.id == category_id, Category.deleted_at.is_(None)
            )
        )
        category = result.scalars().first()
        if not category:
            raise NotFoundError(f"Category with ID {category_id} not found")
        return category

    async def update(
        self,
        category_id: uuid.UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Category:
        category = await self.get(category_id)

        if name is not None and name != category.name:
            slug = slugify(name, fallback="category")
            clash = await self._find_clash(name, slug)
            if clash and clash.id != category.id:
                raise ConflictError("Category with this name or slug already exists")
            category.name = name
            category.slug = slug

        if description is not None:
            category.description = description

        await self._commit()
        await self.db.refresh(category)
        return category

    async def remove(self, category_id: uuid.UUID) -> None:
        category = await self.get(category_id)
        category.deleted_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("category.deleted", category_id=str(category_id))

    async def _find_clash(self, name: str, slug: str) -> Optional[Category]:
        # Includes soft-deleted rows: they still own their name/slug in the unique index.
        result = await self.db.execute(
            select(Category).where(or_(Category.name == name, Category.slug == slug))
        )
        return result.scalars().first()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Category with this name or slug already exists")


class TagService:
    """Business logic for tags."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tag:
        slug = slugify(name, fallback="tag")
        if await self._find_clash(name, slug):
            raise ConflictError("Tag already exists")

        tag = Tag(name=name, slug=slug, description=description, color=color)
        self.db.add(tag)
        await self._commit()
        await self.db.refresh(tag)
        logger.info("tag.created", tag_id=str(tag.id), slug=slug)
        return tag

    async def list_tags(
        self,
        search: Optional[str] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Tag]:
        query = select(Tag).where(Tag.deleted_at.is_(None))
        if search:
            query = query.where(Tag.name.icontains(search, autoescape=True))
        result = await self.db.execute(
            query.order_by(Tag.name).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def get(self, tag_id: uuid.UUID) -> Tag:
        result = await self.db.execute(
            select(Tag).where(Tag.id == tag_id, Tag.deleted_at.is_(None))
        )
        tag = result.scalars().first()
        if not tag:
            raise NotFoundError(f"Tag with ID {tag_id} not found")
        return tag

    async def get_many(self, tag_ids: list[uuid.UUID]) -> list[Tag]:
        """Fetch live tags by id. Missing ids are simply absent from the result."""
        if not tag_ids:
            return []
        result = await self.db.execute(
            select(Tag).where(Tag.id.in_(tag_ids), Tag.deleted_at.is_(None))
        )
        return list(result.scalars().all())

    async def update(
        self,
        tag_id: uuid.UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tag:
        tag = await self.get(tag_id)

        if name is not None and name != tag.name:
            slug = slugify(name, fallback="tag")
            clash = await self._find_clash(name, slug)
            if clash and clash.id != tag.id:
                raise ConflictError("Tag already exists")
            tag.name = name
            tag.slug = slug
        if description is not None:
            tag.description = description
        if color is not None:
            tag.color = color

        await self._commit()
        await self.db.refresh(tag)
        return tag

    async def remove(self, tag_id: uuid.UUID) -> None:
        tag = await self.get(tag_id)
        tag.deleted_at = datetime.now(timezone.utc)
        await self.db.commit()
        logger.info("tag.deleted", tag_id=str(tag_id))

    async def _find_clash(self, name: str, slug: str) -> Optional[Tag]:
        result = await self.db.execute(
            select(Tag).where(or_(Tag.name == name, Tag.slug == slug))
        )
        return result.scalars().first()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Tag already exists")
