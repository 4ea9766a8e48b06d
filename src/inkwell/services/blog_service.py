"""Blog service — posts, slugs, visibility and view counts.

Learn: The rules that make this more than plain CRUD:

1. Slugs are unique. "Hello World" → "hello-world"; if that's taken we
   append a random 4-char suffix ("hello-world-k3x9") and check again,
   up to MAX_SLUG_ATTEMPTS times. The unique index is the final word:
   a race lost at commit time is a Conflict.
2. Visibility. Published posts are public. Drafts and archived posts are
   visible only to their author and to admins; for everyone else they
   simply don't exist (404, not 403).
3. Only the author or an admin may edit/delete; only admins may feature.
4. published_at is stamped the first time a post becomes published.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.auth.dependencies import CurrentUser
from inkwell.db.models import Blog, Comment, Like, Tag, blog_tags
from inkwell.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from inkwell.schemas.blog import BlogStatus
from inkwell.services.slugs import random_suffix, slugify
from inkwell.services.taxonomy_service import CategoryService, TagService

logger = structlog.get_logger()

MAX_SLUG_ATTEMPTS = 5

# An explicit null for these is ignored rather than written.
_REQUIRED_FIELDS = {"title", "content", "status", "is_featured"}

_LOAD_OPTIONS = (
    selectinload(Blog.author),
    selectinload(Blog.category),
    selectinload(Blog.tags),
)


class BlogService:
    """Business logic for blog posts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.categories = CategoryService(db)
        self.tags = TagService(db)

    # ─── Create ──────────────────────────────────────────

    async def create(
        self,
        author_id: uuid.UUID,
        title: str,
        content: str,
        summary: Optional[str] = None,
        cover_image: Optional[str] = None,
        status: BlogStatus = BlogStatus.DRAFT,
        category_id: Optional[uuid.UUID] = None,
        tag_ids: Optional[list[uuid.UUID]] = None,
    ) -> Blog:
        if category_id:
            await self._validate_category(category_id)
        tags = await self._resolve_tags(tag_ids or [])
        slug = await self._unique_slug(title)
        status = BlogStatus(status)

        blog = Blog(
            title=title,
            slug=slug,
            content=content,
            summary=summary,
            cover_image=cover_image,
            status=status.value,
            category_id=category_id,
            author_id=author_id,
            published_at=(
                datetime.now(timezone.utc) if status == BlogStatus.PUBLISHED else None
            ),
        )
        blog.tags = tags
        self.db.add(blog)
        await self._commit()

        logger.info("blog.created", blog_id=str(blog.id), slug=slug, status=status.value)
        return await self._load(blog.id)

    # ─── Read ────────────────────────────────────────────

    async def list_blogs(
        self,
        viewer: Optional[CurrentUser] = None,
        status: Optional[BlogStatus] = None,
        category_id: Optional[uuid.UUID] = None,
        author_id: Optional[uuid.UUID] = None,
        tag: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Blog]:
        """List posts newest first, filtered to what the viewer may see."""
        query = select(Blog).options(*_LOAD_OPTIONS)

        if status:
            query = query.where(Blog.status == BlogStatus(status).value)
        if category_id:
            query = query.where(Blog.category_id == category_id)
        if author_id:
            query = query.where(Blog.author_id == author_id)
        if tag:
            query = query.where(Blog.tags.any(Tag.slug == tag))

        clause = visible_clause(viewer)
        if clause is not None:
            query = query.where(clause)

        result = await self.db.execute(
            query.order_by(Blog.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def get(self, blog_id: uuid.UUID, viewer: Optional[CurrentUser] = None) -> Blog:
        """Fetch a visible post and count the view."""
        blog = await self._load(blog_id)
        if not blog or not _visible_to(blog, viewer):
            raise NotFoundError(f"Blog with ID {blog_id} not found")
        return await self._count_view(blog)

    async def get_by_slug(self, slug: str, viewer: Optional[CurrentUser] = None) -> Blog:
        result = await self.db.execute(
            select(Blog).where(Blog.slug == slug).options(*_LOAD_OPTIONS)
        )
        blog = result.scalars().first()
        if not blog or not _visible_to(blog, viewer):
            raise NotFoundError(f"Blog with slug {slug} not found")
        return await self._count_view(blog)

    async def get_visible(self, blog_id: uuid.UUID, viewer: Optional[CurrentUser] = None) -> Blog:
        """Like get(), minus the view count. For routes that hang off a post."""
        blog = await self.db.get(Blog, blog_id)
        if not blog or not _visible_to(blog, viewer):
            raise NotFoundError(f"Blog with ID {blog_id} not found")
        return blog

    # ─── Update ──────────────────────────────────────────

    async def update(
        self, blog_id: uuid.UUID, caller: CurrentUser, changes: dict[str, Any]
    ) -> Blog:
        """Apply a partial update. `changes` holds only the fields the client sent."""
        blog = await self._load(blog_id)
        if not blog:
            raise NotFoundError(f"Blog with ID {blog_id} not found")
        _ensure_can_modify(blog, caller)

        changes = dict(changes)
        if "is_featured" in changes and not caller.is_admin:
            raise ForbiddenError("Only admins can feature a blog")
        if changes.get("category_id"):
            await self._validate_category(changes["category_id"])
        if "tag_ids" in changes:
            blog.tags = await self._resolve_tags(changes.pop("tag_ids") or [])
        if changes.get("status") is not None:
            status = BlogStatus(changes.pop("status"))
            if status == BlogStatus.PUBLISHED and blog.published_at is None:
                blog.published_at = datetime.now(timezone.utc)
            blog.status = status.value

        for field, value in changes.items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(blog, field, value)

        await self._commit()
        logger.info("blog.updated", blog_id=str(blog_id), fields=sorted(changes))
        return await self._load(blog_id)

    # ─── Delete ──────────────────────────────────────────

    async def remove(self, blog_id: uuid.UUID, caller: CurrentUser) -> None:
        blog = await self._load(blog_id)
        if not blog:
            raise NotFoundError(f"Blog with ID {blog_id} not found")
        _ensure_can_modify(blog, caller)

        await self.db.delete(blog)  # cascades to comments and likes
        await self.db.commit()
        logger.info("blog.deleted", blog_id=str(blog_id))

    async def remove_all(self) -> int:
        """Delete every blog (and its comments, likes, tag links). Returns the count."""
        count = (await self.db.execute(select(func.count(Blog.id)))).scalar_one()
        await self.db.execute(delete(Like))
        await self.db.execute(delete(Comment))
        await self.db.execute(delete(blog_tags))
        await self.db.execute(delete(Blog))
        await self.db.commit()
        logger.warning("blog.deleted_all", count=count)
        return count

    # ─── Helpers ─────────────────────────────────────────

    async def _load(self, blog_id: uuid.UUID) -> Optional[Blog]:
        result = await self.db.execute(
            select(Blog)
            .where(Blog.id == blog_id)
            .options(*_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _count_view(self, blog: Blog) -> Blog:
        # Keep updated_at as-is: a view is not an edit.
        await self.db.execute(
            update(Blog)
            .where(Blog.id == blog.id)
            .values(view_count=Blog.view_count + 1, updated_at=Blog.updated_at)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return await self._load(blog.id)

    async def _unique_slug(self, title: str) -> str:
        base = slugify(title)
        candidate = base
        for _ in range(MAX_SLUG_ATTEMPTS):
            result = await self.db.execute(select(Blog.id).where(Blog.slug == candidate))
            if result.first() is None:
                return candidate
            candidate = f"{base}-{random_suffix()}"
        raise ConflictError("Could not generate a unique slug, try a different title")

    async def _validate_category(self, category_id: uuid.UUID) -> None:
        try:
            await self.categories.get(category_id)
        except NotFoundError:
            raise BadRequestError(f"Category with ID {category_id} does not exist")

    async def _resolve_tags(self, tag_ids: list[uuid.UUID]) -> list[Tag]:
        wanted = set(tag_ids)
        tags = await self.tags.get_many(list(wanted))
        missing = wanted - {t.id for t in tags}
        if missing:
            raise BadRequestError(
                "Tag(s) do not exist: " + ", ".join(sorted(str(m) for m in missing))
            )
        return tags

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Blog with this slug already exists")


def _visible_to(blog: Blog, viewer: Optional[CurrentUser]) -> bool:
    if blog.status == BlogStatus.PUBLISHED.value:
        return True
    if viewer is None:
        return False
    return viewer.is_admin or blog.author_id == viewer.user_id


def visible_clause(viewer: Optional[CurrentUser]):
    """SQL counterpart of _visible_to. None means no restriction (admins)."""
    if viewer is None:
        return Blog.status == BlogStatus.PUBLISHED.value
    if viewer.is_admin:
        return None
    return or_(
        Blog.status == BlogStatus.PUBLISHED.value,
        Blog.author_id == viewer.user_id,
    )


def _ensure_can_modify(blog: Blog, caller: CurrentUser) -> None:
    if not caller.is_admin and blog.author_id != caller.user_id:
        raise ForbiddenError("You can only modify your own blogs")
