"""Comment service.

Learn: One comment per user per blog, enforced twice: a friendly check
before insert, and the uq_comments_blog_user constraint for the race.
Hidden comments are moderation, not deletion: admins still see them,
and so does the person who wrote them.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.auth.dependencies import CurrentUser
from inkwell.db.models import Comment
from inkwell.errors import ConflictError, ForbiddenError, NotFoundError
from inkwell.services.blog_service import BlogService

logger = structlog.get_logger()

DUPLICATE_MESSAGE = "You have already commented on this blog"


class CommentService:
    """Business logic for comments."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.blogs = BlogService(db)

    async def create(self, caller: CurrentUser, blog_id: uuid.UUID, content: str) -> Comment:
        await self.blogs.get_visible(blog_id, caller)

        existing = await self.db.execute(
            select(Comment.id).where(
                Comment.blog_id == blog_id, Comment.user_id == caller.user_id
            )
        )
        if existing.first() is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

        comment = Comment(blog_id=blog_id, user_id=caller.user_id, content=content)
        self.db.add(comment)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_MESSAGE)

        logger.info("comment.created", comment_id=str(comment.id), blog_id=str(blog_id))
        return await self._load(comment.id)

    async def list_for_blog(
        self,
        blog_id: uuid.UUID,
        viewer: Optional[CurrentUser] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Comment]:
        """Comments on a blog, newest first.

        Admins see everything; signed-in users see visible comments plus
        their own hidden ones; anonymous callers see visible comments only.
        A draft the viewer can't see has no comments to list: 404.
        """
        await self.blogs.get_visible(blog_id, viewer)
        query = (
            select(Comment)
            .where(Comment.blog_id == blog_id)
            .options(selectinload(Comment.user))
        )
        if viewer is None:
            query = query.where(Comment.is_hidden.is_(False))
        elif not viewer.is_admin:
            query = query.where(
                or_(Comment.is_hidden.is_(False), Comment.user_id == viewer.user_id)
            )

        result = await self.db.execute(
            query.order_by(Comment.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def get(self, comment_id: uuid.UUID, viewer: Optional[CurrentUser] = None) -> Comment:
        comment = await self._load(comment_id)
        if not comment or (comment.is_hidden and not _owns_or_admin(comment, viewer)):
            raise NotFoundError(f"Comment with ID {comment_id} not found")
        return comment

    async def update(self, comment_id: uuid.UUID, caller: CurrentUser, content: str) -> Comment:
        comment = await self._load(comment_id)
        if not comment:
            raise NotFoundError(f"Comment with ID {comment_id} not found")
        if comment.user_id != caller.user_id:
            raise ForbiddenError("You can only edit your own comments")

        comment.content = content
        await self.db.commit()
        return await self._load(comment_id)

    async def toggle_hidden(self, comment_id: uuid.UUID) -> Comment:
        comment = await self._load(comment_id)
        if not comment:
            raise NotFoundError(f"Comment with ID {comment_id} not found")

        comment.is_hidden = not comment.is_hidden
        await self.db.commit()
        logger.info("comment.visibility_toggled", comment_id=str(comment_id), hidden=comment.is_hidden)
        return await self._load(comment_id)

    async def remove(self, comment_id: uuid.UUID, caller: CurrentUser) -> None:
        comment = await self._load(comment_id)
        if not comment:
            raise NotFoundError(f"Comment with ID {comment_id} not found")
        if not _owns_or_admin(comment, caller):
            raise ForbiddenError("You can only delete your own comments")

        await self.db.delete(comment)
        await self.db.commit()
        logger.info("comment.deleted", comment_id=str(comment_id))

    async def _load(self, comment_id: uuid.UUID) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.user))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()


def _owns_or_admin(comment: Comment, caller: Optional[CurrentUser]) -> bool:
    if caller is None:
        return False
    return caller.is_admin or comment.user_id == caller.user_id
