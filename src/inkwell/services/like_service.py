"""Like service — toggle semantics.

Learn: There is no separate "unlike" call. POST toggles: if a like row
exists it's deleted, otherwise one is inserted. The (blog_id, user_id)
unique constraint means a double-click race ends in an IntegrityError
for the loser, which we treat as "already liked".
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inkwell.auth.dependencies import CurrentUser
from inkwell.db.models import Like
from inkwell.services.blog_service import BlogService, visible_clause

logger = structlog.get_logger()


class LikeService:
    """Business logic for likes."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.blogs = BlogService(db)

    async def toggle(self, caller: CurrentUser, blog_id: uuid.UUID) -> dict:
        await self.blogs.get_visible(blog_id, caller)
        user_id = caller.user_id

        result = await self.db.execute(
            select(Like).where(Like.blog_id == blog_id, Like.user_id == user_id)
        )
        like = result.scalars().first()

        if like:
            await self.db.delete(like)
            await self.db.commit()
            logger.info("like.removed", blog_id=str(blog_id), user_id=str(user_id))
            return {"liked": False, "message": "Blog unliked successfully"}

        self.db.add(Like(blog_id=blog_id, user_id=user_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
        logger.info("like.added", blog_id=str(blog_id), user_id=str(user_id))
        return {"liked": True, "message": "Blog liked successfully"}

    async def count(self, blog_id: uuid.UUID, viewer: Optional[CurrentUser] = None) -> dict:
        await self.blogs.get_visible(blog_id, viewer)
        result = await self.db.execute(
            select(func.count(Like.id)).where(Like.blog_id == blog_id)
        )
        return {"blog_id": blog_id, "like_count": result.scalar_one()}

    async def has_liked(self, blog_id: uuid.UUID, caller: CurrentUser) -> dict:
        await self.blogs.get_visible(blog_id, caller)
        result = await self.db.execute(
            select(Like.id).where(Like.blog_id == blog_id, Like.user_id == caller.user_id)
        )
        return {"blog_id": blog_id, "liked": result.first() is not None}

    async def liked_blogs(self, caller: CurrentUser) -> list[dict]:
        """Blogs the user has liked, most recent like first.

        A liked post that has since gone back to draft drops out of the list.
        """
        query = select(Like).join(Like.blog).where(Like.user_id == caller.user_id)
        clause = visible_clause(caller)
        if clause is not None:
            query = query.where(clause)
        result = await self.db.execute(
            query
            .options(selectinload(Like.blog))
            .order_by(Like.created_at.desc())
        )
        return [
            {"liked_at": like.created_at, "blog": like.blog}
            for like in result.scalars().all()
        ]

