"""Like routes — one toggle endpoint plus read-only views."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import CurrentUser, get_current_user, get_current_user_optional
from inkwell.db.engine import get_db
from inkwell.schemas.blog import LikeCount, LikedBlog, LikeStatus, LikeToggle, LikeToggleResult
from inkwell.services.like_service import LikeService

router = APIRouter(prefix="/likes")


def _svc(db: AsyncSession = Depends(get_db)) -> LikeService:
    return LikeService(db)


@router.post("", response_model=LikeToggleResult)
async def toggle_like(
    body: LikeToggle,
    user: CurrentUser = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await svc.toggle(user, body.blog_id)


@router.get("/blog/{blog_id}/count", response_model=LikeCount)
async def like_count(
    blog_id: uuid.UUID,
    viewer: Optional[CurrentUser] = Depends(get_current_user_optional),
    svc: LikeService = Depends(_svc),
):
    return await svc.count(blog_id, viewer)


@router.get("/blog/{blog_id}/status", response_model=LikeStatus)
async def like_status(
    blog_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await svc.has_liked(blog_id, user)


@router.get("/my-likes", response_model=list[LikedBlog])
async def my_likes(
    user: CurrentUser = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await svc.liked_blogs(user)
