"""Comment routes."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_current_user_optional,
    require_roles,
)
from inkwell.auth.roles import Role
from inkwell.db.engine import get_db
from inkwell.schemas.blog import CommentCreate, CommentRead, CommentUpdate
from inkwell.services.comment_service import CommentService

router = APIRouter(prefix="/comments")


def _svc(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


@router.post("", response_model=CommentRead, status_code=201)
async def create_comment(
    body: CommentCreate,
    user: CurrentUser = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    return await svc.create(user, body.blog_id, body.content)


@router.get("/blog/{blog_id}", response_model=list[CommentRead])
async def list_blog_comments(
    blog_id: uuid.UUID,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    viewer: Optional[CurrentUser] = Depends(get_current_user_optional),
    svc: CommentService = Depends(_svc),
):
    return await svc.list_for_blog(blog_id, viewer, limit=limit, offset=offset)


@router.get("/{comment_id}", response_model=CommentRead)
async def get_comment(
    comment_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    return await svc.get(comment_id, user)


@router.patch("/{comment_id}", response_model=CommentRead)
async def update_comment(
    comment_id: uuid.UUID,
    body: CommentUpdate,
    user: CurrentUser = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    return await svc.update(comment_id, user, body.content)


@router.patch(
    "/{comment_id}/toggle-hidden",
    response_model=CommentRead,
    dependencies=[Depends(require_roles(Role.ADMIN))],
)
async def toggle_comment_hidden(comment_id: uuid.UUID, svc: CommentService = Depends(_svc)):
    """Hide or unhide a comment (moderation). Admin only."""
    return await svc.toggle_hidden(comment_id)


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    await svc.remove(comment_id, user)
    return {"deleted": True}
