"""Blog routes.

Learn: Reads are public but viewer-aware: get_current_user_optional
gives None for anonymous callers, and the service uses that to decide
whether drafts are visible. Static paths (/slug/..., /all) are declared
before /{blog_id} so they're matched first.
"""

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
from inkwell.schemas.blog import BlogCreate, BlogRead, BlogStatus, BlogUpdate
from inkwell.services.blog_service import BlogService

router = APIRouter(prefix="/blogs")


def _svc(db: AsyncSession = Depends(get_db)) -> BlogService:
    return BlogService(db)


@router.post("", response_model=BlogRead, status_code=201)
async def create_blog(
    body: BlogCreate,
    user: CurrentUser = Depends(get_current_user),
    svc: BlogService = Depends(_svc),
):
    return await svc.create(author_id=user.user_id, **body.model_dump())


@router.get("", response_model=list[BlogRead])
async def list_blogs(
    status: Optional[BlogStatus] = None,
    category_id: Optional[uuid.UUID] = None,
    author_id: Optional[uuid.UUID] = None,
    tag: Optional[str] = Query(None, description="Tag slug"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[CurrentUser] = Depends(get_current_user_optional),
    svc: BlogService = Depends(_svc),
):
    return await svc.list_blogs(
        viewer=viewer,
        status=status,
        category_id=category_id,
        author_id=author_id,
        tag=tag,
        limit=limit,
        offset=offset,
    )


@router.get("/slug/{slug}", response_model=BlogRead)
async def get_blog_by_slug(
    slug: str,
    viewer: Optional[CurrentUser] = Depends(get_current_user_optional),
    svc: BlogService = Depends(_svc),
):
    return await svc.get_by_slug(slug, viewer)


@router.delete("/all", dependencies=[Depends(require_roles(Role.ADMIN))])
async def delete_all_blogs(svc: BlogService = Depends(_svc)):
    """Remove every blog with its comments and likes. Admin only."""
    return {"deleted": await svc.remove_all()}


@router.get("/{blog_id}", response_model=BlogRead)
async def get_blog(
    blog_id: uuid.UUID,
    viewer: Optional[CurrentUser] = Depends(get_current_user_optional),
    svc: BlogService = Depends(_svc),
):
    return await svc.get(blog_id, viewer)


@router.patch("/{blog_id}", response_model=BlogRead)
async def update_blog(
    blog_id: uuid.UUID,
    body: BlogUpdate,
    user: CurrentUser = Depends(get_current_user),
    svc: BlogService = Depends(_svc),
):
    return await svc.update(blog_id, user, body.model_dump(exclude_unset=True))


@router.delete("/{blog_id}")
async def delete_blog(
    blog_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    svc: BlogService = Depends(_svc),
):
    await svc.remove(blog_id, user)
    return {"deleted": True}
