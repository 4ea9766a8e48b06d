"""Tag routes. Reads are public, writes are admin only."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import require_roles
from inkwell.auth.roles import Role
from inkwell.db.engine import get_db
from inkwell.schemas.taxonomy import TagCreate, TagRead, TagUpdate
from inkwell.services.taxonomy_service import TagService

router = APIRouter(prefix="/tags")

_admin = [Depends(require_roles(Role.ADMIN))]


def _svc(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


@router.post("", response_model=TagRead, status_code=201, dependencies=_admin)
async def create_tag(body: TagCreate, svc: TagService = Depends(_svc)):
    return await svc.create(name=body.name, description=body.description, color=body.color)


@router.get("", response_model=list[TagRead])
async def list_tags(
    search: Optional[str] = Query(None, description="Case-insensitive match on name"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: TagService = Depends(_svc),
):
    return await svc.list_tags(search=search, limit=limit, offset=offset)


@router.get("/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: uuid.UUID, svc: TagService = Depends(_svc)):
    return await svc.get(tag_id)


@router.patch("/{tag_id}", response_model=TagRead, dependencies=_admin)
async def update_tag(tag_id: uuid.UUID, body: TagUpdate, svc: TagService = Depends(_svc)):
    return await svc.update(
        tag_id, name=body.name, description=body.description, color=body.color
    )


@router.delete("/{tag_id}", dependencies=_admin)
async def delete_tag(tag_id: uuid.UUID, svc: TagService = Depends(_svc)):
    await svc.remove(tag_id)
    return {"deleted": True}
