"""Category routes. Reads are public, writes are admin only."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.auth.dependencies import require_roles
from inkwell.auth.roles import Role
from inkwell.db.engine import get_db
from inkwell.schemas.taxonomy import CategoryCreate, CategoryRead, CategoryUpdate
from inkwell.services.taxonomy_service import CategoryService

router = APIRouter(prefix="/categories")

_admin = [Depends(require_roles(Role.ADMIN))]


def _svc(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


@router.post("", response_model=CategoryRead, status_code=201, dependencies=_admin)
async def create_category(body: CategoryCreate, svc: CategoryService = Depends(_svc)):
    return await svc.create(name=body.name, description=body.description)


@router.get("", response_model=list[CategoryRead])
async def list_categories(svc: CategoryService = Depends(_svc)):
    return await svc.list_categories()


@router.get("/{category_id}", response_model=CategoryRead)
async def get_category(category_id: uuid.UUID, svc: CategoryService = Depends(_svc)):
    return await svc.get(category_id)


@router.patch("/{category_id}", response_model=CategoryRead, dependencies=_admin)
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    svc: CategoryService = Depends(_svc),
):
    return await svc.update(category_id, name=body.name, description=body.description)


@router.delete("/{category_id}", dependencies=_admin)
async def delete_category(category_id: uuid.UUID, svc: CategoryService = Depends(_svc)):
    await svc.remove(category_id)
    return {"deleted": True}
