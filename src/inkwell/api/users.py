"""User administration routes (admin only).

Learn: The role requirement is declared once, on the router include in
inkwell.api, not repeated per handler.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.db.engine import get_db
from inkwell.schemas.user import UserRead, UserUpdate
from inkwell.services.user_service import UserService

router = APIRouter(prefix="/users")


def _svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("", response_model=list[UserRead])
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    svc: UserService = Depends(_svc),
):
    return await svc.list_users(limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: uuid.UUID, svc: UserService = Depends(_svc)):
    return await svc.get(user_id)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(user_id: uuid.UUID, body: UserUpdate, svc: UserService = Depends(_svc)):
    return await svc.update(user_id, **body.model_dump(exclude_unset=True))


@router.delete("/{user_id}")
async def delete_user(user_id: uuid.UUID, svc: UserService = Depends(_svc)):
    await svc.remove(user_id)
    return {"deleted": True}
