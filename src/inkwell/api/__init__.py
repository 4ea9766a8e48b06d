"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Most routers mix public reads with authenticated writes, so auth
is declared per endpoint. The users router is admin-only throughout, so
its role requirement is applied once at include time.
"""

from fastapi import APIRouter, Depends

from inkwell.api.auth import router as auth_router
from inkwell.api.blogs import router as blogs_router
from inkwell.api.categories import router as categories_router
from inkwell.api.comments import router as comments_router
from inkwell.api.health import router as health_router
from inkwell.api.likes import router as likes_router
from inkwell.api.tags import router as tags_router
from inkwell.api.users import router as users_router
from inkwell.auth.dependencies import require_roles
from inkwell.auth.roles import Role
from inkwell.config import settings

api_router = APIRouter(prefix=settings.api_prefix)

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(
    users_router, tags=["users"], dependencies=[Depends(require_roles(Role.ADMIN))]
)
api_router.include_router(blogs_router, tags=["blogs"])
api_router.include_router(comments_router, tags=["comments"])
api_router.include_router(categories_router, tags=["categories"])
api_router.include_router(tags_router, tags=["tags"])
api_router.include_router(likes_router, tags=["likes"])
