"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (Redis pool, DB engine).
Middleware, exception handlers and routers are all registered here;
each concern lives in its own module.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkwell import __version__
from inkwell.api import api_router
from inkwell.cache import close_redis, init_redis
from inkwell.config import settings
from inkwell.errors import register_exception_handlers
from inkwell.middleware.rate_limit import RateLimitMiddleware
from inkwell.middleware.request_id import RequestIdMiddleware
from inkwell.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    logger.info(
        "inkwell.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis()
        logger.info("inkwell.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional: without it there's just no rate limiting
        logger.warning("inkwell.redis_unavailable", error=str(e))

    yield

    logger.info("inkwell.shutdown")
    await close_redis()

    from inkwell.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Inkwell",
        description="Blog platform API: posts, comments, likes, categories and tags",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette runs middleware in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler
    prefix = settings.api_prefix
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, auth_prefix=f"{prefix}/auth")
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
        auth_paths=(f"{prefix}/auth/login", f"{prefix}/auth/register"),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)
    return app


# Default app instance (used by uvicorn: inkwell.main:app)
app = create_app()
