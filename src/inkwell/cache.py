"""Redis connection pool.

Learn: Redis is optional. It backs the rate limiter and nothing else,
so the app starts fine without it (lifespan logs a warning) and
get_redis() raising is the signal for callers to skip their work.
"""

from typing import Optional

import redis.asyncio as aioredis

from inkwell.config import settings

# Global Redis connection pool (initialized in lifespan)
_redis: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    """Open the pool and ping once so a bad URL fails at startup."""
    global _redis
    client = aioredis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    _redis = client
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


def set_redis(client: Optional[aioredis.Redis]) -> None:
    """Install a client directly. Used by tests with a fake Redis."""
    global _redis
    _redis = client
