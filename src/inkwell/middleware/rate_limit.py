"""Rate limiting middleware — Redis fixed window per minute.

Learn: Each client IP gets a counter key like
"inkwell:rl:{ip}:{bucket}:{minute}". INCR is atomic, so concurrent
requests can't both read "9" and both pass a limit of 10.
Login and register get their own, much smaller bucket: they're the
endpoints a password-guessing script hammers.

Skips rate limiting entirely when Redis is unavailable (e.g. in tests).
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inkwell.cache import get_redis
from inkwell.errors import error_body

logger = structlog.get_logger()

KEY_PREFIX = "inkwell:rl"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(
        self,
        app,
        default_rpm: int = 100,
        auth_rpm: int = 10,
        auth_paths: tuple[str, ...] = ("/api/v1/auth/login", "/api/v1/auth/register"),
    ):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm
        self.auth_paths = auth_paths

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            redis = get_redis()
        except RuntimeError:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = request.url.path.startswith(self.auth_paths)
        rpm = self.auth_rpm if is_auth else self.default_rpm
        bucket = "auth" if is_auth else "api"
        window = int(time.time() // 60)
        key = f"{KEY_PREFIX}:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)
        except Exception as e:
            # Redis hiccup: serve the request unlimited rather than fail it
            logger.warning("ratelimit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("ratelimit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content=error_body(429, "Rate limit exceeded. Try again later."),
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
