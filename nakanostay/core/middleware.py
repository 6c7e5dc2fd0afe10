"""Custom middleware for the application."""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from nakanostay.config import settings
from nakanostay.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0
WINDOW_SECONDS = 60
UNLIMITED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


def client_ip(request: Request) -> str:
    """Caller address, honouring proxy headers."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


class SlidingWindow:
    """Per-key request counter over the last minute, kept in a Redis sorted set."""

    def __init__(self, key_prefix: str, redis_url: str | None = None):
        self.key_prefix = key_prefix
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def hit(self, identity: str) -> int:
        """Record one request for ``identity``; return how many came before it.

        Raises:
            redis.RedisError: Redis is unreachable
        """
        redis_client = await self.get_redis()
        key = f"{self.key_prefix}:{identity}"
        now = int(time.time())

        async with redis_client.pipeline(transaction=True) as pipe:
            await pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
            await pipe.zcard(key)
            # time_ns keeps two requests in the same second as separate members
            await pipe.zadd(key, {str(time.time_ns()): now})
            await pipe.expire(key, WINDOW_SECONDS)
            results = await pipe.execute()
        return results[1]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP rate limit."""

    def __init__(
        self,
        app,
        requests_per_minute: int = 100,
        redis_url: str | None = None,
    ):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.window = SlidingWindow("rate_limit", redis_url)

    def _limit_headers(self, remaining: int, reset_at: int) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.requests_per_minute),
            "X-RateLimit-Remaining": str(max(0, remaining)),
            "X-RateLimit-Reset": str(reset_at),
        }

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        try:
            seen = await self.window.hit(client_ip(request))
        except redis.RedisError as e:
            logger.warning(f"Rate limiter unavailable, letting request through: {e}")
            return await call_next(request)

        reset_at = int(time.time()) + WINDOW_SECONDS
        if seen >= self.requests_per_minute:
            return JSONResponse(
                status_code=429,
                content={
                    "detail": "Too many requests. Please try again later.",
                    "retry_after": WINDOW_SECONDS,
                },
                headers={
                    "Retry-After": str(WINDOW_SECONDS),
                    **self._limit_headers(0, reset_at),
                },
            )

        response = await call_next(request)
        response.headers.update(
            self._limit_headers(self.requests_per_minute - seen - 1, reset_at)
        )
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request id propagation and response timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()

        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        summary = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s (request_id={request_id})"
        )
        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(f"SLOW REQUEST: {summary}")
        else:
            logger.debug(summary)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RateLimiter:
    """Per-endpoint rate limit, used as a route dependency."""

    def __init__(self, requests_per_minute: int = 10, key_prefix: str = "api"):
        self.requests_per_minute = requests_per_minute
        self.window = SlidingWindow(f"rate:{key_prefix}")

    async def __call__(self, request: Request) -> None:
        """Raises RateLimitExceeded once the caller used up the minute's budget."""
        ip = client_ip(request)
        try:
            seen = await self.window.hit(ip)
        except redis.RedisError as e:
            logger.warning(f"Rate limiter '{self.window.key_prefix}' unavailable: {e}")
            return

        if seen >= self.requests_per_minute:
            logger.warning(f"Rate limit hit on '{self.window.key_prefix}' from {ip}")
            raise RateLimitExceeded()


# Code + identity lookups are where booking codes could be guessed
booking_lookup_limiter = RateLimiter(
    requests_per_minute=settings.booking_lookup_rate_per_minute,
    key_prefix="booking_lookup",
)
login_limiter = RateLimiter(requests_per_minute=5, key_prefix="login")
