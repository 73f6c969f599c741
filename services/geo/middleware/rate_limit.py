"""
Redis-backed sliding window rate limiter.

Tiers:
  - Per client IP: RATE_LIMIT_ANON_PER_MIN (60 req/min)
  - POST /events/search: RATE_LIMIT_EVENTS_PER_MIN (20 req/min), since
    every miss fans out to upstream event APIs

Redis errors fail open: the request is served without limit headers.
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from services.geo.config import settings

logger = logging.getLogger(__name__)

EVENTS_SEARCH_PATH = "/events/search"
EXEMPT_PATHS = ("/health",)
WINDOW_SECONDS = 60.0


def _get_rate_limit(path: str) -> tuple[int, str]:
    """Return (limit_per_min, tier_name) for the given path."""
    if path == EVENTS_SEARCH_PATH:
        return settings.rate_limit_events_per_min, "events"
    return settings.rate_limit_anon_per_min, "anon"


def _get_client_key(request: Request) -> str:
    """Client identifier: first X-Forwarded-For hop, else the peer address."""
    client_ip = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
    return f"ip:{client_ip}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding window rate limiter backed by Redis sorted sets."""

    def __init__(self, app, redis_client=None):
        super().__init__(app)
        self.redis = redis_client

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS or self.redis is None:
            return await call_next(request)

        client_key = _get_client_key(request)
        limit, tier = _get_rate_limit(request.url.path)
        window_key = f"ratelimit:{tier}:{client_key}"

        now = time.time()
        window_start = now - WINDOW_SECONDS

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(window_key, 0, window_start)
            pipe.zcard(window_key)
            pipe.zadd(window_key, {f"{now}:{id(request)}": now})
            pipe.expire(window_key, int(WINDOW_SECONDS * 2))
            results = await pipe.execute()
        except Exception:
            logger.warning("Rate limiter unavailable; allowing %s", window_key, exc_info=True)
            return await call_next(request)

        current_count = results[1]

        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(max(0, limit - current_count - 1)),
            "X-RateLimit-Reset": str(int(now + WINDOW_SECONDS)),
        }

        if current_count >= limit:
            headers["Retry-After"] = str(int(WINDOW_SECONDS))
            logger.info("Rate limited %s on %s tier (%d/%d)", client_key, tier, current_count, limit)
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": {
                        "code": "RATE_LIMITED",
                        "message": f"Rate limit exceeded. Max {limit} requests per minute for {tier} tier.",
                    },
                    "requestId": getattr(request.state, "request_id", ""),
                },
                headers=headers,
            )

        response = await call_next(request)
        for key, value in headers.items():
            response.headers[key] = value
        return response
