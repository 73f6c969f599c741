"""
Lo geo service: city detection, Ticketmaster market resolution and event search.

Entrypoint: uvicorn services.geo.main:app --host 0.0.0.0 --port 8000
"""

import logging
import uuid
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from services.geo.config import settings
from services.geo.events.cache import EventCache
from services.geo.events.orchestrator import EventSearchOrchestrator
from services.geo.events.ticketmaster import TicketmasterSource
from services.geo.middleware.cors import setup_cors
from services.geo.middleware.rate_limit import RateLimitMiddleware
from services.geo.middleware.sentry import setup_sentry
from services.geo.resolver import default_resolver
from services.geo.routers import cities, events, health, markets

logger = logging.getLogger(__name__)

# Shared redis reference, set during lifespan and read by the rate limiter
_redis_holder: dict = {"client": None}


def build_orchestrator(redis_client) -> EventSearchOrchestrator:
    """Wire the configured event sources around a shared Redis cache."""
    cache = EventCache(redis_client, ttl_seconds=settings.event_cache_ttl_s)
    ticketmaster = TicketmasterSource(
        api_key=settings.ticketmaster_api_key,
        cache=cache,
        timeout_s=settings.ticketmaster_timeout_s,
        max_pages=settings.ticketmaster_max_pages,
    )
    return EventSearchOrchestrator(
        {ticketmaster.name: ticketmaster},
        resolver=default_resolver,
        default_radius=settings.event_default_radius_miles,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    setup_sentry()

    # Redis for rate limiting + event cache
    redis_client = None
    if settings.redis_url:
        try:
            redis_client = aioredis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            await redis_client.ping()
        except Exception:
            # Requests pass through without rate limits or cache
            logger.warning("Redis unavailable at startup; running without cache/rate limits")
            redis_client = None

    _redis_holder["client"] = redis_client
    app.state.redis = redis_client
    app.state.settings = settings
    app.state.resolver = default_resolver
    app.state.event_orchestrator = build_orchestrator(redis_client)

    if not settings.ticketmaster_api_key:
        logger.warning("TICKETMASTER_API_KEY not set; ticketmaster searches will report as failed")

    logger.info(
        "Geo service ready: %d cities, %d markets",
        len(default_resolver.cities), len(default_resolver.markets),
    )

    yield

    if redis_client:
        await redis_client.aclose()


app = FastAPI(
    title="Lo Geo API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

# -- Middleware (order matters: last added = outermost in Starlette) --

app.include_router(health.router)
app.include_router(cities.router)
app.include_router(markets.router)
app.include_router(events.router)

# Rate limiting, using the lazy redis reference from lifespan
class _LazyRateLimitMiddleware(RateLimitMiddleware):
    """Rate limiter that picks up Redis client after lifespan init."""

    def __init__(self, app):
        super().__init__(app, redis_client=None)

    async def dispatch(self, request, call_next):
        self.redis = _redis_holder.get("client")
        return await super().dispatch(request, call_next)


app.add_middleware(_LazyRateLimitMiddleware)


# Request ID injection (outside the rate limiter so 429s carry the id)
@app.middleware("http")
async def request_envelope_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# CORS (needs to be outermost to handle preflight)
setup_cors(app)


# -- Exception Handlers --

def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(request, 404, "NOT_FOUND", str(exc.detail) if exc.detail else "Resource not found.")
    if exc.status_code == 405:
        return _error(request, 405, "METHOD_NOT_ALLOWED", "Method not allowed.")
    return _error(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', 'invalid')}" for e in errors
    ) or "Validation error."
    return _error(request, 422, "VALIDATION_ERROR", message)


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")
