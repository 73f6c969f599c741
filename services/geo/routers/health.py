"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    resolver = request.app.state.resolver
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "version": request.app.state.settings.app_version,
            "cities": len(resolver.cities),
            "markets": len(resolver.markets),
            "redis": request.app.state.redis is not None,
        },
        "requestId": request.state.request_id,
    }
