"""
Event search endpoint.

POST /events/search
- Body: EventSearchRequest (center and/or bounds, radius, timeframe, sources)
- Omitted timeframe falls back to EVENT_DEFAULT_TIMEFRAME
- Per-source failures are reported under data.sources.failed, not as HTTP errors
- Rate limited on its own tier (RATE_LIMIT_EVENTS_PER_MIN)
"""

import logging

from fastapi import APIRouter, Request

from services.geo.config import settings
from services.geo.events.models import EventSearchRequest
from services.geo.routers._payloads import envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/search")
async def search_events(body: EventSearchRequest, request: Request) -> dict:
    if "timeframe" not in body.model_fields_set:
        body = body.model_copy(update={"timeframe": settings.event_default_timeframe})

    orchestrator = request.app.state.event_orchestrator
    result = await orchestrator.search(body)
    if result.sources.failed:
        logger.warning(
            "Event search %s: sources failed: %s",
            request.state.request_id, ", ".join(result.sources.failed),
        )
    return envelope(request, result.to_payload())
