"""
Event search: request models, the Ticketmaster source, its Redis cache, and
the orchestrator that fans a search out across sources.
"""

from services.geo.events.cache import EventCache
from services.geo.events.errors import EventSourceError, EventSourceRateLimited
from services.geo.events.models import EventSearchRequest, EventSearchResult, NormalizedEvent
from services.geo.events.orchestrator import EventSearchOrchestrator, calculate_optimal_radius, dedupe_events
from services.geo.events.ticketmaster import TicketmasterSource

__all__ = [
    "EventCache",
    "EventSearchOrchestrator",
    "EventSearchRequest",
    "EventSearchResult",
    "EventSourceError",
    "EventSourceRateLimited",
    "NormalizedEvent",
    "TicketmasterSource",
    "calculate_optimal_radius",
    "dedupe_events",
]
