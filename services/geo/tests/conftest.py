"""
Shared test fixtures for the geo service test suite.

Provides:
- async FastAPI test client (no Redis or Ticketmaster needed)
- mock Redis with a pipeline for the rate limiter
- a mocked event orchestrator for router tests
- factory for raw Ticketmaster Discovery API events
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("REDIS_URL", "redis://localhost:26379/0")
os.environ.setdefault("SENTRY_DSN", "")
os.environ.setdefault("TICKETMASTER_API_KEY", "test-key")


# ---------------------------------------------------------------------------
# FastAPI test client with mocked Redis and orchestrator
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_redis():
    """In-memory mock Redis client for rate limiter and cache tests."""
    redis = AsyncMock()
    pipe = AsyncMock()
    pipe.execute = AsyncMock(return_value=[None, 0, None, None])
    redis.pipeline = MagicMock(return_value=pipe)
    redis.ping = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    return redis


@pytest.fixture
def mock_orchestrator():
    """Orchestrator stub returning an empty, successful search."""
    from services.geo.events.models import EventSearchResult, LatLng, SourceReport

    orchestrator = MagicMock()
    orchestrator.search = AsyncMock(return_value=EventSearchResult(
        events=[],
        sources=SourceReport(processed=["ticketmaster"], failed=[]),
        center=LatLng(lat=40.7128, lng=-74.0060),
        radius=25,
        timeframe="24h",
        city_id="new-york",
        market_id="35",
    ))
    return orchestrator


@pytest.fixture
async def app(mock_redis, mock_orchestrator, monkeypatch):
    """Create a test FastAPI app with mocked dependencies."""
    from services.geo import main
    from services.geo.config import settings
    from services.geo.resolver import default_resolver

    _app = main.app
    _app.state.redis = mock_redis
    _app.state.settings = settings
    _app.state.resolver = default_resolver
    _app.state.event_orchestrator = mock_orchestrator
    monkeypatch.setitem(main._redis_holder, "client", mock_redis)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_tm_event(**overrides: Any) -> dict:
    """Factory for a raw Ticketmaster Discovery API event."""
    base = {
        "id": "G5vYZ9f1",
        "name": "Test Artist Live",
        "url": "https://www.ticketmaster.com/event/G5vYZ9f1",
        "info": "Doors at 7pm.",
        "images": [
            {"url": "https://img.example.com/small.jpg", "width": 100},
            {"url": "https://img.example.com/large.jpg", "width": 1024},
        ],
        "dates": {"start": {"dateTime": "2026-10-18T01:00:00Z"}},
        "priceRanges": [{"min": 35.0, "max": 120.0}],
        "classifications": [{"segment": {"name": "Music"}, "genre": {"name": "Rock"}}],
        "_embedded": {
            "venues": [{
                "name": "Madison Square Garden",
                "address": {"line1": "4 Pennsylvania Plaza"},
                "city": {"name": "New York"},
                "state": {"stateCode": "NY"},
                "postalCode": "10001",
                "country": {"countryCode": "US"},
                "location": {"latitude": "40.7505", "longitude": "-73.9934"},
            }],
        },
    }
    base.update(overrides)
    return base


def make_normalized_event(**overrides: Any) -> dict:
    """Factory for an already-normalized event dict."""
    base = {
        "external_id": "evt-1",
        "source": "ticketmaster",
        "title": "Test Event",
        "description": "",
        "event_url": None,
        "image_url": None,
        "venue_name": "Test Venue",
        "venue_address": "",
        "lat": 40.75,
        "lng": -73.99,
        "start_date": "2026-10-18T01:00:00Z",
        "end_date": None,
        "price_min": None,
        "price_max": None,
        "genre": None,
        "classification": None,
    }
    base.update(overrides)
    return base
