"""
EventSearchOrchestrator tests.

Sources are AsyncMock stand-ins; no network or Redis.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from services.geo.events.errors import EventSourceError, EventSourceRateLimited
from services.geo.events.models import EventSearchRequest
from services.geo.events.orchestrator import (
    EventSearchOrchestrator,
    calculate_optimal_radius,
    dedupe_events,
)
from services.geo.resolver import default_resolver, haversine_miles
from services.geo.resolver.lookup import get_city_by_id
from services.geo.tests.conftest import make_normalized_event

# Open ocean: nearest city (Honolulu) is well over 500 miles away
REMOTE = {"lat": 0.0, "lng": -150.0}
# Between Death Valley and the Sierra: Fresno is the closest city, ~128 miles
DESERT = {"lat": 37.0, "lng": -117.5}
# Gulf of Mexico: nothing within 200 miles, New Orleans ~342 miles
GULF = {"lat": 25.0, "lng": -90.0}


def _source(*results, name="ticketmaster"):
    source = MagicMock()
    source.name = name
    source.fetch_events = AsyncMock(side_effect=list(results))
    return source


def _request(**overrides):
    body = {"center": {"lat": 40.7128, "lng": -74.0060}}
    body.update(overrides)
    return EventSearchRequest(**body)


class TestDedupeEvents:

    def test_keeps_first_seen_copy(self):
        later = make_normalized_event(external_id="a", start_date="2026-10-19T00:00:00Z", title="first")
        earlier = make_normalized_event(external_id="a", start_date="2026-10-18T00:00:00Z", title="second")
        result = dedupe_events([later, earlier])
        assert [e["title"] for e in result] == ["first"]

    def test_same_id_different_source_kept(self):
        a = make_normalized_event(external_id="a", source="ticketmaster")
        b = make_normalized_event(external_id="a", source="eventbrite")
        assert len(dedupe_events([a, b])) == 2

    def test_undated_first_copy_still_wins(self):
        undated = make_normalized_event(external_id="a", start_date=None, title="undated")
        dated = make_normalized_event(external_id="a", title="dated")
        assert [e["title"] for e in dedupe_events([undated, dated])] == ["undated"]

    def test_preserves_first_seen_order(self):
        events = [make_normalized_event(external_id=i) for i in ("c", "a", "b", "a")]
        assert [e["external_id"] for e in dedupe_events(events)] == ["c", "a", "b"]


class TestOptimalRadius:

    def test_major_metro_at_center(self):
        # New York: 30 mile metro radius, population over 2M
        assert calculate_optimal_radius(get_city_by_id("new-york"), 0) == 45

    def test_small_city_floor(self):
        # Burlington: 15 mile radius, population under 500k
        assert calculate_optimal_radius(get_city_by_id("burlington"), 5) == 35

    def test_mid_size_city_keeps_own_radius(self):
        # Denver: 25 mile radius, 715k people
        assert calculate_optimal_radius(get_city_by_id("denver"), 10) == 25

    def test_grows_with_distance(self):
        assert calculate_optimal_radius(get_city_by_id("denver"), 40) == 55

    def test_capped_at_100(self):
        assert calculate_optimal_radius(get_city_by_id("denver"), 400) == 100


class TestSearch:

    @pytest.mark.asyncio
    async def test_market_resolved_for_city_center(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})

        result = await orchestrator.search(_request())

        assert result.city_id == "new-york"
        assert result.market_id == "35"
        assert result.sources.processed == ["ticketmaster"]
        assert result.sources.failed == []
        assert len(result.events) == 1
        assert result.search_strategy == "primary-city"
        assert result.fallback_used is False
        assert result.nearest_city_distance == 0
        # Market searches report the market's radius
        assert result.radius == 60
        source.fetch_events.assert_awaited_once_with(40.7128, -74.0060, 60, "24h", "35")

    @pytest.mark.asyncio
    async def test_market_radius_overrides_requested_radius(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(radius=300))
        assert result.market_id == "35"
        assert result.radius == 60

    @pytest.mark.asyncio
    async def test_requested_radius_capped_outside_markets(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(center=REMOTE, radius=300, timeframe="6h"))
        assert result.market_id is None
        assert result.radius == 100
        assert source.fetch_events.await_args.args[2] == 100

    @pytest.mark.asyncio
    async def test_remote_center_searches_by_latlong(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})

        result = await orchestrator.search(_request(center=REMOTE, timeframe="6h"))

        assert result.market_id is None
        assert result.city_id is not None
        assert result.search_strategy == "primary-city"
        assert result.fallback_used is False
        assert result.nearest_city_distance > 500
        assert source.fetch_events.await_args.args[4] is None

    @pytest.mark.asyncio
    async def test_empty_24h_widens_to_48h(self):
        source = _source([], [make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})

        result = await orchestrator.search(_request(center=REMOTE, radius=5))

        assert len(result.events) == 1
        second = source.fetch_events.await_args_list[1].args
        assert second[2] == 15
        assert second[3] == "48h"
        # The reported window is the requested one
        assert result.timeframe == "24h"

    @pytest.mark.asyncio
    async def test_widen_keeps_larger_radius(self):
        source = _source([], [])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        await orchestrator.search(_request(center=REMOTE, radius=40))
        assert source.fetch_events.await_args_list[1].args[2] == 40

    @pytest.mark.asyncio
    async def test_no_widening_for_other_timeframes(self):
        source = _source([])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(timeframe="7d"))
        assert result.events == []
        assert source.fetch_events.await_count == 1

    @pytest.mark.asyncio
    async def test_source_error_recorded_as_failed(self):
        source = _source(EventSourceError("boom", source="ticketmaster"))
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request())
        assert result.sources.failed == ["ticketmaster"]
        assert result.sources.processed == []
        assert result.events == []

    @pytest.mark.asyncio
    async def test_rate_limited_recorded_as_failed(self):
        source = _source(EventSourceRateLimited("ticketmaster"))
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request())
        assert result.sources.failed == ["ticketmaster"]

    @pytest.mark.asyncio
    async def test_unexpected_error_recorded_as_failed(self):
        source = _source(RuntimeError("bug"))
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request())
        assert result.sources.failed == ["ticketmaster"]

    @pytest.mark.asyncio
    async def test_unknown_source_recorded_as_failed(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(sources=["ticketmaster", "eventbrite"]))
        assert result.sources.processed == ["ticketmaster"]
        assert result.sources.failed == ["eventbrite"]
        assert len(result.events) == 1

    @pytest.mark.asyncio
    async def test_duplicates_collapsed(self):
        source = _source([
            make_normalized_event(external_id="x", start_date="2026-10-19T00:00:00Z"),
            make_normalized_event(external_id="x", start_date="2026-10-18T00:00:00Z"),
            make_normalized_event(external_id="y"),
        ])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request())
        assert [e.external_id for e in result.events] == ["x", "y"]
        assert result.events[0].start_date == "2026-10-19T00:00:00Z"

    @pytest.mark.asyncio
    async def test_bounds_request(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        request = EventSearchRequest(bounds={"north": 41.0, "south": 40.4, "east": -73.7, "west": -74.3})
        result = await orchestrator.search(request)
        assert result.center.lat == pytest.approx(40.7)
        assert 1 <= result.radius <= 100
        assert result.city_id == "new-york"

    def test_source_names(self):
        orchestrator = EventSearchOrchestrator({"ticketmaster": _source()})
        assert orchestrator.source_names == ["ticketmaster"]


class TestFallbackStrategies:
    """Centers more than 75 miles from every city move to a nearby or regional city."""

    @pytest.mark.asyncio
    async def test_nearby_cities_prefers_largest(self):
        candidates = default_resolver.get_cities_within_radius(DESERT["lat"], DESERT["lng"], 200)
        largest = max(candidates, key=lambda c: c.population)
        assert largest.id != candidates[0].id

        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(center=DESERT, timeframe="6h"))

        nearest = candidates[0]
        assert result.search_strategy == "nearby-cities"
        assert result.fallback_used is True
        assert result.cities_checked == len(candidates)
        assert result.city_id == nearest.id
        assert result.nearest_city_distance == pytest.approx(haversine_miles(
            DESERT["lat"], DESERT["lng"], nearest.coordinates.lat, nearest.coordinates.lng,
        ))
        assert result.nearest_city_distance > 75
        assert (result.center.lat, result.center.lng) == (largest.coordinates.lat, largest.coordinates.lng)
        assert result.radius == max(largest.radius, 50)
        assert result.market_id is None
        args = source.fetch_events.await_args.args
        assert args[:2] == (largest.coordinates.lat, largest.coordinates.lng)
        assert args[4] is None

    @pytest.mark.asyncio
    async def test_nearby_cities_closest_when_not_preferring_metros(self):
        candidates = default_resolver.get_cities_within_radius(DESERT["lat"], DESERT["lng"], 200)
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})

        result = await orchestrator.search(
            _request(center=DESERT, timeframe="6h", prefer_large_metros=False),
        )

        closest = candidates[0]
        assert result.search_strategy == "nearby-cities"
        assert (result.center.lat, result.center.lng) == (closest.coordinates.lat, closest.coordinates.lng)

    @pytest.mark.asyncio
    async def test_nearby_cities_keeps_requested_radius(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(center=DESERT, timeframe="6h", radius=12))
        assert result.search_strategy == "nearby-cities"
        assert result.radius == 12

    @pytest.mark.asyncio
    async def test_regional_fallback(self):
        assert default_resolver.get_cities_within_radius(GULF["lat"], GULF["lng"], 200) == []
        regional = default_resolver.get_cities_within_radius(GULF["lat"], GULF["lng"], 500)
        largest = max(regional, key=lambda c: c.population)

        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(_request(center=GULF, timeframe="6h"))

        assert result.search_strategy == "regional-fallback"
        assert result.fallback_used is True
        assert result.cities_checked == len(regional)
        assert (result.center.lat, result.center.lng) == (largest.coordinates.lat, largest.coordinates.lng)
        assert result.radius == min(100, largest.radius + 25)

    @pytest.mark.asyncio
    async def test_fallback_disabled_keeps_primary_city(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})

        result = await orchestrator.search(_request(center=DESERT, timeframe="6h", enable_fallback=False))

        assert result.search_strategy == "primary-city"
        assert result.fallback_used is False
        assert (result.center.lat, result.center.lng) == (DESERT["lat"], DESERT["lng"])
        nearest = get_city_by_id(result.city_id)
        assert result.radius == calculate_optimal_radius(nearest, result.nearest_city_distance)

    @pytest.mark.asyncio
    async def test_close_to_city_never_falls_back(self):
        source = _source([make_normalized_event()])
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        # ~40 miles north of Denver
        result = await orchestrator.search(_request(center={"lat": 40.32, "lng": -104.99}, timeframe="6h"))
        assert result.search_strategy == "primary-city"
        assert result.fallback_used is False
        assert result.market_id is None
