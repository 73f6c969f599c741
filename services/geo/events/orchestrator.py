"""
EventSearchOrchestrator: one event search across the configured sources.

Flow:
  1. Resolve center + radius from the request (center wins over bounds).
  2. Plan the search around the nearest city ("primary-city"):
       - The Ticketmaster market id is only used when the center lies inside
         that city's metro radius; the market's radius is then the effective
         radius. Elsewhere sources search by latlong/radius.
       - Without a requested radius (or bounds), the radius is sized from the
         city and the distance to it (calculate_optimal_radius).
  3. When the nearest city is more than 75 miles away, move the search to:
       - "nearby-cities": a city within 200 miles (the most populous one,
         or the closest when prefer_large_metros is off), radius >= 50
       - "regional-fallback": the most populous city within 500 miles,
         radius = min(100, city radius + 25)
     Beyond 500 miles the primary-city plan stands.
  4. Fetch every requested source. Unknown sources and source errors land
     in sources.failed; they never fail the whole search.
  5. A 24h search that comes back empty is retried once as 48h with the
     radius raised to at least 15 miles.
  6. De-duplicate by (source, external_id), keeping the first-seen copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from services.geo.events.errors import EventSourceError
from services.geo.events.models import (
    DEFAULT_RADIUS_MILES,
    MAX_RADIUS_MILES,
    EventSearchRequest,
    EventSearchResult,
    LatLng,
    NormalizedEvent,
    SourceReport,
    compute_center_and_radius,
)
from services.geo.resolver import CityRecord, GeoResolver, default_resolver
from services.geo.resolver.distance import haversine_miles

logger = logging.getLogger(__name__)

_WIDEN_FROM_TIMEFRAME = "24h"
_WIDEN_TO_TIMEFRAME = "48h"
_WIDEN_MIN_RADIUS_MILES = 15

# Fallback strategies, miles
FALLBACK_TRIGGER_MILES = 75
NEARBY_CITIES_MILES = 200
REGIONAL_CITIES_MILES = 500
_NEARBY_MIN_RADIUS_MILES = 50
_REGIONAL_RADIUS_PADDING_MILES = 25

STRATEGY_PRIMARY = "primary-city"
STRATEGY_NEARBY = "nearby-cities"
STRATEGY_REGIONAL = "regional-fallback"


class EventSource(Protocol):
    name: str

    async def fetch_events(
        self,
        lat: float,
        lng: float,
        radius: float,
        timeframe: str,
        market_id: str | None = None,
    ) -> list[dict[str, Any]]: ...


@dataclass(frozen=True)
class SearchPlan:
    """Where and how wide the sources are asked to search."""
    center: LatLng
    radius: float
    city_id: str | None = None
    market_id: str | None = None
    strategy: str = STRATEGY_PRIMARY
    fallback_used: bool = False
    nearest_city_distance: float | None = None
    cities_checked: int = 0


def dedupe_events(events: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Collapse duplicates by (source, external_id); the first-seen copy wins."""
    kept: dict[tuple[str, str], dict[str, Any]] = {}
    for event in events:
        key = (event.get("source"), event.get("external_id"))
        if key in kept:
            logger.debug("Dropping duplicate event %s:%s", *key)
            continue
        kept[key] = event
    return list(kept.values())


def calculate_optimal_radius(city: CityRecord, distance_miles: float) -> float:
    """
    Search radius around a city for a center distance_miles from it.

    Starts from the city's metro radius, grows to distance + 15 beyond 25
    miles out, is at least 45 for metros over 2M people and at least 35
    under 500k, and never exceeds 100.
    """
    radius = float(city.radius)
    if distance_miles > 25:
        radius = max(radius, distance_miles + 15)

    if city.population > 2_000_000:
        radius = max(radius, 45)
    elif city.population < 500_000:
        radius = max(radius, 35)

    return min(radius, MAX_RADIUS_MILES)


def _largest(cities: list[CityRecord]) -> CityRecord:
    # max() keeps the earliest of equally populous cities
    return max(cities, key=lambda city: city.population)


class EventSearchOrchestrator:
    """
    Usage:
        orchestrator = EventSearchOrchestrator({"ticketmaster": source})
        result = await orchestrator.search(EventSearchRequest(center={"lat": 40.7, "lng": -74.0}))
    """

    def __init__(
        self,
        sources: dict[str, EventSource],
        resolver: GeoResolver | None = None,
        default_radius: float = DEFAULT_RADIUS_MILES,
    ) -> None:
        self._sources = sources
        self._resolver = resolver or default_resolver
        self._default_radius = default_radius

    @property
    def source_names(self) -> list[str]:
        return list(self._sources)

    async def search(self, request: EventSearchRequest) -> EventSearchResult:
        plan = self.plan(request)
        timeframe = request.timeframe
        logger.info(
            "Event search at %.4f,%.4f radius=%s timeframe=%s city=%s market=%s strategy=%s sources=%s",
            plan.center.lat, plan.center.lng, plan.radius, timeframe,
            plan.city_id, plan.market_id, plan.strategy, request.sources,
        )

        report = SourceReport()
        collected: list[dict[str, Any]] = []

        for name in request.sources:
            source = self._sources.get(name)
            if source is None:
                logger.warning("Unknown event source requested: %s", name)
                report.failed.append(name)
                continue

            try:
                events = await source.fetch_events(
                    plan.center.lat, plan.center.lng, plan.radius, timeframe, plan.market_id,
                )
                if not events and timeframe == _WIDEN_FROM_TIMEFRAME:
                    widened_radius = max(plan.radius, _WIDEN_MIN_RADIUS_MILES)
                    logger.info(
                        "No %s events in %s; widening to %s radius=%s",
                        name, timeframe, _WIDEN_TO_TIMEFRAME, widened_radius,
                    )
                    events = await source.fetch_events(
                        plan.center.lat, plan.center.lng, widened_radius,
                        _WIDEN_TO_TIMEFRAME, plan.market_id,
                    )
            except EventSourceError as exc:
                logger.warning("Event source %s failed: %s", name, exc)
                report.failed.append(name)
                continue
            except Exception:
                logger.exception("Unexpected error from event source %s", name)
                report.failed.append(name)
                continue

            report.processed.append(name)
            collected.extend(events)

        unique = dedupe_events(collected)
        logger.info(
            "Event search complete: %d events (%d before dedupe), processed=%s failed=%s",
            len(unique), len(collected), report.processed, report.failed,
        )

        return EventSearchResult(
            events=[NormalizedEvent(**e) for e in unique],
            sources=report,
            center=plan.center,
            radius=plan.radius,
            timeframe=timeframe,
            city_id=plan.city_id,
            market_id=plan.market_id,
            search_strategy=plan.strategy,
            fallback_used=plan.fallback_used,
            nearest_city_distance=plan.nearest_city_distance,
            cities_checked=plan.cities_checked,
        )

    def plan(self, request: EventSearchRequest) -> SearchPlan:
        """Resolve the effective center, radius, city and market for a request."""
        center, radius = compute_center_and_radius(request, self._default_radius)
        requested_radius = radius if request.radius is not None or request.bounds is not None else None

        match = self._resolver.detect_city_with_market(center.lat, center.lng)
        if match is None:
            return SearchPlan(center=center, radius=radius)

        city = match.city
        distance = haversine_miles(center.lat, center.lng, city.coordinates.lat, city.coordinates.lng)

        if request.enable_fallback and distance > FALLBACK_TRIGGER_MILES:
            fallback = self._plan_fallback(center, requested_radius, request.prefer_large_metros)
            if fallback is not None:
                return SearchPlan(
                    center=fallback.center,
                    radius=fallback.radius,
                    city_id=city.id,
                    strategy=fallback.strategy,
                    fallback_used=True,
                    nearest_city_distance=distance,
                    cities_checked=fallback.cities_checked,
                )

        market_id = None
        if requested_radius is None:
            radius = calculate_optimal_radius(city, distance)
        if match.market is not None and distance <= city.radius:
            market_id = match.market.id
            radius = min(match.market.radius, MAX_RADIUS_MILES)

        return SearchPlan(
            center=center,
            radius=radius,
            city_id=city.id,
            market_id=market_id,
            nearest_city_distance=distance,
            cities_checked=1,
        )

    def _plan_fallback(
        self,
        center: LatLng,
        requested_radius: float | None,
        prefer_large_metros: bool,
    ) -> SearchPlan | None:
        nearby = self._resolver.get_cities_within_radius(center.lat, center.lng, NEARBY_CITIES_MILES)
        if nearby:
            target = _largest(nearby) if prefer_large_metros else nearby[0]
            radius = requested_radius or max(target.radius, _NEARBY_MIN_RADIUS_MILES)
            logger.info("Fallback %s: searching around %s", STRATEGY_NEARBY, target.id)
            return SearchPlan(
                center=LatLng(lat=target.coordinates.lat, lng=target.coordinates.lng),
                radius=radius,
                strategy=STRATEGY_NEARBY,
                cities_checked=len(nearby),
            )

        regional = self._resolver.get_cities_within_radius(center.lat, center.lng, REGIONAL_CITIES_MILES)
        if regional:
            target = _largest(regional)
            radius = requested_radius or min(MAX_RADIUS_MILES, target.radius + _REGIONAL_RADIUS_PADDING_MILES)
            logger.info("Fallback %s: searching around %s", STRATEGY_REGIONAL, target.id)
            return SearchPlan(
                center=LatLng(lat=target.coordinates.lat, lng=target.coordinates.lng),
                radius=radius,
                strategy=STRATEGY_REGIONAL,
                cities_checked=len(regional),
            )

        return None
