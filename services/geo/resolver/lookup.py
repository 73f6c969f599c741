"""
GeoResolver: nearest-city detection and market resolution.

Every operation is a linear scan over immutable tables with the haversine
distance from distance.py. Nothing here performs I/O or holds mutable state,
so a single resolver instance is shared by every caller without locking.

Malformed input never raises:
  - NaN / Infinity coordinates produce NaN distances. NaN never compares
    below the running minimum, so detect_nearest_city() keeps its starting
    candidate (the first table row) and radius queries come back empty.
  - Unknown ids return None.
  - An empty table returns None / [] instead of a default record.

try_detect_nearest_city() is the strict variant for callers that would
rather reject bad coordinates than get the first-row fallback.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from services.geo.resolver.cities import CITY_TABLE, CityRecord, Coordinates
from services.geo.resolver.distance import haversine_miles, is_valid_point
from services.geo.resolver.markets import MARKET_TABLE, SECONDARY_MARKETS, MarketRecord, SecondaryMarket

logger = logging.getLogger(__name__)

# Default "is there anything nearby" distance, miles
DEFAULT_EVENT_RADIUS_MILES = 50

# Search radius bounds for points outside every metro area, miles
RURAL_MIN_RADIUS_MILES = 50
MAX_SEARCH_RADIUS_MILES = 100

_DEFAULT_CITY_EMOJI = "🏙️"

_CITY_EMOJIS: dict[str, str] = {
    "new-york": "🗽",
    "los-angeles": "🌴",
    "chicago": "🏙️",
    "houston": "🚀",
    "phoenix": "🌵",
    "philadelphia": "🔔",
    "san-antonio": "🤠",
    "san-diego": "🏖️",
    "dallas": "🤠",
    "san-jose": "💻",
    "atlanta": "🍑",
    "miami": "🏖️",
    "denver": "⛰️",
    "seattle": "☕",
    "las-vegas": "🎰",
}


@dataclass(frozen=True)
class CityMarketMatch:
    """Nearest city plus the market that claims it, if any."""
    city: CityRecord
    market: MarketRecord | None


@dataclass(frozen=True)
class SearchParams:
    """Ticketmaster search inputs derived from a city."""
    market_id: str | None
    radius: int
    coordinates: Coordinates


class GeoResolver:
    """Pure lookups over a city table and a market table.

    Usage:
        resolver = GeoResolver()
        city = resolver.detect_nearest_city(40.7128, -74.0060)
        market = resolver.get_market_for_city(city.id)
    """

    def __init__(
        self,
        cities: Sequence[CityRecord] = CITY_TABLE,
        markets: Sequence[MarketRecord] = MARKET_TABLE,
        secondary_markets: Sequence[SecondaryMarket] = SECONDARY_MARKETS,
    ) -> None:
        self._cities = tuple(cities)
        self._markets = tuple(markets)
        self._secondary = tuple(secondary_markets)
        # First occurrence wins if a table ever repeats an id
        self._cities_by_id: dict[str, CityRecord] = {}
        for city in self._cities:
            self._cities_by_id.setdefault(city.id, city)

    @property
    def cities(self) -> tuple[CityRecord, ...]:
        return self._cities

    @property
    def markets(self) -> tuple[MarketRecord, ...]:
        return self._markets

    # ------------------------------------------------------------------
    # City lookups
    # ------------------------------------------------------------------

    def detect_nearest_city(self, lat: float, lng: float) -> CityRecord | None:
        """Return the city whose centroid is closest to (lat, lng).

        Ties go to the earlier table row. Non-finite input returns the first
        row. Returns None only when the city table is empty.
        """
        if not self._cities:
            return None

        nearest = self._cities[0]
        shortest = math.inf
        for city in self._cities:
            distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
            if distance < shortest:
                shortest = distance
                nearest = city

        if math.isinf(shortest):
            logger.debug("No finite distance for (%r, %r); falling back to %s", lat, lng, nearest.id)
        return nearest

    def try_detect_nearest_city(self, lat: float, lng: float) -> CityRecord | None:
        """Strict variant: None for NaN/Infinity or out-of-range coordinates."""
        if not is_valid_point(lat, lng):
            return None
        return self.detect_nearest_city(lat, lng)

    def get_cities_within_radius(self, lat: float, lng: float, radius_miles: float) -> list[CityRecord]:
        """Cities with distance <= radius_miles, closest first.

        A zero radius keeps only exact centroid matches; a negative or NaN
        radius matches nothing.
        """
        hits: list[tuple[float, CityRecord]] = []
        for city in self._cities:
            distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
            if distance <= radius_miles:
                hits.append((distance, city))
        # sorted() is stable, so equal distances keep table order
        hits = sorted(hits, key=lambda hit: hit[0])
        return [city for _, city in hits]

    def get_cities_by_state(self, state_code: str) -> list[CityRecord]:
        """Exact, case-sensitive match on the two-letter state code."""
        return [city for city in self._cities if city.state == state_code]

    def get_major_metros(self, min_population: int) -> list[CityRecord]:
        """Cities with population >= min_population, largest first."""
        metros = [city for city in self._cities if city.population >= min_population]
        return sorted(metros, key=lambda city: city.population, reverse=True)

    def get_city_by_id(self, city_id: str) -> CityRecord | None:
        return self._cities_by_id.get(city_id)

    def get_all_cities(self) -> list[CityRecord]:
        """Every city, largest population first. The table itself is untouched."""
        return sorted(self._cities, key=lambda city: city.population, reverse=True)

    def is_within_event_radius(
        self,
        lat: float,
        lng: float,
        max_distance: float = DEFAULT_EVENT_RADIUS_MILES,
    ) -> bool:
        """True if any city centroid lies within max_distance miles."""
        for city in self._cities:
            distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
            if distance <= max_distance:
                return True
        return False

    def get_optimal_search_radius(self, lat: float, lng: float) -> int:
        """
        Pick an event search radius (miles) for a map position.

        Inside the nearest city's metro radius the market radius is used
        (or the city's own radius when no market claims it). Outside, the
        radius grows with the distance to that city, bounded to
        [RURAL_MIN_RADIUS_MILES, MAX_SEARCH_RADIUS_MILES].
        """
        city = self.detect_nearest_city(lat, lng)
        if city is None:
            return RURAL_MIN_RADIUS_MILES

        distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
        if not math.isfinite(distance):
            return RURAL_MIN_RADIUS_MILES

        if distance <= city.radius:
            market = self.get_market_for_city(city.id)
            radius = market.radius if market is not None else city.radius
            return min(radius, MAX_SEARCH_RADIUS_MILES)

        return max(RURAL_MIN_RADIUS_MILES, min(MAX_SEARCH_RADIUS_MILES, math.ceil(distance)))

    # ------------------------------------------------------------------
    # Market lookups
    # ------------------------------------------------------------------

    def get_market_for_city(self, city_id: str) -> MarketRecord | None:
        """First market, in table order, whose cities include city_id."""
        for market in self._markets:
            if city_id in market.cities:
                return market
        return None

    def get_market_by_id(self, market_id: str) -> MarketRecord | None:
        for market in self._markets:
            if market.id == market_id:
                return market
        return None

    def find_nearest_market(self, lat: float, lng: float) -> MarketRecord | None:
        """Market whose centroid is closest to (lat, lng); None for an empty table."""
        if not self._markets:
            return None

        nearest = self._markets[0]
        shortest = math.inf
        for market in self._markets:
            distance = haversine_miles(lat, lng, market.coordinates.lat, market.coordinates.lng)
            if distance < shortest:
                shortest = distance
                nearest = market
        return nearest

    def get_all_market_ids(self) -> list[str]:
        """Primary market ids followed by secondary market ids."""
        return [m.id for m in self._markets] + [m.id for m in self._secondary]

    # ------------------------------------------------------------------
    # Composite helpers
    # ------------------------------------------------------------------

    def detect_city_with_market(self, lat: float, lng: float) -> CityMarketMatch | None:
        city = self.detect_nearest_city(lat, lng)
        if city is None:
            return None
        return CityMarketMatch(city=city, market=self.get_market_for_city(city.id))

    def get_ticketmaster_search_params(self, city: CityRecord) -> SearchParams:
        """Market id and radius for a city, falling back to the city's own radius."""
        market = self.get_market_for_city(city.id)
        if market is not None:
            return SearchParams(market_id=market.id, radius=market.radius, coordinates=city.coordinates)
        return SearchParams(market_id=None, radius=city.radius, coordinates=city.coordinates)


def format_city_display(city: CityRecord) -> str:
    """Emoji-prefixed label for city pickers, e.g. '🗽 New York, NY'."""
    emoji = _CITY_EMOJIS.get(city.id, _DEFAULT_CITY_EMOJI)
    return f"{emoji} {city.display_name}"


# ---------------------------------------------------------------------------
# Module-level API over the static tables
# ---------------------------------------------------------------------------

default_resolver = GeoResolver()

detect_nearest_city = default_resolver.detect_nearest_city
try_detect_nearest_city = default_resolver.try_detect_nearest_city
get_cities_within_radius = default_resolver.get_cities_within_radius
get_cities_by_state = default_resolver.get_cities_by_state
get_major_metros = default_resolver.get_major_metros
get_city_by_id = default_resolver.get_city_by_id
get_all_cities = default_resolver.get_all_cities
is_within_event_radius = default_resolver.is_within_event_radius
get_optimal_search_radius = default_resolver.get_optimal_search_radius
get_market_for_city = default_resolver.get_market_for_city
get_market_by_id = default_resolver.get_market_by_id
find_nearest_market = default_resolver.find_nearest_market
get_all_market_ids = default_resolver.get_all_market_ids
detect_city_with_market = default_resolver.detect_city_with_market
get_ticketmaster_search_params = default_resolver.get_ticketmaster_search_params
