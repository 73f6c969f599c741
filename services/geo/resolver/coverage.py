"""
Coverage diagnostics for the city and market tables.

Used by scripts/coverage_report.py and the table tests. Each probe location
names either the exact city it must resolve to, a city it must land near,
or nothing (remote points that only need some city within 200 miles).
"""

from __future__ import annotations

from dataclasses import dataclass

from services.geo.resolver.distance import haversine_miles
from services.geo.resolver.lookup import GeoResolver, default_resolver

NEARBY_MAX_MILES = 50
NEARBY_ANY_CITY_MILES = 30
FALLBACK_MAX_MILES = 200


@dataclass(frozen=True)
class ProbeLocation:
    name: str
    lat: float
    lng: float
    expected_city: str | None = None
    expected_nearby: str | None = None


@dataclass(frozen=True)
class ProbeResult:
    location: str
    passed: bool
    detected: str
    distance: float
    has_market: bool
    message: str


PROBE_LOCATIONS: tuple[ProbeLocation, ...] = (
    # Major cities
    ProbeLocation("Times Square, NYC", 40.7580, -73.9855, expected_city="new-york"),
    ProbeLocation("Hollywood, LA", 34.0928, -118.3287, expected_city="los-angeles"),
    ProbeLocation("Downtown Chicago", 41.8781, -87.6298, expected_city="chicago"),
    ProbeLocation("Downtown Houston", 29.7604, -95.3698, expected_city="houston"),
    ProbeLocation("Phoenix Downtown", 33.4484, -112.0740, expected_city="phoenix"),
    # Mid-sized cities
    ProbeLocation("Downtown Austin", 30.2672, -97.7431, expected_city="austin"),
    ProbeLocation("Downtown Nashville", 36.1627, -86.7816, expected_city="nashville"),
    ProbeLocation("Downtown Portland", 45.5152, -122.6784, expected_city="portland"),
    ProbeLocation("Downtown Denver", 39.7392, -104.9903, expected_city="denver"),
    ProbeLocation("Downtown Atlanta", 33.7490, -84.3880, expected_city="atlanta"),
    # Smaller cities
    ProbeLocation("Boise, ID", 43.6150, -116.2023, expected_city="boise"),
    ProbeLocation("Des Moines, IA", 41.5868, -93.6250, expected_city="des-moines"),
    ProbeLocation("Albuquerque, NM", 35.0844, -106.6504, expected_city="albuquerque"),
    ProbeLocation("Anchorage, AK", 61.2181, -149.9003, expected_city="anchorage"),
    ProbeLocation("Honolulu, HI", 21.3099, -157.8581, expected_city="honolulu"),
    # Suburbs
    ProbeLocation("Suburban NYC (Westchester)", 41.0534, -73.5387, expected_nearby="new-york"),
    ProbeLocation("Silicon Valley (Palo Alto)", 37.4419, -122.1430, expected_nearby="san-jose"),
    ProbeLocation("Orange County, CA", 33.7175, -117.8311, expected_nearby="los-angeles"),
    ProbeLocation("North Dallas Suburbs", 33.0198, -96.6989, expected_nearby="dallas"),
    # Remote
    ProbeLocation("Rural Montana", 47.0527, -109.6333),
    ProbeLocation("Rural Nevada", 39.1638, -117.2694),
    ProbeLocation("Rural Wyoming", 43.0759, -107.2903),
)


def probe_location(location: ProbeLocation, resolver: GeoResolver = default_resolver) -> ProbeResult:
    city = resolver.detect_nearest_city(location.lat, location.lng)
    if city is None:
        return ProbeResult(location.name, False, "-", float("nan"), False, "empty city table")

    distance = haversine_miles(location.lat, location.lng, city.coordinates.lat, city.coordinates.lng)
    has_market = resolver.get_market_for_city(city.id) is not None

    if location.expected_city:
        passed = city.id == location.expected_city
        message = (
            f"exact match: {city.display_name}" if passed
            else f"expected {location.expected_city}, got {city.id}"
        )
    elif location.expected_nearby:
        passed = distance <= NEARBY_MAX_MILES and (
            city.id == location.expected_nearby or distance <= NEARBY_ANY_CITY_MILES
        )
        message = (
            f"nearby match: {city.display_name} ({distance:.1f}mi)" if passed
            else f"expected near {location.expected_nearby}, got {city.id} at {distance:.1f}mi"
        )
    else:
        passed = distance <= FALLBACK_MAX_MILES
        message = (
            f"fallback: {city.display_name} ({distance:.1f}mi)" if passed
            else f"fallback too far: {city.id} ({distance:.1f}mi)"
        )

    return ProbeResult(location.name, passed, city.display_name, distance, has_market, message)


def coverage_metrics(resolver: GeoResolver = default_resolver, metro_population: int = 400_000) -> dict:
    """Summary counts over the tables."""
    cities = resolver.cities
    with_market = [c for c in cities if resolver.get_market_for_city(c.id) is not None]
    return {
        "total_cities": len(cities),
        "states_covered": len({c.state for c in cities}),
        "major_metros": len(resolver.get_major_metros(metro_population)),
        "cities_with_markets": len(with_market),
        "total_markets": len(resolver.get_all_market_ids()),
        "avg_radius": round(sum(c.radius for c in cities) / len(cities), 1) if cities else 0.0,
    }
