"""
Geo resolver package.

Static city and Ticketmaster market tables plus the pure lookups over them:
nearest city, cities within a radius, and city -> market resolution.
"""

from services.geo.resolver.cities import CITY_TABLE, CityRecord, Coordinates
from services.geo.resolver.distance import haversine_miles
from services.geo.resolver.lookup import (
    CityMarketMatch,
    GeoResolver,
    SearchParams,
    default_resolver,
    format_city_display,
)
from services.geo.resolver.markets import MARKET_TABLE, SECONDARY_MARKETS, MarketRecord

__all__ = [
    "CITY_TABLE",
    "MARKET_TABLE",
    "SECONDARY_MARKETS",
    "CityMarketMatch",
    "CityRecord",
    "Coordinates",
    "GeoResolver",
    "MarketRecord",
    "SearchParams",
    "default_resolver",
    "format_city_display",
    "haversine_miles",
]
