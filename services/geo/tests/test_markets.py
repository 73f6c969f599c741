"""Ticketmaster market resolution over the market table."""

import math

import pytest

from services.geo.resolver import MARKET_TABLE, SECONDARY_MARKETS, default_resolver
from services.geo.resolver.lookup import (
    detect_city_with_market,
    get_market_by_id,
    get_market_for_city,
    get_ticketmaster_search_params,
)


@pytest.fixture
def resolver():
    return default_resolver


class TestMarketForCity:

    @pytest.mark.parametrize("city_id,market_id", [
        ("new-york", "35"),
        ("los-angeles", "27"),
        ("chicago", "8"),
        ("newark", "35"),
        ("long-beach", "27"),
    ])
    def test_known_markets(self, resolver, city_id, market_id):
        assert resolver.get_market_for_city(city_id).id == market_id

    @pytest.mark.parametrize("city_id,market_id", [
        # Cities listed by more than one market resolve to the earlier table row
        ("milwaukee", "8"),
        ("san-jose", "26"),
        ("tacoma", "32"),
    ])
    def test_first_match_wins(self, resolver, city_id, market_id):
        assert resolver.get_market_for_city(city_id).id == market_id

    def test_unknown_city(self, resolver):
        assert resolver.get_market_for_city("atlantis") is None

    def test_secondary_only_city_has_no_primary_market(self, resolver):
        assert resolver.get_market_for_city("honolulu") is None

    def test_module_alias(self):
        assert get_market_for_city("chicago").id == "8"

    def test_market_contains_city(self, resolver):
        for city in resolver.cities:
            market = resolver.get_market_for_city(city.id)
            if market is not None:
                assert city.id in market.cities


class TestMarketById:

    def test_lookup(self, resolver):
        market = resolver.get_market_by_id("35")
        assert market.name == "New York"
        assert market.primary_city == "new-york"
        assert market.radius == 60

    def test_dedicated_san_jose_market_is_reachable_by_id(self):
        assert get_market_by_id("41").primary_city == "san-jose"

    def test_unknown_id(self, resolver):
        assert resolver.get_market_by_id("999") is None

    def test_secondary_ids_are_not_primary_records(self, resolver):
        assert resolver.get_market_by_id("53") is None


class TestFindNearestMarket:

    @pytest.mark.parametrize("lat,lng,expected", [
        (40.7128, -74.0060, "35"),
        (34.0522, -118.2437, "27"),
        (41.8781, -87.6298, "8"),
    ])
    def test_seed_scenarios(self, resolver, lat, lng, expected):
        assert resolver.find_nearest_market(lat, lng).id == expected

    def test_non_finite_returns_first_row(self, resolver):
        assert resolver.find_nearest_market(math.nan, math.nan).id == MARKET_TABLE[0].id


class TestMarketIds:

    def test_primary_then_secondary(self, resolver):
        ids = resolver.get_all_market_ids()
        assert ids[:len(MARKET_TABLE)] == [m.id for m in MARKET_TABLE]
        assert ids[len(MARKET_TABLE):] == [m.id for m in SECONDARY_MARKETS]

    def test_unique(self, resolver):
        ids = resolver.get_all_market_ids()
        assert len(ids) == len(set(ids))


class TestSearchParams:

    def test_market_city(self, resolver):
        params = get_ticketmaster_search_params(resolver.get_city_by_id("new-york"))
        assert params.market_id == "35"
        assert params.radius == 60
        assert params.coordinates.lat == 40.7128

    def test_city_without_market_uses_city_radius(self, resolver):
        city = resolver.get_city_by_id("honolulu")
        params = resolver.get_ticketmaster_search_params(city)
        assert params.market_id is None
        assert params.radius == city.radius
        assert params.coordinates == city.coordinates

    def test_detect_city_with_market(self):
        match = detect_city_with_market(34.0522, -118.2437)
        assert match.city.id == "los-angeles"
        assert match.market.id == "27"

    def test_detect_city_without_market(self):
        match = detect_city_with_market(21.3099, -157.8581)
        assert match.city.id == "honolulu"
        assert match.market is None
