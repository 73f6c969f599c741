"""Static city and market table integrity."""

import re

from services.geo.resolver import CITY_TABLE, MARKET_TABLE, SECONDARY_MARKETS
from services.geo.resolver.cities import CITIES_BY_ID

_STATE_CODES = {
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI", "ID", "IL",
    "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE",
    "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD",
    "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
}


class TestCityTable:

    def test_ids_unique(self):
        ids = [c.id for c in CITY_TABLE]
        assert len(ids) == len(set(ids))
        assert set(CITIES_BY_ID) == set(ids)

    def test_ids_are_slugs(self):
        for city in CITY_TABLE:
            assert re.fullmatch(r"[a-z0-9]+(-[a-z0-9]+)*", city.id), city.id

    def test_first_rows(self):
        assert [c.id for c in CITY_TABLE[:3]] == ["new-york", "los-angeles", "chicago"]

    def test_coordinates_within_us_bounds(self):
        for city in CITY_TABLE:
            assert 20 <= city.coordinates.lat <= 72, city.id
            assert -180 <= city.coordinates.lng <= -65, city.id

    def test_fields_populated(self):
        for city in CITY_TABLE:
            assert city.radius > 0
            assert city.population > 0
            assert city.state in _STATE_CODES, city.id
            assert city.display_name == f"{city.name}, {city.state}"
            assert city.timezone.startswith(("America/", "Pacific/"))

    def test_covers_every_state(self):
        states = {c.state for c in CITY_TABLE}
        assert _STATE_CODES - {"DC"} <= states


class TestMarketTable:

    def test_ids_unique_across_primary_and_secondary(self):
        ids = [m.id for m in MARKET_TABLE] + [m.id for m in SECONDARY_MARKETS]
        assert len(ids) == len(set(ids))

    def test_market_cities_exist(self):
        for market in MARKET_TABLE:
            assert market.cities, market.id
            for city_id in market.cities:
                assert city_id in CITIES_BY_ID, (market.id, city_id)

    def test_secondary_cities_exist(self):
        for market in SECONDARY_MARKETS:
            for city_id in market.cities:
                assert city_id in CITIES_BY_ID, (market.id, city_id)

    def test_primary_city_is_listed(self):
        for market in MARKET_TABLE:
            assert market.primary_city in market.cities, market.id

    def test_radius_positive(self):
        for market in MARKET_TABLE:
            assert market.radius > 0
