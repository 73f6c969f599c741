"""
Ticketmaster market registry.

Single source of truth for the mapping between:
  - Ticketmaster Discovery API market ids (e.g. "35")
  - Nielsen DMA codes (passed through to the API untouched)
  - City ids from cities.py

Some cities appear in more than one market (san-jose, milwaukee, norfolk,
tacoma, ...). Lookups walk MARKET_TABLE in order and the first market that
lists the city wins.

Secondary markets carry no DMA code or search radius and are only reported
through get_all_market_ids(); resolution never returns them.
"""

from __future__ import annotations

from dataclasses import dataclass

from services.geo.resolver.cities import Coordinates


@dataclass(frozen=True)
class MarketRecord:
    """One Ticketmaster search market."""

    id: str                     # Ticketmaster market id
    name: str                   # Human-readable region name
    dma_id: str                 # Designated Market Area code
    cities: tuple[str, ...]     # City ids belonging to this market
    primary_city: str           # Canonical city id for the market
    coordinates: Coordinates    # Market centroid
    radius: int                 # Recommended search radius in miles


@dataclass(frozen=True)
class SecondaryMarket:
    id: str
    name: str
    cities: tuple[str, ...]
    coordinates: Coordinates


def _market(
    market_id: str,
    name: str,
    dma_id: str,
    cities: tuple[str, ...],
    primary_city: str,
    lat: float,
    lng: float,
    radius: int,
) -> MarketRecord:
    return MarketRecord(
        id=market_id,
        name=name,
        dma_id=dma_id,
        cities=cities,
        primary_city=primary_city,
        coordinates=Coordinates(lat=lat, lng=lng),
        radius=radius,
    )


# ======================================================================
# Primary markets
# ======================================================================

MARKET_TABLE: tuple[MarketRecord, ...] = (
    _market("1", "Atlanta", "524", ("atlanta", "columbus-ga"), "atlanta",
            33.7490, -84.3880, 40),
    _market("2", "Baltimore/Washington", "511", ("baltimore", "washington-dc"), "washington-dc",
            38.9072, -77.0369, 45),
    _market("3", "Boston", "506", ("boston",), "boston",
            42.3601, -71.0589, 40),
    _market("4", "Buffalo/Rochester", "514", ("buffalo", "rochester"), "buffalo",
            42.8864, -78.8784, 35),
    _market("6", "Charlotte/Greensboro", "517", ("charlotte", "winston-salem"), "charlotte",
            35.2271, -80.8431, 40),
    _market("7", "Cleveland", "510", ("cleveland", "toledo"), "cleveland",
            41.4993, -81.6944, 35),
    _market("8", "Chicago", "602", ("chicago", "milwaukee"), "chicago",
            41.8781, -87.6298, 50),
    _market("9", "Columbus", "535", ("columbus",), "columbus",
            39.9612, -82.9988, 35),
    _market("10", "Twin Cities", "613", ("minneapolis", "st-paul"), "minneapolis",
            44.9778, -93.2650, 40),
    _market("11", "Dallas/Fort Worth", "623",
            ("dallas", "fort-worth", "arlington", "plano", "garland", "irving"), "dallas",
            32.7767, -96.7970, 50),
    _market("12", "Denver", "751", ("denver", "colorado-springs"), "denver",
            39.7392, -104.9903, 40),
    _market("13", "Detroit", "505", ("detroit",), "detroit",
            42.3314, -83.0458, 40),
    _market("14", "Indianapolis", "527", ("indianapolis", "fort-wayne"), "indianapolis",
            39.7684, -86.1581, 35),
    _market("15", "Jacksonville", "561", ("jacksonville",), "jacksonville",
            30.3322, -81.6557, 35),
    _market("16", "Kansas City", "616", ("kansas-city",), "kansas-city",
            39.0997, -94.5786, 35),
    _market("17", "Phoenix", "753",
            ("phoenix", "mesa", "scottsdale", "glendale", "chandler", "gilbert", "tucson"),
            "phoenix", 33.4484, -112.0740, 50),
    _market("18", "Houston", "618", ("houston",), "houston",
            29.7604, -95.3698, 45),
    _market("19", "Louisville", "529", ("louisville", "lexington"), "louisville",
            38.2527, -85.7585, 35),
    _market("20", "Las Vegas", "839", ("las-vegas", "henderson", "north-las-vegas"), "las-vegas",
            36.1699, -115.1398, 35),
    _market("21", "Miami/Fort Lauderdale", "528", ("miami", "hialeah"), "miami",
            25.7617, -80.1918, 40),
    _market("22", "Memphis", "640", ("memphis",), "memphis",
            35.1495, -90.0490, 35),
    _market("23", "Milwaukee", "617", ("milwaukee", "madison"), "milwaukee",
            43.0389, -87.9065, 35),
    _market("24", "Nashville", "659", ("nashville", "knoxville"), "nashville",
            36.1627, -86.7816, 40),
    _market("25", "New Orleans", "622", ("new-orleans", "baton-rouge"), "new-orleans",
            29.9511, -90.0715, 35),
    _market("26", "San Francisco Bay Area", "807",
            ("san-francisco", "san-jose", "oakland", "fremont"), "san-francisco",
            37.7749, -122.4194, 50),
    _market("27", "Los Angeles", "803",
            ("los-angeles", "long-beach", "anaheim", "santa-ana", "riverside",
             "san-bernardino", "oxnard", "fontana"),
            "los-angeles", 34.0522, -118.2437, 60),
    _market("28", "Oklahoma City", "650", ("oklahoma-city",), "oklahoma-city",
            35.4676, -97.5164, 35),
    _market("29", "Philadelphia", "504", ("philadelphia",), "philadelphia",
            39.9526, -75.1652, 40),
    _market("31", "Pittsburgh", "508", ("pittsburgh",), "pittsburgh",
            40.4406, -79.9959, 35),
    _market("32", "Portland", "820", ("portland", "spokane", "tacoma"), "portland",
            45.5152, -122.6784, 40),
    _market("33", "Raleigh/Durham", "560", ("raleigh", "durham", "fayetteville"), "raleigh",
            35.7796, -78.6382, 35),
    _market("34", "Reno", "811", ("reno",), "reno",
            39.5296, -119.8138, 30),
    _market("35", "New York", "501", ("new-york", "newark", "jersey-city"), "new-york",
            40.7128, -74.0060, 60),
    _market("36", "Sacramento", "862", ("sacramento", "stockton", "modesto"), "sacramento",
            38.5816, -121.4944, 40),
    _market("37", "San Diego", "825", ("san-diego", "chula-vista"), "san-diego",
            32.7157, -117.1611, 35),
    _market("38", "Richmond", "556", ("richmond", "norfolk", "virginia-beach", "chesapeake"),
            "richmond", 37.5407, -77.4360, 40),
    _market("41", "San Jose", "807", ("san-jose",), "san-jose",
            37.3382, -121.8863, 30),
    _market("44", "Orlando", "534", ("orlando",), "orlando",
            28.5383, -81.3792, 35),
    _market("45", "St. Louis", "609", ("st-louis",), "st-louis",
            38.6270, -90.1994, 35),
    _market("46", "Tampa/St. Petersburg", "539", ("tampa", "st-petersburg"), "tampa",
            27.9506, -82.4572, 35),
    _market("48", "Norfolk/Virginia Beach", "544", ("norfolk", "virginia-beach", "chesapeake"),
            "virginia-beach", 36.8529, -75.9780, 35),
    _market("49", "Seattle", "819", ("seattle", "tacoma", "spokane"), "seattle",
            47.6062, -122.3321, 45),
)


# ======================================================================
# Secondary markets
# ======================================================================

def _secondary(market_id: str, name: str, cities: tuple[str, ...], lat: float, lng: float):
    return SecondaryMarket(
        id=market_id, name=name, cities=cities, coordinates=Coordinates(lat=lat, lng=lng),
    )


SECONDARY_MARKETS: tuple[SecondaryMarket, ...] = (
    _secondary("50", "Austin", ("austin",), 30.2672, -97.7431),
    _secondary("52", "Tucson", ("tucson",), 32.2226, -110.9747),
    _secondary("53", "Honolulu", ("honolulu",), 21.3099, -157.8581),
    _secondary("54", "Bakersfield", ("bakersfield",), 35.3733, -119.0187),
    _secondary("55", "Fresno", ("fresno",), 36.7378, -119.7871),
    _secondary("56", "El Paso", ("el-paso",), 31.7619, -106.4850),
    _secondary("57", "Corpus Christi", ("corpus-christi",), 27.8006, -97.3964),
    _secondary("58", "Wichita", ("wichita",), 37.6872, -97.3301),
    _secondary("59", "San Antonio", ("san-antonio", "laredo"), 29.4241, -98.4936),
    _secondary("60", "Albuquerque", ("albuquerque",), 35.0844, -106.6504),
    _secondary("61", "Omaha", ("omaha", "lincoln"), 41.2565, -95.9345),
    _secondary("62", "Lexington", ("lexington",), 38.0406, -84.5037),
    _secondary("63", "Anchorage", ("anchorage",), 61.2181, -149.9003),
    _secondary("64", "Lubbock", ("lubbock",), 33.5779, -101.8552),
    _secondary("65", "Baton Rouge", ("baton-rouge",), 30.4515, -91.1871),
    _secondary("66", "Boise", ("boise",), 43.6150, -116.2023),
    _secondary("67", "Birmingham", ("birmingham",), 33.5186, -86.8104),
    _secondary("68", "Des Moines", ("des-moines",), 41.5868, -93.6250),
)
