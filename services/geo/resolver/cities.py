"""
City reference table for nearest-city detection.

Each city defines:
  - id (slug), name, display name ("City, ST")
  - centroid coordinates
  - recommended metro search radius in miles
  - population (city proper; used for major-metro ranking only)
  - two-letter state code and IANA timezone

Table order is significant: detection breaks distance ties in favour of the
earlier row, and New York (row 0) is what a scan over NaN distances settles on.

Every city id referenced by a market in markets.py must exist here.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    """A WGS84 point in decimal degrees."""
    lat: float
    lng: float


@dataclass(frozen=True)
class CityRecord:
    id: str
    name: str
    display_name: str
    coordinates: Coordinates
    radius: int  # miles
    population: int
    state: str
    timezone: str


def _city(
    city_id: str,
    name: str,
    state: str,
    lat: float,
    lng: float,
    radius: int,
    population: int,
    timezone: str,
) -> CityRecord:
    return CityRecord(
        id=city_id,
        name=name,
        display_name=f"{name}, {state}",
        coordinates=Coordinates(lat=lat, lng=lng),
        radius=radius,
        population=population,
        state=state,
        timezone=timezone,
    )


_ET = "America/New_York"
_CT = "America/Chicago"
_MT = "America/Denver"
_PT = "America/Los_Angeles"
_AZ = "America/Phoenix"


# ---------------------------------------------------------------------------
# City table
# ---------------------------------------------------------------------------

CITY_TABLE: tuple[CityRecord, ...] = (
    # Top metros
    _city("new-york", "New York", "NY", 40.7128, -74.0060, 30, 8_336_817, _ET),
    _city("los-angeles", "Los Angeles", "CA", 34.0522, -118.2437, 35, 3_898_747, _PT),
    _city("chicago", "Chicago", "IL", 41.8781, -87.6298, 25, 2_746_388, _CT),
    _city("houston", "Houston", "TX", 29.7604, -95.3698, 30, 2_304_580, _CT),
    _city("phoenix", "Phoenix", "AZ", 33.4484, -112.0740, 25, 1_608_139, _AZ),
    _city("philadelphia", "Philadelphia", "PA", 39.9526, -75.1652, 20, 1_603_797, _ET),
    _city("san-antonio", "San Antonio", "TX", 29.4241, -98.4936, 20, 1_434_625, _CT),
    _city("san-diego", "San Diego", "CA", 32.7157, -117.1611, 25, 1_386_932, _PT),
    _city("dallas", "Dallas", "TX", 32.7767, -96.7970, 30, 1_304_379, _CT),
    _city("san-jose", "San Jose", "CA", 37.3382, -121.8863, 25, 1_013_240, _PT),
    _city("atlanta", "Atlanta", "GA", 33.7490, -84.3880, 30, 498_715, _ET),
    _city("miami", "Miami", "FL", 25.7617, -80.1918, 25, 442_241, _ET),
    _city("denver", "Denver", "CO", 39.7392, -104.9903, 25, 715_522, _MT),
    _city("seattle", "Seattle", "WA", 47.6062, -122.3321, 25, 737_015, _PT),
    _city("las-vegas", "Las Vegas", "NV", 36.1699, -115.1398, 20, 641_903, _PT),

    # Large cities
    _city("austin", "Austin", "TX", 30.2672, -97.7431, 25, 961_855, _CT),
    _city("jacksonville", "Jacksonville", "FL", 30.3322, -81.6557, 25, 949_611, _ET),
    _city("fort-worth", "Fort Worth", "TX", 32.7555, -97.3308, 20, 918_915, _CT),
    _city("columbus", "Columbus", "OH", 39.9612, -82.9988, 20, 905_748, _ET),
    _city("indianapolis", "Indianapolis", "IN", 39.7684, -86.1581, 20, 887_642,
          "America/Indiana/Indianapolis"),
    _city("charlotte", "Charlotte", "NC", 35.2271, -80.8431, 25, 874_579, _ET),
    _city("san-francisco", "San Francisco", "CA", 37.7749, -122.4194, 25, 873_965, _PT),
    _city("washington-dc", "Washington", "DC", 38.9072, -77.0369, 25, 689_545, _ET),
    _city("nashville", "Nashville", "TN", 36.1627, -86.7816, 25, 689_447, _CT),
    _city("oklahoma-city", "Oklahoma City", "OK", 35.4676, -97.5164, 25, 681_054, _CT),
    _city("el-paso", "El Paso", "TX", 31.7619, -106.4850, 20, 678_815, _MT),
    _city("boston", "Boston", "MA", 42.3601, -71.0589, 25, 675_647, _ET),
    _city("portland", "Portland", "OR", 45.5152, -122.6784, 25, 652_503, _PT),
    _city("detroit", "Detroit", "MI", 42.3314, -83.0458, 25, 639_111, "America/Detroit"),
    _city("memphis", "Memphis", "TN", 35.1495, -90.0490, 20, 633_104, _CT),
    _city("louisville", "Louisville", "KY", 38.2527, -85.7585, 20, 617_638,
          "America/Kentucky/Louisville"),
    _city("baltimore", "Baltimore", "MD", 39.2904, -76.6122, 20, 585_708, _ET),
    _city("milwaukee", "Milwaukee", "WI", 43.0389, -87.9065, 20, 577_222, _CT),
    _city("albuquerque", "Albuquerque", "NM", 35.0844, -106.6504, 20, 564_559, _MT),
    _city("tucson", "Tucson", "AZ", 32.2226, -110.9747, 20, 542_629, _AZ),
    _city("fresno", "Fresno", "CA", 36.7378, -119.7871, 20, 542_107, _PT),
    _city("sacramento", "Sacramento", "CA", 38.5816, -121.4944, 20, 524_943, _PT),
    _city("kansas-city", "Kansas City", "MO", 39.0997, -94.5786, 25, 508_090, _CT),
    _city("mesa", "Mesa", "AZ", 33.4152, -111.8315, 15, 504_258, _AZ),

    # Mid-sized cities
    _city("omaha", "Omaha", "NE", 41.2565, -95.9345, 20, 486_051, _CT),
    _city("colorado-springs", "Colorado Springs", "CO", 38.8339, -104.8214, 20, 478_961, _MT),
    _city("raleigh", "Raleigh", "NC", 35.7796, -78.6382, 20, 467_665, _ET),
    _city("long-beach", "Long Beach", "CA", 33.7701, -118.1937, 15, 466_742, _PT),
    _city("virginia-beach", "Virginia Beach", "VA", 36.8529, -75.9780, 20, 459_470, _ET),
    _city("oakland", "Oakland", "CA", 37.8044, -122.2712, 15, 440_646, _PT),
    _city("minneapolis", "Minneapolis", "MN", 44.9778, -93.2650, 25, 429_954, _CT),
    _city("bakersfield", "Bakersfield", "CA", 35.3733, -119.0187, 20, 403_455, _PT),
    _city("wichita", "Wichita", "KS", 37.6872, -97.3301, 20, 397_532, _CT),
    _city("arlington", "Arlington", "TX", 32.7357, -97.1081, 15, 394_266, _CT),
    _city("tampa", "Tampa", "FL", 27.9506, -82.4572, 25, 384_959, _ET),
    _city("new-orleans", "New Orleans", "LA", 29.9511, -90.0715, 20, 383_997, _CT),
    _city("cleveland", "Cleveland", "OH", 41.4993, -81.6944, 20, 372_624, _ET),
    _city("honolulu", "Honolulu", "HI", 21.3099, -157.8581, 20, 350_964, "Pacific/Honolulu"),
    _city("anaheim", "Anaheim", "CA", 33.8366, -117.9143, 15, 346_824, _PT),
    _city("lexington", "Lexington", "KY", 38.0406, -84.5037, 20, 322_570, _ET),
    _city("stockton", "Stockton", "CA", 37.9577, -121.2908, 15, 320_804, _PT),
    _city("henderson", "Henderson", "NV", 36.0395, -114.9817, 15, 320_189, _PT),
    _city("corpus-christi", "Corpus Christi", "TX", 27.8006, -97.3964, 20, 317_863, _CT),
    _city("riverside", "Riverside", "CA", 33.9806, -117.3755, 15, 314_998, _PT),
    _city("newark", "Newark", "NJ", 40.7357, -74.1724, 10, 311_549, _ET),
    _city("st-paul", "St. Paul", "MN", 44.9537, -93.0900, 15, 311_527, _CT),
    _city("santa-ana", "Santa Ana", "CA", 33.7455, -117.8677, 15, 310_227, _PT),
    _city("orlando", "Orlando", "FL", 28.5383, -81.3792, 25, 307_573, _ET),
    _city("pittsburgh", "Pittsburgh", "PA", 40.4406, -79.9959, 20, 302_971, _ET),
    _city("st-louis", "St. Louis", "MO", 38.6270, -90.1994, 25, 301_578, _CT),
    _city("jersey-city", "Jersey City", "NJ", 40.7178, -74.0431, 10, 292_449, _ET),
    _city("anchorage", "Anchorage", "AK", 61.2181, -149.9003, 25, 291_247, "America/Anchorage"),
    _city("lincoln", "Lincoln", "NE", 40.8136, -96.7026, 15, 291_082, _CT),
    _city("plano", "Plano", "TX", 33.0198, -96.6989, 15, 285_494, _CT),
    _city("durham", "Durham", "NC", 35.9940, -78.8986, 15, 283_506, _ET),
    _city("buffalo", "Buffalo", "NY", 42.8864, -78.8784, 20, 278_349, _ET),
    _city("chandler", "Chandler", "AZ", 33.3062, -111.8413, 10, 275_987, _AZ),
    _city("chula-vista", "Chula Vista", "CA", 32.6401, -117.0842, 10, 275_487, _PT),
    _city("toledo", "Toledo", "OH", 41.6528, -83.5379, 15, 270_871, "America/Detroit"),
    _city("madison", "Madison", "WI", 43.0731, -89.4012, 15, 269_840, _CT),
    _city("gilbert", "Gilbert", "AZ", 33.3528, -111.7890, 10, 267_918, _AZ),
    _city("reno", "Reno", "NV", 39.5296, -119.8138, 20, 264_165, _PT),
    _city("fort-wayne", "Fort Wayne", "IN", 41.0793, -85.1394, 15, 263_886,
          "America/Indiana/Indianapolis"),
    _city("north-las-vegas", "North Las Vegas", "NV", 36.1989, -115.1175, 10, 262_527, _PT),
    _city("st-petersburg", "St. Petersburg", "FL", 27.7676, -82.6403, 15, 258_308, _ET),
    _city("lubbock", "Lubbock", "TX", 33.5779, -101.8552, 20, 257_141, _CT),
    _city("irving", "Irving", "TX", 32.8140, -96.9489, 10, 256_684, _CT),
    _city("laredo", "Laredo", "TX", 27.5306, -99.4803, 15, 255_205, _CT),
    _city("winston-salem", "Winston-Salem", "NC", 36.0999, -80.2442, 15, 249_545, _ET),
    _city("chesapeake", "Chesapeake", "VA", 36.7682, -76.2875, 15, 249_422, _ET),
    _city("glendale", "Glendale", "AZ", 33.5387, -112.1860, 10, 248_325, _AZ),
    _city("garland", "Garland", "TX", 32.9126, -96.6389, 10, 246_018, _CT),
    _city("scottsdale", "Scottsdale", "AZ", 33.4942, -111.9261, 10, 241_361, _AZ),
    _city("norfolk", "Norfolk", "VA", 36.8508, -76.2859, 15, 238_005, _ET),
    _city("boise", "Boise", "ID", 43.6150, -116.2023, 20, 235_684, "America/Boise"),
    _city("fremont", "Fremont", "CA", 37.5485, -121.9886, 15, 230_504, _PT),
    _city("spokane", "Spokane", "WA", 47.6588, -117.4260, 20, 228_989, _PT),
    _city("baton-rouge", "Baton Rouge", "LA", 30.4515, -91.1871, 20, 227_470, _CT),
    _city("richmond", "Richmond", "VA", 37.5407, -77.4360, 20, 226_610, _ET),
    _city("hialeah", "Hialeah", "FL", 25.8576, -80.2781, 10, 223_109, _ET),
    _city("san-bernardino", "San Bernardino", "CA", 34.1083, -117.2898, 15, 222_101, _PT),
    _city("tacoma", "Tacoma", "WA", 47.2529, -122.4443, 15, 219_346, _PT),
    _city("modesto", "Modesto", "CA", 37.6391, -120.9969, 15, 218_464, _PT),
    _city("des-moines", "Des Moines", "IA", 41.5868, -93.6250, 20, 214_133, _CT),
    _city("rochester", "Rochester", "NY", 43.1566, -77.6088, 15, 211_328, _ET),
    _city("fayetteville", "Fayetteville", "NC", 35.0527, -78.8784, 15, 208_501, _ET),
    _city("fontana", "Fontana", "CA", 34.0922, -117.4350, 10, 208_393, _PT),
    _city("columbus-ga", "Columbus", "GA", 32.4610, -84.9877, 15, 206_922, _ET),
    _city("little-rock", "Little Rock", "AR", 34.7465, -92.2896, 20, 202_591, _CT),
    _city("oxnard", "Oxnard", "CA", 34.1975, -119.1771, 15, 202_063, _PT),
    _city("birmingham", "Birmingham", "AL", 33.5186, -86.8104, 20, 200_733, _CT),
    _city("salt-lake-city", "Salt Lake City", "UT", 40.7608, -111.8910, 25, 199_723, _MT),

    # Regional centers (state coverage)
    _city("sioux-falls", "Sioux Falls", "SD", 43.5446, -96.7311, 20, 192_517, _CT),
    _city("providence", "Providence", "RI", 41.8240, -71.4128, 15, 190_934, _ET),
    _city("hartford", "Hartford", "CT", 41.7658, -72.6734, 15, 121_054, _ET),
    _city("knoxville", "Knoxville", "TN", 35.9606, -83.9207, 20, 190_740, _ET),
    _city("jackson", "Jackson", "MS", 32.2988, -90.1848, 20, 153_701, _CT),
    _city("charleston", "Charleston", "SC", 32.7765, -79.9311, 20, 150_227, _ET),
    _city("fargo", "Fargo", "ND", 46.8772, -96.7898, 20, 125_990, _CT),
    _city("billings", "Billings", "MT", 45.7833, -108.5007, 25, 117_116, _MT),
    _city("manchester", "Manchester", "NH", 42.9956, -71.4548, 15, 115_644, _ET),
    _city("wilmington", "Wilmington", "DE", 39.7391, -75.5398, 15, 70_898, _ET),
    _city("portland-me", "Portland", "ME", 43.6591, -70.2568, 15, 68_408, _ET),
    _city("cheyenne", "Cheyenne", "WY", 41.1400, -104.8197, 20, 65_132, _MT),
    _city("charleston-wv", "Charleston", "WV", 38.3498, -81.6326, 15, 48_864, _ET),
    _city("burlington", "Burlington", "VT", 44.4759, -73.2121, 15, 44_743, _ET),
)


CITIES_BY_ID: dict[str, CityRecord] = {city.id: city for city in CITY_TABLE}
