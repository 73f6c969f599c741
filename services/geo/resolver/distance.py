"""
Great-circle distance in statute miles.

Radius inclusion checks downstream compare against this exact formula, so the
Earth radius and the degree->radian conversion are fixed here and nowhere else.

Python's math module raises on sin(inf) and sqrt(-x) where browsers quietly
return NaN. haversine_miles keeps the NaN behaviour: any non-finite
intermediate yields NaN, and a haversine term pushed outside [0, 1] (rounding,
or latitudes far outside +/-90) is clamped instead of failing.
"""

from __future__ import annotations

import math

# Mean Earth radius in statute miles
EARTH_RADIUS_MILES = 3959


def to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def is_finite_point(lat: float, lng: float) -> bool:
    """True when both coordinates are real, finite numbers."""
    try:
        return math.isfinite(lat) and math.isfinite(lng)
    except TypeError:
        return False


def is_valid_point(lat: float, lng: float) -> bool:
    """True for finite coordinates inside [-90, 90] x [-180, 180]."""
    return is_finite_point(lat, lng) and -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute haversine distance between two points in miles.

    Great-circle distance on a sphere of radius EARTH_RADIUS_MILES.

    Args:
        lat1, lng1: First point (decimal degrees)
        lat2, lng2: Second point (decimal degrees)

    Returns:
        Distance in miles, or NaN when any input is NaN/Infinity.
    """
    dlat = to_radians(lat2 - lat1)
    dlng = to_radians(lng2 - lng1)
    if not (
        is_finite_point(lat1, lat2)
        and math.isfinite(dlat)
        and math.isfinite(dlng)
    ):
        return math.nan

    a = (
        math.sin(dlat / 2) * math.sin(dlat / 2)
        + math.cos(to_radians(lat1)) * math.cos(to_radians(lat2))
        * math.sin(dlng / 2) * math.sin(dlng / 2)
    )
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c
