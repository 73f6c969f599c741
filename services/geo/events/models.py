"""
Request/response schemas for event search.

A search is anchored on either a map center or the visible map bounds.
When only bounds are sent, the center is the bounds midpoint and the radius
is derived from the bounds extent (see compute_center_and_radius).
"""

from __future__ import annotations

import math
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

# Supported search windows
TIMEFRAMES: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "6h": timedelta(hours=6),
    "12h": timedelta(hours=12),
    "24h": timedelta(hours=24),
    "48h": timedelta(hours=48),
    "7d": timedelta(days=7),
}

DEFAULT_TIMEFRAME = "24h"
DEFAULT_RADIUS_MILES = 25.0
MIN_RADIUS_MILES = 1
MAX_RADIUS_MILES = 100

# Rough miles per degree of latitude
_MILES_PER_DEGREE = 69
# Padding applied to the bounds half-extent
_BOUNDS_PADDING = 1.1


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


class Bounds(BaseModel):
    north: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    south: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    east: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    west: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    @model_validator(mode="after")
    def _north_of_south(self) -> "Bounds":
        if self.north < self.south:
            raise ValueError("bounds.north must be >= bounds.south")
        return self


class EventSearchRequest(BaseModel):
    """POST /events/search body."""

    center: LatLng | None = None
    bounds: Bounds | None = None
    radius: float | None = Field(default=None, gt=0, le=500, allow_inf_nan=False)
    timeframe: str = DEFAULT_TIMEFRAME
    sources: list[str] = Field(default_factory=lambda: ["ticketmaster"], min_length=1, max_length=10)
    # Fallback search when the nearest city is more than 75 miles away
    prefer_large_metros: bool = True
    enable_fallback: bool = True

    @field_validator("timeframe")
    @classmethod
    def _known_timeframe(cls, v: str) -> str:
        if v not in TIMEFRAMES:
            raise ValueError(f"timeframe must be one of {sorted(TIMEFRAMES)}")
        return v

    @field_validator("sources")
    @classmethod
    def _normalise_sources(cls, v: list[str]) -> list[str]:
        seen: list[str] = []
        for source in v:
            name = source.strip().lower()
            if name and name not in seen:
                seen.append(name)
        if not seen:
            raise ValueError("sources must name at least one event source")
        return seen

    @model_validator(mode="after")
    def _needs_anchor(self) -> "EventSearchRequest":
        if self.center is None and self.bounds is None:
            raise ValueError("Missing center/bounds: send the map center or bounds")
        return self


class NormalizedEvent(BaseModel):
    """One event in the shape the map layer stores and renders."""

    external_id: str
    source: str
    title: str
    description: str = ""
    event_url: str | None = None
    image_url: str | None = None
    venue_name: str | None = None
    venue_address: str = ""
    lat: float
    lng: float
    start_date: str | None = None
    end_date: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    genre: str | None = None
    classification: str | None = None


class SourceReport(BaseModel):
    processed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)


class EventSearchResult(BaseModel):
    events: list[NormalizedEvent]
    sources: SourceReport
    center: LatLng
    radius: float
    timeframe: str
    city_id: str | None = None
    market_id: str | None = None
    search_strategy: str = "primary-city"
    fallback_used: bool = False
    nearest_city_distance: float | None = None
    cities_checked: int = 0

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump()


def compute_center_and_radius(
    request: EventSearchRequest,
    default_radius: float = DEFAULT_RADIUS_MILES,
) -> tuple[LatLng, float]:
    """
    Resolve the search anchor for a request.

    Center wins when present; otherwise the bounds midpoint is used. With
    bounds, the radius covers the larger half-extent plus 10% padding,
    rounded up and clamped to [1, 100] miles. A requested radius is capped
    at 100 miles, the most any source searches.
    """
    bounds = request.bounds
    if request.center is not None:
        center = request.center
    else:
        assert bounds is not None  # guaranteed by EventSearchRequest validation
        center = LatLng(
            lat=(bounds.north + bounds.south) / 2,
            lng=(bounds.east + bounds.west) / 2,
        )

    radius = request.radius if request.radius is not None else default_radius
    radius = min(radius, MAX_RADIUS_MILES)
    if bounds is not None:
        miles_per_lng = _MILES_PER_DEGREE * math.cos(center.lat * math.pi / 180)
        dy = (bounds.north - bounds.south) * _MILES_PER_DEGREE / 2
        dx = (bounds.east - bounds.west) * miles_per_lng / 2
        radius = max(MIN_RADIUS_MILES, min(MAX_RADIUS_MILES, math.ceil(max(dx, dy) * _BOUNDS_PADDING)))

    return center, radius


def timeframe_delta(timeframe: str) -> timedelta:
    """Window length for a timeframe code; unknown codes fall back to 24h."""
    return TIMEFRAMES.get(timeframe, TIMEFRAMES[DEFAULT_TIMEFRAME])
