"""
Redis-backed event search cache, keyed per search area.

Cache key format:  events:{source}:{lat}:{lng}:{radius}:{timeframe}:{market}
TTL:               300 seconds by default (EVENT_CACHE_TTL_S)

Coordinates are rounded to 2 decimals (~0.7 miles) so small map pans reuse
the same entry. The market segment is "geo" when the search ran on
latlong/radius instead of a Ticketmaster market id.

The normalized event list is cached, not the raw upstream pages.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULT_TTL_SECONDS = 300


def _cache_key(
    source: str,
    lat: float,
    lng: float,
    radius: float,
    timeframe: str,
    market_id: str | None = None,
) -> str:
    """Build the Redis key for one source + search area."""
    return (
        f"events:{source}:{lat:.2f}:{lng:.2f}:{round(radius)}:{timeframe}:"
        f"{market_id or 'geo'}"
    )


class EventCache:
    """
    Redis-backed event cache.

    Usage:
        cache = EventCache(redis_client)
        events = await cache.get("ticketmaster", 40.71, -74.0, 25, "24h", "35")
        if events is None:
            events = await fetch(...)
            await cache.set("ticketmaster", 40.71, -74.0, 25, "24h", "35", events)
    """

    def __init__(self, redis, ttl_seconds: int = _DEFAULT_TTL_SECONDS) -> None:
        """
        Args:
            redis:       An async Redis client (redis.asyncio compatible).
                         May be None, in which case every get is a miss.
            ttl_seconds: Entry lifetime.
        """
        self._redis = redis
        self._ttl = ttl_seconds

    async def get(
        self,
        source: str,
        lat: float,
        lng: float,
        radius: float,
        timeframe: str,
        market_id: str | None = None,
    ) -> list[dict[str, Any]] | None:
        """Return cached events for the area, or None on miss / unavailable."""
        if self._redis is None:
            return None

        key = _cache_key(source, lat, lng, radius, timeframe, market_id)
        try:
            raw = await self._redis.get(key)
            if raw is None:
                logger.debug("Event cache miss: %s", key)
                return None
            logger.debug("Event cache hit: %s", key)
            return json.loads(raw)
        except Exception:
            logger.warning("Event cache GET failed for key=%s", key, exc_info=True)
            return None

    async def set(
        self,
        source: str,
        lat: float,
        lng: float,
        radius: float,
        timeframe: str,
        market_id: str | None,
        events: list[dict[str, Any]],
    ) -> None:
        """Write the event list with the configured TTL."""
        if self._redis is None:
            return

        key = _cache_key(source, lat, lng, radius, timeframe, market_id)
        try:
            await self._redis.set(key, json.dumps(events), ex=self._ttl)
            logger.debug("Events cached: key=%s count=%d ttl=%ds", key, len(events), self._ttl)
        except Exception:
            logger.warning("Event cache SET failed for key=%s", key, exc_info=True)
