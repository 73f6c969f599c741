"""
TicketmasterSource: Discovery API v2 client with Redis caching.

Endpoint: GET https://app.ticketmaster.com/discovery/v2/events.json

Targeting:
  - When the search resolved to a Ticketmaster market, query by marketId.
  - Otherwise fall back to latlong + radius (miles, rounded, clamped 1-100).

Paging: follows page.totalPages up to max_pages (default 5), 200 events per
page. 5xx responses and network errors are retried with linear backoff;
429 raises EventSourceRateLimited immediately.

Discovery API event payload (trimmed):
  {
    "id": "vvG1zZ9...",
    "name": "Artist Live",
    "url": "https://www.ticketmaster.com/...",
    "dates": {"start": {"dateTime": "2026-10-18T01:00:00Z"}},
    "_embedded": {"venues": [{"name": ..., "location": {"latitude": "40.75", ...}}]},
    ...
  }
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any

import httpx

from services.geo.events.cache import EventCache
from services.geo.events.errors import EventSourceError, EventSourceRateLimited
from services.geo.events.models import timeframe_delta

logger = logging.getLogger(__name__)

SOURCE_NAME = "ticketmaster"

_TM_EVENTS_ENDPOINT = "https://app.ticketmaster.com/discovery/v2/events.json"

_PAGE_SIZE = 200
_DEFAULT_MAX_PAGES = 5
_RETRY_ATTEMPTS = 3
_RETRY_DELAY_S = 1.0
_API_TIMEOUT_S = 30.0

_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "Lo-Events/2.0",
    "Cache-Control": "no-cache",
}


def _iso_no_ms(dt: datetime) -> str:
    """UTC timestamp without fractional seconds, e.g. 2026-10-17T12:00:00Z."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _clamp_radius(radius: float) -> int:
    return max(1, min(100, round(radius)))


def build_search_params(
    api_key: str,
    lat: float,
    lng: float,
    radius: float,
    timeframe: str,
    market_id: str | None = None,
    now: datetime | None = None,
) -> dict[str, str]:
    """Query string for the first page of a Discovery API search."""
    start = now or datetime.now(timezone.utc)
    end = start + timeframe_delta(timeframe)

    params = {
        "apikey": api_key,
        "size": str(_PAGE_SIZE),
        "sort": "date,asc",
        "includeTest": "no",
        "startDateTime": _iso_no_ms(start),
        "endDateTime": _iso_no_ms(end),
    }
    if market_id:
        params["marketId"] = market_id
    else:
        params["latlong"] = f"{lat},{lng}"
        params["radius"] = str(_clamp_radius(radius))
        params["unit"] = "miles"
    return params


def _to_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_event(event: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Discovery API event into the NormalizedEvent shape."""
    venues = (event.get("_embedded") or {}).get("venues") or [{}]
    venue = venues[0] or {}
    address = venue.get("address") or {}
    address_parts = [
        address.get("line1"),
        address.get("line2"),
        (venue.get("city") or {}).get("name"),
        (venue.get("state") or {}).get("stateCode"),
        venue.get("postalCode"),
        (venue.get("country") or {}).get("countryCode"),
    ]
    price = (event.get("priceRanges") or [{}])[0] or {}
    classification = (event.get("classifications") or [{}])[0] or {}
    location = venue.get("location") or {}

    images = event.get("images") or []
    image_url = next((img.get("url") for img in images if (img.get("width") or 0) > 300), None)
    if image_url is None and images:
        image_url = images[0].get("url")

    dates = event.get("dates") or {}
    return {
        "external_id": event.get("id"),
        "source": SOURCE_NAME,
        "title": event.get("name") or "Untitled Event",
        "description": event.get("info") or event.get("pleaseNote") or "",
        "event_url": event.get("url"),
        "image_url": image_url,
        "venue_name": venue.get("name"),
        "venue_address": ", ".join(part for part in address_parts if part),
        "lat": _to_float(location.get("latitude")),
        "lng": _to_float(location.get("longitude")),
        "start_date": (dates.get("start") or {}).get("dateTime"),
        "end_date": (dates.get("end") or {}).get("dateTime"),
        "price_min": price.get("min"),
        "price_max": price.get("max"),
        "genre": (classification.get("genre") or {}).get("name"),
        "classification": (classification.get("segment") or {}).get("name"),
    }


def _is_usable(event: dict[str, Any]) -> bool:
    lat, lng = event.get("lat"), event.get("lng")
    if lat is None or lng is None or not (math.isfinite(lat) and math.isfinite(lng)):
        logger.debug("Dropping Ticketmaster event with invalid coordinates: %r", event.get("title"))
        return False
    if not event.get("external_id") or not event.get("title"):
        logger.debug("Dropping Ticketmaster event missing id/title: %r", event.get("title"))
        return False
    return True


class TicketmasterSource:
    """
    Ticketmaster Discovery API client.

    Usage:
        source = TicketmasterSource(api_key="...", cache=EventCache(redis))
        events = await source.fetch_events(40.7128, -74.0060, 25, "24h", market_id="35")
    """

    name = SOURCE_NAME

    def __init__(
        self,
        api_key: str,
        cache: EventCache,
        timeout_s: float = _API_TIMEOUT_S,
        max_pages: int = _DEFAULT_MAX_PAGES,
        retry_delay_s: float = _RETRY_DELAY_S,
    ) -> None:
        self._api_key = api_key
        self._cache = cache
        self._timeout_s = timeout_s
        self._max_pages = max_pages
        self._retry_delay_s = retry_delay_s

    async def fetch_events(
        self,
        lat: float,
        lng: float,
        radius: float,
        timeframe: str,
        market_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return normalized events for the search area.

        Raises:
            EventSourceRateLimited: upstream answered 429.
            EventSourceError:       missing key, non-retryable HTTP error, or
                                    retries exhausted.
        """
        cached = await self._cache.get(self.name, lat, lng, radius, timeframe, market_id)
        if cached is not None:
            return cached

        if not self._api_key:
            raise EventSourceError("TICKETMASTER_API_KEY not set", source=self.name)

        params = build_search_params(self._api_key, lat, lng, radius, timeframe, market_id)
        if market_id:
            logger.info("Ticketmaster search by marketId=%s timeframe=%s", market_id, timeframe)
        else:
            logger.info(
                "Ticketmaster search at %.4f,%.4f radius=%smi timeframe=%s",
                lat, lng, params["radius"], timeframe,
            )

        raw_events: list[dict[str, Any]] = []
        async with httpx.AsyncClient(timeout=self._timeout_s, headers=_HEADERS) as client:
            page = 0
            total_pages = 1
            while page < total_pages and page < self._max_pages:
                data = await self._get_page(client, {**params, "page": str(page)})
                page_events = (data.get("_embedded") or {}).get("events") or []
                raw_events.extend(page_events)
                logger.debug("Ticketmaster page %d: %d events", page + 1, len(page_events))

                total_pages = min((data.get("page") or {}).get("totalPages", 1), self._max_pages)
                page += 1

        events = [e for e in (normalize_event(ev) for ev in raw_events) if _is_usable(e)]
        await self._cache.set(self.name, lat, lng, radius, timeframe, market_id, events)

        logger.info("Ticketmaster fetch complete: %d usable of %d events", len(events), len(raw_events))
        return events

    async def _get_page(self, client: httpx.AsyncClient, params: dict[str, str]) -> dict[str, Any]:
        """GET one page, retrying 5xx and transport errors."""
        attempt = 0
        while True:
            try:
                resp = await client.get(_TM_EVENTS_ENDPOINT, params=params)
            except httpx.HTTPError as exc:
                if attempt < _RETRY_ATTEMPTS:
                    attempt += 1
                    logger.warning("Ticketmaster request error (attempt %d): %s", attempt, exc)
                    await asyncio.sleep(self._retry_delay_s * attempt)
                    continue
                raise EventSourceError(
                    f"Ticketmaster fetch failed: {exc}", source=self.name, status_code=None,
                ) from exc

            if resp.status_code == 429:
                retry_after = resp.headers.get("Retry-After")
                raise EventSourceRateLimited(
                    self.name,
                    retry_after_s=int(retry_after) if retry_after and retry_after.isdigit() else None,
                )

            if resp.status_code >= 500 and attempt < _RETRY_ATTEMPTS:
                attempt += 1
                logger.warning(
                    "Ticketmaster returned %d; retrying (attempt %d)", resp.status_code, attempt,
                )
                await asyncio.sleep(self._retry_delay_s * attempt)
                continue

            if resp.status_code >= 400:
                raise EventSourceError(
                    f"Ticketmaster API error: {resp.status_code}",
                    source=self.name,
                    status_code=resp.status_code,
                    retryable=resp.status_code >= 500,
                )

            try:
                return resp.json()
            except ValueError as exc:
                raise EventSourceError(
                    "Ticketmaster returned invalid JSON", source=self.name, status_code=resp.status_code,
                ) from exc
