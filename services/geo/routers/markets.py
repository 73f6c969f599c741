"""Ticketmaster market lookup endpoints."""

from fastapi import APIRouter, Query, Request

from services.geo.routers._payloads import envelope, get_resolver, market_payload, not_found

router = APIRouter(prefix="/markets", tags=["markets"])


@router.get("")
async def list_market_ids(request: Request) -> dict:
    return envelope(request, get_resolver(request).get_all_market_ids())


@router.get("/nearest")
async def nearest_market(
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
) -> dict:
    market = get_resolver(request).find_nearest_market(lat, lng)
    if market is None:
        raise not_found("Market")
    return envelope(request, market_payload(market))


@router.get("/for-city/{city_id}")
async def market_for_city(city_id: str, request: Request) -> dict:
    market = get_resolver(request).get_market_for_city(city_id)
    if market is None:
        raise not_found("Market")
    return envelope(request, market_payload(market))


@router.get("/{market_id}")
async def get_market(market_id: str, request: Request) -> dict:
    market = get_resolver(request).get_market_by_id(market_id)
    if market is None:
        raise not_found("Market")
    return envelope(request, market_payload(market))
