"""
City lookup endpoints over the static city table.

GET /cities                          all cities, most populous first
GET /cities/nearest                  nearest city (strict=true rejects invalid coordinates)
GET /cities/within-radius            cities within radius miles, nearest first
GET /cities/state/{code}             cities in a state (exact, case-sensitive code)
GET /cities/major-metros             cities with population >= min_population
GET /cities/coverage                 whether a point is near any covered city
GET /cities/{city_id}                one city
GET /cities/{city_id}/search-params  Ticketmaster market id + radius for a city

Static routes are declared before /{city_id} so they are not captured by it.
"""

import math

from fastapi import APIRouter, Query, Request

from services.geo.resolver.distance import haversine_miles
from services.geo.resolver.lookup import DEFAULT_EVENT_RADIUS_MILES
from services.geo.routers._payloads import (
    city_payload,
    envelope,
    error_response,
    get_resolver,
    not_found,
)

router = APIRouter(prefix="/cities", tags=["cities"])


@router.get("")
async def list_cities(request: Request) -> dict:
    resolver = get_resolver(request)
    return envelope(request, [city_payload(c) for c in resolver.get_all_cities()])


@router.get("/nearest")
async def nearest_city(
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
    strict: bool = Query(default=False),
):
    resolver = get_resolver(request)
    if strict:
        city = resolver.try_detect_nearest_city(lat, lng)
        if city is None:
            return error_response(
                request, 422, "INVALID_COORDINATES",
                "lat must be within [-90, 90] and lng within [-180, 180].",
            )
    else:
        city = resolver.detect_nearest_city(lat, lng)
        if city is None:
            raise not_found("City")

    distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
    return envelope(request, {
        "city": city_payload(city),
        "distanceMiles": round(distance, 2) if math.isfinite(distance) else None,
    })


@router.get("/within-radius")
async def cities_within_radius(
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
    radius: float = Query(...),
) -> dict:
    resolver = get_resolver(request)
    cities = resolver.get_cities_within_radius(lat, lng, radius)
    return envelope(request, [
        {
            **city_payload(c),
            "distanceMiles": round(haversine_miles(lat, lng, c.coordinates.lat, c.coordinates.lng), 2),
        }
        for c in cities
    ])


@router.get("/state/{state_code}")
async def cities_by_state(state_code: str, request: Request) -> dict:
    resolver = get_resolver(request)
    return envelope(request, [city_payload(c) for c in resolver.get_cities_by_state(state_code)])


@router.get("/major-metros")
async def major_metros(
    request: Request,
    min_population: int = Query(default=1_000_000, ge=0),
) -> dict:
    resolver = get_resolver(request)
    return envelope(request, [city_payload(c) for c in resolver.get_major_metros(min_population)])


@router.get("/coverage")
async def coverage(
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
    max_distance: float = Query(default=DEFAULT_EVENT_RADIUS_MILES),
) -> dict:
    resolver = get_resolver(request)
    match = resolver.detect_city_with_market(lat, lng)
    return envelope(request, {
        "covered": resolver.is_within_event_radius(lat, lng, max_distance),
        "optimalRadius": resolver.get_optimal_search_radius(lat, lng),
        "nearestCity": match.city.id if match else None,
        "marketId": match.market.id if match and match.market else None,
    })


@router.get("/{city_id}")
async def get_city(city_id: str, request: Request) -> dict:
    city = get_resolver(request).get_city_by_id(city_id)
    if city is None:
        raise not_found("City")
    return envelope(request, city_payload(city))


@router.get("/{city_id}/search-params")
async def city_search_params(city_id: str, request: Request) -> dict:
    resolver = get_resolver(request)
    city = resolver.get_city_by_id(city_id)
    if city is None:
        raise not_found("City")
    params = resolver.get_ticketmaster_search_params(city)
    return envelope(request, {
        "cityId": city.id,
        "marketId": params.market_id,
        "radius": params.radius,
        "coordinates": {"lat": params.coordinates.lat, "lng": params.coordinates.lng},
    })
