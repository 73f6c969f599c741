"""Shared response helpers for the geo routers."""

from fastapi import HTTPException, Request
from starlette.responses import JSONResponse

from services.geo.resolver import CityRecord, GeoResolver, MarketRecord, format_city_display


def get_resolver(request: Request) -> GeoResolver:
    return request.app.state.resolver


def envelope(request: Request, data) -> dict:
    return {"success": True, "data": data, "requestId": request.state.request_id}


def error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": request.state.request_id,
        },
    )


def not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


def city_payload(city: CityRecord) -> dict:
    return {
        "id": city.id,
        "name": city.name,
        "displayName": city.display_name,
        "label": format_city_display(city),
        "coordinates": {"lat": city.coordinates.lat, "lng": city.coordinates.lng},
        "radius": city.radius,
        "population": city.population,
        "state": city.state,
        "timezone": city.timezone,
    }


def market_payload(market: MarketRecord) -> dict:
    return {
        "id": market.id,
        "name": market.name,
        "dmaId": market.dma_id,
        "cities": list(market.cities),
        "primaryCity": market.primary_city,
        "coordinates": {"lat": market.coordinates.lat, "lng": market.coordinates.lng},
        "radius": market.radius,
    }
