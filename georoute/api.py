"""HTTP API exposing geocoding and route estimation."""

import hmac
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from . import engine
from .config import settings
from .domain import GeocodingResult, RouteResult
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the configured key, if there is one."""
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(prefix="/routing", dependencies=[Depends(require_api_key)])
health_router = APIRouter()


class CoordinatesModel(BaseModel):
    """Latitude/longitude pair."""
    lat: float
    lng: float


class GeocodeResponse(BaseModel):
    """Geocoding outcome; `success` is false only when no provider knew the address."""
    success: bool
    coordinates: Optional[CoordinatesModel] = None
    error: Optional[str] = None


class RouteResponse(BaseModel):
    """Route estimate returned for every request, whichever tier produced it."""
    distance_km: float
    travel_time_minutes: float
    travel_time_minutes_no_traffic: float
    traffic_delay_minutes: float
    source: str


class RouteRequest(BaseModel):
    startPLZ: Optional[str] = None
    zielPLZ: Optional[str] = None


class GeocodeRequest(BaseModel):
    address: Optional[str] = None
    plz: Optional[str] = None


class BatchGeocodeRequest(BaseModel):
    addresses: Optional[List[str]] = Field(default=None)


def _geocode_response(result: GeocodingResult) -> GeocodeResponse:
    coords = None
    if result.coordinates is not None:
        coords = CoordinatesModel(lat=result.coordinates.lat, lng=result.coordinates.lng)
    return GeocodeResponse(success=result.success, coordinates=coords, error=result.error)


def _route_response(result: RouteResult) -> RouteResponse:
    return RouteResponse(
        distance_km=result.distance_km,
        travel_time_minutes=result.travel_time_minutes,
        travel_time_minutes_no_traffic=result.travel_time_minutes_no_traffic,
        traffic_delay_minutes=result.traffic_delay_minutes,
        source=result.source.value,
    )


@router.post("/calculate", response_model=RouteResponse)
def calculate(req: RouteRequest):
    """Estimate distance and travel time between two postal codes."""
    if not req.startPLZ or not req.zielPLZ:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="startPLZ and zielPLZ are required")

    logger.info("ROUTE_CALCULATE %s -> %s", req.startPLZ, req.zielPLZ)
    return _route_response(engine.calculate_route(req.startPLZ, req.zielPLZ))


@router.post("/geocode", response_model=GeocodeResponse)
def geocode(req: GeocodeRequest):
    """Geocode a free-text address or a bare postal code."""
    address = req.address or req.plz
    if not address:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="address or plz is required")

    logger.info("GEOCODE %s", address)
    return _geocode_response(engine.geocode(address))


@router.post("/batch-geocode", response_model=List[GeocodeResponse])
def batch_geocode(req: BatchGeocodeRequest):
    """Geocode up to `batch_max_addresses` addresses, sequentially and throttled."""
    if req.addresses is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="addresses array is required")

    limited = req.addresses[: settings.batch_max_addresses]
    logger.info("BATCH_GEOCODE count=%d (requested %d)", len(limited), len(req.addresses))
    return [_geocode_response(r) for r in engine.batch_geocode(limited)]


@health_router.get("/health")
def health():
    """Report which upstream providers are configured."""
    return {
        "status": "ok",
        "providers": {
            "google": bool(settings.google_maps_api_key),
            "nominatim": True,
            "openrouteservice": bool(settings.openrouteservice_api_key),
        },
    }
