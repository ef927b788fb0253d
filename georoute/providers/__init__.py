"""Geocoding and routing providers, tried in fixed priority order by the engine."""

from .base import GeocodingProvider, RoutingProvider
from .factory import build_geocoders, build_routers
from .google import GoogleGeocoder, GoogleRoutesRouter, parse_duration_minutes
from .http import build_session
from .nominatim import NominatimGeocoder
from .openrouteservice import OpenRouteServiceRouter

__all__ = [
    "GeocodingProvider",
    "RoutingProvider",
    "build_geocoders",
    "build_routers",
    "build_session",
    "GoogleGeocoder",
    "GoogleRoutesRouter",
    "NominatimGeocoder",
    "OpenRouteServiceRouter",
    "parse_duration_minutes",
]
