"""Factory helpers that assemble providers in their fixed priority order."""

from __future__ import annotations

from typing import List

import requests

from georoute import config
from georoute.providers.base import GeocodingProvider, RoutingProvider
from georoute.providers.google import GoogleGeocoder, GoogleRoutesRouter
from georoute.providers.http import build_session
from georoute.providers.nominatim import NominatimGeocoder
from georoute.providers.openrouteservice import OpenRouteServiceRouter
from georoute.rate_limit import MinIntervalLimiter
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="providers/factory")


def build_geocoders(
    settings: config.Settings | None = None,
    session: requests.Session | None = None,
    limiter: MinIntervalLimiter | None = None,
) -> List[GeocodingProvider]:
    """Commercial geocoder first, community geocoder second."""
    settings = settings or config.settings
    session = session or build_session(settings)
    if limiter is None:
        limiter = MinIntervalLimiter(settings.nominatim_min_interval_seconds)

    if not settings.google_maps_api_key:
        logger.info("Google Maps key not configured; geocoding goes straight to Nominatim")

    return [
        GoogleGeocoder(
            session,
            settings.google_maps_api_key,
            url=settings.google_geocode_url,
            country=settings.country,
            language=settings.language,
            timeout=settings.provider_timeout_seconds,
        ),
        NominatimGeocoder(
            session,
            user_agent=settings.nominatim_user_agent,
            limiter=limiter,
            url=settings.nominatim_url,
            country=settings.country,
            timeout=settings.provider_timeout_seconds,
        ),
    ]


def build_routers(
    settings: config.Settings | None = None,
    session: requests.Session | None = None,
) -> List[RoutingProvider]:
    """Traffic-aware commercial router first, open router second."""
    settings = settings or config.settings
    session = session or build_session(settings)

    configured = [
        name
        for name, key in (
            ("google", settings.google_maps_api_key),
            ("openrouteservice", settings.openrouteservice_api_key),
        )
        if key
    ]
    logger.info("Routing providers configured: %s", ", ".join(configured) or "none (great-circle only)")

    return [
        GoogleRoutesRouter(
            session,
            settings.google_maps_api_key,
            url=settings.google_routes_url,
            timeout=settings.provider_timeout_seconds,
        ),
        OpenRouteServiceRouter(
            session,
            settings.openrouteservice_api_key,
            url=settings.openrouteservice_url,
            timeout=settings.provider_timeout_seconds,
        ),
    ]
