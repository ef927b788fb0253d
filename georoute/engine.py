"""Geocoding and routing resolution engine.

Coordinates come from a configurable override table, then the commercial
geocoder, then the community geocoder. Routes come from the route cache,
then the traffic-aware router, then the open router, then a great-circle
estimate. If either endpoint cannot be geocoded at all, a postal-zone
estimate is returned instead and is not cached.

Providers never raise, so the ladder below is a plain sequence of
"if not found, try the next one" checks.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Sequence

from georoute import config
from georoute.cache import (
    CoordinateCache,
    InMemoryCoordinateCache,
    RouteCache,
    build_route_cache,
    coordinate_key,
    route_key,
)
from georoute.domain import Coordinates, GeocodingResult, LookupStatus, ProviderResult, RouteResult
from georoute.geometry import great_circle_estimate, is_plausible_germany, postal_zone_estimate
from georoute.overrides import CoordinateOverrides
from georoute.providers import GeocodingProvider, RoutingProvider, build_geocoders, build_routers, build_session
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="engine")

ADDRESS_NOT_FOUND = "address not found"


class RoutingEngine:
    """Owns both caches and walks the provider fallback ladder."""

    def __init__(
        self,
        geocoders: Sequence[GeocodingProvider],
        routers: Sequence[RoutingProvider],
        *,
        coordinate_cache: CoordinateCache | None = None,
        route_cache: RouteCache | None = None,
        overrides: CoordinateOverrides | None = None,
        settings: config.Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or config.settings
        self.geocoders = list(geocoders)
        self.routers = list(routers)
        self.coordinate_cache = coordinate_cache if coordinate_cache is not None else InMemoryCoordinateCache(
            max_entries=self.settings.geocode_cache_max_entries
        )
        self.route_cache = route_cache if route_cache is not None else build_route_cache(self.settings)
        self.overrides = overrides if overrides is not None else CoordinateOverrides(
            self.settings.coordinate_overrides
        )
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Geocoding
    # ------------------------------------------------------------------

    def _geocode_with(self, provider: GeocodingProvider, address: str) -> ProviderResult[Coordinates]:
        """Ask one provider, consulting and populating its tagged cache slot."""
        key = coordinate_key(provider.cache_tag, address)
        cached = self.coordinate_cache.get(key)
        if cached is not None:
            logger.debug("Coordinate cache hit", extra={"key": key})
            return ProviderResult.hit(cached)

        result = provider.geocode(address)
        if result.found:
            self.coordinate_cache.set(key, result.value)
        elif result.status is LookupStatus.UNAVAILABLE:
            logger.debug("Skipping geocoder %s: %s", provider.name, result.reason)
        return result

    def geocode(self, address: str) -> GeocodingResult:
        """Resolve an address; only fails when every provider comes up empty."""
        override = self.overrides.match(address)
        if override is not None:
            return GeocodingResult.found(override)

        for provider in self.geocoders:
            result = self._geocode_with(provider, address)
            if result.found:
                return GeocodingResult.found(result.value)

        logger.info("Address could not be geocoded", extra={"address": address})
        return GeocodingResult.not_found(ADDRESS_NOT_FOUND)

    def batch_geocode(self, addresses: Sequence[str]) -> List[GeocodingResult]:
        """Geocode sequentially with a fixed pause between calls, cache hit or not."""
        results: List[GeocodingResult] = []
        for i, address in enumerate(addresses):
            if i > 0 and self.settings.batch_delay_seconds > 0:
                self._sleep(self.settings.batch_delay_seconds)
            results.append(self.geocode(address))
        return results

    def geocode_structured(self, street: str = "", postal_code: str = "", city: str = "") -> GeocodingResult:
        """Geocode address parts, widening the query until a result lands inside Germany.

        Tries street + postal code + city, then street + postal code, then
        postal code + city, then the postal code alone. The country qualifier
        is added by each geocoder.
        """
        street, postal_code, city = (part.strip() for part in (street or "", postal_code or "", city or ""))
        candidates = [
            ", ".join(p for p in (street, " ".join(p for p in (postal_code, city) if p)) if p),
            ", ".join(p for p in (street, postal_code) if p),
            " ".join(p for p in (postal_code, city) if p),
            postal_code,
        ]
        queries: List[str] = []
        for candidate in candidates:
            if candidate and candidate not in queries:
                queries.append(candidate)

        for query in queries:
            result = self.geocode(query)
            if not result.success:
                continue
            if is_plausible_germany(result.coordinates):
                return result
            logger.warning(
                "Implausible coordinates for query; trying a wider one",
                extra={"query": query, "lat": result.coordinates.lat, "lng": result.coordinates.lng},
            )

        logger.warning(
            "No coordinates found for structured address",
            extra={"street": street, "postal_code": postal_code, "city": city},
        )
        return GeocodingResult.not_found(ADDRESS_NOT_FOUND)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _route_with_providers(self, origin: Coordinates, destination: Coordinates) -> Optional[RouteResult]:
        for provider in self.routers:
            result = provider.route(origin, destination)
            if result.found:
                return result.value
            if result.status is LookupStatus.UNAVAILABLE:
                logger.debug("Skipping router %s: %s", provider.name, result.reason)
        return None

    def calculate_route(self, origin_postal_code: str, destination_postal_code: str) -> RouteResult:
        """Always returns a route; precision degrades as providers fail."""
        key = route_key(origin_postal_code, destination_postal_code)
        cached = self.route_cache.get(key)
        if cached is not None:
            logger.debug("Route cache hit", extra={"key": key})
            return cached

        origin = self.geocode(origin_postal_code)
        destination = self.geocode(destination_postal_code)

        if not (origin.success and destination.success):
            estimate = postal_zone_estimate(
                origin_postal_code,
                destination_postal_code,
                step_km=self.settings.postal_zone_step_km,
                min_km=self.settings.postal_zone_min_km,
                speed_kmh=self.settings.average_speed_kmh,
            )
            logger.warning(
                "Geocoding failed; using postal-zone estimate %s -> %s: %.1f km",
                origin_postal_code,
                destination_postal_code,
                estimate.distance_km,
            )
            return estimate

        result = self._route_with_providers(origin.coordinates, destination.coordinates)
        if result is None:
            result = great_circle_estimate(
                origin.coordinates,
                destination.coordinates,
                road_factor=self.settings.road_factor,
                speed_kmh=self.settings.average_speed_kmh,
            )

        self.route_cache.set(key, result)
        logger.info(
            "Route %s -> %s: %.1f km",
            origin_postal_code,
            destination_postal_code,
            result.distance_km,
            extra={"source": result.source.value},
        )
        return result

    def clear_caches(self) -> None:
        """Drop every cached coordinate and route."""
        self.coordinate_cache.clear()
        self.route_cache.clear()


# ----------------------------------------------------------------------
# Process-wide default engine
# ----------------------------------------------------------------------

_engine: RoutingEngine | None = None
_engine_lock = threading.Lock()


def build_engine(settings: config.Settings | None = None) -> RoutingEngine:
    """Wire providers and caches from configuration."""
    settings = settings or config.settings
    session = build_session(settings)
    return RoutingEngine(
        build_geocoders(settings, session=session),
        build_routers(settings, session=session),
        settings=settings,
    )


def get_engine() -> RoutingEngine:
    """Return the process-wide engine, building it on first use."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_engine()
        return _engine


def use_engine_for_tests(engine: RoutingEngine | None) -> None:
    """Swap the process-wide engine; None rebuilds it from settings on next use."""
    global _engine
    with _engine_lock:
        _engine = engine


def geocode(address: str) -> GeocodingResult:
    return get_engine().geocode(address)


def batch_geocode(addresses: Sequence[str]) -> List[GeocodingResult]:
    return get_engine().batch_geocode(addresses)


def calculate_route(origin_postal_code: str, destination_postal_code: str) -> RouteResult:
    return get_engine().calculate_route(origin_postal_code, destination_postal_code)
