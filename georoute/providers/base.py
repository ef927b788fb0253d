"""Interfaces for geocoding and routing providers."""

from __future__ import annotations

from typing import Protocol

from georoute.domain import Coordinates, ProviderResult, RouteResult

# Exceptions a provider converts into ProviderResult.error instead of raising.
PAYLOAD_ERRORS = (ValueError, KeyError, IndexError, TypeError, AttributeError)


class GeocodingProvider(Protocol):
    """Anything that can turn an address string into coordinates.

    Implementations must never raise; every failure is reported through the
    returned ProviderResult.
    """

    name: str
    cache_tag: str

    def geocode(self, address: str) -> ProviderResult[Coordinates]:
        """Resolve `address` to coordinates."""
        ...


class RoutingProvider(Protocol):
    """Anything that can compute a driving route between two points."""

    name: str

    def route(self, origin: Coordinates, destination: Coordinates) -> ProviderResult[RouteResult]:
        """Return distance and travel times from `origin` to `destination`."""
        ...
