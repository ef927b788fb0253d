"""Shared protocol and types for coordinate and route caches."""

from dataclasses import dataclass
from typing import Generic, Optional, Protocol, TypeVar

from georoute.domain import Coordinates, RouteResult

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value with the epoch time (seconds) it was stored."""
    value: T
    inserted_at: float


def coordinate_key(cache_tag: str, address: str) -> str:
    """Key for a provider's answer for one raw address string."""
    return f"{cache_tag}-{address}"


def route_key(origin_postal_code: str, destination_postal_code: str) -> str:
    """Order-sensitive key for a postal-code pair."""
    return f"{origin_postal_code}->{destination_postal_code}"


class CoordinateCache(Protocol):
    """Protocol for coordinate caches (no expiry)."""

    def get(self, key: str) -> Optional[Coordinates]:
        """Return the cached coordinates or None."""

    def set(self, key: str, value: Coordinates) -> None:
        """Store coordinates under `key`."""

    def clear(self) -> None:
        """Drop every entry."""


class RouteCache(Protocol):
    """Protocol for TTL-bound route caches."""

    def get(self, key: str) -> Optional[RouteResult]:
        """Return a fresh cached route, or None if missing or expired."""

    def set(self, key: str, value: RouteResult) -> None:
        """Store a route stamped with the current time."""

    def clear(self) -> None:
        """Drop every entry."""
