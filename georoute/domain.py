"""Core value types shared by providers, caches and the resolution engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class RouteSource(str, Enum):
    """Which tier of the fallback ladder produced a route."""
    GOOGLE = "google"
    OPENROUTESERVICE = "openrouteservice"
    GREAT_CIRCLE = "great_circle"
    POSTAL_ZONE = "postal_zone"


@dataclass(frozen=True)
class Coordinates:
    """WGS84 latitude/longitude in degrees."""
    lat: float
    lng: float

    def __post_init__(self):
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise ValueError(f"Coordinates must be finite numbers, got ({self.lat}, {self.lng})")


@dataclass(frozen=True)
class RouteResult:
    """Distance and travel-time estimate for an origin/destination pair.

    `traffic_delay_minutes` is always derived from the two travel times and
    is never negative, whichever provider or fallback produced the result.
    """
    distance_km: float
    travel_time_minutes: float
    travel_time_minutes_no_traffic: float
    traffic_delay_minutes: float
    source: RouteSource

    @classmethod
    def build(
        cls,
        distance_km: float,
        travel_time_minutes: float,
        travel_time_minutes_no_traffic: Optional[float] = None,
        *,
        source: RouteSource,
    ) -> "RouteResult":
        """Create a result, clamping negatives and deriving the traffic delay."""
        distance_km = max(0.0, float(distance_km))
        travel_time_minutes = max(0.0, float(travel_time_minutes))
        if travel_time_minutes_no_traffic is None:
            travel_time_minutes_no_traffic = travel_time_minutes
        travel_time_minutes_no_traffic = max(0.0, float(travel_time_minutes_no_traffic))
        return cls(
            distance_km=distance_km,
            travel_time_minutes=travel_time_minutes,
            travel_time_minutes_no_traffic=travel_time_minutes_no_traffic,
            traffic_delay_minutes=max(0.0, travel_time_minutes - travel_time_minutes_no_traffic),
            source=source,
        )


@dataclass(frozen=True)
class GeocodingResult:
    """Caller-facing geocoding outcome; absence is a value, never an exception."""
    success: bool
    coordinates: Optional[Coordinates] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, coordinates: Coordinates) -> "GeocodingResult":
        return cls(success=True, coordinates=coordinates)

    @classmethod
    def not_found(cls, error: str = "address not found") -> "GeocodingResult":
        return cls(success=False, error=error)


class LookupStatus(str, Enum):
    """Outcome of a single provider call."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"  # provider not configured (no API key)
    ERROR = "error"  # network, HTTP or payload failure


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Typed provider answer: Found(value) | NotFound | Unavailable | Error(reason)."""
    status: LookupStatus
    value: Optional[T] = None
    reason: Optional[str] = field(default=None)

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND and self.value is not None

    @classmethod
    def hit(cls, value: T) -> "ProviderResult[T]":
        return cls(status=LookupStatus.FOUND, value=value)

    @classmethod
    def miss(cls, reason: Optional[str] = None) -> "ProviderResult[T]":
        return cls(status=LookupStatus.NOT_FOUND, reason=reason)

    @classmethod
    def unavailable(cls, reason: str = "not configured") -> "ProviderResult[T]":
        return cls(status=LookupStatus.UNAVAILABLE, reason=reason)

    @classmethod
    def error(cls, reason: str) -> "ProviderResult[T]":
        return cls(status=LookupStatus.ERROR, reason=reason)
