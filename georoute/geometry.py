"""Offline distance estimates used when no routing provider answers."""
from __future__ import annotations

import math
from typing import Optional

from georoute.domain import Coordinates, RouteResult, RouteSource

EARTH_RADIUS_KM = 6371.0

# Rough bounding box of Germany; anything outside is treated as a bad geocode.
GERMANY_LAT_RANGE = (47.0, 55.0)
GERMANY_LNG_RANGE = (5.0, 15.0)


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in kilometers."""
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def minutes_at_speed(distance_km: float, speed_kmh: float) -> float:
    """Travel time in minutes for a constant average speed."""
    return distance_km / speed_kmh * 60


def great_circle_estimate(
    origin: Coordinates,
    destination: Coordinates,
    *,
    road_factor: float = 1.3,
    speed_kmh: float = 60.0,
) -> RouteResult:
    """Straight-line distance inflated by `road_factor`, driven at `speed_kmh`."""
    distance = haversine_km(origin, destination) * road_factor
    minutes = minutes_at_speed(distance, speed_kmh)
    return RouteResult.build(distance, minutes, minutes, source=RouteSource.GREAT_CIRCLE)


def postal_zone(postal_code: str) -> Optional[int]:
    """First two digits of a German postal code, or None if they are not digits."""
    prefix = (postal_code or "").strip()[:2]
    if len(prefix) == 2 and prefix.isdigit():
        return int(prefix)
    return None


def postal_zone_estimate(
    origin_postal_code: str,
    destination_postal_code: str,
    *,
    step_km: float = 50.0,
    min_km: float = 20.0,
    speed_kmh: float = 60.0,
) -> RouteResult:
    """Crude regional estimate from the gap between two postal zones.

    Unparseable codes contribute no gap, so the estimate falls to `min_km`.
    """
    origin_zone = postal_zone(origin_postal_code)
    destination_zone = postal_zone(destination_postal_code)
    if origin_zone is None or destination_zone is None:
        gap = 0
    else:
        gap = abs(origin_zone - destination_zone)
    distance = max(min_km, gap * step_km)
    minutes = minutes_at_speed(distance, speed_kmh)
    return RouteResult.build(distance, minutes, minutes, source=RouteSource.POSTAL_ZONE)


def is_plausible_germany(coords: Coordinates) -> bool:
    """True if the point falls inside Germany's rough bounding box."""
    return (
        GERMANY_LAT_RANGE[0] <= coords.lat <= GERMANY_LAT_RANGE[1]
        and GERMANY_LNG_RANGE[0] <= coords.lng <= GERMANY_LNG_RANGE[1]
    )
