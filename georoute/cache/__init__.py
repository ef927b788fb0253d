"""Coordinate and route cache backends."""

from .base import CacheEntry, CoordinateCache, RouteCache, coordinate_key, route_key
from .factory import build_route_cache
from .memory import InMemoryCoordinateCache, InMemoryRouteCache
from .redis import RedisRouteCache

__all__ = [
    "CacheEntry",
    "CoordinateCache",
    "RouteCache",
    "coordinate_key",
    "route_key",
    "build_route_cache",
    "InMemoryCoordinateCache",
    "InMemoryRouteCache",
    "RedisRouteCache",
]
