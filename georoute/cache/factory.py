"""Factory helpers for choosing the route cache backend at startup."""

from __future__ import annotations

import redis

from georoute import config
from georoute.cache.base import RouteCache
from georoute.cache.memory import InMemoryRouteCache
from georoute.cache.redis import RedisRouteCache
from utils.logging_utils import get_tagged_logger, mask_url_secrets

logger = get_tagged_logger(__name__, tag="cache/factory")


def build_route_cache(settings: config.Settings | None = None) -> RouteCache:
    """Instantiate the configured route cache, falling back to memory if Redis is unreachable."""
    settings = settings or config.settings
    backend = (settings.route_cache_backend or "memory").lower()

    if backend == "memory":
        logger.info("Using in-memory route cache")
        return InMemoryRouteCache(
            ttl_seconds=settings.route_cache_ttl_seconds,
            max_entries=settings.route_cache_max_entries,
        )

    if backend == "redis":
        url = settings.route_cache_redis_url
        if not url:
            raise ValueError("route_cache_redis_url must be set for the redis route cache")
        try:
            client = redis.Redis.from_url(url)
            client.ping()
            logger.info("Using Redis route cache", extra={"redis_url": mask_url_secrets(url)})
            return RedisRouteCache(client, ttl_seconds=settings.route_cache_ttl_seconds)
        except redis.RedisError as exc:
            logger.warning(
                "Falling back to in-memory route cache (Redis unavailable)",
                extra={"error": str(exc)},
            )
            return InMemoryRouteCache(
                ttl_seconds=settings.route_cache_ttl_seconds,
                max_entries=settings.route_cache_max_entries,
            )

    raise ValueError(f"Unknown route cache backend '{backend}'")
