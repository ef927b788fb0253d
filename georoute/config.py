"""Routing service configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


DEFAULT_COORDINATE_OVERRIDES: dict[str, tuple[float, float]] = {
    "97828": (49.85, 9.6),
    "marktheidenfeld": (49.85, 9.6),
}


class Settings(BaseSettings):
    """Environment-driven configuration for the geocoding and routing engine."""
    model_config = SettingsConfigDict(env_prefix="ROUTING_", extra="ignore")

    # Providers; a missing key disables that tier, it is not an error.
    google_maps_api_key: str | None = None
    openrouteservice_api_key: str | None = None
    google_geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    google_routes_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    openrouteservice_url: str = "https://api.openrouteservice.org/v2/directions/driving-car"
    nominatim_user_agent: str = "georoute/1.0 (logistics route estimation)"
    nominatim_min_interval_seconds: float = 1.0
    country: str = "Germany"
    language: str = "de"

    # HTTP
    provider_timeout_seconds: float = 5.0
    http_retries: int = 1
    http_backoff_factor: float = 0.2

    # Caches
    route_cache_ttl_seconds: float = 300.0
    route_cache_backend: str = "memory"  # options: memory, redis
    route_cache_redis_url: str | None = None
    route_cache_max_entries: int = 10000
    geocode_cache_max_entries: int = 10000

    # Batch geocoding
    batch_delay_seconds: float = 0.1
    batch_max_addresses: int = 50

    # Fallback estimation constants
    road_factor: float = 1.3
    average_speed_kmh: float = 60.0
    postal_zone_step_km: float = 50.0
    postal_zone_min_km: float = 20.0

    coordinate_overrides: dict[str, tuple[float, float]] = Field(
        default_factory=lambda: dict(DEFAULT_COORDINATE_OVERRIDES)
    )

    # HTTP API
    api_key: str | None = None
    log_level: str = "INFO"

    @field_validator("google_maps_api_key", "openrouteservice_api_key", "api_key", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty or whitespace-only keys as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("route_cache_backend", mode="after")
    @classmethod
    def normalize_backend(cls, v: str) -> str:
        """Lower-case the cache backend name."""
        return v.strip().lower()

    @field_validator("coordinate_overrides", mode="after")
    @classmethod
    def lowercase_override_keys(cls, v: dict[str, tuple[float, float]]) -> dict[str, tuple[float, float]]:
        """Override keys are matched case-insensitively."""
        return {key.lower(): coords for key, coords in v.items()}


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(
        "Loaded settings: %s",
        settings.model_dump_json(indent=4, exclude={"google_maps_api_key", "openrouteservice_api_key", "api_key"}),
    )
