import os

import uvicorn

from georoute.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def log_provider_configuration() -> None:
    """Report which provider tiers are active; missing keys are valid, not fatal."""
    logger.info(
        "Provider keys: google=%s openrouteservice=%s",
        "set" if settings.google_maps_api_key else "optional (unset)",
        "set" if settings.openrouteservice_api_key else "optional (unset)",
    )
    logger.info("Route cache backend: %s", settings.route_cache_backend)


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="georoute_api")
    log_provider_configuration()

    uvicorn.run(
        "georoute.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
