"""Shared HTTP session for provider calls."""
from __future__ import annotations

import requests
from retry_requests import retry

from georoute import config
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="providers/http")


def build_session(settings: config.Settings | None = None) -> requests.Session:
    """Return a requests session that retries transient 5xx responses a bounded number of times."""
    settings = settings or config.settings
    session = retry(
        requests.Session(),
        retries=settings.http_retries,
        backoff_factor=settings.http_backoff_factor,
    )
    logger.debug(
        "Built provider HTTP session",
        extra={"retries": settings.http_retries, "backoff_factor": settings.http_backoff_factor},
    )
    return session


class ProviderHTTPError(Exception):
    """Non-2xx response from a provider."""

    def __init__(self, provider: str, status_code: int, detail: str = "") -> None:
        super().__init__(f"{provider} returned HTTP {status_code}{': ' + detail if detail else ''}")
        self.provider = provider
        self.status_code = status_code


def ensure_ok(provider: str, resp: requests.Response) -> None:
    """Raise ProviderHTTPError unless `resp` is a 2xx response."""
    if not resp.ok:
        raise ProviderHTTPError(provider, resp.status_code, (resp.text or "")[:200])
