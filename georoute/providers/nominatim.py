"""OpenStreetMap Nominatim geocoder.

Nominatim's usage policy requires an identifying User-Agent and at most
about one request per second, so every network call goes through a shared
MinIntervalLimiter.
"""
from __future__ import annotations

import requests

from georoute.domain import Coordinates, ProviderResult
from georoute.providers.base import PAYLOAD_ERRORS
from georoute.providers.http import ProviderHTTPError, ensure_ok
from georoute.rate_limit import MinIntervalLimiter
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="providers/nominatim")

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


class NominatimGeocoder:
    """Free community geocoder; needs no key."""

    name = "nominatim"
    cache_tag = "community"

    def __init__(
        self,
        session: requests.Session,
        *,
        user_agent: str,
        limiter: MinIntervalLimiter | None = None,
        url: str = NOMINATIM_URL,
        country: str = "Germany",
        timeout: float = 5.0,
    ) -> None:
        if not user_agent:
            raise ValueError("Nominatim requires an identifying User-Agent")
        self.session = session
        self.user_agent = user_agent
        self.limiter = limiter
        self.url = url
        self.country = country
        self.timeout = timeout

    def geocode(self, address: str) -> ProviderResult[Coordinates]:
        params = {
            "q": f"{address},{self.country}",
            "format": "json",
            "limit": 1,
        }
        headers = {"User-Agent": self.user_agent}
        if self.limiter is not None:
            self.limiter.acquire()
        try:
            resp = self.session.get(self.url, params=params, headers=headers, timeout=self.timeout)
            ensure_ok(self.name, resp)
            data = resp.json()
            if not data:
                logger.info("Nominatim found no result", extra={"address": address})
                return ProviderResult.miss("empty result")
            first = data[0]
            return ProviderResult.hit(Coordinates(lat=float(first["lat"]), lng=float(first["lon"])))
        except (requests.exceptions.RequestException, ProviderHTTPError) as exc:
            logger.warning("Nominatim error: %s", exc, extra={"address": address})
            return ProviderResult.error(str(exc))
        except PAYLOAD_ERRORS as exc:
            logger.warning("Nominatim returned an unreadable payload: %s", exc, extra={"address": address})
            return ProviderResult.error(f"malformed response: {exc}")
