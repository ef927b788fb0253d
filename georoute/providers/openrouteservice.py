"""OpenRouteService driving-car directions."""
from __future__ import annotations

import requests

from georoute.domain import Coordinates, ProviderResult, RouteResult, RouteSource
from georoute.providers.base import PAYLOAD_ERRORS
from georoute.providers.http import ProviderHTTPError, ensure_ok
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="providers/openrouteservice")

ORS_DIRECTIONS_URL = "https://api.openrouteservice.org/v2/directions/driving-car"


class OpenRouteServiceRouter:
    """Open routing provider; cannot tell traffic from free flow, so the delay is always zero."""

    name = "openrouteservice"

    def __init__(
        self,
        session: requests.Session,
        api_key: str | None,
        *,
        url: str = ORS_DIRECTIONS_URL,
        timeout: float = 5.0,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    def _redact(self, message: str) -> str:
        # the key travels in the query string and shows up in requests' error text
        return message.replace(self.api_key, "***") if self.api_key else message

    def route(self, origin: Coordinates, destination: Coordinates) -> ProviderResult[RouteResult]:
        if not self.api_key:
            return ProviderResult.unavailable("ROUTING_OPENROUTESERVICE_API_KEY not set")

        # ORS expects lng,lat
        params = {
            "api_key": self.api_key,
            "start": f"{origin.lng},{origin.lat}",
            "end": f"{destination.lng},{destination.lat}",
        }
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
            ensure_ok(self.name, resp)
            features = resp.json().get("features") or []
            segments = []
            if features:
                segments = (features[0].get("properties") or {}).get("segments") or []
            if not segments:
                logger.info("OpenRouteService returned no route")
                return ProviderResult.miss("no segments")
            segment = segments[0]
            minutes = segment["duration"] / 60
            return ProviderResult.hit(
                RouteResult.build(segment["distance"] / 1000, minutes, minutes, source=RouteSource.OPENROUTESERVICE)
            )
        except (requests.exceptions.RequestException, ProviderHTTPError) as exc:
            message = self._redact(str(exc))
            logger.warning("OpenRouteService error: %s", message)
            return ProviderResult.error(message)
        except PAYLOAD_ERRORS as exc:
            logger.warning("OpenRouteService returned an unreadable payload: %s", exc)
            return ProviderResult.error(f"malformed response: {exc}")
