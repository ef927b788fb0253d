"""Google Maps geocoding and traffic-aware Routes API providers."""
from __future__ import annotations

from typing import Optional

import requests

from georoute.domain import Coordinates, ProviderResult, RouteResult, RouteSource
from georoute.providers.base import PAYLOAD_ERRORS
from georoute.providers.http import ProviderHTTPError, ensure_ok
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="providers/google")

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
ROUTES_FIELD_MASK = "routes.duration,routes.staticDuration,routes.distanceMeters"


def parse_duration_minutes(value: Optional[str]) -> float:
    """Convert a Routes API duration such as "1234s" into minutes.

    A missing duration counts as zero. Anything else that is not integer
    seconds followed by a unit letter raises ValueError.
    """
    if not value:
        return 0.0
    text = str(value).strip()
    if text and text[-1].isalpha():
        text = text[:-1]
    return int(text) / 60


class GoogleGeocoder:
    """Commercial geocoder; reports UNAVAILABLE without a network call when no key is set."""

    name = "google"
    cache_tag = "commercial"

    def __init__(
        self,
        session: requests.Session,
        api_key: str | None,
        *,
        url: str = GOOGLE_GEOCODE_URL,
        country: str = "Germany",
        language: str = "de",
        timeout: float = 5.0,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.url = url
        self.country = country
        self.language = language
        self.timeout = timeout

    def geocode(self, address: str) -> ProviderResult[Coordinates]:
        if not self.api_key:
            return ProviderResult.unavailable("ROUTING_GOOGLE_MAPS_API_KEY not set")

        params = {
            "address": f"{address},{self.country}",
            "key": self.api_key,
            "language": self.language,
        }
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
            ensure_ok(self.name, resp)
            data = resp.json()
            status = data.get("status")
            if status == "ZERO_RESULTS" or (status == "OK" and not data.get("results")):
                logger.info("Google found no result", extra={"address": address})
                return ProviderResult.miss(status)
            if status != "OK":
                logger.warning("Google geocoding refused: %s", status, extra={"address": address})
                return ProviderResult.error(f"status {status}")
            location = data["results"][0]["geometry"]["location"]
            return ProviderResult.hit(Coordinates(lat=float(location["lat"]), lng=float(location["lng"])))
        except (requests.exceptions.RequestException, ProviderHTTPError) as exc:
            # the key travels in the query string and shows up in requests' error text
            message = str(exc).replace(self.api_key, "***")
            logger.warning("Google geocoding error: %s", message, extra={"address": address})
            return ProviderResult.error(message)
        except PAYLOAD_ERRORS as exc:
            logger.warning("Google geocoding returned an unreadable payload: %s", exc, extra={"address": address})
            return ProviderResult.error(f"malformed response: {exc}")


class GoogleRoutesRouter:
    """Traffic-aware driving routes from the Google Routes API."""

    name = "google"

    def __init__(
        self,
        session: requests.Session,
        api_key: str | None,
        *,
        url: str = GOOGLE_ROUTES_URL,
        timeout: float = 5.0,
    ) -> None:
        self.session = session
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    @staticmethod
    def _waypoint(coords: Coordinates) -> dict:
        return {"location": {"latLng": {"latitude": coords.lat, "longitude": coords.lng}}}

    def route(self, origin: Coordinates, destination: Coordinates) -> ProviderResult[RouteResult]:
        if not self.api_key:
            return ProviderResult.unavailable("ROUTING_GOOGLE_MAPS_API_KEY not set")

        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": ROUTES_FIELD_MASK,
        }
        body = {
            "origin": self._waypoint(origin),
            "destination": self._waypoint(destination),
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE",
        }
        try:
            resp = self.session.post(self.url, json=body, headers=headers, timeout=self.timeout)
            ensure_ok(self.name, resp)
            routes = resp.json().get("routes") or []
            if not routes:
                logger.info("Google Routes returned no route")
                return ProviderResult.miss("no routes")
            route = routes[0]
            minutes = parse_duration_minutes(route.get("duration"))
            # without a free-flow time the whole duration counts as free flow
            minutes_static = None
            if route.get("staticDuration"):
                minutes_static = parse_duration_minutes(route["staticDuration"])
            return ProviderResult.hit(
                RouteResult.build(
                    route["distanceMeters"] / 1000,
                    minutes,
                    minutes_static,
                    source=RouteSource.GOOGLE,
                )
            )
        except (requests.exceptions.RequestException, ProviderHTTPError) as exc:
            logger.warning("Google Routes error: %s", exc)
            return ProviderResult.error(str(exc))
        except PAYLOAD_ERRORS as exc:
            logger.warning("Google Routes returned an unreadable payload: %s", exc)
            return ProviderResult.error(f"malformed response: {exc}")
