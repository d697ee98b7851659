"""HTTP client for the Mapbox Directions API."""

from __future__ import annotations

import logging
import math

import httpx

from ...config import settings
from ...models.domain import Coordinate, DistanceResult

DRIVING_PROFILE = "mapbox/driving"

logger = logging.getLogger(__name__)


class DirectionsError(Exception):
    """The directions service could not produce a route."""


class MapboxDirectionsClient:
    """Single-attempt driving-route lookups with a bounded timeout.

    Every failure mode (network, timeout, HTTP status, body shape, ``code``
    other than ``"Ok"``, empty ``routes``) is reported as ``DirectionsError``
    so callers only have one exception to handle.
    """

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.access_token = access_token or settings.mapbox_access_token
        if not self.access_token:
            raise ValueError("Mapbox access token is not configured.")
        self.base_url = (base_url or settings.mapbox_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.mapbox_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
        )

    def driving_route(self, origin: Coordinate, destination: Coordinate) -> DistanceResult:
        """Return the first driving route's distance (m) and duration (s)."""

        # Mapbox expects "lng,lat;lng,lat"
        coordinate_str = f"{origin.longitude},{origin.latitude};{destination.longitude},{destination.latitude}"
        url = f"{self.base_url}/directions/v5/{DRIVING_PROFILE}/{coordinate_str}"
        params = {"access_token": self.access_token, "overview": "false"}

        client = self._get_client()
        try:
            response = client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise DirectionsError(
                f"Mapbox API error: {exc.response.status_code} - {exc.response.text[:200]}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise DirectionsError(f"Mapbox request timed out after {self.timeout:.1f}s") from exc
        except httpx.HTTPError as exc:
            raise DirectionsError(f"Failed to reach Mapbox: {exc}") from exc
        except ValueError as exc:
            raise DirectionsError(f"Mapbox returned a non-JSON body: {exc}") from exc
        finally:
            client.close()

        if not isinstance(data, dict):
            raise DirectionsError("Mapbox returned an unexpected body.")

        routes = data.get("routes") or []
        if data.get("code") != "Ok" or not routes:
            raise DirectionsError(data.get("message") or "No route found")
        if not isinstance(routes, list):
            raise DirectionsError("Mapbox returned routes in an unexpected shape.")

        try:
            route = routes[0]
            distance = float(route["distance"])
            duration = route.get("duration")
            duration = float(duration) if duration is not None else None
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise DirectionsError(f"Malformed Mapbox route: {exc}") from exc

        if not math.isfinite(distance) or distance < 0:
            raise DirectionsError(f"Mapbox returned an invalid distance: {distance}")
        if duration is not None and (not math.isfinite(duration) or duration < 0):
            raise DirectionsError(f"Mapbox returned an invalid duration: {duration}")

        return DistanceResult(distance_meters=distance, duration_seconds=duration, source="mapbox")


def check_health(access_token: str | None = None) -> bool:
    """Check the directions service by routing between two fixed Kampala points."""

    token = access_token or settings.mapbox_access_token
    if not token:
        return False
    try:
        client = MapboxDirectionsClient(access_token=token)
        client.driving_route(Coordinate(0.3476, 32.5825), Coordinate(0.3136, 32.5811))
        return True
    except DirectionsError as exc:
        logger.info(f"Mapbox health check failed: {exc}")
        return False
