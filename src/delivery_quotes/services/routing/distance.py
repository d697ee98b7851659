"""Distance estimation with a routing-service first, haversine-fallback strategy."""

from __future__ import annotations

import logging
from typing import Protocol

from ...config import settings
from ...models.domain import Coordinate, DistanceResult
from ..geospatial import haversine_distance
from .directions_client import DirectionsError, MapboxDirectionsClient

logger = logging.getLogger(__name__)


class DirectionsClient(Protocol):
    def driving_route(self, origin: Coordinate, destination: Coordinate) -> DistanceResult: ...


class DistanceEstimator:
    """Resolve a pickup to dropoff distance.

    With a directions client, one route request is attempted and any
    ``DirectionsError`` downgrades to the haversine distance. Without one, no
    network call is made.
    """

    def __init__(self, directions: DirectionsClient | None = None) -> None:
        self.directions = directions

    def estimate(self, origin: Coordinate, destination: Coordinate) -> DistanceResult:
        if self.directions is None:
            return haversine_distance(origin, destination)
        try:
            return self.directions.driving_route(origin, destination)
        except DirectionsError as exc:
            logger.warning(f"Mapbox failed, using haversine: {exc}")
            return haversine_distance(origin, destination)


def build_distance_estimator() -> DistanceEstimator:
    """Estimator wired from settings; routing is skipped when no token is configured."""

    if not settings.mapbox_access_token:
        return DistanceEstimator()
    return DistanceEstimator(MapboxDirectionsClient())
