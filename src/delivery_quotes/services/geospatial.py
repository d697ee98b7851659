"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate, DistanceResult

EARTH_RADIUS_M = 6_371_000.0


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def haversine_distance(origin: Coordinate, destination: Coordinate) -> DistanceResult:
    """Great-circle distance between two coordinates, without a duration."""

    meters = haversine_meters(origin.latitude, origin.longitude, destination.latitude, destination.longitude)
    return DistanceResult(distance_meters=meters, source="haversine")
