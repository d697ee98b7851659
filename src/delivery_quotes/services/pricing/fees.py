"""Delivery fee calculation."""

from __future__ import annotations

import math

from ...models.domain import FeeBreakdown, FeeConfig

# UGX
DEFAULT_FEE_CONFIG = FeeConfig(base_fee=3000, rate_per_km=500, min_fee=5000, surge_multiplier=1.0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def calculate_fee(distance_meters: float, config: FeeConfig) -> FeeBreakdown:
    """Fee for a distance: base plus per-km charge, surged, floored at the minimum."""

    distance_km = distance_meters / 1000
    distance_fee = round_half_up(distance_km * config.rate_per_km)
    subtotal = config.base_fee + distance_fee
    with_surge = round_half_up(subtotal * config.surge_multiplier)
    delivery_fee = max(with_surge, config.min_fee)

    return FeeBreakdown(
        base_fee=config.base_fee,
        distance_fee=distance_fee,
        delivery_fee=delivery_fee,
    )
