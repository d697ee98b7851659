import itertools

import pytest

from src.delivery_quotes.models.domain import FeeConfig
from src.delivery_quotes.services.pricing.fees import DEFAULT_FEE_CONFIG, calculate_fee, round_half_up


def test_default_config_values():
    assert DEFAULT_FEE_CONFIG == FeeConfig(base_fee=3000, rate_per_km=500, min_fee=5000, surge_multiplier=1.0)


def test_ten_km_trip_with_default_config():
    fees = calculate_fee(10_000, DEFAULT_FEE_CONFIG)

    assert fees.base_fee == 3000
    assert fees.distance_fee == 5000
    assert fees.delivery_fee == 8000


def test_short_trip_is_floored_at_minimum_fee():
    fees = calculate_fee(3800, DEFAULT_FEE_CONFIG)

    assert fees.distance_fee == 1900
    assert fees.delivery_fee == 5000


def test_zero_distance_charges_minimum():
    fees = calculate_fee(0, DEFAULT_FEE_CONFIG)

    assert fees.distance_fee == 0
    assert fees.delivery_fee == 5000


def test_surge_applies_to_base_plus_distance_before_floor():
    config = FeeConfig(base_fee=3000, rate_per_km=500, min_fee=0, surge_multiplier=1.5)

    fees = calculate_fee(2500, config)

    assert fees.distance_fee == 1250
    assert fees.delivery_fee == 6375


def test_halves_round_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(2.4) == 2
    config = FeeConfig(base_fee=0, rate_per_km=1, min_fee=0)
    assert calculate_fee(2500, config).distance_fee == 3


DISTANCES = [0, 1, 499, 1500, 3784, 10_000, 57_321]
CONFIGS = [
    FeeConfig(base_fee=0, rate_per_km=0, min_fee=0),
    FeeConfig(base_fee=3000, rate_per_km=500, min_fee=5000),
    FeeConfig(base_fee=1000, rate_per_km=750, min_fee=2500, surge_multiplier=1.25),
    FeeConfig(base_fee=500, rate_per_km=120, min_fee=8000, surge_multiplier=0.8),
]


@pytest.mark.parametrize("distance,config", itertools.product(DISTANCES, CONFIGS))
def test_delivery_fee_never_below_minimum_and_matches_formula(distance, config):
    fees = calculate_fee(distance, config)

    assert fees.delivery_fee >= config.min_fee
    expected = max(round_half_up((fees.base_fee + fees.distance_fee) * config.surge_multiplier), config.min_fee)
    assert fees.delivery_fee == expected


@pytest.mark.parametrize("distance", DISTANCES)
def test_higher_rate_never_lowers_fee(distance):
    previous = None
    for rate in (0, 100, 250, 500, 501, 1000, 5000):
        fee = calculate_fee(distance, FeeConfig(base_fee=3000, rate_per_km=rate, min_fee=5000)).delivery_fee
        if previous is not None:
            assert fee >= previous
        previous = fee
