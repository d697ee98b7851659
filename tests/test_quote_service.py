import threading
from datetime import timedelta

import pytest

from src.delivery_quotes.errors import NotFoundError, QuoteAlreadyUsedError, QuoteExpiredError
from src.delivery_quotes.models.domain import DeliveryZone, DistanceResult, PricingRule
from src.delivery_quotes.persistence.pricing_rules import InMemoryPricingRuleStore, InMemoryZoneStore
from src.delivery_quotes.persistence.quotes import InMemoryQuoteStore
from src.delivery_quotes.schemas.quotes import QuoteRequest
from src.delivery_quotes.services.pricing.resolver import DefaultConfigResolver, RuleBasedConfigResolver
from src.delivery_quotes.services.quotes.service import QuoteService, duration_minutes, round_km
from src.delivery_quotes.services.routing.directions_client import DirectionsError
from src.delivery_quotes.services.routing.distance import DistanceEstimator

KAMPALA_TRIP = QuoteRequest(pickup_lat=0.3476, pickup_lng=32.5825, dropoff_lat=0.3136, dropoff_lng=32.5811)


class StubDirections:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def driving_route(self, origin, destination):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def _service(clock, directions=None, resolver=None, store=None):
    return QuoteService(
        store=store or InMemoryQuoteStore(),
        estimator=DistanceEstimator(directions),
        resolver=resolver or DefaultConfigResolver(),
        clock=clock,
        validity=timedelta(minutes=30),
        currency="UGX",
    )


def test_round_km_and_duration_minutes():
    assert round_km(3784.2) == 3.8
    assert round_km(3750) == 3.8
    assert round_km(10_000) == 10.0
    assert duration_minutes(1200) == 20
    assert duration_minutes(1201) == 21
    assert duration_minutes(None) is None
    assert duration_minutes(0) is None


def test_short_haversine_trip_is_charged_minimum_fee(clock):
    service = _service(clock)

    response = service.calculate(KAMPALA_TRIP)

    assert response.distance_source == "haversine"
    assert 3700 < response.distance_meters < 3900
    assert response.distance_km == 3.8
    assert response.delivery_fee == 5000
    assert response.base_fee == 3000
    assert response.currency == "UGX"
    assert response.estimated_duration_seconds is None
    assert response.estimated_duration_minutes is None


def test_routed_trip_uses_mapbox_distance_and_duration(clock):
    directions = StubDirections(DistanceResult(distance_meters=10_000, source="mapbox", duration_seconds=1200))
    service = _service(clock, directions=directions)

    response = service.calculate(KAMPALA_TRIP)

    assert directions.calls == 1
    assert response.distance_source == "mapbox"
    assert response.distance_meters == 10_000
    assert response.distance_km == 10.0
    assert response.distance_fee == 5000
    assert response.delivery_fee == 8000
    assert response.estimated_duration_minutes == 20


def test_routing_failure_still_produces_a_quote(clock):
    directions = StubDirections(error=DirectionsError("Mapbox returned HTTP 503"))
    service = _service(clock, directions=directions)

    response = service.calculate(KAMPALA_TRIP)

    assert directions.calls == 1
    assert response.distance_source == "haversine"
    assert response.delivery_fee == 5000


def test_stored_quote_matches_response_and_expires_after_validity(clock):
    service = _service(clock)

    response = service.calculate(KAMPALA_TRIP)
    quote = service.get(response.quote_id)

    assert quote is not None
    assert quote.delivery_fee == response.delivery_fee
    assert quote.distance_meters == response.distance_meters
    assert quote.pickup_lat == KAMPALA_TRIP.pickup_lat
    assert quote.dropoff_lng == KAMPALA_TRIP.dropoff_lng
    assert quote.rate_per_km == 500
    assert quote.min_fee == 5000
    assert quote.surge_multiplier == 1.0
    assert quote.created_at == clock.now
    assert quote.expires_at == quote.created_at + timedelta(minutes=30)
    assert response.expires_at == quote.expires_at
    assert quote.used_at is None
    assert quote.order_id is None and quote.parcel_id is None


def test_every_calculation_creates_a_new_quote(clock):
    service = _service(clock)

    first = service.calculate(KAMPALA_TRIP)
    second = service.calculate(KAMPALA_TRIP)

    assert first.quote_id != second.quote_id


def test_get_unknown_quote_returns_none(clock):
    assert _service(clock).get("missing") is None


def test_link_to_order_marks_quote_used(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    clock.advance(minutes=5)

    assert service.link_to_order(quote_id, "order-1").success is True

    quote = service.get(quote_id)
    assert quote.order_id == "order-1"
    assert quote.used_at == clock.now
    assert service.get_by_order("order-1").id == quote_id


def test_link_to_parcel_marks_quote_used(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id

    service.link_to_parcel(quote_id, "parcel-9")

    assert service.get_by_parcel("parcel-9").id == quote_id
    assert service.get_by_order("parcel-9") is None


def test_second_link_is_rejected_and_first_link_kept(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    service.link_to_order(quote_id, "order-1")

    with pytest.raises(QuoteAlreadyUsedError):
        service.link_to_order(quote_id, "order-2")
    with pytest.raises(QuoteAlreadyUsedError):
        service.link_to_parcel(quote_id, "parcel-1")

    quote = service.get(quote_id)
    assert quote.order_id == "order-1"
    assert quote.parcel_id is None


def test_expired_quote_cannot_be_linked(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    clock.advance(minutes=31)

    with pytest.raises(QuoteExpiredError):
        service.link_to_order(quote_id, "order-1")

    assert service.get(quote_id).used_at is None


def test_quote_can_be_linked_at_exact_expiry(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    clock.advance(minutes=30)

    service.link_to_parcel(quote_id, "parcel-1")

    assert service.get(quote_id).parcel_id == "parcel-1"


def test_expiry_is_reported_before_usage(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    service.link_to_order(quote_id, "order-1")
    clock.advance(hours=1)

    with pytest.raises(QuoteExpiredError):
        service.link_to_order(quote_id, "order-2")


def test_linking_unknown_quote_raises_not_found(clock):
    with pytest.raises(NotFoundError):
        _service(clock).link_to_order("missing", "order-1")


def test_concurrent_links_have_exactly_one_winner(clock):
    service = _service(clock)
    quote_id = service.calculate(KAMPALA_TRIP).quote_id
    barrier = threading.Barrier(8)
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt(order_id):
        barrier.wait()
        try:
            service.link_to_order(quote_id, order_id)
            result = ("ok", order_id)
        except QuoteAlreadyUsedError:
            result = ("used", order_id)
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt, args=(f"order-{i}",)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    winners = [order_id for status, order_id in outcomes if status == "ok"]
    assert len(outcomes) == 8
    assert len(winners) == 1
    assert service.get(quote_id).order_id == winners[0]


def test_estimate_does_not_persist_or_route(clock):
    store = InMemoryQuoteStore()
    directions = StubDirections(DistanceResult(distance_meters=50_000, source="mapbox", duration_seconds=3600))
    service = _service(clock, directions=directions, store=store)

    first = service.estimate(KAMPALA_TRIP)
    second = service.estimate(KAMPALA_TRIP)

    assert first == second
    assert first.estimated_fee == 5000
    assert first.distance_km == 3.8
    assert first.currency == "UGX"
    assert directions.calls == 0
    assert store._quotes == {}


def test_rule_based_pricing_records_provenance(clock):
    created = clock.now - timedelta(days=1)
    rules = InMemoryPricingRuleStore(
        [
            PricingRule(
                id="rule-1",
                name="Central weekday",
                zone_id="zone-1",
                base_fee=4000,
                rate_per_km=600,
                min_fee=6000,
                surge_multiplier=1.5,
                created_at=created,
                updated_at=created,
            )
        ]
    )
    zones = InMemoryZoneStore([DeliveryZone(id="zone-1", name="Central", city="Kampala")])
    resolver = RuleBasedConfigResolver(rules, zones, timezone="Africa/Kampala")
    directions = StubDirections(DistanceResult(distance_meters=10_000, source="mapbox", duration_seconds=900))
    service = _service(clock, directions=directions, resolver=resolver)

    request = KAMPALA_TRIP.model_copy(update={"zone_id": "zone-1"})
    response = service.calculate(request)
    quote = service.get(response.quote_id)

    # (4000 + 6000) * 1.5
    assert response.delivery_fee == 15_000
    assert response.zone_id == "zone-1"
    assert response.rule_id == "rule-1"
    assert quote.rule_name == "Central weekday"
    assert quote.zone_name == "Central"
    assert quote.surge_multiplier == 1.5
    assert quote.rate_per_km == 600


def test_unmatched_zone_falls_back_to_default_fees(clock):
    resolver = RuleBasedConfigResolver(InMemoryPricingRuleStore(), InMemoryZoneStore(), timezone="Africa/Kampala")
    service = _service(clock, resolver=resolver)

    request = KAMPALA_TRIP.model_copy(update={"zone_id": "zone-x"})
    response = service.calculate(request)

    assert response.delivery_fee == 5000
    assert response.zone_id == "zone-x"
    assert response.rule_id is None
