"""Quote orchestration service."""

from __future__ import annotations

import logging
import math
from datetime import timedelta

from ...config import settings
from ...models.domain import (
    Coordinate,
    DeliveryQuote,
    DistanceResult,
    FeeBreakdown,
    FeeConfig,
    QuoteProvenance,
)
from ...persistence.quotes import QuoteStore, new_quote_id
from ...schemas.quotes import (
    EstimateResponse,
    LinkResponse,
    QuoteCalculationResponse,
    QuoteRequest,
)
from ..clock import Clock, utc_now
from ..geospatial import haversine_distance
from ..pricing.fees import calculate_fee, round_half_up
from ..pricing.resolver import ConfigResolver
from ..routing.distance import DistanceEstimator

logger = logging.getLogger(__name__)


def round_km(distance_meters: float) -> float:
    """Kilometres rounded to one decimal place."""
    return math.floor(distance_meters / 100 + 0.5) / 10


def duration_minutes(duration_seconds: float | None) -> int | None:
    if not duration_seconds:
        return None
    return math.ceil(duration_seconds / 60)


class QuoteService:
    """Create, read and link delivery quotes."""

    def __init__(
        self,
        store: QuoteStore,
        estimator: DistanceEstimator,
        resolver: ConfigResolver,
        clock: Clock = utc_now,
        validity: timedelta | None = None,
        currency: str | None = None,
    ) -> None:
        self.store = store
        self.estimator = estimator
        self.resolver = resolver
        self.clock = clock
        self.validity = validity or timedelta(minutes=settings.quote_validity_minutes)
        self.currency = currency or settings.currency

    def create_quote(
        self,
        pickup: Coordinate,
        dropoff: Coordinate,
        distance: DistanceResult,
        config: FeeConfig,
        fees: FeeBreakdown,
        provenance: QuoteProvenance | None = None,
    ) -> DeliveryQuote:
        provenance = provenance or QuoteProvenance()
        now = self.clock()
        quote = DeliveryQuote(
            id=new_quote_id(),
            pickup_lat=pickup.latitude,
            pickup_lng=pickup.longitude,
            dropoff_lat=dropoff.latitude,
            dropoff_lng=dropoff.longitude,
            distance_meters=round_half_up(distance.distance_meters),
            distance_source=distance.source,
            estimated_duration_seconds=distance.duration_seconds,
            base_fee=fees.base_fee,
            rate_per_km=config.rate_per_km,
            distance_fee=fees.distance_fee,
            surge_multiplier=config.surge_multiplier,
            min_fee=config.min_fee,
            delivery_fee=fees.delivery_fee,
            zone_id=provenance.zone_id,
            zone_name=provenance.zone_name,
            rule_id=provenance.rule_id,
            rule_name=provenance.rule_name,
            created_at=now,
            expires_at=now + self.validity,
        )
        return self.store.insert(quote)

    def calculate(self, payload: QuoteRequest) -> QuoteCalculationResponse:
        pickup = Coordinate(payload.pickup_lat, payload.pickup_lng)
        dropoff = Coordinate(payload.dropoff_lat, payload.dropoff_lng)

        distance = self.estimator.estimate(pickup, dropoff)
        resolved = self.resolver.resolve(payload.zone_id, self.clock())
        # Fee uses the unrounded distance; the stored distance is rounded.
        fees = calculate_fee(distance.distance_meters, resolved.config)
        quote = self.create_quote(pickup, dropoff, distance, resolved.config, fees, resolved.provenance)

        logger.info(
            f"Created quote {quote.id}: {quote.distance_meters} m via {quote.distance_source}, "
            f"fee {quote.delivery_fee} {self.currency}"
        )

        return QuoteCalculationResponse(
            quote_id=quote.id,
            distance_meters=quote.distance_meters,
            distance_km=round_km(distance.distance_meters),
            distance_source=quote.distance_source,
            estimated_duration_seconds=distance.duration_seconds,
            estimated_duration_minutes=duration_minutes(distance.duration_seconds),
            base_fee=fees.base_fee,
            distance_fee=fees.distance_fee,
            delivery_fee=fees.delivery_fee,
            currency=self.currency,
            expires_at=quote.expires_at,
            zone_id=quote.zone_id,
            rule_id=quote.rule_id,
        )

    def estimate(self, payload: QuoteRequest) -> EstimateResponse:
        """Haversine-only fee preview; never persists and never calls the routing service."""
        pickup = Coordinate(payload.pickup_lat, payload.pickup_lng)
        dropoff = Coordinate(payload.dropoff_lat, payload.dropoff_lng)

        distance = haversine_distance(pickup, dropoff)
        resolved = self.resolver.resolve(payload.zone_id, self.clock())
        fees = calculate_fee(distance.distance_meters, resolved.config)

        return EstimateResponse(
            distance_meters=round_half_up(distance.distance_meters),
            distance_km=round_km(distance.distance_meters),
            estimated_fee=fees.delivery_fee,
            currency=self.currency,
        )

    def get(self, quote_id: str) -> DeliveryQuote | None:
        return self.store.get(quote_id)

    def get_by_order(self, order_id: str) -> DeliveryQuote | None:
        return self.store.get_by_field("order_id", order_id)

    def get_by_parcel(self, parcel_id: str) -> DeliveryQuote | None:
        return self.store.get_by_field("parcel_id", parcel_id)

    def link_to_order(self, quote_id: str, order_id: str) -> LinkResponse:
        self.store.link(quote_id, "order_id", order_id, self.clock())
        logger.info(f"Linked quote {quote_id} to order {order_id}")
        return LinkResponse(success=True)

    def link_to_parcel(self, quote_id: str, parcel_id: str) -> LinkResponse:
        self.store.link(quote_id, "parcel_id", parcel_id, self.clock())
        logger.info(f"Linked quote {quote_id} to parcel {parcel_id}")
        return LinkResponse(success=True)
