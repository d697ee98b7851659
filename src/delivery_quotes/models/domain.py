"""Domain models for quotes, pricing rules and delivery zones."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

DistanceSource = Literal["mapbox", "haversine"]
RuleStatus = Literal["active", "inactive"]


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class DistanceResult:
    """Distance between two coordinates and where it came from."""

    distance_meters: float
    source: DistanceSource
    duration_seconds: Optional[float] = None


@dataclass(slots=True, frozen=True)
class FeeConfig:
    """Fee formula inputs. Amounts are whole currency units."""

    base_fee: int
    rate_per_km: int
    min_fee: int
    surge_multiplier: float = 1.0


@dataclass(slots=True, frozen=True)
class FeeBreakdown:
    base_fee: int
    distance_fee: int
    delivery_fee: int


@dataclass(slots=True, frozen=True)
class QuoteProvenance:
    """Which zone and pricing rule produced a fee, when one did."""

    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None


@dataclass(slots=True)
class DeliveryZone:
    id: str
    name: str
    city: Optional[str] = None


@dataclass(slots=True)
class PricingRule:
    """Admin-configured fee formula, optionally scoped by zone, day and hour."""

    id: str
    name: str
    base_fee: int
    rate_per_km: int
    min_fee: int
    created_at: datetime
    updated_at: datetime
    surge_multiplier: float = 1.0
    zone_id: Optional[str] = None
    days_of_week: Optional[list[int]] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    status: RuleStatus = "active"

    @property
    def has_schedule(self) -> bool:
        return bool(self.days_of_week) or self.start_hour is not None or self.end_hour is not None

    def fee_config(self) -> FeeConfig:
        return FeeConfig(
            base_fee=self.base_fee,
            rate_per_km=self.rate_per_km,
            min_fee=self.min_fee,
            surge_multiplier=self.surge_multiplier,
        )


@dataclass(slots=True)
class DeliveryQuote:
    """A time-boxed, single-use price commitment for one pickup to dropoff trip."""

    id: str
    pickup_lat: float
    pickup_lng: float
    dropoff_lat: float
    dropoff_lng: float
    distance_meters: int
    distance_source: DistanceSource
    base_fee: int
    rate_per_km: int
    distance_fee: int
    surge_multiplier: float
    min_fee: int
    delivery_fee: int
    created_at: datetime
    expires_at: datetime
    estimated_duration_seconds: Optional[float] = None
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    order_id: Optional[str] = None
    parcel_id: Optional[str] = None
    used_at: Optional[datetime] = None

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
