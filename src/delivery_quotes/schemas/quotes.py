"""Quote request/response schemas."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import DeliveryQuote


class QuoteRequest(BaseModel):
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    dropoff_lat: float = Field(..., ge=-90, le=90)
    dropoff_lng: float = Field(..., ge=-180, le=180)
    zone_id: Optional[str] = Field(
        default=None,
        description="Delivery zone used to pick a pricing rule when rule-based pricing is enabled.",
    )


class QuoteCalculationResponse(BaseModel):
    quote_id: str
    distance_meters: int
    distance_km: float
    distance_source: Literal["mapbox", "haversine"]
    estimated_duration_seconds: Optional[float] = None
    estimated_duration_minutes: Optional[int] = None
    base_fee: int
    distance_fee: int
    delivery_fee: int
    currency: str
    expires_at: datetime
    zone_id: Optional[str] = None
    rule_id: Optional[str] = None


class EstimateResponse(BaseModel):
    distance_meters: int
    distance_km: float
    estimated_fee: int
    currency: str


class LinkOrderRequest(BaseModel):
    order_id: str = Field(..., min_length=1)


class LinkParcelRequest(BaseModel):
    parcel_id: str = Field(..., min_length=1)


class LinkResponse(BaseModel):
    success: bool


class QuoteModel(BaseModel):
    id: str
    pickup_lat: float
    pickup_lng: float
    dropoff_lat: float
    dropoff_lng: float
    distance_meters: int
    distance_source: Literal["mapbox", "haversine"]
    estimated_duration_seconds: Optional[float] = None
    base_fee: int
    rate_per_km: int
    distance_fee: int
    surge_multiplier: float
    min_fee: int
    delivery_fee: int
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    order_id: Optional[str] = None
    parcel_id: Optional[str] = None
    used_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, quote: DeliveryQuote) -> "QuoteModel":
        return cls(**asdict(quote))
