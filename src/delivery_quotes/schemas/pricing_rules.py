"""Pricing rule request/response schemas."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import DeliveryZone, PricingRule

RuleStatus = Literal["active", "inactive"]


class PricingRuleCreate(BaseModel):
    zone_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    base_fee: int = Field(..., ge=0)
    rate_per_km: int = Field(..., ge=0)
    min_fee: int = Field(..., ge=0)
    surge_multiplier: float = Field(default=1.0, gt=0)
    days_of_week: Optional[List[int]] = Field(default=None, description="0 (Sunday) to 6 (Saturday).")
    start_hour: Optional[int] = Field(default=None, description="0-23, inclusive start of the window.")
    end_hour: Optional[int] = Field(default=None, description="0-23, exclusive end of the window.")
    status: RuleStatus = "active"


class PricingRuleUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied.

    Sending ``null`` clears ``zone_id``, ``days_of_week``, ``start_hour`` and
    ``end_hour``. The remaining fields cannot be cleared.
    """

    zone_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    base_fee: Optional[int] = Field(default=None, ge=0)
    rate_per_km: Optional[int] = Field(default=None, ge=0)
    min_fee: Optional[int] = Field(default=None, ge=0)
    surge_multiplier: Optional[float] = Field(default=None, gt=0)
    days_of_week: Optional[List[int]] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    status: Optional[RuleStatus] = None

    def provided_changes(self) -> dict:
        """Fields explicitly present in the payload, including explicit nulls."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class PricingRuleModel(BaseModel):
    id: str
    zone_id: Optional[str] = None
    name: str
    base_fee: int
    rate_per_km: int
    min_fee: int
    surge_multiplier: float
    days_of_week: Optional[List[int]] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    status: RuleStatus
    created_at: datetime
    updated_at: datetime
    zone_name: Optional[str] = None
    zone_city: Optional[str] = None

    @classmethod
    def from_domain(cls, rule: PricingRule, zone: DeliveryZone | None = None) -> "PricingRuleModel":
        return cls(
            **asdict(rule),
            zone_name=zone.name if zone else None,
            zone_city=zone.city if zone else None,
        )


class RuleIdResponse(BaseModel):
    id: str


class ToggleStatusResponse(BaseModel):
    status: RuleStatus


class RemoveResponse(BaseModel):
    success: bool
