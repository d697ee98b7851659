"""Pricing rule administration and lookups."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from ...errors import NotFoundError, ValidationError
from ...models.domain import PricingRule
from ...persistence.pricing_rules import PricingRuleStore, ZoneStore, new_rule_id
from ...schemas.pricing_rules import PricingRuleCreate, PricingRuleModel, PricingRuleUpdate
from ..clock import Clock, utc_now
from .rules import validate_schedule

logger = logging.getLogger(__name__)

_NULLABLE_FIELDS = {"zone_id", "days_of_week", "start_hour", "end_hour"}


class PricingRuleService:
    """Pricing rule CRUD. Callers enforce the platform-admin gate on mutations."""

    def __init__(self, rules: PricingRuleStore, zones: ZoneStore, clock: Clock = utc_now) -> None:
        self.rules = rules
        self.zones = zones
        self.clock = clock

    def _require_zone(self, zone_id: str | None) -> None:
        if zone_id is not None and self.zones.get(zone_id) is None:
            raise NotFoundError("Delivery zone not found")

    def _require_rule(self, rule_id: str) -> PricingRule:
        rule = self.rules.get(rule_id)
        if rule is None:
            raise NotFoundError("Pricing rule not found")
        return rule

    def _enrich(self, rules: Iterable[PricingRule]) -> list[PricingRuleModel]:
        zone_cache: dict[str, object] = {}
        enriched = []
        for rule in rules:
            zone = None
            if rule.zone_id:
                if rule.zone_id not in zone_cache:
                    zone_cache[rule.zone_id] = self.zones.get(rule.zone_id)
                zone = zone_cache[rule.zone_id]
            enriched.append(PricingRuleModel.from_domain(rule, zone))
        return enriched

    # Queries

    def list_rules(self) -> list[PricingRuleModel]:
        return self._enrich(self.rules.list_all())

    def list_active(self) -> list[PricingRuleModel]:
        return self._enrich(self.rules.list_by_status("active"))

    def list_by_zone(self, zone_id: str) -> list[PricingRuleModel]:
        return self._enrich(self.rules.list_by_zone(zone_id))

    def list_active_by_zone(self, zone_id: str | None) -> list[PricingRuleModel]:
        return self._enrich(self.rules.list_active_by_zone(zone_id))

    def get(self, rule_id: str) -> PricingRuleModel | None:
        rule = self.rules.get(rule_id)
        if rule is None:
            return None
        return self._enrich([rule])[0]

    # Mutations

    def create(self, payload: PricingRuleCreate) -> str:
        self._require_zone(payload.zone_id)
        validate_schedule(payload.days_of_week, payload.start_hour, payload.end_hour)

        now: datetime = self.clock()
        rule = PricingRule(
            id=new_rule_id(),
            zone_id=payload.zone_id,
            name=payload.name,
            base_fee=payload.base_fee,
            rate_per_km=payload.rate_per_km,
            min_fee=payload.min_fee,
            surge_multiplier=payload.surge_multiplier,
            days_of_week=payload.days_of_week,
            start_hour=payload.start_hour,
            end_hour=payload.end_hour,
            status=payload.status,
            created_at=now,
            updated_at=now,
        )
        stored = self.rules.insert(rule)
        logger.info(f"Created pricing rule {stored.id} ({stored.name})")
        return stored.id

    def update(self, rule_id: str, payload: PricingRuleUpdate) -> str:
        self._require_rule(rule_id)
        changes = payload.provided_changes()

        cleared = sorted(name for name, value in changes.items() if value is None and name not in _NULLABLE_FIELDS)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {', '.join(cleared)}")

        self._require_zone(changes.get("zone_id"))
        validate_schedule(changes.get("days_of_week"), changes.get("start_hour"), changes.get("end_hour"))

        changes["updated_at"] = self.clock()
        self.rules.patch(rule_id, changes)
        logger.info(f"Updated pricing rule {rule_id}: {sorted(changes)}")
        return rule_id

    def remove(self, rule_id: str) -> None:
        self._require_rule(rule_id)
        self.rules.delete(rule_id)
        logger.info(f"Deleted pricing rule {rule_id}")

    def toggle_status(self, rule_id: str) -> str:
        existing = self._require_rule(rule_id)
        new_status = "inactive" if existing.status == "active" else "active"
        self.rules.patch(rule_id, {"status": new_status, "updated_at": self.clock()})
        logger.info(f"Pricing rule {rule_id} is now {new_status}")
        return new_status
