"""Pricing rule and delivery zone storage."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict, replace
from datetime import datetime
from functools import lru_cache
from typing import Any, Protocol

from ..db.supabase import get_supabase_client
from ..models.domain import DeliveryZone, PricingRule

RULES_TABLE = "pricing_rules"
ZONES_TABLE = "delivery_zones"

logger = logging.getLogger(__name__)


class PricingRuleStore(Protocol):
    def insert(self, rule: PricingRule) -> PricingRule: ...

    def get(self, rule_id: str) -> PricingRule | None: ...

    def patch(self, rule_id: str, changes: dict[str, Any]) -> PricingRule | None: ...

    def delete(self, rule_id: str) -> bool: ...

    def list_all(self) -> list[PricingRule]: ...

    def list_by_status(self, status: str) -> list[PricingRule]: ...

    def list_by_zone(self, zone_id: str) -> list[PricingRule]: ...

    def list_active_by_zone(self, zone_id: str | None) -> list[PricingRule]: ...


class ZoneStore(Protocol):
    def get(self, zone_id: str) -> DeliveryZone | None: ...


def new_rule_id() -> str:
    return str(uuid.uuid4())


def rule_to_record(rule: PricingRule) -> dict[str, Any]:
    record = asdict(rule)
    record["created_at"] = rule.created_at.isoformat()
    record["updated_at"] = rule.updated_at.isoformat()
    return record


def rule_from_record(row: dict[str, Any]) -> PricingRule:
    values = {name: row.get(name) for name in PricingRule.__dataclass_fields__}
    for key in ("created_at", "updated_at"):
        if isinstance(values[key], str):
            values[key] = datetime.fromisoformat(values[key])
    if values["surge_multiplier"] is None:
        values["surge_multiplier"] = 1.0
    if values["status"] is None:
        values["status"] = "active"
    return PricingRule(**values)


def _serialize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    return {key: value.isoformat() if isinstance(value, datetime) else value for key, value in changes.items()}


class SupabasePricingRuleStore:
    def __init__(self, client) -> None:
        self.client = client

    def _rows(self, query) -> list[PricingRule]:
        response = query.order("created_at").execute()
        return [rule_from_record(row) for row in (response.data or [])]

    def insert(self, rule: PricingRule) -> PricingRule:
        response = self.client.table(RULES_TABLE).insert(rule_to_record(rule)).execute()
        rows = response.data or []
        return rule_from_record(rows[0]) if rows else rule

    def get(self, rule_id: str) -> PricingRule | None:
        response = self.client.table(RULES_TABLE).select("*").eq("id", rule_id).limit(1).execute()
        rows = response.data or []
        return rule_from_record(rows[0]) if rows else None

    def patch(self, rule_id: str, changes: dict[str, Any]) -> PricingRule | None:
        response = (
            self.client.table(RULES_TABLE)
            .update(_serialize_changes(changes))
            .eq("id", rule_id)
            .execute()
        )
        rows = response.data or []
        return rule_from_record(rows[0]) if rows else None

    def delete(self, rule_id: str) -> bool:
        response = self.client.table(RULES_TABLE).delete().eq("id", rule_id).execute()
        return bool(response.data)

    def list_all(self) -> list[PricingRule]:
        return self._rows(self.client.table(RULES_TABLE).select("*"))

    def list_by_status(self, status: str) -> list[PricingRule]:
        return self._rows(self.client.table(RULES_TABLE).select("*").eq("status", status))

    def list_by_zone(self, zone_id: str) -> list[PricingRule]:
        return self._rows(self.client.table(RULES_TABLE).select("*").eq("zone_id", zone_id))

    def list_active_by_zone(self, zone_id: str | None) -> list[PricingRule]:
        """Active rules of the zone followed by active global rules; all active rules without a zone."""
        if zone_id is None:
            return self.list_by_status("active")
        zone_rules = self._rows(
            self.client.table(RULES_TABLE).select("*").eq("zone_id", zone_id).eq("status", "active")
        )
        global_rules = self._rows(
            self.client.table(RULES_TABLE).select("*").is_("zone_id", "null").eq("status", "active")
        )
        return zone_rules + global_rules


class InMemoryPricingRuleStore:
    def __init__(self, rules: list[PricingRule] | None = None) -> None:
        self._rules: dict[str, PricingRule] = {rule.id: rule for rule in rules or []}
        self._lock = threading.Lock()

    def _select(self, predicate) -> list[PricingRule]:
        with self._lock:
            matches = [replace(rule) for rule in self._rules.values() if predicate(rule)]
        return sorted(matches, key=lambda rule: rule.created_at)

    def insert(self, rule: PricingRule) -> PricingRule:
        with self._lock:
            self._rules[rule.id] = replace(rule)
        return replace(rule)

    def get(self, rule_id: str) -> PricingRule | None:
        with self._lock:
            rule = self._rules.get(rule_id)
            return replace(rule) if rule else None

    def patch(self, rule_id: str, changes: dict[str, Any]) -> PricingRule | None:
        with self._lock:
            rule = self._rules.get(rule_id)
            if rule is None:
                return None
            updated = replace(rule, **changes)
            self._rules[rule_id] = updated
            return replace(updated)

    def delete(self, rule_id: str) -> bool:
        with self._lock:
            return self._rules.pop(rule_id, None) is not None

    def list_all(self) -> list[PricingRule]:
        return self._select(lambda rule: True)

    def list_by_status(self, status: str) -> list[PricingRule]:
        return self._select(lambda rule: rule.status == status)

    def list_by_zone(self, zone_id: str) -> list[PricingRule]:
        return self._select(lambda rule: rule.zone_id == zone_id)

    def list_active_by_zone(self, zone_id: str | None) -> list[PricingRule]:
        if zone_id is None:
            return self.list_by_status("active")
        zone_rules = self._select(lambda rule: rule.status == "active" and rule.zone_id == zone_id)
        global_rules = self._select(lambda rule: rule.status == "active" and rule.zone_id is None)
        return zone_rules + global_rules


class SupabaseZoneStore:
    """Read-only view of the ``delivery_zones`` table."""

    def __init__(self, client) -> None:
        self.client = client

    def get(self, zone_id: str) -> DeliveryZone | None:
        response = (
            self.client.table(ZONES_TABLE).select("id,name,city").eq("id", zone_id).limit(1).execute()
        )
        rows = response.data or []
        if not rows:
            return None
        row = rows[0]
        return DeliveryZone(id=str(row["id"]), name=row.get("name") or "", city=row.get("city"))


class InMemoryZoneStore:
    def __init__(self, zones: list[DeliveryZone] | None = None) -> None:
        self._zones = {zone.id: zone for zone in zones or []}

    def get(self, zone_id: str) -> DeliveryZone | None:
        return self._zones.get(zone_id)


@lru_cache()
def _in_memory_rule_store() -> InMemoryPricingRuleStore:
    logger.warning("Supabase not configured - pricing rules are kept in process memory only")
    return InMemoryPricingRuleStore()


@lru_cache()
def _in_memory_zone_store() -> InMemoryZoneStore:
    return InMemoryZoneStore()


def get_pricing_rule_store() -> PricingRuleStore:
    client = get_supabase_client()
    if client is not None:
        return SupabasePricingRuleStore(client)
    return _in_memory_rule_store()


def get_zone_store() -> ZoneStore:
    client = get_supabase_client()
    if client is not None:
        return SupabaseZoneStore(client)
    return _in_memory_zone_store()
