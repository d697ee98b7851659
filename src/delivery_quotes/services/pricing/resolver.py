"""Fee configuration resolution.

The quote pipeline asks a resolver for the configuration to price with, so
the rule selector can be switched on without touching the calculator or the
quote store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import FeeConfig, QuoteProvenance
from .fees import DEFAULT_FEE_CONFIG
from .rules import pick_rule, select_applicable_rules

if TYPE_CHECKING:
    from ...persistence.pricing_rules import PricingRuleStore, ZoneStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ResolvedConfig:
    config: FeeConfig
    provenance: QuoteProvenance = field(default_factory=QuoteProvenance)


class ConfigResolver(Protocol):
    def resolve(self, zone_id: str | None, now: datetime) -> ResolvedConfig: ...


class DefaultConfigResolver:
    """Always prices with one fixed configuration."""

    def __init__(self, config: FeeConfig = DEFAULT_FEE_CONFIG) -> None:
        self.config = config

    def resolve(self, zone_id: str | None, now: datetime) -> ResolvedConfig:
        return ResolvedConfig(config=self.config)


class RuleBasedConfigResolver:
    """Prices with the best matching active pricing rule, else the fallback config."""

    def __init__(
        self,
        rules: PricingRuleStore,
        zones: ZoneStore,
        timezone: str | None = None,
        fallback: FeeConfig = DEFAULT_FEE_CONFIG,
    ) -> None:
        self.rules = rules
        self.zones = zones
        self.tz = ZoneInfo(timezone or settings.pricing_timezone)
        self.fallback = fallback

    def resolve(self, zone_id: str | None, now: datetime) -> ResolvedConfig:
        local_now = now.astimezone(self.tz)
        candidates = select_applicable_rules(self.rules.list_active_by_zone(zone_id), zone_id, local_now)
        rule = pick_rule(candidates, zone_id)

        zone_name = None
        if zone_id is not None:
            zone = self.zones.get(zone_id)
            zone_name = zone.name if zone else None

        if rule is None:
            logger.debug(f"No pricing rule matched zone={zone_id!r} at {local_now.isoformat()}; using default")
            return ResolvedConfig(
                config=self.fallback,
                provenance=QuoteProvenance(zone_id=zone_id, zone_name=zone_name),
            )

        return ResolvedConfig(
            config=rule.fee_config(),
            provenance=QuoteProvenance(
                zone_id=zone_id,
                zone_name=zone_name,
                rule_id=rule.id,
                rule_name=rule.name,
            ),
        )


def build_config_resolver() -> ConfigResolver:
    """Resolver selected by ``pricing_rules_enabled``."""
    if not settings.pricing_rules_enabled:
        return DefaultConfigResolver()
    from ...persistence.pricing_rules import get_pricing_rule_store, get_zone_store

    return RuleBasedConfigResolver(get_pricing_rule_store(), get_zone_store())
