"""Pricing rule matching and selection."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from ...errors import ValidationError
from ...models.domain import PricingRule


def day_of_week(moment: datetime) -> int:
    """Day index with Sunday = 0 ... Saturday = 6."""
    return (moment.weekday() + 1) % 7


def hour_in_window(hour: int, start_hour: int | None, end_hour: int | None) -> bool:
    """Whether ``hour`` falls inside the half-open window ``[start_hour, end_hour)``.

    A window with ``start_hour > end_hour`` crosses midnight and matches
    ``hour >= start_hour or hour < end_hour``. Equal bounds form an empty
    window. A missing bound leaves that side open.
    """
    if start_hour is None and end_hour is None:
        return True
    if start_hour is None:
        return hour < end_hour
    if end_hour is None:
        return hour >= start_hour
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def rule_matches_time(rule: PricingRule, now: datetime) -> bool:
    if rule.days_of_week and day_of_week(now) not in rule.days_of_week:
        return False
    return hour_in_window(now.hour, rule.start_hour, rule.end_hour)


def select_applicable_rules(
    rules: Iterable[PricingRule],
    zone_id: str | None,
    now: datetime,
) -> list[PricingRule]:
    """Active rules applicable at ``now``.

    With a zone, rules scoped to that zone come first, followed by global
    rules; rules of other zones are dropped. Without a zone every active rule
    is eligible. ``now`` must already be in the pricing timezone.
    """
    active = [rule for rule in rules if rule.status == "active" and rule_matches_time(rule, now)]
    if zone_id is None:
        return active

    zone_rules = [rule for rule in active if rule.zone_id == zone_id]
    global_rules = [rule for rule in active if rule.zone_id is None]
    return zone_rules + global_rules


def pick_rule(rules: Sequence[PricingRule], zone_id: str | None = None) -> PricingRule | None:
    """The single rule to price with.

    Zone-specific before global, schedule-restricted before always-on, then
    the oldest rule.
    """
    if not rules:
        return None

    def _key(rule: PricingRule) -> tuple:
        zone_rank = 0 if (zone_id is not None and rule.zone_id == zone_id) else 1
        schedule_rank = 0 if rule.has_schedule else 1
        return (zone_rank, schedule_rank, rule.created_at)

    return min(rules, key=_key)


def validate_schedule(
    days_of_week: Sequence[int] | None = None,
    start_hour: int | None = None,
    end_hour: int | None = None,
) -> None:
    """Reject hours outside 0-23 and days outside 0-6."""
    if start_hour is not None and not 0 <= start_hour <= 23:
        raise ValidationError("Start hour must be between 0 and 23")
    if end_hour is not None and not 0 <= end_hour <= 23:
        raise ValidationError("End hour must be between 0 and 23")
    if days_of_week:
        for day in days_of_week:
            if not 0 <= day <= 6:
                raise ValidationError("Days of week must be between 0 (Sunday) and 6 (Saturday)")
