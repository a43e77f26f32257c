"""Heuristic reminder cadence for a product."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from .models import NotificationFrequency, ProductFacts, as_day
from .normalize import normalize_facts


@dataclass(frozen=True)
class NotificationThresholds:
    daily_within_days: int = 7
    weekly_within_days: int = 30
    low_remaining: float = 2.0


def suggest_notification_frequency(
    facts: ProductFacts,
    now: date | datetime,
    thresholds: NotificationThresholds | None = None,
) -> NotificationFrequency:
    """Pick how often to remind the user about a product.

    Products without both dates get a monthly reminder; expired ones
    (or ones expiring today) get none. A small remainder or a close
    expiration date means daily.
    """
    thresholds = thresholds or NotificationThresholds()
    if facts.purchase_date is None or facts.expiration_date is None:
        return NotificationFrequency.MONTHLY

    today = as_day(now)
    clean, _ = normalize_facts(facts, today)
    days_to_expiry = (clean.expiration_date - today).days
    remaining = max(0.0, clean.quantity_bought - clean.quantity_consumed)

    if days_to_expiry <= 0:
        return NotificationFrequency.NEVER
    if remaining <= thresholds.low_remaining or days_to_expiry <= thresholds.daily_within_days:
        return NotificationFrequency.DAILY
    if days_to_expiry <= thresholds.weekly_within_days:
        return NotificationFrequency.WEEKLY
    return NotificationFrequency.MONTHLY
