"""Consumption analysis: remaining stock, pace, projection and warnings."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta

from .advisories import AnalysisThresholds, build_warnings
from .models import ProductAnalysis, ProductFacts, as_day
from .normalize import normalize_facts
from .status import classify, is_expired, is_finished


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, truncated toward zero."""
    packed_start = (start.year * 12 + start.month - 1) * 32 + start.day
    packed_end = (end.year * 12 + end.month - 1) * 32 + end.day
    return int((packed_end - packed_start) / 32)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def analyze(
    facts: ProductFacts,
    now: date | datetime,
    thresholds: AnalysisThresholds | None = None,
) -> ProductAnalysis:
    """Analyze a product's consumption as of ``now``.

    Args:
        facts: Quantities and dates of the product.
        now: Current day (a datetime is reduced to its date).
        thresholds: Warning limits; defaults to AnalysisThresholds().

    Returns:
        A new ProductAnalysis. Never raises for well-typed input; bad
        quantities are normalized and reported in ``warnings``.
    """
    today = as_day(now)
    clean, findings = normalize_facts(facts, today)
    bought = clean.quantity_bought
    consumed = clean.quantity_consumed

    remaining = max(0.0, bought - consumed)
    percent_consumed = 0.0 if bought <= 0 else _clamp(consumed / bought * 100.0, 0.0, 100.0)
    percent_consumed = round(percent_consumed, 2)

    expired = is_expired(clean, today)
    status = classify(is_finished(clean), expired)
    terminal = status.is_terminal

    # Expiration
    days_until_expiration = None
    months_until_expiration = None
    years_until_expiration = None
    if clean.expiration_date is not None:
        days_until_expiration = (clean.expiration_date - today).days
        months_until_expiration = months_between(today, clean.expiration_date)
        years_until_expiration = int(months_until_expiration / 12)

    # Pace since purchase
    days_since_purchase = 0
    if clean.purchase_date is not None:
        days_since_purchase = max(0, (today - clean.purchase_date).days)

    raw_pace = None
    pace = None
    if days_since_purchase > 0 and consumed > 0:
        raw_pace = consumed / days_since_purchase
        # tiny rates keep their full value rather than rounding to 0
        pace = round(raw_pace, 6) or raw_pace

    # Recommendation to finish by the expiration date
    raw_recommended = None
    recommended_daily = None
    recommended_monthly = None
    if not terminal and days_until_expiration is not None and days_until_expiration > 0:
        raw_recommended = remaining / days_until_expiration
        recommended_daily = round(raw_recommended, 6) or raw_recommended
        if months_until_expiration is not None and months_until_expiration > 0:
            recommended_monthly = round(remaining / months_until_expiration, 6)

    # Projection at the current pace
    finish_date = None
    days_to_finish = None
    if not terminal and raw_pace is not None:
        # remaining / (consumed / days) without the intermediate rounding
        days_to_finish = math.ceil(round(remaining * days_since_purchase / consumed, 9))
        try:
            finish_date = today + timedelta(days=days_to_finish)
        except OverflowError:
            # beyond date.max: the day count is still reported
            finish_date = None

    warnings = build_warnings(
        facts=clean,
        findings=findings,
        remaining=round(remaining, 4),
        days_until_expiration=days_until_expiration,
        pace=raw_pace,
        recommended=raw_recommended,
        terminal=terminal,
        thresholds=thresholds,
    )

    return ProductAnalysis(
        remaining_quantity=round(remaining, 4),
        percent_consumed=percent_consumed,
        percent_remaining=round(100.0 - percent_consumed, 2),
        days_until_expiration=days_until_expiration,
        months_until_expiration=months_until_expiration,
        years_until_expiration=years_until_expiration,
        is_expired=expired,
        days_since_purchase=days_since_purchase,
        current_avg_daily_consumption=pace,
        recommended_daily_to_finish=recommended_daily,
        recommended_monthly_to_finish=recommended_monthly,
        estimated_finish_date=finish_date,
        estimated_days_to_finish_from_now=days_to_finish,
        status_suggestion=status,
        warnings=warnings,
    )
