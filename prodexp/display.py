"""Terminal rendering of product analyses."""

from __future__ import annotations

from .analysis import ProductAnalysis, ProductFacts
from .units import format_percent, format_quantity, format_significant, normalize_unit


def _num(value: float, places: int = 2) -> str:
    return f"{round(value, places):g}"


def expiration_phrase(days_until_expiration: int | None) -> str:
    if days_until_expiration is None:
        return "No expiration date"
    if days_until_expiration < 0:
        return f"Expired {abs(days_until_expiration)} days ago"
    if days_until_expiration == 0:
        return "Expires TODAY"
    return f"Expires in {days_until_expiration} days"


def format_summary(facts: ProductFacts, analysis: ProductAnalysis) -> str:
    """One-line summary, e.g.

    ``Bought: 10 | Consumed: 4 (40%) | Remaining: 6 | Expires in 5 days | Status: AVAILABLE``
    """
    return " | ".join([
        f"Bought: {_num(facts.quantity_bought)}",
        f"Consumed: {_num(facts.quantity_consumed)} ({_num(analysis.percent_consumed, 1)}%)",
        f"Remaining: {_num(analysis.remaining_quantity)}",
        expiration_phrase(analysis.days_until_expiration),
        f"Status: {analysis.status_suggestion.value}",
    ])


def render_analysis(name: str, facts: ProductFacts, analysis: ProductAnalysis) -> str:
    """Multi-line human-readable report for one product."""
    unit = normalize_unit(facts.unit)
    pace = analysis.current_avg_daily_consumption
    recommended = analysis.recommended_daily_to_finish

    lines = [
        f"{name} [{analysis.status_suggestion.value}]",
        f"  {format_summary(facts, analysis)}",
        f"  Remaining:     {format_quantity(analysis.remaining_quantity, unit)}"
        f" ({format_percent(analysis.percent_remaining)})",
        f"  Since purchase: {analysis.days_since_purchase} days",
        f"  Current pace:  "
        + (f"{format_significant(pace, 3)} {unit}/day" if pace is not None else "not enough data"),
        f"  Recommended:   "
        + (f"{format_significant(recommended, 3)} {unit}/day" if recommended is not None else "-"),
    ]
    if analysis.recommended_monthly_to_finish is not None:
        lines.append(
            f"                 {format_significant(analysis.recommended_monthly_to_finish, 3)}"
            f" {unit}/month"
        )
    if analysis.estimated_finish_date is not None:
        lines.append(
            f"  Finish by:     {analysis.estimated_finish_date.isoformat()}"
            f" (in {analysis.estimated_days_to_finish_from_now} days)"
        )
    for warning in analysis.warnings:
        lines.append(f"  ! {warning}")
    return "\n".join(lines)
