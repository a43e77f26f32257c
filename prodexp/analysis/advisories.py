"""Human-readable warnings derived from an analysis."""

from __future__ import annotations

from dataclasses import dataclass

from .models import ProductFacts
from .normalize import Findings


@dataclass(frozen=True)
class AnalysisThresholds:
    """Tunable limits for warning generation."""

    urgent_days: int = 3        # expiring within this many days is urgent
    fast_pace_ratio: float = 1.5  # pace above ratio x recommended is flagged


def _num(value: float) -> str:
    if 0 < abs(value) < 0.01:
        return f"{value:.2g}"
    return f"{round(value, 2):g}"


def expiration_warning(
    days_until_expiration: int | None,
    remaining: float,
    unit: str,
    thresholds: AnalysisThresholds,
) -> str | None:
    if days_until_expiration is None or remaining <= 0:
        return None
    if days_until_expiration < 0:
        return (
            f"This product has expired with {_num(remaining)} {unit} remaining. "
            "Consider discarding it."
        )
    if days_until_expiration == 0:
        return "URGENT: Expires today!"
    if days_until_expiration <= thresholds.urgent_days:
        plural = "day" if days_until_expiration == 1 else "days"
        return f"URGENT: Only {days_until_expiration} {plural} until expiration!"
    return None


def slow_pace_warning(
    pace: float | None,
    recommended: float | None,
    terminal: bool,
) -> str | None:
    if terminal or pace is None or recommended is None:
        return None
    if pace < recommended:
        return (
            f"Current pace ({_num(pace)}/day) is below the recommended pace "
            f"({_num(recommended)}/day). At this rate it will not be finished in time."
        )
    return None


def fast_pace_warning(
    pace: float | None,
    recommended: float | None,
    thresholds: AnalysisThresholds,
) -> str | None:
    if pace is None or recommended is None:
        return None
    if pace > thresholds.fast_pace_ratio * recommended:
        return (
            f"Current pace ({_num(pace)}/day) is unusually fast compared to the "
            f"recommended pace ({_num(recommended)}/day). "
            "Check the recorded consumption if this is unexpected."
        )
    return None


def integrity_warnings(facts: ProductFacts, findings: Findings) -> list[str]:
    out: list[str] = []
    if findings.consumed_exceeds_bought:
        out.append(
            f"Consumed quantity ({_num(facts.quantity_consumed)}) exceeds purchased "
            f"quantity ({_num(facts.quantity_bought)}). Please correct the recorded amounts."
        )
    out.extend(findings.issues)
    return out


def build_warnings(
    *,
    facts: ProductFacts,
    findings: Findings,
    remaining: float,
    days_until_expiration: int | None,
    pace: float | None,
    recommended: float | None,
    terminal: bool,
    thresholds: AnalysisThresholds | None = None,
) -> tuple[str, ...]:
    """Collect warnings in their fixed order.

    Order: expiration urgency, slow pace, fast pace, data integrity.
    Each check looks only at the values passed in, never at another
    check's result.
    """
    thresholds = thresholds or AnalysisThresholds()
    candidates = [
        expiration_warning(days_until_expiration, remaining, facts.unit, thresholds),
        slow_pace_warning(pace, recommended, terminal),
        fast_pace_warning(pace, recommended, thresholds),
    ]
    warnings = [w for w in candidates if w is not None]
    warnings.extend(integrity_warnings(facts, findings))
    return tuple(warnings)
