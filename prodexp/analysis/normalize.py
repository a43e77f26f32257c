"""Defensive normalization of incoming product facts."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date

from .models import ProductFacts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Findings:
    """Input anomalies found while normalizing a ProductFacts value."""

    consumed_exceeds_bought: bool = False
    issues: tuple[str, ...] = ()

    @property
    def clean(self) -> bool:
        return not self.consumed_exceeds_bought and not self.issues


def _clean_quantity(value, label: str, issues: list[str]) -> float:
    try:
        number = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        issues.append(f"{label} is not a number. Treating it as 0.")
        return 0.0
    if not math.isfinite(number):
        issues.append(f"{label} is not a finite number. Treating it as 0.")
        return 0.0
    if number < 0:
        issues.append(f"{label} cannot be negative. Treating it as 0.")
        return 0.0
    return number


def normalize_facts(facts: ProductFacts, today: date) -> tuple[ProductFacts, Findings]:
    """Return facts safe for arithmetic, plus what had to be corrected.

    Quantities that are missing, NaN, infinite or negative become 0.
    ``quantity_consumed`` is *not* clamped to ``quantity_bought`` here;
    the overrun is reported and each calculation clamps on its own.
    """
    issues: list[str] = []
    bought = _clean_quantity(facts.quantity_bought, "Purchased quantity", issues)
    consumed = _clean_quantity(facts.quantity_consumed, "Consumed quantity", issues)

    purchase = facts.purchase_date
    expiration = facts.expiration_date
    if purchase is not None and expiration is not None and expiration < purchase:
        issues.append("Expiration date is before the purchase date.")
    if purchase is not None and purchase > today:
        issues.append("Purchase date is in the future. Consumption rate is unavailable.")

    findings = Findings(consumed_exceeds_bought=consumed > bought, issues=tuple(issues))
    if not findings.clean:
        logger.debug(
            "normalized facts: overrun=%s issues=%s",
            findings.consumed_exceeds_bought,
            findings.issues,
        )

    normalized = replace(facts, quantity_bought=bought, quantity_consumed=consumed)
    return normalized, findings
