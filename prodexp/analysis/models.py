"""Data models for product facts and their derived analysis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class ProductStatus(str, Enum):
    """Lifecycle classification of a tracked product."""

    AVAILABLE = "AVAILABLE"
    FINISHED = "FINISHED"
    EXPIRED = "EXPIRED"
    EXPIRED_AND_FINISHED = "EXPIRED_AND_FINISHED"

    @property
    def is_terminal(self) -> bool:
        return self is not ProductStatus.AVAILABLE


class NotificationFrequency(str, Enum):
    """How often reminders should be sent for a product."""

    NEVER = "NEVER"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"


@dataclass(frozen=True)
class ProductFacts:
    """Quantity and date facts of a single product, as stored by the caller."""

    quantity_bought: float
    quantity_consumed: float = 0.0
    unit: str = "pcs"
    purchase_date: date | None = None
    expiration_date: date | None = None  # None: does not expire
    persisted_status: ProductStatus | None = None  # advisory, never read by analyze()


@dataclass(frozen=True)
class ProductAnalysis:
    """Everything derived from a ProductFacts value at a given day.

    ``None`` in any optional field means "not computable" for this input.
    """

    remaining_quantity: float
    percent_consumed: float
    percent_remaining: float
    days_until_expiration: int | None
    months_until_expiration: int | None
    years_until_expiration: int | None
    is_expired: bool
    days_since_purchase: int
    current_avg_daily_consumption: float | None
    recommended_daily_to_finish: float | None
    recommended_monthly_to_finish: float | None
    estimated_finish_date: date | None
    estimated_days_to_finish_from_now: int | None
    status_suggestion: ProductStatus
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Return a JSON-compatible dict (ISO dates, enum values as strings)."""
        return {
            "remainingQuantity": self.remaining_quantity,
            "percentConsumed": self.percent_consumed,
            "percentRemaining": self.percent_remaining,
            "daysUntilExpiration": self.days_until_expiration,
            "monthsUntilExpiration": self.months_until_expiration,
            "yearsUntilExpiration": self.years_until_expiration,
            "isExpired": self.is_expired,
            "daysSincePurchase": self.days_since_purchase,
            "currentAvgDailyConsumption": self.current_avg_daily_consumption,
            "recommendedDailyToFinish": self.recommended_daily_to_finish,
            "recommendedMonthlyToFinish": self.recommended_monthly_to_finish,
            "estimatedFinishDate": (
                self.estimated_finish_date.isoformat()
                if self.estimated_finish_date
                else None
            ),
            "estimatedDaysToFinishFromNow": self.estimated_days_to_finish_from_now,
            "statusSuggestion": self.status_suggestion.value,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class StatusReconciliation:
    """Persisted vs. freshly derived status of one product."""

    product_id: object
    persisted_status: ProductStatus | None
    derived_status: ProductStatus

    @property
    def changed(self) -> bool:
        return self.persisted_status != self.derived_status


def as_day(now: date | datetime) -> date:
    """Reduce a date or datetime to its calendar date."""
    if isinstance(now, datetime):
        return now.date()
    return now
