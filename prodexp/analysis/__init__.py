"""Consumption analysis and lifecycle status engine."""

from .advisories import AnalysisThresholds, build_warnings
from .engine import analyze, months_between
from .models import (
    NotificationFrequency,
    ProductAnalysis,
    ProductFacts,
    ProductStatus,
    StatusReconciliation,
)
from .normalize import Findings, normalize_facts
from .notifications import NotificationThresholds, suggest_notification_frequency
from .status import derive_status, reconcile_statuses

__all__ = [
    "ProductFacts",
    "ProductAnalysis",
    "ProductStatus",
    "NotificationFrequency",
    "StatusReconciliation",
    "AnalysisThresholds",
    "NotificationThresholds",
    "Findings",
    "analyze",
    "derive_status",
    "reconcile_statuses",
    "normalize_facts",
    "build_warnings",
    "suggest_notification_frequency",
    "months_between",
]
