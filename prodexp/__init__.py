"""Food inventory tracking with consumption analysis."""

from .analysis import (
    NotificationFrequency,
    ProductAnalysis,
    ProductFacts,
    ProductStatus,
    StatusReconciliation,
    analyze,
    derive_status,
    reconcile_statuses,
    suggest_notification_frequency,
)
from .config import AppConfig, load_config
from .db import ProductStore
from .sequencing import ResponseSequencer
from .service import InvalidProductError, ProductNotFoundError, ProductService

__all__ = [
    "ProductFacts",
    "ProductAnalysis",
    "ProductStatus",
    "NotificationFrequency",
    "StatusReconciliation",
    "analyze",
    "derive_status",
    "reconcile_statuses",
    "suggest_notification_frequency",
    "AppConfig",
    "load_config",
    "ProductStore",
    "ProductService",
    "ProductNotFoundError",
    "InvalidProductError",
    "ResponseSequencer",
]
