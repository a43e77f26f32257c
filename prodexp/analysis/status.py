"""Lifecycle status classification and batch reconciliation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from .models import ProductFacts, ProductStatus, StatusReconciliation, as_day
from .normalize import normalize_facts


def is_finished(facts: ProductFacts) -> bool:
    """A product with nothing bought is never finished."""
    return facts.quantity_bought > 0 and facts.quantity_consumed >= facts.quantity_bought


def is_expired(facts: ProductFacts, today: date) -> bool:
    """The expiration day itself is still usable."""
    return facts.expiration_date is not None and facts.expiration_date < today


def classify(finished: bool, expired: bool) -> ProductStatus:
    if finished and expired:
        return ProductStatus.EXPIRED_AND_FINISHED
    if expired:
        return ProductStatus.EXPIRED
    if finished:
        return ProductStatus.FINISHED
    return ProductStatus.AVAILABLE


def derive_status(facts: ProductFacts, now: date | datetime) -> ProductStatus:
    """Classify a product from its quantities and expiration date.

    Never raises; ``persisted_status`` is ignored.
    """
    today = as_day(now)
    clean, _ = normalize_facts(facts, today)
    return classify(is_finished(clean), is_expired(clean, today))


def reconcile_statuses(
    products: Iterable[tuple[object, ProductFacts]],
    now: date | datetime,
) -> list[StatusReconciliation]:
    """Compare each product's persisted status with a freshly derived one.

    Args:
        products: ``(product_id, facts)`` pairs.
        now: Day the statuses are derived for.

    Returns:
        One StatusReconciliation per product, in input order. Nothing is
        written; persisting the changed ones is up to the caller.
    """
    return [
        StatusReconciliation(
            product_id=product_id,
            persisted_status=facts.persisted_status,
            derived_status=derive_status(facts, now),
        )
        for product_id, facts in products
    ]
