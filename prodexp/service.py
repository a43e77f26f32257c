"""Product operations that connect the store with the analysis engine."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime

from .analysis import (
    NotificationFrequency,
    ProductAnalysis,
    ProductFacts,
    ProductStatus,
    analyze,
    derive_status,
    reconcile_statuses,
    suggest_notification_frequency,
)
from .config import AppConfig
from .db import ProductStore
from .units import normalize_unit

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    """Raised when a product ID does not exist."""


class InvalidProductError(ValueError):
    """Raised when a product request fails validation."""


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _check_quantity(value, label: str) -> float:
    if value is None:
        raise InvalidProductError(f"{label} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidProductError(f"{label} must be a number") from None
    if not math.isfinite(number) or number < 0:
        raise InvalidProductError(f"{label} must be non-negative")
    return number


def validate_product(
    user_id: str | None,
    name: str | None,
    quantity_bought,
    quantity_consumed,
    unit: str | None,
    purchase_date: date | None,
    expiration_date: date | None,
) -> tuple[float, float]:
    """Validate a create/update request.

    Returns:
        The (bought, consumed) quantities as floats.

    Raises:
        InvalidProductError: On the first failed check.
    """
    if _is_blank(user_id):
        raise InvalidProductError("userId is required")
    if _is_blank(name):
        raise InvalidProductError("name is required")
    if _is_blank(unit):
        raise InvalidProductError("unit is required")
    bought = _check_quantity(quantity_bought, "quantityBought")
    consumed = _check_quantity(quantity_consumed, "quantityConsumed")
    if consumed > bought:
        raise InvalidProductError("quantityConsumed cannot exceed quantityBought")
    if (
        purchase_date is not None
        and expiration_date is not None
        and expiration_date < purchase_date
    ):
        raise InvalidProductError("expirationDate cannot be before purchaseDate")
    return bought, consumed


class ProductService:
    """Validates requests, persists products and runs the analysis on them.

    Every method that depends on the current day takes ``now`` explicitly.
    """

    def __init__(self, store: ProductStore, config: AppConfig | None = None) -> None:
        self._store = store
        self._config = config or AppConfig()

    def _require(self, product_id: int) -> dict:
        product = self._store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product with id '{product_id}' not found")
        return product

    def _frequency(self, facts: ProductFacts, now: date | datetime) -> NotificationFrequency:
        return suggest_notification_frequency(
            facts, now, self._config.notifications.thresholds()
        )

    def create_product(
        self,
        user_id: str,
        name: str,
        quantity_bought: float,
        now: date | datetime,
        quantity_consumed: float = 0.0,
        unit: str = "pcs",
        purchase_date: date | None = None,
        expiration_date: date | None = None,
        tags: list[str] | None = None,
    ) -> dict:
        """Validate and store a new product with its derived status."""
        bought, consumed = validate_product(
            user_id, name, quantity_bought, quantity_consumed, unit,
            purchase_date, expiration_date,
        )
        facts = ProductFacts(
            quantity_bought=bought,
            quantity_consumed=consumed,
            unit=normalize_unit(unit),
            purchase_date=purchase_date,
            expiration_date=expiration_date,
        )
        product_id = self._store.add_product(
            user_id=user_id.strip(),
            name=name.strip(),
            quantity_bought=bought,
            quantity_consumed=consumed,
            unit=facts.unit,
            purchase_date=purchase_date,
            expiration_date=expiration_date,
            status=derive_status(facts, now),
            notification_frequency=self._frequency(facts, now),
            tags=[t.strip() for t in tags or [] if t and t.strip()],
        )
        logger.info("Created product %d (%s) for user %s", product_id, name, user_id)
        return self._require(product_id)

    def get_product(self, product_id: int) -> dict:
        return self._require(product_id)

    def list_products(
        self,
        user_id: str,
        statuses: list[ProductStatus] | None = None,
    ) -> list[dict]:
        if _is_blank(user_id):
            raise InvalidProductError("userId is required")
        return self._store.list_products(user_id, statuses=statuses)

    def analyze_product(
        self,
        product_id: int,
        now: date | datetime,
    ) -> tuple[dict, ProductAnalysis]:
        """Run the analysis for a stored product.

        Returns:
            (stored product, analysis)
        """
        product = self._require(product_id)
        facts = self._store.to_facts(product)
        analysis = analyze(facts, now, self._config.analysis.thresholds())
        return product, analysis

    def update_product(self, product_id: int, now: date | datetime, **changes) -> dict:
        """Apply field changes, re-validate and recompute derived columns."""
        current = self._require(product_id)
        merged = {**current, **changes}
        bought, consumed = validate_product(
            merged.get("user_id"),
            merged.get("name"),
            merged.get("quantity_bought"),
            merged.get("quantity_consumed"),
            merged.get("unit"),
            self._as_date(merged.get("purchase_date")),
            self._as_date(merged.get("expiration_date")),
        )
        changes["quantity_bought"] = bought
        changes["quantity_consumed"] = consumed
        if "unit" in changes:
            changes["unit"] = normalize_unit(changes["unit"])
        self._store.update_product(product_id, **changes)
        return self._refresh_derived(product_id, now, keep_frequency=False)

    def set_consumed(self, product_id: int, total: float, now: date | datetime) -> dict:
        """Set the cumulative consumed quantity."""
        product = self._require(product_id)
        consumed = _check_quantity(total, "quantityConsumed")
        bought = product["quantity_bought"]
        # float drift from summed increments must not leave a sliver unconsumed
        if math.isclose(consumed, bought, rel_tol=1e-9, abs_tol=1e-9):
            consumed = bought
        if consumed > bought:
            raise InvalidProductError("quantityConsumed cannot exceed quantityBought")
        self._store.update_product(product_id, quantity_consumed=consumed)
        return self._refresh_derived(product_id, now)

    def record_consumption(self, product_id: int, amount: float, now: date | datetime) -> dict:
        """Add ``amount`` to the consumed quantity."""
        product = self._require(product_id)
        increment = _check_quantity(amount, "amount")
        total = round(product["quantity_consumed"] + increment, 9)
        return self.set_consumed(product_id, total, now)

    def set_notification_frequency(
        self,
        product_id: int,
        frequency: NotificationFrequency | None,
    ) -> dict:
        if frequency is None:
            raise InvalidProductError("notificationFrequency is required")
        self._require(product_id)
        self._store.update_product(product_id, notification_frequency=frequency)
        return self._require(product_id)

    def delete_product(self, product_id: int) -> None:
        if not self._store.delete_product(product_id):
            raise ProductNotFoundError(f"Product with id '{product_id}' not found")
        logger.info("Deleted product %d", product_id)

    def recompute_statuses_for_user(self, user_id: str, now: date | datetime) -> int:
        """Persist freshly derived statuses for all of a user's products.

        Returns:
            Number of products whose stored status changed.
        """
        if _is_blank(user_id):
            raise InvalidProductError("userId is required")
        products = self._store.list_products(user_id)
        results = reconcile_statuses(
            ((p["id"], self._store.to_facts(p)) for p in products), now
        )
        changed = {r.product_id: r.derived_status for r in results if r.changed}
        count = self._store.set_statuses(changed)
        logger.info(
            "Recomputed statuses for user %s: %d of %d changed",
            user_id, count, len(products),
        )
        return count

    def recompute_all_statuses(self, now: date | datetime, user_ids: list[str] | None = None) -> int:
        total = 0
        for user_id in user_ids or self._store.list_user_ids():
            total += self.recompute_statuses_for_user(user_id, now)
        return total

    def _refresh_derived(
        self,
        product_id: int,
        now: date | datetime,
        keep_frequency: bool = True,
    ) -> dict:
        product = self._require(product_id)
        facts = self._store.to_facts(product)
        fields: dict = {"status": derive_status(facts, now)}
        if not keep_frequency or not product.get("notification_frequency"):
            fields["notification_frequency"] = self._frequency(facts, now)
        self._store.update_product(product_id, **fields)
        return self._require(product_id)

    @staticmethod
    def _as_date(value) -> date | None:
        if value is None or isinstance(value, date):
            return value
        return date.fromisoformat(value)
