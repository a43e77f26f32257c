"""Product CRUD operations."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date
from pathlib import Path

from ..analysis import NotificationFrequency, ProductFacts, ProductStatus
from .schema import ensure_schema

logger = logging.getLogger(__name__)

_UPDATABLE = {
    "user_id",
    "name",
    "quantity_bought",
    "quantity_consumed",
    "unit",
    "purchase_date",
    "expiration_date",
    "status",
    "notification_frequency",
    "tags",
}


def _to_db(column: str, value):
    if value is None:
        return None
    if column == "tags":
        return json.dumps(list(value), ensure_ascii=False)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (ProductStatus, NotificationFrequency)):
        return value.value
    return value


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring malformed date %r", value)
        return None


class ProductStore:
    """Manages the products table."""

    def __init__(self, db_path: str | Path = "~/.config/prodexp/products.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def add_product(
        self,
        user_id: str,
        name: str,
        quantity_bought: float,
        quantity_consumed: float = 0.0,
        unit: str = "pcs",
        purchase_date: date | None = None,
        expiration_date: date | None = None,
        status: ProductStatus | None = None,
        notification_frequency: NotificationFrequency | None = None,
        tags: list[str] | None = None,
    ) -> int:
        """Insert a product.

        Returns:
            The new row ID.
        """
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO products
               (user_id, name, quantity_bought, quantity_consumed, unit,
                purchase_date, expiration_date, status,
                notification_frequency, tags)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                user_id,
                name,
                quantity_bought,
                quantity_consumed,
                unit,
                _to_db("purchase_date", purchase_date),
                _to_db("expiration_date", expiration_date),
                _to_db("status", status),
                _to_db("notification_frequency", notification_frequency),
                _to_db("tags", tags or []),
            ),
        )
        conn.commit()
        return cur.lastrowid

    def get_product(self, product_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        return self._row_to_dict(row) if row else None

    def list_products(
        self,
        user_id: str,
        statuses: list[ProductStatus] | None = None,
    ) -> list[dict]:
        """Return a user's products ordered by expiration date.

        Products without an expiration date come last.
        """
        conn = self._get_conn()
        sql = "SELECT * FROM products WHERE user_id = ?"
        params: list = [user_id]
        if statuses:
            sql += f" AND status IN ({', '.join('?' for _ in statuses)})"
            params.extend(s.value for s in statuses)
        sql += " ORDER BY expiration_date IS NULL, expiration_date, id"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_dict(r) for r in rows]

    def list_user_ids(self) -> list[str]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT DISTINCT user_id FROM products ORDER BY user_id"
        ).fetchall()
        return [r["user_id"] for r in rows]

    def update_product(self, product_id: int, **fields) -> None:
        """Update the given columns of a product.

        Raises:
            ValueError: If a field is not an updatable column.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown product fields: {', '.join(sorted(unknown))}")
        if not fields:
            return
        assignments = ", ".join(f"{column} = ?" for column in fields)
        values = [_to_db(column, value) for column, value in fields.items()]
        conn = self._get_conn()
        conn.execute(
            f"""UPDATE products
                SET {assignments},
                    updated_at = datetime('now', 'localtime')
                WHERE id = ?""",
            (*values, product_id),
        )
        conn.commit()

    def set_statuses(self, statuses: dict[int, ProductStatus]) -> int:
        """Write several statuses in one transaction.

        Returns:
            Number of rows updated.
        """
        if not statuses:
            return 0
        conn = self._get_conn()
        count = 0
        with conn:
            for product_id, status in statuses.items():
                cur = conn.execute(
                    """UPDATE products
                       SET status = ?,
                           updated_at = datetime('now', 'localtime')
                       WHERE id = ?""",
                    (status.value, product_id),
                )
                count += cur.rowcount
        return count

    def delete_product(self, product_id: int) -> bool:
        """Delete a product by ID. Returns False if it did not exist."""
        conn = self._get_conn()
        cur = conn.execute("DELETE FROM products WHERE id = ?", (product_id,))
        conn.commit()
        return cur.rowcount > 0

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> dict:
        item = dict(row)
        item["tags"] = json.loads(item.get("tags") or "[]")
        return item

    @staticmethod
    def to_facts(product: dict) -> ProductFacts:
        """Build the analysis input from a stored product."""
        status = product.get("status")
        try:
            persisted = ProductStatus(status) if status else None
        except ValueError:
            logger.warning("Ignoring unknown stored status %r", status)
            persisted = None
        return ProductFacts(
            quantity_bought=product.get("quantity_bought") or 0.0,
            quantity_consumed=product.get("quantity_consumed") or 0.0,
            unit=product.get("unit") or "pcs",
            purchase_date=_parse_date(product.get("purchase_date")),
            expiration_date=_parse_date(product.get("expiration_date")),
            persisted_status=persisted,
        )
