"""Unit label lookup and quantity formatting helpers."""

from __future__ import annotations

import math
import re

# Canonical display label per unit name
_UNIT_LABELS: dict[str, str] = {
    "PIECES": "pcs",
    "GRAM": "g",
    "KILOGRAM": "kg",
    "LITER": "l",
    "MILLILITER": "ml",
    "OUNCE": "oz",
    "POUND": "lb",
    "CUP": "cup",
    "QUART": "qt",
    "GALLON": "gal",
    "BOTTLE": "bottle",
    "BOX": "box",
    "PACK": "pack",
}

# Common spellings seen in user input
_ALIASES: dict[str, str] = {
    "pc": "pcs",
    "piece": "pcs",
    "gr": "g",
    "grams": "g",
    "litre": "l",
    "liters": "l",
    "cups": "cup",
    "bottles": "bottle",
    "boxes": "box",
    "packs": "pack",
}

_QTY_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


def normalize_unit(text: str) -> str:
    """Map a unit name or label to its canonical label.

    Matching is case-insensitive on either the label ("kg") or the name
    ("KILOGRAM"). Unknown units are returned stripped but unchanged.
    """
    value = (text or "").strip()
    if not value:
        return "pcs"
    lower = value.lower()
    for name, label in _UNIT_LABELS.items():
        if lower == label or lower == name.lower():
            return label
    return _ALIASES.get(lower, value)


def parse_quantity(text: str) -> tuple[float, str]:
    """Parse strings like "500g" or "2 bottles".

    Returns:
        (amount, unit label). The unit defaults to "pcs" when omitted.

    Raises:
        ValueError: If the text is not a number followed by an optional unit.
    """
    m = _QTY_PATTERN.match(text or "")
    if not m:
        raise ValueError(f"Invalid quantity: {text!r}")
    return float(m.group(1)), normalize_unit(m.group(2))


def format_significant(value: float | None, sig_digits: int = 2) -> str:
    """Format a number with about ``sig_digits`` significant digits.

    Never uses scientific notation; at most 6 decimals. ``None`` and
    non-finite values render as "-".
    """
    if value is None or not math.isfinite(value):
        return "-"
    if value == 0:
        return f"{0:.{max(sig_digits, 2)}f}"
    magnitude = abs(value)
    digits_before = math.floor(math.log10(magnitude)) + 1 if magnitude >= 1 else 0
    decimals = min(max(sig_digits - digits_before, 0), 6)
    return f"{value:.{decimals}f}"


def format_quantity(value: float | None, unit: str, sig_digits: int = 3) -> str:
    if value is None:
        return "-"
    return f"{format_significant(value, sig_digits)} {normalize_unit(unit)}"


def format_percent(value: float | None, sig_digits: int = 3) -> str:
    if value is None or not math.isfinite(value):
        return "-"
    return f"{format_significant(value, sig_digits)}%"
