"""Numeric coercion helpers shared by the extractors and normalizers.

Agent payloads are produced by an LLM, so numbers arrive as JSON numbers,
formatted strings ("$1,200.50") or not at all.  Every helper here returns a
finite number or ``None``; nothing raises on malformed input.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Mapping

Number = int | float

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def to_number(value: Any) -> Number | None:
    """Return ``value`` as a finite number, accepting numeric strings."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        result = float(value)
        return result if math.isfinite(result) else None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
        return result if math.isfinite(result) else None
    return None


def parse_numeric_text(text: Any) -> float | None:
    """Strip everything but digits, dots and minus signs, then parse.

    ``"$1,200.50"`` becomes ``1200.5`` while ``"Marketing"`` or
    ``"2025-01-15"`` do not parse and yield ``None``.
    """

    if text is None:
        return None
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return to_number(text)
    stripped = _NON_NUMERIC.sub("", str(text))
    if not stripped:
        return None
    try:
        result = float(stripped)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def number_or_zero(value: Any) -> Number:
    number = to_number(value)
    return 0 if number is None else number


def first_number(item: Mapping[str, Any], *keys: str) -> Number:
    """Return the first non-zero number found under ``keys``, else ``0``."""

    for key in keys:
        number = to_number(item.get(key))
        if number:
            return number
    return 0


def first_text(*values: Any, default: str) -> str:
    """Return the first truthy value rendered as text, else ``default``."""

    for value in values:
        if value is None or isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            if value:
                return label_text(value)
            continue
        text = str(value).strip()
        if text:
            return text
    return default


def label_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
