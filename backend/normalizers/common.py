"""Shape probing helpers shared by the domain normalizers."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, TypeVar

from backend.core.numbers import first_text, number_or_zero, to_number
from backend.core.schema import ChartPoint

T = TypeVar("T")


def as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_records(value: Any) -> list[dict[str, Any]] | None:
    """Return a legacy array of objects; non-object entries become ``{}``."""

    if not isinstance(value, list):
        return None
    return [item if isinstance(item, dict) else {} for item in value]


def non_empty(items: Sequence[T] | None) -> list[T] | None:
    return list(items) if items else None


def is_count(value: Any) -> bool:
    return to_number(value) is not None and not isinstance(value, str)


def object_points(value: Any, *, with_amount: bool = True) -> list[ChartPoint] | None:
    """``{"Rent": 1200, "Payroll": 5400}`` → one point per key.

    Non-numeric values are charted as ``0``.  Returns ``None`` when ``value``
    is not an object or has no keys.
    """

    if not isinstance(value, dict):
        return None
    points: list[ChartPoint] = []
    for name, raw in value.items():
        number = number_or_zero(raw)
        point = ChartPoint(name=first_text(name, default="Unknown"), value=number)
        if with_amount:
            point.amount = number
        points.append(point)
    return non_empty(points)


def optional_total(graph_data: Mapping[str, Any], key: str) -> int | float | None:
    if key not in graph_data:
        return None
    return to_number(graph_data[key])
