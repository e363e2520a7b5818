"""Per-domain ``graphData`` normalizers."""

from __future__ import annotations

from typing import Any, Callable

from backend.core.schema import ChartDataset
from backend.extractors.detect import resolve_request_type

from . import compliance, expense, income, reporting

NORMALIZERS: dict[str, Callable[[Any], ChartDataset]] = {
    "compliance": compliance.normalize,
    "expense": expense.normalize,
    "income": income.normalize,
    "reporting": reporting.normalize,
}


def normalize_graph_data(request_type: str | None, graph_data: Any) -> ChartDataset:
    """Dispatch ``graph_data`` to the normalizer named by ``request_type``.

    Matching is case-insensitive; unknown types use the compliance normalizer.
    """

    key, _ = resolve_request_type(request_type)
    return NORMALIZERS[key](graph_data)


__all__ = ["NORMALIZERS", "normalize_graph_data"]
