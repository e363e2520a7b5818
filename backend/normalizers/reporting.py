"""Reporting ``graphData`` → chart slots.

Financial reports carry period series at month level (``timeSeries`` or
``monthlyData``) and year level (``yearlyData``), category breakdowns as an
object of totals or an array of ``{name, amount}`` records, and a handful of
headline totals.  ``net`` is derived as ``income - expense`` whenever the
record does not state it.
"""

from __future__ import annotations

from typing import Any

from backend.core.numbers import first_number, first_text, number_or_zero
from backend.core.schema import ChartDataset, ChartPoint, TimeSeriesPoint
from backend.normalizers.common import as_mapping, as_records, non_empty, object_points, optional_total


def _period_point(item: dict[str, Any], date_keys: tuple[str, ...], net_keys: tuple[str, ...]) -> TimeSeriesPoint:
    income = first_number(item, "income", "revenue")
    expense = first_number(item, "expense", "expenses")
    net = first_number(item, *net_keys) or number_or_zero(income - expense)
    return TimeSeriesPoint(
        date=first_text(*(item.get(key) for key in date_keys), default="") or None,
        income=income,
        expense=expense,
        net=net,
    )


def _series(value: Any, date_keys: tuple[str, ...], net_keys: tuple[str, ...]) -> list[TimeSeriesPoint] | None:
    records = as_records(value)
    if records is None:
        return None
    return non_empty([_period_point(item, date_keys, net_keys) for item in records])


def normalize(graph_data: Any) -> ChartDataset:
    dataset = ChartDataset(reporting_data=True)
    graph_data = as_mapping(graph_data)

    if graph_data.get("metrics"):
        dataset.metrics = graph_data["metrics"]

    dataset.time_series_data = _series(
        graph_data.get("timeSeries"),
        ("date", "month", "period", "year"),
        ("net", "profit"),
    )
    monthly = _series(graph_data.get("monthlyData"), ("month", "date"), ("net", "cashFlow"))
    if monthly:
        dataset.time_series_data = monthly
    dataset.yearly_data = _series(graph_data.get("yearlyData"), ("year", "date"), ("net", "cashFlow"))

    dataset.category_data = object_points(graph_data.get("categoriesByType"), with_amount=False)
    categories = as_records(graph_data.get("categories"))
    if categories:
        dataset.category_data = [
            ChartPoint(
                name=first_text(item.get("name"), item.get("category"), default="Unknown"),
                value=first_number(item, "amount", "value"),
            )
            for item in categories
        ]

    comparison = graph_data.get("comparison")
    if isinstance(comparison, list):
        dataset.comparison_data = non_empty(comparison)

    dataset.total_revenue = optional_total(graph_data, "totalRevenue")
    dataset.total_expenses = optional_total(graph_data, "totalExpenses")
    dataset.net_profit = optional_total(graph_data, "netProfit")
    return dataset
