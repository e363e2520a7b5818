"""Expense ``graphData`` → chart slots."""

from __future__ import annotations

from typing import Any

from backend.core.numbers import first_number, first_text
from backend.core.schema import ChartDataset, ChartPoint, TimeSeriesPoint
from backend.normalizers.common import as_mapping, as_records, non_empty, object_points, optional_total


def normalize(graph_data: Any) -> ChartDataset:
    dataset = ChartDataset(expense_data=True)
    graph_data = as_mapping(graph_data)

    dataset.expense_category_data = object_points(graph_data.get("expensesByCategory"))
    dataset.total_expenses = optional_total(graph_data, "totalExpenses")

    # legacy array form replaces the object form when both are sent
    categories = as_records(graph_data.get("categories"))
    if categories:
        dataset.expense_category_data = [
            ChartPoint(
                name=first_text(item.get("name"), item.get("category"), default="Unknown"),
                value=first_number(item, "amount", "value"),
                amount=first_number(item, "amount", "value"),
            )
            for item in categories
        ]

    series = as_records(graph_data.get("timeSeries"))
    if series is not None:
        dataset.time_series_data = non_empty(
            [
                TimeSeriesPoint(
                    date=first_text(item.get("date"), item.get("month"), item.get("period"), default="") or None,
                    expense=first_number(item, "amount", "expense", "value"),
                    category=first_text(item.get("category"), default="Other"),
                )
                for item in series
            ]
        )

    top = as_records(graph_data.get("topExpenses"))
    if top is not None:
        dataset.top_expenses_data = non_empty(
            [
                ChartPoint(
                    name=first_text(item.get("name"), item.get("description"), default="Expense"),
                    value=first_number(item, "amount", "value"),
                )
                for item in top
            ]
        )
    return dataset
