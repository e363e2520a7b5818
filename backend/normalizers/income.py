"""Income ``graphData`` → chart slots.

Channel and source breakdowns arrive either as ``{"Online": 5000}``
objects or, from older agents, as ``[{"name": "Online", "amount": 5000}]``
arrays.  The array form is applied last and therefore wins.
"""

from __future__ import annotations

from typing import Any

from backend.core.numbers import first_number, first_text
from backend.core.schema import ChartDataset, ChartPoint, TimeSeriesPoint
from backend.normalizers.common import as_mapping, as_records, non_empty, object_points, optional_total


def normalize(graph_data: Any) -> ChartDataset:
    dataset = ChartDataset(income_data=True)
    graph_data = as_mapping(graph_data)

    dataset.revenue_channel_data = object_points(graph_data.get("incomeByChannel"))
    dataset.income_source_data = object_points(graph_data.get("incomeBySource"))
    dataset.total_income = optional_total(graph_data, "totalIncome")

    sources = as_records(graph_data.get("sources"))
    if sources:
        dataset.income_source_data = [
            ChartPoint(
                name=first_text(item.get("name"), item.get("source"), default="Unknown"),
                value=first_number(item, "amount", "value"),
                amount=first_number(item, "amount", "value"),
            )
            for item in sources
        ]

    series = as_records(graph_data.get("timeSeries"))
    if series is not None:
        dataset.time_series_data = non_empty(
            [
                TimeSeriesPoint(
                    date=first_text(item.get("date"), item.get("month"), item.get("period"), default="") or None,
                    income=first_number(item, "amount", "income", "value"),
                    source=first_text(item.get("source"), default="Other"),
                )
                for item in series
            ]
        )

    channels = as_records(graph_data.get("channels"))
    if channels:
        dataset.revenue_channel_data = [
            ChartPoint(
                name=first_text(item.get("name"), item.get("channel"), default="Unknown"),
                value=first_number(item, "amount", "value"),
            )
            for item in channels
        ]
    return dataset
