"""Aggregation of raw record arrays into chart data.

Used for agent turns that carry a plain ``data`` array instead of
``graphData``.  Three record layouts are understood:

``financial``
    ``{date, amount, category, type}`` with ``type`` one of ``income`` /
    ``expense``.  Produces totals, an absolute per-category pie and a per-date
    income/expense/net series.
``timeseries``
    ``{timestamp, value, metric}``.  Produces a chronologically sorted line
    series and summary statistics.
anything else
    A count plus the first and last record, with the records echoed back.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import pandas as pd

from backend.core.numbers import first_text, number_or_zero

log = logging.getLogger(__name__)

DEFAULT_TYPE = "financial"


class InvalidDataError(ValueError):
    """Raised when the submitted ``data`` is not an array of records."""

    def __init__(self, message: str = "Invalid data format. Expected an array of records.") -> None:
        super().__init__(message)


def _records(data: Any) -> list[dict[str, Any]]:
    return [item if isinstance(item, dict) else {} for item in data]


def _as_float(value: Any) -> float:
    return float(value) if pd.notna(value) else 0.0


def process_financial(data: list[Any]) -> dict[str, Any]:
    today = date.today().isoformat()
    frame = pd.DataFrame(
        [
            {
                "date": first_text(item.get("date"), default=today),
                "category": first_text(item.get("category"), default="Uncategorized"),
                "amount": float(number_or_zero(item.get("amount"))),
                "type": item.get("type"),
            }
            for item in _records(data)
        ],
        columns=["date", "category", "amount", "type"],
    )

    is_income = frame["type"] == "income"
    is_expense = frame["type"] == "expense"
    total_income = _as_float(frame.loc[is_income, "amount"].sum())
    total_expense = _as_float(frame.loc[is_expense, "amount"].sum())

    by_category = frame.groupby("category", sort=False)["amount"].sum()
    pie_chart_data = [{"name": str(name), "value": abs(float(value))} for name, value in by_category.items()]

    # anything that is not income counts against the day
    frame["income"] = frame["amount"].where(is_income, 0.0)
    frame["expense"] = frame["amount"].where(~is_income, 0.0)
    by_date = frame.groupby("date", sort=True)[["income", "expense"]].sum()
    time_series_data = [
        {
            "date": str(day),
            "income": float(row["income"]),
            "expense": float(row["expense"]),
            "net": float(row["income"] - row["expense"]),
        }
        for day, row in by_date.iterrows()
    ]

    return {
        "summary": {
            "totalIncome": total_income,
            "totalExpense": total_expense,
            "netCashFlow": total_income - total_expense,
            "transactionCount": len(data),
        },
        "pieChartData": pie_chart_data,
        "timeSeriesData": time_series_data,
        "barChartData": time_series_data,
    }


def process_timeseries(data: list[Any]) -> dict[str, Any]:
    records = _records(data)
    points = [
        {
            "timestamp": item.get("timestamp"),
            "value": float(number_or_zero(item.get("value"))),
            "metric": first_text(item.get("metric"), default="value"),
        }
        for item in records
    ]
    moments = pd.to_datetime(
        pd.Series([point["timestamp"] for point in points], dtype=object),
        errors="coerce",
        utc=True,
        format="mixed",
    )
    # unparseable timestamps keep their relative order at the end
    order = moments.sort_values(kind="mergesort", na_position="last").index
    line_chart_data = [points[position] for position in order]

    values = pd.Series([point["value"] for point in points], dtype=float)
    summary = {
        "average": _as_float(values.mean()) if len(values) else 0.0,
        "max": _as_float(values.max()) if len(values) else 0.0,
        "min": _as_float(values.min()) if len(values) else 0.0,
        "count": len(records),
    }
    return {"summary": summary, "lineChartData": line_chart_data}


def process_generic(data: list[Any]) -> dict[str, Any]:
    return {
        "summary": {
            "count": len(data),
            "firstRecord": data[0] if data else None,
            "lastRecord": data[-1] if data else None,
        },
        "rawData": data,
    }


PROCESSORS = {
    "financial": process_financial,
    "timeseries": process_timeseries,
}


def process_data(data: Any, data_type: str | None = DEFAULT_TYPE) -> dict[str, Any]:
    """Aggregate ``data`` according to ``data_type``.

    Raises :class:`InvalidDataError` when ``data`` is not a list.
    """

    if not isinstance(data, list):
        raise InvalidDataError()

    data_type = data_type or DEFAULT_TYPE
    log.info("Processing %d records of type %s", len(data), data_type)
    processor = PROCESSORS.get(data_type, process_generic)
    return processor(data)


__all__ = [
    "DEFAULT_TYPE",
    "InvalidDataError",
    "process_data",
    "process_financial",
    "process_generic",
    "process_timeseries",
]
