from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.process_data import InvalidDataError, process_data


TRANSACTIONS = [
    {"date": "2025-01-02", "amount": "1,200", "category": "Sales", "type": "income"},
    {"date": "2025-01-01", "amount": 300, "category": "Rent", "type": "expense"},
    {"date": "2025-01-02", "amount": 50, "category": "Rent", "type": "expense"},
    {"date": "2025-01-01", "amount": -20, "type": "refund"},
]


def test_financial_summary_and_charts():
    result = process_data(TRANSACTIONS, "financial")

    assert result["summary"] == {
        "totalIncome": 1200.0,
        "totalExpense": 350.0,
        "netCashFlow": 850.0,
        "transactionCount": 4,
    }
    assert result["pieChartData"] == [
        {"name": "Sales", "value": 1200.0},
        {"name": "Rent", "value": 350.0},
        {"name": "Uncategorized", "value": 20.0},
    ]
    # records that are not income count as expense for the day
    assert result["timeSeriesData"] == [
        {"date": "2025-01-01", "income": 0.0, "expense": 280.0, "net": -280.0},
        {"date": "2025-01-02", "income": 1200.0, "expense": 50.0, "net": 1150.0},
    ]
    assert result["barChartData"] == result["timeSeriesData"]


def test_financial_defaults_missing_dates_to_today():
    result = process_data([{"amount": 10, "type": "income"}])

    assert result["timeSeriesData"] == [
        {"date": date.today().isoformat(), "income": 10.0, "expense": 0.0, "net": 10.0}
    ]


def test_financial_empty_records():
    result = process_data([], "financial")

    assert result["summary"]["transactionCount"] == 0
    assert result["pieChartData"] == []
    assert result["timeSeriesData"] == []


def test_timeseries_sorted_with_summary():
    data = [
        {"timestamp": "2025-03-01T00:00:00Z", "value": "30"},
        {"timestamp": "2025-01-01T00:00:00Z", "value": 10, "metric": "cash"},
        {"timestamp": "2025-02-01T00:00:00Z", "value": 20},
    ]

    result = process_data(data, "timeseries")

    assert [point["value"] for point in result["lineChartData"]] == [10.0, 20.0, 30.0]
    assert result["lineChartData"][0]["metric"] == "cash"
    assert result["lineChartData"][1]["metric"] == "value"
    assert result["summary"] == {"average": 20.0, "max": 30.0, "min": 10.0, "count": 3}


def test_timeseries_empty_summary_is_zeroed():
    result = process_data([], "timeseries")

    assert result == {"summary": {"average": 0.0, "max": 0.0, "min": 0.0, "count": 0}, "lineChartData": []}


def test_generic_type_echoes_records():
    data = [{"a": 1}, {"a": 2}]

    result = process_data(data, "inventory")

    assert result["summary"] == {"count": 2, "firstRecord": {"a": 1}, "lastRecord": {"a": 2}}
    assert result["rawData"] == data


@pytest.mark.parametrize("data", [None, {"records": []}, "rows"])
def test_non_list_data_is_rejected(data):
    with pytest.raises(InvalidDataError, match="Expected an array of records"):
        process_data(data, "financial")
