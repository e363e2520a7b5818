#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
from pathlib import Path


GRAPH_DATA = {
    "compliance": {"compliantTransactions": 42, "nonCompliantTransactions": 8},
    "expense": {
        "expensesByCategory": {"Payroll": 54000, "Rent": 12000, "Marketing": 8000},
        "totalExpenses": 74000,
        "topExpenses": [{"description": "AWS invoice", "amount": 3200}],
    },
    "income": {
        "incomeByChannel": {"Online": 65000, "Retail": 55000},
        "incomeBySource": {"Subscriptions": 90000, "Services": 30000},
        "totalIncome": 120000,
    },
    "reporting": {
        "monthlyData": [
            {"month": "Jan", "income": 40000, "expenses": 26000},
            {"month": "Feb", "income": 38000, "expenses": 25000},
            {"month": "Mar", "income": 42000, "expenses": 23000},
        ],
        "totalRevenue": 120000,
        "totalExpenses": 74000,
        "netProfit": 46000,
    },
}

CHAT_OUTPUT = """Here is the Q1 summary.

Total Revenue: $120,000
Total Expenses: $80,000
Gross margin improved to 38%.

| Category | Amount |
|----------|--------|
| Payroll  | 54,000 |
| Rent     | 12,000 |
"""


def main() -> None:
    parser = argparse.ArgumentParser(description="Write a sample agent payload for POST /api/visualize")
    parser.add_argument("--output", required=True, help="Output file path (.json)")
    parser.add_argument(
        "--request-type",
        choices=sorted(GRAPH_DATA),
        help="Include graphData for this domain; omit for a text-only payload",
    )
    args = parser.parse_args()

    payload: dict[str, object] = {"chatOutput": CHAT_OUTPUT}
    if args.request_type:
        payload["requestType"] = args.request_type
        payload["graphData"] = GRAPH_DATA[args.request_type]

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    print(f"Sample agent payload written to {output}")


if __name__ == "__main__":
    main()
