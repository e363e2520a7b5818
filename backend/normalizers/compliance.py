"""Compliance ``graphData`` → chart slots.

Two shapes are in circulation.  The current agent reports plain counts::

    {"compliantTransactions": 42, "nonCompliantTransactions": 8}

Older agents listed the offending records instead::

    {"compliantTransactions": ["TX1", "TX2"],
     "flaggedTransactions": [{"transactionId": "TX9", "description": "..."}],
     "nonCompliantVendors": [{"vendorName": "Acme", "transactionIds": [...]}]}

The count shape wins whenever either count is numeric.
"""

from __future__ import annotations

from typing import Any

from backend.core.numbers import first_text, number_or_zero
from backend.core.schema import ChartDataset, ChartPoint
from backend.normalizers.common import as_mapping, as_records, is_count, non_empty


SUMMARY_LABELS = [
    ("compliantTransactions", "Compliant Transactions"),
    ("risks", "Risks Detected"),
    ("flaggedTransactions", "Flagged Transactions"),
    ("nonCompliantVendors", "Non-Compliant Vendors"),
    ("missingDocumentation", "Missing Documentation"),
    ("managerVerificationRequired", "Needs Verification"),
]


def _normalize_counts(graph_data: dict[str, Any], dataset: ChartDataset) -> ChartDataset:
    compliant = number_or_zero(graph_data.get("compliantTransactions"))
    non_compliant = number_or_zero(graph_data.get("nonCompliantTransactions"))
    dataset.compliance_bar_data = [
        ChartPoint(name="Compliant", count=int(compliant), value=compliant),
        ChartPoint(name="Non-Compliant", count=int(non_compliant), value=non_compliant),
    ]
    dataset.compliance_pie_data = [
        ChartPoint(name="Compliant Transactions", value=compliant),
        ChartPoint(name="Non-Compliant Transactions", value=non_compliant),
    ]
    return dataset


def _transaction_name(item: Any, index: int) -> str:
    return first_text(item, default=f"Transaction {index + 1}")


def _normalize_lists(graph_data: dict[str, Any], dataset: ChartDataset) -> ChartDataset:
    compliant = graph_data.get("compliantTransactions")
    if isinstance(compliant, list):
        dataset.compliant_transactions_data = non_empty(
            [ChartPoint(name=_transaction_name(item, index), count=1) for index, item in enumerate(compliant)]
        )

    risks = graph_data.get("risks")
    if isinstance(risks, list):
        dataset.risks_data = non_empty(
            [ChartPoint(name=first_text(risk, default="Unknown Risk"), count=1) for risk in risks]
        )

    flagged = as_records(graph_data.get("flaggedTransactions"))
    if flagged is not None:
        dataset.flagged_transactions_data = non_empty(
            [
                ChartPoint(
                    name=_transaction_name(item.get("transactionId"), index),
                    count=1,
                    description=first_text(item.get("description"), default="Flagged transaction"),
                )
                for index, item in enumerate(flagged)
            ]
        )

    vendors = as_records(graph_data.get("nonCompliantVendors"))
    if vendors is not None:
        points: list[ChartPoint] = []
        for item in vendors:
            transaction_ids = item.get("transactionIds")
            has_ids = isinstance(transaction_ids, list)
            points.append(
                ChartPoint(
                    name=first_text(item.get("vendorName"), default="Unknown Vendor"),
                    count=len(transaction_ids) if has_ids else 1,
                    transactionIds=transaction_ids if has_ids else [],
                )
            )
        dataset.non_compliant_vendors_data = non_empty(points)

    missing = as_records(graph_data.get("missingDocumentation"))
    if missing is not None:
        dataset.missing_documentation_data = non_empty(
            [
                ChartPoint(
                    name=_transaction_name(item.get("transactionId"), index),
                    count=1,
                    missing=first_text(item.get("missing"), default="Documentation"),
                )
                for index, item in enumerate(missing)
            ]
        )

    verification = as_records(graph_data.get("managerVerificationRequired"))
    if verification is not None:
        dataset.manager_verification_data = non_empty(
            [
                ChartPoint(
                    name=_transaction_name(item.get("transactionId"), index),
                    count=1,
                    reason=first_text(item.get("reason"), default="Verification required"),
                )
                for index, item in enumerate(verification)
            ]
        )

    summary = [
        ChartPoint(name=label, value=len(graph_data[key]))
        for key, label in SUMMARY_LABELS
        if isinstance(graph_data.get(key), list) and graph_data[key]
    ]
    dataset.compliance_summary_data = non_empty(summary)
    return dataset


def normalize(graph_data: Any) -> ChartDataset:
    dataset = ChartDataset(compliance_data=True)
    graph_data = as_mapping(graph_data)
    if is_count(graph_data.get("compliantTransactions")) or is_count(graph_data.get("nonCompliantTransactions")):
        return _normalize_counts(graph_data, dataset)
    return _normalize_lists(graph_data, dataset)
