from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.core.schema import AgentPayload
from backend.extractors.detect import classify, hydrate_payload
from backend.infrastructure.processing import DataProcessorError, LocalDataProcessor
from backend.workers.pipeline import ROUTE_EMPTY, VisualizationPipeline


class RecordingProcessor:
    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.calls: list[tuple[Any, str]] = []
        self._response = response
        self._error = error

    async def process(self, data: Any, data_type: str) -> dict[str, Any]:
        self.calls.append((data, data_type))
        if self._error is not None:
            raise self._error
        return self._response


def _run(payload: AgentPayload, processor=None):
    pipeline = VisualizationPipeline(processor or LocalDataProcessor())
    return asyncio.run(pipeline.process(payload))


@pytest.mark.parametrize(
    ("payload", "route"),
    [
        ({"requestType": "Expense", "graphData": {"totalExpenses": 1}}, "graph_data"),
        ({"type": "compliance", "graphData": {"risks": []}}, "legacy_compliance"),
        ({"chatOutput": "Hello"}, "text_only"),
        ({"chatOutput": "Hello", "data": [1]}, "generic"),
        ({"graphData": {"a": 1}}, "generic"),
    ],
)
def test_classifier_priority(payload, route):
    assert classify(AgentPayload.model_validate(payload)).route == route


def test_classifier_does_not_mutate_payload():
    payload = AgentPayload(chat_output="Hi", request_type="INCOME", graph_data={"totalIncome": 5})
    before = payload.model_dump()

    detected = classify(payload)

    assert detected.request_type == "income"
    assert payload.model_dump() == before


def test_hydrate_lifts_fenced_json_without_touching_input():
    text = 'Here you go\n```json\n{"requestType": "income", "graphData": {"totalIncome": 5}}\n```'
    payload = AgentPayload(chat_output=text)

    hydrated = hydrate_payload(payload)

    assert hydrated.request_type == "income"
    assert hydrated.graph_data == {"totalIncome": 5}
    assert payload.graph_data is None


def test_hydrate_ignores_unparseable_json():
    payload = AgentPayload(chat_output='```json\n{"graphData": {broken\n```')

    assert hydrate_payload(payload) is payload


def test_empty_payload_yields_nothing():
    result = _run(AgentPayload())

    assert result.route == ROUTE_EMPTY
    assert not result.has_visualization()
    assert result.to_payload() == {"route": "empty", "tables": [], "tableCharts": []}


def test_plain_text_has_no_dataset():
    result = _run(AgentPayload(chat_output="Cash flow looks healthy this week."))

    assert result.route == "text_only"
    assert result.dataset is None
    assert result.metrics is None
    assert result.extracted_chart is None
    assert not result.has_visualization()


def test_text_only_synthesizes_chart_from_metrics():
    result = _run(AgentPayload(chat_output="Total Revenue: $120,000\nTotal Expenses: $80,000\nMargin 33%"))

    payload = result.to_payload()
    assert payload["route"] == "text_only"
    assert payload["dataset"]["barChartData"] == [
        {"name": "Total Revenue", "value": 120000.0},
        {"name": "Total Expenses", "value": 80000.0},
    ]
    assert payload["dataset"]["pieChartData"] == [{"name": "Metric 1", "value": 33.0}]
    assert payload["extractedChart"] == payload["dataset"]


def test_graph_data_normalizer_wins_and_metrics_fill_gaps():
    payload = AgentPayload(
        chat_output="Total Revenue: $120,000",
        request_type="income",
        graph_data={"incomeByChannel": {"Online": 5000}},
    )

    result = _run(payload)

    dataset = result.dataset
    assert result.route == "graph_data"
    assert dataset.income_data is True
    assert [point.name for point in dataset.revenue_channel_data] == ["Online"]
    assert [point.name for point in dataset.bar_chart_data] == ["Total Revenue"]
    assert [point.name for point in result.extracted_chart.bar_chart_data] == ["Total Revenue"]


def test_unknown_request_type_uses_compliance_shape():
    result = _run(
        AgentPayload(request_type="unknown-type", graph_data={"compliantTransactions": 42, "nonCompliantTransactions": 8})
    )

    assert result.request_type == "compliance"
    assert result.dataset.to_payload()["complianceBarData"][0] == {"name": "Compliant", "count": 42, "value": 42}


def test_legacy_compliance_route():
    result = _run(AgentPayload(type="compliance", graph_data={"risks": ["Late filing"]}))

    assert result.route == "legacy_compliance"
    assert result.dataset.to_payload() == {
        "complianceData": True,
        "risksData": [{"name": "Late filing", "count": 1}],
        "complianceSummaryData": [{"name": "Risks Detected", "value": 1}],
    }


def test_compliance_report_and_tables_are_attached():
    text = (
        "Compliance report\n"
        "- Bank Reconciliation (CHK_001): Completed (closed 2025-05-31)\n\n"
        "| Category | Amount |\n|---|---|\n| Rent | 100 |\n\n"
        "| Category | Amount |\n|---|---|\n| Rent | 50 |\n| Fees | 5 |\n"
    )

    result = _run(AgentPayload(chat_output=text))

    assert result.compliance.status_breakdown.completed == 1
    assert len(result.tables) == 2
    assert len(result.table_charts) == 2
    assert [(point.name, point.value) for point in result.combined_table_chart.category_data] == [
        ("Rent", 150.0),
        ("Fees", 5.0),
    ]


def test_generic_route_forwards_data_and_type():
    processor = RecordingProcessor(response={"summary": {"count": 1}})

    result = _run(AgentPayload(data=[{"amount": 5}], type="timeseries"), processor)

    assert processor.calls == [([{"amount": 5}], "timeseries")]
    assert result.processed == {"summary": {"count": 1}}
    assert result.has_visualization()


def test_generic_route_forwards_whole_payload_by_default():
    processor = RecordingProcessor(response={"summary": {}})

    _run(AgentPayload(graph_data={"totalIncome": 1}), processor)

    assert processor.calls == [({"graphData": {"totalIncome": 1}}, "financial")]


def test_generic_processor_failure_is_not_raised():
    processor = RecordingProcessor(error=DataProcessorError("service down"))

    result = _run(AgentPayload(data=[{"amount": 5}]), processor)

    assert result.route == "generic"
    assert result.processed is None


def test_generic_route_with_local_processor_rejects_objects_quietly():
    result = _run(AgentPayload(data={"not": "a list"}))

    assert result.processed is None


def test_pipeline_survives_normalizer_errors(monkeypatch):
    from backend.workers import pipeline as pipeline_module

    def explode(request_type, graph_data):
        raise RuntimeError("unexpected shape")

    monkeypatch.setattr(pipeline_module, "normalize_graph_data", explode)

    result = _run(AgentPayload(request_type="expense", graph_data={"totalExpenses": 1}))

    assert result.route == "graph_data"
    assert result.dataset is None


@pytest.mark.parametrize(
    "text",
    [
        "|" * 5000,
        "| a |\n|---|\n" + "| x |\n" * 2000,
        "A" * 20000 + ": 1",
        "- " + "(" * 5000 + "): done (",
        "$" * 3000 + "%" * 3000,
    ],
)
def test_pipeline_is_total_on_adversarial_text(text):
    result = _run(AgentPayload(chat_output=text))

    assert result.route == "text_only"
