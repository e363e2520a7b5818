from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from backend.core.schema import (
    AgentPayload,
    ChartDataset,
    ComplianceReport,
    ExtractedMetrics,
    ExtractedTable,
    VisualizationResult,
)
from backend.extractors import compliance_report, markdown_tables, metrics as metric_extractor
from backend.extractors.detect import (
    ROUTE_GENERIC,
    ROUTE_GRAPH_DATA,
    ROUTE_LEGACY_COMPLIANCE,
    ROUTE_TEXT_ONLY,
    DetectedRoute,
    classify,
    hydrate_payload,
)
from backend.infrastructure.processing import DataProcessor, get_data_processor
from backend.normalizers import normalize_graph_data

log = logging.getLogger(__name__)

ROUTE_EMPTY = "empty"
DEFAULT_DATA_TYPE = "financial"

T = TypeVar("T")


def _guarded(step: str, func: Callable[..., T], *args: Any, default: T) -> T:
    """Run ``func`` and fall back to ``default`` when it raises.

    Visualization is best effort: a failing step costs its own chart, never
    the chat turn.
    """

    try:
        return func(*args)
    except Exception:  # noqa: BLE001
        log.exception("Visualization step %s failed", step)
        return default


class VisualizationPipeline:
    """Turns one agent payload into chart-ready datasets."""

    def __init__(self, processor: DataProcessor | None = None) -> None:
        self._processor = processor

    @property
    def processor(self) -> DataProcessor:
        return self._processor or get_data_processor()

    # ------------------------------------------------------------------
    # text extraction
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_tables(text: str | None) -> list[ExtractedTable]:
        if not text:
            return []
        return _guarded("tables", markdown_tables.parse_markdown_tables, text, default=[])

    @staticmethod
    def _extract_metrics(text: str | None) -> ExtractedMetrics | None:
        if not text:
            return None
        found = _guarded("metrics", metric_extractor.extract_metrics, text, default=ExtractedMetrics())
        return None if found.is_empty() else found

    @staticmethod
    def _extract_compliance(text: str | None) -> ComplianceReport | None:
        if not text or not compliance_report.is_compliance_report(text):
            return None
        report = _guarded("compliance", compliance_report.parse_compliance_report, text, default=ComplianceReport())
        return None if report.is_empty() else report

    @staticmethod
    def _table_charts(tables: list[ExtractedTable]) -> list[ChartDataset]:
        charts: list[ChartDataset] = []
        for table in tables:
            chart = _guarded("table chart", markdown_tables.table_to_chart_data, table, default=ChartDataset())
            if not chart.is_empty():
                charts.append(chart)
        return charts

    # ------------------------------------------------------------------
    # assembly
    # ------------------------------------------------------------------
    @staticmethod
    def _fill_from_metrics(dataset: ChartDataset, extracted: ChartDataset | None) -> ChartDataset:
        """Metric charts only take bar/pie slots the normalizer left empty."""

        if extracted is None:
            return dataset
        if dataset.bar_chart_data is None and extracted.bar_chart_data:
            dataset.bar_chart_data = extracted.bar_chart_data
        if dataset.pie_chart_data is None and extracted.pie_chart_data:
            dataset.pie_chart_data = extracted.pie_chart_data
        return dataset

    async def _forward_generic(self, payload: AgentPayload) -> Any | None:
        data = payload.data if payload.data is not None else payload.to_payload()
        data_type = payload.type or DEFAULT_DATA_TYPE
        try:
            return await self.processor.process(data, data_type)
        except Exception:  # noqa: BLE001
            log.exception("Generic data processing failed for type %s", data_type)
            return None

    async def process(self, payload: AgentPayload) -> VisualizationResult:
        if not payload.has_content():
            return VisualizationResult(route=ROUTE_EMPTY)

        payload = _guarded("hydrate", hydrate_payload, payload, default=payload)
        detected = _guarded("classify", classify, payload, default=DetectedRoute(route=ROUTE_GENERIC))
        log.debug("Agent payload routed to %s (requestType=%s)", detected.route, detected.request_type)

        text = payload.chat_output
        tables = self._extract_tables(text)
        found_metrics = self._extract_metrics(text)
        compliance = self._extract_compliance(text)

        extracted_chart: ChartDataset | None = None
        if found_metrics is not None:
            extracted_chart = _guarded(
                "metric chart", metric_extractor.metrics_to_chart_data, found_metrics, default=ChartDataset()
            )
            if extracted_chart.is_empty():
                extracted_chart = None

        result = VisualizationResult(
            route=detected.route,
            request_type=detected.request_type,
            tables=tables,
            table_charts=self._table_charts(tables),
            combined_table_chart=_guarded("combined tables", markdown_tables.combine_table_charts, tables, default=None),
            metrics=found_metrics,
            extracted_chart=extracted_chart,
            compliance=compliance,
        )

        if detected.route == ROUTE_GRAPH_DATA:
            dataset = _guarded(
                "normalize",
                normalize_graph_data,
                detected.request_type,
                payload.graph_data,
                default=None,
            )
            if dataset is not None:
                result.dataset = self._fill_from_metrics(dataset, extracted_chart)
        elif detected.route == ROUTE_LEGACY_COMPLIANCE:
            result.dataset = _guarded("normalize", normalize_graph_data, "compliance", payload.graph_data, default=None)
        elif detected.route == ROUTE_TEXT_ONLY:
            if extracted_chart is not None:
                result.dataset = extracted_chart.model_copy()
        else:
            result.processed = await self._forward_generic(payload)

        return result


_pipeline = VisualizationPipeline()


def get_visualization_pipeline() -> VisualizationPipeline:
    """Return the process wide visualization pipeline."""

    return _pipeline


__all__ = [
    "DEFAULT_DATA_TYPE",
    "ROUTE_EMPTY",
    "VisualizationPipeline",
    "get_visualization_pipeline",
]
