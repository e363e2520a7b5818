from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase keys with the dashboard front end."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AgentPayload(CamelModel):
    """A single agent turn as handed to the visualization pipeline."""

    chat_output: str | None = None
    graph_data: Any | None = None
    request_type: str | None = None
    data: Any | None = None
    type: str | None = None

    def has_content(self) -> bool:
        return bool(self.chat_output) or self.graph_data is not None or self.data is not None


# ---------------------------------------------------------------------------
# text extraction results
# ---------------------------------------------------------------------------


class ExtractedTable(CamelModel):
    headers: list[str]
    rows: list[dict[str, float | str]] = Field(default_factory=list)


class KeyValuePair(CamelModel):
    key: str
    value: float


class PercentageObservation(CamelModel):
    name: str = "Percentage"
    value: float


class CurrencyObservation(CamelModel):
    name: str = "Amount"
    value: float


class ExtractedMetrics(CamelModel):
    key_value_pairs: list[KeyValuePair] = Field(default_factory=list)
    percentages: list[PercentageObservation] = Field(default_factory=list)
    currency_values: list[CurrencyObservation] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.key_value_pairs or self.percentages or self.currency_values)


class ChecklistItem(CamelModel):
    id: str
    name: str
    status: str
    status_type: str
    date: str | None = None
    date_info: str = ""


class RegulationItem(CamelModel):
    id: str
    name: str
    description: str


class StatusBreakdown(CamelModel):
    completed: int = 0
    in_progress: int = 0
    pending: int = 0

    @property
    def total(self) -> int:
        return self.completed + self.in_progress + self.pending


class ComplianceReport(CamelModel):
    checklists: list[ChecklistItem] = Field(default_factory=list)
    regulations: list[RegulationItem] = Field(default_factory=list)
    status_breakdown: StatusBreakdown = Field(default_factory=StatusBreakdown)

    def is_empty(self) -> bool:
        return not (self.checklists or self.regulations)


# ---------------------------------------------------------------------------
# canonical chart data
# ---------------------------------------------------------------------------


class ChartPoint(CamelModel):
    """A ``{name, value}`` record; chart specific annotations are kept as extras."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    value: int | float | None = None
    count: int | None = None
    amount: int | float | None = None


class TimeSeriesPoint(CamelModel):
    date: str | None = None
    value: int | float | None = None
    income: int | float | None = None
    expense: int | float | None = None
    net: int | float | None = None
    category: str | None = None
    source: str | None = None


class ChartDataset(CamelModel):
    """Named chart slots handed to the rendering layer.

    A slot that is ``None`` means the chart does not exist.  Normalizers
    never populate a slot with an empty list.
    """

    compliance_data: bool | None = None
    expense_data: bool | None = None
    income_data: bool | None = None
    reporting_data: bool | None = None

    compliance_bar_data: list[ChartPoint] | None = None
    compliance_pie_data: list[ChartPoint] | None = None
    compliant_transactions_data: list[ChartPoint] | None = None
    risks_data: list[ChartPoint] | None = None
    flagged_transactions_data: list[ChartPoint] | None = None
    non_compliant_vendors_data: list[ChartPoint] | None = None
    missing_documentation_data: list[ChartPoint] | None = None
    manager_verification_data: list[ChartPoint] | None = None
    compliance_summary_data: list[ChartPoint] | None = None

    expense_category_data: list[ChartPoint] | None = None
    top_expenses_data: list[ChartPoint] | None = None
    total_expenses: int | float | None = None

    revenue_channel_data: list[ChartPoint] | None = None
    income_source_data: list[ChartPoint] | None = None
    total_income: int | float | None = None

    category_data: list[ChartPoint] | None = None
    yearly_data: list[TimeSeriesPoint] | None = None
    comparison_data: list[Any] | None = None
    metrics: Any | None = None
    total_revenue: int | float | None = None
    net_profit: int | float | None = None

    time_series_data: list[TimeSeriesPoint] | None = None
    bar_chart_data: list[ChartPoint] | None = None
    pie_chart_data: list[ChartPoint] | None = None

    DOMAIN_TAGS: ClassVar[tuple[str, ...]] = ("compliance_data", "expense_data", "income_data", "reporting_data")

    def chart_slots(self) -> list[str]:
        """Return the names of the populated list slots."""

        return [
            name
            for name, value in self
            if isinstance(value, list) and value
        ]

    def is_empty(self) -> bool:
        return all(
            value is None
            for name, value in self
            if name not in self.DOMAIN_TAGS
        )


class VisualizationResult(CamelModel):
    """Everything the dashboard needs to draw the charts of one agent turn."""

    route: str
    request_type: str | None = None
    dataset: ChartDataset | None = None
    tables: list[ExtractedTable] = Field(default_factory=list)
    table_charts: list[ChartDataset] = Field(default_factory=list)
    combined_table_chart: ChartDataset | None = None
    metrics: ExtractedMetrics | None = None
    extracted_chart: ChartDataset | None = None
    compliance: ComplianceReport | None = None
    processed: Any | None = None

    def has_visualization(self) -> bool:
        return any(
            (
                self.dataset is not None,
                bool(self.tables),
                self.metrics is not None,
                self.compliance is not None,
                self.processed is not None,
            )
        )
