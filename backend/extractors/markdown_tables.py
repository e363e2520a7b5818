"""Markdown table extraction from agent responses.

Tables are located with a line scanner instead of a single multi-line
regular expression: a header row, a separator row made of dashes, colons
and pipes, then every following row that still looks like a table row.
Each candidate line is matched with an anchored pattern so the scan stays
linear on arbitrarily large responses.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

import pandas as pd

from backend.core.numbers import label_text, parse_numeric_text
from backend.core.schema import ChartDataset, ChartPoint, ExtractedTable, TimeSeriesPoint


ROW_PATTERN = re.compile(r"^[ \t]*\|.*\|[ \t]*$")
SEPARATOR_PATTERN = re.compile(r"^[ \t]*\|[-:| \t]*-[-:| \t]*\|[ \t]*$")

CATEGORY_KEYWORDS = ["category", "type"]
AMOUNT_KEYWORDS = ["amount", "value", "cost"]
DATE_KEYWORDS = ["date", "month", "period"]


def _split_cells(line: str) -> list[str]:
    cells = [cell.strip() for cell in line.strip().split("|")]
    while cells and not cells[0]:
        cells.pop(0)
    while cells and not cells[-1]:
        cells.pop()
    return cells


def _coerce_cell(cell: str) -> float | str:
    if not cell:
        return cell
    number = parse_numeric_text(cell)
    return cell if number is None else number


def _build_table(header_line: str, data_lines: list[str]) -> ExtractedTable | None:
    header_cells = _split_cells(header_line)
    columns = [(index, header) for index, header in enumerate(header_cells) if header]
    if not columns:
        return None

    rows: list[dict[str, float | str]] = []
    for line in data_lines:
        cells = _split_cells(line)
        row: dict[str, float | str] = {}
        for index, header in columns:
            cell = cells[index] if index < len(cells) else ""
            row[header] = _coerce_cell(cell)
        if any(value != "" for value in row.values()):
            rows.append(row)

    if not rows:
        return None
    return ExtractedTable(headers=[header for _, header in columns], rows=rows)


def parse_markdown_tables(text: str | None) -> list[ExtractedTable]:
    """Return every markdown table found in ``text`` in document order."""

    if not text:
        return []

    lines = text.splitlines()
    tables: list[ExtractedTable] = []
    index = 0
    while index < len(lines) - 2:
        header = lines[index]
        if not (ROW_PATTERN.match(header) and SEPARATOR_PATTERN.match(lines[index + 1])):
            index += 1
            continue

        cursor = index + 2
        data_lines: list[str] = []
        while cursor < len(lines) and ROW_PATTERN.match(lines[cursor]):
            data_lines.append(lines[cursor])
            cursor += 1

        if not data_lines:
            index += 1
            continue

        table = _build_table(header, data_lines)
        if table is not None:
            tables.append(table)
        index = cursor
    return tables


# ---------------------------------------------------------------------------
# table → chart data
# ---------------------------------------------------------------------------


def _find_header(headers: Iterable[str], keywords: list[str]) -> str | None:
    for header in headers:
        lowered = header.lower()
        if any(keyword in lowered for keyword in keywords):
            return header
    return None


def _category_label(value: Any) -> str:
    if value is None or value == "" or value == 0:
        return "Other"
    return label_text(value)


def table_to_chart_data(table: ExtractedTable) -> ChartDataset:
    """Derive category and time series charts from a single table.

    A category column ("category"/"type") paired with an amount column
    ("amount"/"value"/"cost") yields summed ``categoryData``; a date column
    ("date"/"month"/"period") paired with the amount column yields
    ``timeSeriesData``.
    """

    dataset = ChartDataset()
    if not table.headers or not table.rows:
        return dataset

    amount_column = _find_header(table.headers, AMOUNT_KEYWORDS)
    if amount_column is None:
        return dataset

    frame = pd.DataFrame(table.rows, columns=list(dict.fromkeys(table.headers)))
    amounts = frame[amount_column].map(parse_numeric_text)

    category_column = _find_header(table.headers, CATEGORY_KEYWORDS)
    if category_column is not None:
        grouped = (
            pd.DataFrame(
                {
                    "name": frame[category_column].map(_category_label),
                    "value": amounts.astype("float64"),
                }
            )
            .dropna(subset=["value"])
            .groupby("name", sort=False)["value"]
            .sum()
        )
        points = [ChartPoint(name=str(name), value=float(value)) for name, value in grouped.items()]
        if points:
            dataset.category_data = points

    date_column = _find_header(table.headers, DATE_KEYWORDS)
    if date_column is not None:
        series: list[TimeSeriesPoint] = []
        for raw_date, amount in zip(frame[date_column], amounts):
            if raw_date is None or raw_date == "":
                continue
            series.append(
                TimeSeriesPoint(
                    date=label_text(raw_date),
                    value=0.0 if amount is None or pd.isna(amount) else float(amount),
                )
            )
        if series:
            dataset.time_series_data = series

    return dataset


def combine_table_charts(tables: list[ExtractedTable]) -> ChartDataset | None:
    """Merge the category breakdowns of several tables into one view.

    Only offered when more than one table was extracted.  Categories are
    merged on their exact name and their values summed; time series are
    concatenated in table order.
    """

    if len(tables) <= 1:
        return None

    category_frames: list[pd.DataFrame] = []
    series: list[TimeSeriesPoint] = []
    for table in tables:
        chart = table_to_chart_data(table)
        if chart.category_data:
            category_frames.append(
                pd.DataFrame(
                    {
                        "name": [point.name for point in chart.category_data],
                        "value": [point.value for point in chart.category_data],
                    }
                )
            )
        if chart.time_series_data:
            series.extend(chart.time_series_data)

    combined = ChartDataset()
    if category_frames:
        totals = pd.concat(category_frames, ignore_index=True).groupby("name", sort=False)["value"].sum()
        combined.category_data = [ChartPoint(name=str(name), value=float(value)) for name, value in totals.items()]
    if series:
        combined.time_series_data = series
    return None if combined.is_empty() else combined
