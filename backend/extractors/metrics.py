"""Heuristic metric extraction from free-form agent prose.

Three independent scanners run over the response text:

* key/value pairs such as ``Total Revenue: $120,000`` or ``**Net Profit**: 4,500``
* percentages such as ``Compliance rate 91.5%``
* currency amounts such as ``paid $3,200 in rent``

Labels are restricted to a single line and every quantifier is bounded, so
``finditer`` stays linear even on adversarial input.  A pattern that fails
to match at one position simply lets the scan continue at the next one.
"""

from __future__ import annotations

import logging
import re

from backend.core.numbers import to_number
from backend.core.schema import (
    ChartDataset,
    ChartPoint,
    CurrencyObservation,
    ExtractedMetrics,
    KeyValuePair,
    PercentageObservation,
)

log = logging.getLogger(__name__)

MAX_KEY_VALUE_PAIRS = 10

_LABEL = r"(?P<label>[A-Za-z&][A-Za-z &\t]{0,79})"
_AMOUNT = r"(?P<number>\d[\d,]{0,30}(?:\.\d{0,12})?)"

KEY_VALUE_PATTERNS = [
    re.compile(_LABEL + r":[ \t]*\$?" + _AMOUNT + r"(?:[ \t]*(?:%|dollars?|USD))?", re.IGNORECASE),
    re.compile(_LABEL + r"[ \t]*[:\-][ \t]*\$?" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\*\*" + _LABEL + r"\*\*:[ \t]*\$?" + _AMOUNT, re.IGNORECASE),
    re.compile(r"-[ \t]*" + _LABEL + r":[ \t]*\$?" + _AMOUNT, re.IGNORECASE),
    re.compile(_LABEL + r"[ \t]*[:\-][ \t]*\$?" + _AMOUNT + r"[ \t]*\(", re.IGNORECASE),
]
PERCENT_PATTERN = re.compile(r"(?:" + _LABEL + r"[ \t]*)?" + _AMOUNT + r"[ \t]*%")
CURRENCY_PATTERN = re.compile(r"(?:" + _LABEL + r"[ \t]*)?\$" + _AMOUNT)


def _parse_amount(raw: str) -> float | None:
    number = to_number(raw.replace(",", ""))
    return None if number is None else float(number)


def _clean_label(raw: str | None) -> str:
    if not raw:
        return ""
    return raw.replace("**", "").strip()


def extract_key_value_pairs(text: str | None) -> list[KeyValuePair]:
    """Collect ``Label: amount`` pairs, first occurrence of a label wins."""

    if not text:
        return []

    pairs: list[KeyValuePair] = []
    seen: set[str] = set()
    for pattern in KEY_VALUE_PATTERNS:
        for match in pattern.finditer(text):
            key = _clean_label(match.group("label"))
            value = _parse_amount(match.group("number"))
            if value is None or value <= 0 or len(key) <= 2:
                continue
            lowered = key.lower()
            if lowered in seen:
                continue
            seen.add(lowered)
            pairs.append(KeyValuePair(key=key, value=value))
    return pairs


def extract_percentages(text: str | None) -> list[PercentageObservation]:
    """Collect percentages between 0 and 100; anything else is dropped."""

    if not text:
        return []

    observations: list[PercentageObservation] = []
    for match in PERCENT_PATTERN.finditer(text):
        value = _parse_amount(match.group("number"))
        if value is None or not 0 <= value <= 100:
            continue
        name = _clean_label(match.group("label")) or "Percentage"
        observations.append(PercentageObservation(name=name, value=value))
    return observations


def _scan_currency(text: str) -> list[tuple[CurrencyObservation, bool]]:
    found: list[tuple[CurrencyObservation, bool]] = []
    for match in CURRENCY_PATTERN.finditer(text):
        value = _parse_amount(match.group("number"))
        if value is None or value <= 0:
            continue
        label = _clean_label(match.group("label"))
        found.append((CurrencyObservation(name=label or "Amount", value=value), bool(label)))
    return found


def extract_currency_values(text: str | None) -> list[CurrencyObservation]:
    if not text:
        return []
    return [observation for observation, _ in _scan_currency(text)]


def _merge_currency(pairs: list[KeyValuePair], found: list[tuple[CurrencyObservation, bool]]) -> None:
    # Unlabelled amounts only carry the "Amount" placeholder and are not
    # folded into the pairs.
    for observation, labelled in found:
        if not labelled or len(observation.name) <= 2:
            continue
        context = observation.name.lower()
        duplicate = any(
            pair.key.lower() in context or context in pair.key.lower()
            for pair in pairs
        )
        if not duplicate:
            pairs.append(KeyValuePair(key=observation.name, value=observation.value))


def extract_metrics(text: str | None) -> ExtractedMetrics:
    """Run every metric scanner over ``text``.

    Labelled currency amounts are folded into the key/value pairs unless a
    pair with an overlapping label already exists.  Only the ten largest
    pairs are kept.
    """

    if not text:
        return ExtractedMetrics()

    pairs = extract_key_value_pairs(text)
    percentages = extract_percentages(text)
    currency = _scan_currency(text)
    _merge_currency(pairs, currency)

    pairs.sort(key=lambda pair: pair.value, reverse=True)
    metrics = ExtractedMetrics(
        key_value_pairs=pairs[:MAX_KEY_VALUE_PAIRS],
        percentages=percentages,
        currency_values=[observation for observation, _ in currency],
    )
    log.debug(
        "Extracted %d key/value pairs, %d percentages, %d currency values",
        len(metrics.key_value_pairs),
        len(metrics.percentages),
        len(metrics.currency_values),
    )
    return metrics


def metrics_to_chart_data(metrics: ExtractedMetrics | None) -> ChartDataset:
    """Key/value pairs become a bar chart, percentages a pie chart."""

    dataset = ChartDataset()
    if metrics is None:
        return dataset
    if metrics.key_value_pairs:
        dataset.bar_chart_data = [ChartPoint(name=pair.key, value=pair.value) for pair in metrics.key_value_pairs]
    if metrics.percentages:
        dataset.pie_chart_data = [
            ChartPoint(name=f"Metric {index}", value=observation.value)
            for index, observation in enumerate(metrics.percentages, start=1)
        ]
    return dataset
