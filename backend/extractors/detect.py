"""Routing of agent payloads to a processing branch.

The classifier inspects which fields of an :class:`AgentPayload` are
populated and picks, in priority order:

* ``graph_data`` → ``requestType`` and ``graphData`` present; the per-domain
  normalizer named by ``requestType`` runs (unknown types fall back to the
  compliance normalizer)
* ``legacy_compliance`` → ``type == "compliance"`` with ``graphData``
* ``text_only`` → prose without ``graphData`` or ``data``; only the text
  extractors run
* ``generic`` → anything else is forwarded to the data processing service

Agents occasionally answer with the structured part embedded in the prose
as a fenced JSON block.  :func:`hydrate_payload` lifts such a block into the
payload fields before classification.  A block that does not parse is
ignored and classification proceeds on the prose alone.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from backend.core.schema import AgentPayload

log = logging.getLogger(__name__)


ROUTE_GRAPH_DATA = "graph_data"
ROUTE_LEGACY_COMPLIANCE = "legacy_compliance"
ROUTE_TEXT_ONLY = "text_only"
ROUTE_GENERIC = "generic"

REQUEST_TYPES = ("compliance", "expense", "income", "reporting")
FALLBACK_REQUEST_TYPE = "compliance"

JSON_FENCE_PATTERN = re.compile(r"```json[ \t]*\n?(?P<body>.*?)```", re.DOTALL | re.IGNORECASE)
EMBEDDED_KEYS = {
    "graphData": "graph_data",
    "requestType": "request_type",
    "type": "type",
    "data": "data",
}


@dataclass
class DetectedRoute:
    route: str
    request_type: str | None = None
    fallback: bool = False


def _present(value: Any) -> bool:
    return value is not None and value != ""


def resolve_request_type(request_type: str | None) -> tuple[str, bool]:
    """Return the normalizer key for ``request_type`` and whether it fell back."""

    key = (request_type or "").strip().lower()
    if key in REQUEST_TYPES:
        return key, False
    return FALLBACK_REQUEST_TYPE, True


def classify(payload: AgentPayload) -> DetectedRoute:
    if _present(payload.request_type) and _present(payload.graph_data):
        request_type, fallback = resolve_request_type(payload.request_type)
        if fallback:
            log.info("Unknown requestType %r, using the %s normalizer", payload.request_type, request_type)
        return DetectedRoute(route=ROUTE_GRAPH_DATA, request_type=request_type, fallback=fallback)

    if payload.type == "compliance" and _present(payload.graph_data):
        return DetectedRoute(route=ROUTE_LEGACY_COMPLIANCE, request_type="compliance")

    if payload.chat_output and not _present(payload.graph_data) and not _present(payload.data):
        return DetectedRoute(route=ROUTE_TEXT_ONLY)

    return DetectedRoute(route=ROUTE_GENERIC)


def extract_embedded_json(text: str | None) -> Any | None:
    """Return the JSON document embedded in ``text``.

    A fenced ``json`` block wins; otherwise the whole text is tried.
    """

    if not text:
        return None

    match = JSON_FENCE_PATTERN.search(text)
    candidate = (match.group("body") if match else text).strip()
    if not candidate.startswith(("{", "[")):
        return None
    try:
        return json.loads(candidate)
    except ValueError as exc:
        log.debug("Embedded JSON block did not parse: %s", exc)
        return None


def hydrate_payload(payload: AgentPayload) -> AgentPayload:
    """Return a copy of ``payload`` completed from an embedded JSON block.

    Only fields the payload does not already carry are filled in.  The input
    payload is never modified.
    """

    if not payload.chat_output or _present(payload.graph_data):
        return payload

    document = extract_embedded_json(payload.chat_output.strip())
    if not isinstance(document, dict):
        return payload

    updates: dict[str, Any] = {}
    for key, field_name in EMBEDDED_KEYS.items():
        value = document.get(key)
        if value is None:
            value = document.get(field_name)
        if _present(value) and not _present(getattr(payload, field_name)):
            updates[field_name] = value
    if not updates:
        return payload

    if "request_type" in updates and not isinstance(updates["request_type"], str):
        updates.pop("request_type")
    if "type" in updates and not isinstance(updates["type"], str):
        updates.pop("type")
    log.debug("Hydrated payload fields from embedded JSON: %s", sorted(updates))
    return payload.model_copy(update=updates)
