"""HTTP client for the CFO agent orchestration service.

The orchestration service has answered in two formats over time.  The
current one returns the agent trace, a JSON array of events in which the
final answer sits in the last event carrying ``chatOutput`` (older traces
use ``output`` or ``response``)::

    [{"type": "trace", ...},
     {"chatOutput": "Revenue grew 12%", "graphData": {...}, "requestType": "income"}]

The direct format is a single object::

    {"response": "...", "visualizationData": {...}, "sessionId": "..."}

:func:`parse_agent_response` folds both into an :class:`AgentReply`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from backend.core.schema import AgentPayload

log = logging.getLogger(__name__)

TEXT_KEYS = ("chatOutput", "output", "response")
DIRECT_TEXT_KEYS = ("response", "message", "text")


class AgentServiceError(RuntimeError):
    """Raised when the agent service is unreachable or reports an error."""


@dataclass(slots=True)
class AgentReply:
    """Normalised answer of one agent invocation."""

    text: str = ""
    graph_data: Any | None = None
    request_type: str | None = None
    type: str | None = None
    data: Any | None = None
    session_id: str | None = None

    def to_payload(self) -> AgentPayload:
        return AgentPayload(
            chat_output=self.text or None,
            graph_data=self.graph_data,
            request_type=self.request_type,
            type=self.type,
            data=self.data,
        )


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def _parse_trace(events: list[Any]) -> AgentReply:
    reply = AgentReply()
    for event in events:
        if not isinstance(event, dict):
            continue
        for key in TEXT_KEYS:
            text = _text(event.get(key))
            if text is not None:
                reply.text = text
                break
        if event.get("graphData") is not None:
            reply.graph_data = event["graphData"]
        if _text(event.get("requestType")):
            reply.request_type = event["requestType"]
        if event.get("error"):
            raise AgentServiceError(str(event["error"]))
    return reply


def _parse_direct(body: dict[str, Any]) -> AgentReply:
    if body.get("error"):
        raise AgentServiceError(str(body["error"]))

    reply = AgentReply(session_id=_text(body.get("sessionId")))
    for key in DIRECT_TEXT_KEYS:
        text = _text(body.get(key))
        if text is not None:
            reply.text = text
            break

    visualization = body.get("visualizationData")
    if isinstance(visualization, dict):
        if "graphData" in visualization or "requestType" in visualization:
            reply.graph_data = visualization.get("graphData")
            reply.request_type = _text(visualization.get("requestType"))
            reply.type = _text(visualization.get("type"))
            reply.data = visualization.get("data")
        else:
            reply.graph_data = visualization

    if body.get("graphData") is not None:
        reply.graph_data = body["graphData"]
    for attr, key in (("request_type", "requestType"), ("type", "type")):
        if _text(body.get(key)):
            setattr(reply, attr, body[key])
    if body.get("data") is not None:
        reply.data = body["data"]
    return reply


def parse_agent_response(body: Any) -> AgentReply:
    """Fold a trace array or a direct response object into an :class:`AgentReply`."""

    if isinstance(body, list):
        return _parse_trace(body)
    if isinstance(body, dict):
        return _parse_direct(body)
    if isinstance(body, str):
        return AgentReply(text=body)
    raise AgentServiceError(f"Unexpected agent response of type {type(body).__name__}")


class AgentClient(Protocol):
    """Contract for agent integrations."""

    async def send_message(self, message: str, session_id: str, files: list[str] | None = None) -> AgentReply:
        """Forward ``message`` to the agent within ``session_id``."""


class HttpAgentClient:
    """Posts chat turns to the orchestration service over HTTP."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def send_message(self, message: str, session_id: str, files: list[str] | None = None) -> AgentReply:
        payload = {"message": message, "sessionId": session_id, "files": list(files or [])}
        try:
            response = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            raise AgentServiceError(f"Agent service unreachable: {exc}") from exc

        if response.is_error:
            raise AgentServiceError(f"Agent service returned {response.status_code}: {response.text[:200]}")
        try:
            body = response.json()
        except ValueError as exc:
            raise AgentServiceError("Agent service returned a non-JSON body") from exc

        reply = parse_agent_response(body)
        log.debug("Agent replied for session %s (graphData=%s)", session_id, reply.graph_data is not None)
        return reply

    async def aclose(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            await self._client.aclose()


class UnconfiguredAgentClient:
    """Fallback used when no ``AGENT_SERVICE_URL`` is set."""

    async def send_message(self, message: str, session_id: str, files: list[str] | None = None) -> AgentReply:
        raise AgentServiceError("Agent service is not configured")


_client: AgentClient = UnconfiguredAgentClient()


def configure_agent_client(client: AgentClient) -> None:
    """Install the agent client used by the chat service."""

    global _client
    _client = client


def get_agent_client() -> AgentClient:
    """Return the currently configured agent client."""

    return _client


__all__ = [
    "AgentClient",
    "AgentReply",
    "AgentServiceError",
    "HttpAgentClient",
    "UnconfiguredAgentClient",
    "configure_agent_client",
    "get_agent_client",
    "parse_agent_response",
]
