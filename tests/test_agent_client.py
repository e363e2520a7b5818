from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend.infrastructure.agent import AgentServiceError, HttpAgentClient, parse_agent_response
from backend.infrastructure.processing import DataProcessorError, HttpDataProcessor
from backend.core.process_data import InvalidDataError


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_send_message_posts_session_and_parses_trace():
    captured: dict[str, object] = {}
    trace = [
        {"type": "orchestration", "rationale": "Looking up expenses"},
        {"graphData": {"expensesByCategory": {"Rent": 1200}}, "requestType": "expense"},
        {"output": "draft answer"},
        {"chatOutput": "Rent was your largest expense."},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json=trace)

    agent = HttpAgentClient("https://agent.example.test/invoke", http_client=_client(handler))

    reply = asyncio.run(agent.send_message("Where did the money go?", "session-1", ["q3.csv"]))

    assert captured["url"] == "https://agent.example.test/invoke"
    assert captured["body"] == {"message": "Where did the money go?", "sessionId": "session-1", "files": ["q3.csv"]}
    assert reply.text == "Rent was your largest expense."
    assert reply.request_type == "expense"
    assert reply.graph_data == {"expensesByCategory": {"Rent": 1200}}

    payload = reply.to_payload()
    assert payload.chat_output == "Rent was your largest expense."
    assert payload.graph_data == {"expensesByCategory": {"Rent": 1200}}


def test_send_message_raises_on_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    agent = HttpAgentClient("https://agent.example.test/invoke", http_client=_client(handler))

    with pytest.raises(AgentServiceError, match="502"):
        asyncio.run(agent.send_message("hi", "session-1"))


def test_send_message_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    agent = HttpAgentClient("https://agent.example.test/invoke", http_client=_client(handler))

    with pytest.raises(AgentServiceError, match="unreachable"):
        asyncio.run(agent.send_message("hi", "session-1"))


def test_parse_direct_format_with_visualization_data():
    reply = parse_agent_response(
        {
            "response": "Compliance looks good.",
            "visualizationData": {
                "requestType": "compliance",
                "graphData": {"compliantTransactions": 42, "nonCompliantTransactions": 8},
            },
            "sessionId": "abc",
        }
    )

    assert reply.text == "Compliance looks good."
    assert reply.request_type == "compliance"
    assert reply.graph_data == {"compliantTransactions": 42, "nonCompliantTransactions": 8}
    assert reply.session_id == "abc"


def test_parse_direct_format_prefers_top_level_fields():
    reply = parse_agent_response(
        {
            "message": "Here are your numbers",
            "visualizationData": {"totalIncome": 10},
            "graphData": {"totalIncome": 20},
            "requestType": "income",
            "type": "financial",
            "data": [{"amount": 1}],
        }
    )

    assert reply.text == "Here are your numbers"
    assert reply.graph_data == {"totalIncome": 20}
    assert reply.request_type == "income"
    assert reply.type == "financial"
    assert reply.data == [{"amount": 1}]


def test_parse_error_body_raises():
    with pytest.raises(AgentServiceError, match="throttled"):
        parse_agent_response({"error": "throttled"})
    with pytest.raises(AgentServiceError):
        parse_agent_response(42)


def test_http_data_processor_round_trip():
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"summary": {"count": 1}})

    processor = HttpDataProcessor("https://process.example.test", http_client=_client(handler))

    result = asyncio.run(processor.process([{"amount": 1}], "inventory"))

    assert captured["body"] == {"data": [{"amount": 1}], "type": "inventory"}
    assert result == {"summary": {"count": 1}}


def test_http_data_processor_maps_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/bad-request":
            return httpx.Response(400, json={"error": "Invalid data format. Expected an array of records."})
        return httpx.Response(500, json={"error": "boom"})

    bad_request = HttpDataProcessor("https://process.example.test/bad-request", http_client=_client(handler))
    failing = HttpDataProcessor("https://process.example.test/fail", http_client=_client(handler))

    with pytest.raises(InvalidDataError):
        asyncio.run(bad_request.process({}, "financial"))
    with pytest.raises(DataProcessorError, match="boom"):
        asyncio.run(failing.process([], "financial"))


def test_http_data_processor_wraps_transport_and_body_errors():
    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    def not_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="ok")

    with pytest.raises(DataProcessorError, match="unreachable"):
        asyncio.run(HttpDataProcessor("https://process.example.test", http_client=_client(unreachable)).process([], "financial"))
    with pytest.raises(DataProcessorError, match="non-JSON"):
        asyncio.run(HttpDataProcessor("https://process.example.test", http_client=_client(not_json)).process([], "financial"))
