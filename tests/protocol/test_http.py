"""Tests for the FastAPI HTTP adapter."""

from __future__ import annotations

import datetime
import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

from mcpkit.config import ServerSettings
from mcpkit.core.descriptors import ToolDescriptor
from mcpkit.core.progress import create_progress
from mcpkit.core.registry import CapabilityRegistry
from mcpkit.core.schema import T
from mcpkit.protocol.dispatcher import ProtocolDispatcher
from mcpkit.protocol.http import create_app
from mcpkit.protocol.models import PROTOCOL_VERSION, ServerInfo
from mcpkit.utils.logsink import log


def _steps(args: dict[str, Any]):
    step = create_progress(2)
    yield step()
    yield step()
    return "done"


def _dated_steps(args: dict[str, Any]):
    step = create_progress(1)
    log.info({"when": datetime.date(2024, 1, 1)})
    yield step()
    return "dated"


def _client(path: str = "/") -> TestClient:
    registry = CapabilityRegistry()
    registry.register_tool(
        ToolDescriptor.from_handler("echo", lambda args: args["text"], input={"text": T.string(required=True)})
    )
    registry.register_tool(ToolDescriptor.from_handler("steps", _steps))
    registry.register_tool(ToolDescriptor.from_handler("dated", _dated_steps))
    dispatcher = ProtocolDispatcher(registry, server_info=ServerInfo(name="http-test", version="0.0.1"))
    return TestClient(create_app(dispatcher, ServerSettings(path=path)))


@pytest.fixture
def client() -> TestClient:
    return _client()


class TestHttpAdapter:
    def test_post_round_trip(self, client: TestClient) -> None:
        resp = client.post("/", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert resp.status_code == 200
        assert resp.json() == {"jsonrpc": "2.0", "id": 1, "result": {}}
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.headers["mcp-protocol-version"] == PROTOCOL_VERSION
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_options_preflight(self, client: TestClient) -> None:
        resp = client.options("/")
        assert resp.status_code == 204
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]

    @pytest.mark.parametrize("verb", ["GET", "PUT", "DELETE", "PATCH"])
    def test_other_verbs_rejected(self, client: TestClient, verb: str) -> None:
        resp = client.request(verb, "/")
        assert resp.status_code == 405
        body = resp.json()
        assert body["id"] is None
        assert body["error"]["code"] == -32600
        assert verb in body["error"]["message"]
        assert resp.headers["mcp-protocol-version"] == PROTOCOL_VERSION

    def test_parse_error(self, client: TestClient) -> None:
        resp = client.post("/", content=b"{oops", headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == -32700
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_notification_gets_202(self, client: TestClient) -> None:
        resp = client.post("/", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert resp.status_code == 202
        assert resp.content == b""

    def test_unknown_tool_404(self, client: TestClient) -> None:
        resp = client.post(
            "/", json={"jsonrpc": "2.0", "id": "x", "method": "tools/call", "params": {"name": "nope"}}
        )
        assert resp.status_code == 404
        assert resp.json()["id"] == "x"

    def test_schema_violation_is_400(self, client: TestClient) -> None:
        resp = client.post(
            "/", json={"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "echo", "arguments": {}}}
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["data"] == {"field": "text"}

    def test_progress_as_event_stream(self, client: TestClient) -> None:
        resp = client.post(
            "/",
            json={"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "steps"}},
            headers={"accept": "application/json, text/event-stream"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        events = [line for line in resp.text.splitlines() if line.startswith("data: ")]
        assert len(events) == 3
        assert '"notifications/progress"' in events[0]
        assert '"id": 3' in events[-1]

    def test_event_stream_with_non_json_log_data(self, client: TestClient) -> None:
        resp = client.post(
            "/",
            json={"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "dated"}},
            headers={"accept": "application/json, text/event-stream"},
        )
        assert resp.status_code == 200
        events = [json.loads(line[len("data: ") :]) for line in resp.text.splitlines() if line.startswith("data: ")]
        assert [e.get("method") for e in events] == ["notifications/message", "notifications/progress", None]
        assert events[0]["params"]["data"] == {"when": "2024-01-01"}
        assert events[-1]["id"] == 1
        assert events[-1]["result"]["content"][0]["text"] == "dated"

    def test_deeply_nested_body_is_parse_error(self, client: TestClient) -> None:
        resp = client.post("/", content=b"[" * 200000, headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == -32700
        assert resp.json()["id"] is None
        assert resp.headers["mcp-protocol-version"] == PROTOCOL_VERSION

    def test_progress_dropped_without_event_stream(self, client: TestClient) -> None:
        resp = client.post(
            "/", json={"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "steps"}}
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["content"][0]["text"] == "done"

    def test_custom_path(self) -> None:
        client = _client("/mcp")
        assert client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "ping"}).status_code == 200
        assert client.post("/", json={"jsonrpc": "2.0", "id": 1, "method": "ping"}).status_code == 404
