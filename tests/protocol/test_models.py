"""Tests for JSON-RPC envelopes and MCP payload models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcpkit.protocol.models import (
    CallToolParams,
    InitializeParams,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ProgressParams,
    RequestMeta,
    ResourceTemplateDef,
    ToolDef,
)


class TestJsonRpcRequest:
    def test_request(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert req.id == 1
        assert req.params == {}
        assert not req.is_notification

    def test_null_id_is_not_a_notification(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": None, "method": "ping"})
        assert req.id is None
        assert not req.is_notification

    def test_missing_id_is_notification(self) -> None:
        req = JsonRpcRequest.model_validate({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert req.is_notification

    def test_wrong_version(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "1.0", "id": 1, "method": "ping"})

    def test_id_must_be_string_or_int(self) -> None:
        for bad in (1.5, True, [1], {"a": 1}):
            with pytest.raises(ValidationError):
                JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": bad, "method": "ping"})

    def test_method_must_be_string(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 1, "method": 5})


class TestJsonRpcResponse:
    def test_result(self) -> None:
        assert JsonRpcResponse(id="a", result={}).to_wire() == {"jsonrpc": "2.0", "id": "a", "result": {}}

    def test_error(self) -> None:
        body = JsonRpcResponse(id=None, error=JsonRpcError(code=-32700, message="Parse error")).to_wire()
        assert body == {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}

    def test_exactly_one_outcome(self) -> None:
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1)
        with pytest.raises(ValidationError):
            JsonRpcResponse(id=1, result={}, error=JsonRpcError(code=1, message="x"))


class TestParams:
    def test_call_tool_defaults(self) -> None:
        params = CallToolParams.model_validate({"name": "greet"})
        assert params.arguments == {}

    def test_call_tool_requires_name(self) -> None:
        with pytest.raises(ValidationError):
            CallToolParams.model_validate({"arguments": {}})

    def test_meta_progress_token(self) -> None:
        assert RequestMeta.model_validate({"progressToken": "tok"}).progress_token == "tok"

    def test_initialize_aliases(self) -> None:
        params = InitializeParams.model_validate({"protocolVersion": "2025-06-18", "clientInfo": {"name": "c"}})
        assert params.protocol_version == "2025-06-18"
        assert params.client_info == {"name": "c"}


class TestPayloads:
    def test_tool_def_wire_names(self) -> None:
        wire = ToolDef(name="t", input_schema={"type": "object"}).to_wire()
        assert wire == {"name": "t", "description": "", "inputSchema": {"type": "object"}}

    def test_template_def_wire_names(self) -> None:
        wire = ResourceTemplateDef(uri_template="user://{id}", name="user", mime_type="application/json").to_wire()
        assert wire == {"uriTemplate": "user://{id}", "name": "user", "mimeType": "application/json"}

    def test_progress_params_omit_missing_token(self) -> None:
        assert ProgressParams(progress=1, total=3).to_wire() == {"progress": 1, "total": 3}
