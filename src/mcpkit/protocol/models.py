"""MCP models — JSON-RPC 2.0 envelopes and MCP method payloads.

Envelopes validate the incoming request shape; payload models describe the
``params`` each method accepts and the ``result`` it returns.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

from mcpkit.core.content import PromptMessage, WireModel

PROTOCOL_VERSION = "2025-11-25"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-11-25", "2025-06-18", "2025-03-26", "2024-11-05")

JsonRpcId = StrictInt | StrictStr | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification."""

    jsonrpc: Literal["2.0"]
    method: StrictStr
    id: JsonRpcId = None
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        """``True`` when the request carried no ``id`` member at all."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message; exactly one of result/error is set."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: JsonRpcId = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _one_outcome(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result
        return body


# ---------------------------------------------------------------------------
# Request params
# ---------------------------------------------------------------------------


class RequestMeta(BaseModel):
    """The ``_meta`` member a client may attach to request params."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    progress_token: StrictStr | StrictInt | None = Field(default=None, alias="progressToken")


class InitializeParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    protocol_version: str = Field(default=PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: dict[str, Any] = Field(default_factory=dict, alias="clientInfo")


class CallToolParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: StrictStr
    arguments: dict[str, Any] = Field(default_factory=dict)


class ReadResourceParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    uri: StrictStr


class GetPromptParams(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: StrictStr
    arguments: dict[str, Any] = Field(default_factory=dict)


class CancelledParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    request_id: JsonRpcId = Field(default=None, alias="requestId")
    reason: str | None = None


# ---------------------------------------------------------------------------
# Discovery payloads
# ---------------------------------------------------------------------------


class ToolDef(WireModel):
    """A tool entry in ``tools/list``."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class ResourceDef(WireModel):
    """A resource entry in ``resources/list``."""

    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class ResourceTemplateDef(WireModel):
    """A template entry in ``resources/templates/list``."""

    uri_template: str = Field(alias="uriTemplate")
    name: str
    description: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class PromptArgument(WireModel):
    name: str
    description: str | None = None
    required: bool = False


class PromptDef(WireModel):
    """A prompt entry in ``prompts/list``."""

    name: str
    description: str | None = None
    arguments: list[PromptArgument] = []


# ---------------------------------------------------------------------------
# Method results
# ---------------------------------------------------------------------------


class ResourceContents(WireModel):
    uri: str
    mime_type: str = Field(alias="mimeType")
    text: str


class ReadResourceResult(WireModel):
    contents: list[ResourceContents]


class GetPromptResult(WireModel):
    description: str | None = None
    messages: list[PromptMessage]


class ServerInfo(WireModel):
    name: str
    version: str


class InitializeResult(WireModel):
    protocol_version: str = Field(alias="protocolVersion")
    capabilities: dict[str, Any]
    server_info: ServerInfo = Field(alias="serverInfo")
    instructions: str | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class ProgressParams(WireModel):
    """Params of a ``notifications/progress`` message."""

    progress_token: str | int | None = Field(default=None, alias="progressToken")
    progress: int
    total: int
