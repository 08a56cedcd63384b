"""ProtocolDispatcher — the JSON-RPC 2.0 request/response engine.

One request moves through ``Received → Parsed → Routed → Executed →
Responded``; any stage may exit early with an error envelope:

* body is not JSON → ``-32700``
* envelope malformed, or params malformed for the method → ``-32600``
* method missing or unsupported → ``-32601``
* arguments break the capability's input schema → ``-32600``
* tool/resource/prompt name unknown → ``-32601`` (HTTP 404)

Tool handler failures are *not* errors at this level; the execution engine
turns them into ``isError`` results.  The dispatcher is transport-agnostic:
it takes a decoded body (or raw bytes) and returns a :class:`DispatchResult`
that an adapter such as :mod:`mcpkit.protocol.http` writes out.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from opentelemetry.trace import Span
from pydantic import BaseModel, ValidationError

from mcpkit.core.context import RequestScope, ToolContext, request_scope
from mcpkit.core.conversation import coerce_prompt_output
from mcpkit.core.descriptors import positional_arity
from mcpkit.core.errors import ArgumentValidationError
from mcpkit.core.execution import ExecutionEngine, ProgressSink
from mcpkit.core.progress import Progress
from mcpkit.core.registry import CapabilityRegistry
from mcpkit.core.sampling import ClientChannel, Sampling
from mcpkit.core.schema import InputSchema, validate_arguments
from mcpkit.protocol.errors import (
    CapabilityNotFoundError,
    InternalError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from mcpkit.protocol.models import (
    PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    CallToolParams,
    CancelledParams,
    GetPromptParams,
    GetPromptResult,
    InitializeParams,
    InitializeResult,
    JsonRpcError,
    JsonRpcId,
    JsonRpcRequest,
    JsonRpcResponse,
    ProgressParams,
    PromptArgument,
    PromptDef,
    ReadResourceParams,
    ReadResourceResult,
    RequestMeta,
    ResourceContents,
    ResourceDef,
    ResourceTemplateDef,
    ServerInfo,
    ToolDef,
)
from mcpkit.utils.logsink import LogLevel
from mcpkit.utils.telemetry import (
    ATTR_PROMPT_NAME,
    ATTR_RESOURCE_URI,
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_KIND,
    ATTR_TOOL_NAME,
    ATTR_TOOL_PROGRESS_STEPS,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

P = TypeVar("P", bound=BaseModel)


class Method(str, Enum):
    """Every JSON-RPC method the dispatcher routes."""

    INITIALIZE = "initialize"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_READ = "resources/read"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    NOTIFICATIONS_CANCELLED = "notifications/cancelled"


@dataclass
class DispatchResult:
    """What a transport must send back for one request.

    ``body`` is ``None`` for successfully handled notifications.
    ``notifications`` holds the progress/log messages emitted while serving,
    in order; all of them precede the response.
    """

    status: int
    body: dict[str, Any] | None
    notifications: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class _Call:
    """Per-request collaborators handed to a route."""

    scope: RequestScope
    span: Span
    channel: ClientChannel | None = None
    on_progress: ProgressSink | None = None


Route = Callable[[JsonRpcRequest, _Call], Awaitable[dict[str, Any]]]


class ProtocolDispatcher:
    """Route JSON-RPC requests to a frozen :class:`CapabilityRegistry`."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        server_info: ServerInfo,
        instructions: str | None = None,
        engine: ExecutionEngine | None = None,
        log_level: LogLevel = LogLevel.INFO,
    ) -> None:
        registry.freeze()
        self._registry = registry
        self._server_info = server_info
        self._instructions = instructions
        self._engine = engine or ExecutionEngine()
        self._log_threshold = LogLevel(log_level).numeric
        self._routes: dict[Method, Route] = {
            Method.INITIALIZE: self._initialize,
            Method.PING: self._ping,
            Method.TOOLS_LIST: self._tools_list,
            Method.TOOLS_CALL: self._tools_call,
            Method.RESOURCES_LIST: self._resources_list,
            Method.RESOURCES_TEMPLATES_LIST: self._resources_templates_list,
            Method.RESOURCES_READ: self._resources_read,
            Method.PROMPTS_LIST: self._prompts_list,
            Method.PROMPTS_GET: self._prompts_get,
            Method.NOTIFICATIONS_INITIALIZED: self._acknowledge,
            Method.NOTIFICATIONS_CANCELLED: self._cancelled,
        }

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def server_info(self) -> ServerInfo:
        return self._server_info

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def dispatch_raw(
        self,
        body: bytes | str,
        *,
        channel: ClientChannel | None = None,
        on_progress: ProgressSink | None = None,
    ) -> DispatchResult:
        """Decode *body* as JSON and dispatch it."""
        try:
            message = json.loads(body)
        except (ValueError, RecursionError) as exc:
            logger.info("Rejected request body: %s", exc)
            return self._error_result(None, ParseError(str(exc)))
        return await self.dispatch(message, channel=channel, on_progress=on_progress)

    async def dispatch(
        self,
        message: Any,
        *,
        channel: ClientChannel | None = None,
        on_progress: ProgressSink | None = None,
    ) -> DispatchResult:
        """Dispatch one decoded JSON-RPC message."""
        with _tracer.start_as_current_span("mcp.request") as span:
            try:
                request = self._parse(message)
            except ProtocolError as exc:
                logger.info("Rejected request: %s", exc.message)
                span.set_attribute(ATTR_RPC_ERROR_CODE, int(exc.code))
                return self._error_result(_salvage_id(message), exc)

            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request.id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request.id))

            scope = RequestScope(
                request.id,
                method=request.method,
                progress_token=_progress_token(request),
                log_threshold=self._log_threshold,
            )
            call = _Call(scope=scope, span=span, channel=channel, on_progress=on_progress)

            with request_scope(scope):
                try:
                    route = self._route(request)
                    result = await route(request, call)
                except ProtocolError as exc:
                    logger.info("Request %s (%s) failed: %s", request.id, request.method, exc.message)
                    span.set_attribute(ATTR_RPC_ERROR_CODE, int(exc.code))
                    return self._error_result(request.id, exc, scope)
                except Exception:
                    logger.exception("Unhandled error serving %s", request.method)
                    error = InternalError("Internal error")
                    span.set_attribute(ATTR_RPC_ERROR_CODE, int(error.code))
                    return self._error_result(request.id, error, scope)

            if request.is_notification:
                return DispatchResult(202, None, scope.notifications)
            body = JsonRpcResponse(id=request.id, result=result).to_wire()
            return DispatchResult(200, body, scope.notifications)

    # ------------------------------------------------------------------
    # Parsing and routing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(message: Any) -> JsonRpcRequest:
        if isinstance(message, list):
            raise InvalidRequestError("Invalid Request - batch requests are not supported")
        if not isinstance(message, dict):
            raise InvalidRequestError("Invalid Request - body must be a JSON object")

        try:
            return JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            fields = {err["loc"][0] for err in exc.errors() if err["loc"]}
            if "jsonrpc" in fields:
                raise InvalidRequestError('Invalid Request - jsonrpc must be "2.0"') from exc
            if "id" in fields:
                raise InvalidRequestError("Invalid Request - id must be a string, number, or null") from exc
            if "method" in fields:
                raise MethodNotFoundError(message.get("method")) from exc
            raise InvalidRequestError("Invalid Request - params must be an object") from exc

    def _route(self, request: JsonRpcRequest) -> Route:
        try:
            method = Method(request.method)
        except ValueError:
            raise MethodNotFoundError(request.method) from None
        return self._routes[method]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        params = _params(InitializeParams, request)
        requested = params.protocol_version
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else PROTOCOL_VERSION
        logger.info("Initialize from %s (protocol %s)", params.client_info.get("name", "unknown client"), version)
        return InitializeResult(
            protocol_version=version,
            capabilities=self._capabilities(),
            server_info=self._server_info,
            instructions=self._instructions,
        ).to_wire()

    def _capabilities(self) -> dict[str, Any]:
        capabilities: dict[str, Any] = {"logging": {}}
        if self._registry.list_tools():
            capabilities["tools"] = {"listChanged": False}
        if self._registry.list_resources() or self._registry.list_resource_templates():
            capabilities["resources"] = {"subscribe": False, "listChanged": False}
        if self._registry.list_prompts():
            capabilities["prompts"] = {"listChanged": False}
        return capabilities

    async def _ping(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        return {}

    async def _acknowledge(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        return {}

    async def _cancelled(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        params = _params(CancelledParams, request)
        logger.info(
            "Cancellation requested for request %s%s",
            params.request_id,
            f" ({params.reason})" if params.reason else "",
        )
        return {}

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _tools_list(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        tools = [
            ToolDef(name=tool.name, description=tool.description, input_schema=tool.json_schema).to_wire()
            for tool in self._registry.list_tools()
        ]
        return {"tools": tools}

    async def _tools_call(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        params = _params(CallToolParams, request)
        tool = self._registry.find_tool(params.name)
        if tool is None:
            raise CapabilityNotFoundError("tool", params.name)

        call.span.set_attribute(ATTR_TOOL_NAME, tool.name)
        call.span.set_attribute(ATTR_TOOL_KIND, tool.kind.value)
        arguments = _validated(tool.input_schema, params.arguments)

        scope = call.scope
        steps = 0

        async def deliver(step: Progress) -> None:
            nonlocal steps
            steps += 1
            progress = ProgressParams(progress_token=scope.progress_token, progress=step.current, total=step.total)
            scope.notify("notifications/progress", progress.to_wire())
            if call.on_progress is not None:
                delivered = call.on_progress(step)
                if inspect.isawaitable(delivered):
                    await delivered

        sampling = Sampling.over(call.channel) if call.channel is not None else Sampling.unavailable()
        context = ToolContext(request_id=request.id, progress_token=scope.progress_token, sampling=sampling)
        result = await self._engine.execute(tool, arguments, on_progress=deliver, context=context)

        call.span.set_attribute(ATTR_TOOL_IS_ERROR, bool(result.is_error))
        call.span.set_attribute(ATTR_TOOL_PROGRESS_STEPS, steps)
        return result.to_wire()

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def _resources_list(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        resources = [
            ResourceDef(
                uri=resource.uri_pattern,
                name=resource.name,
                description=resource.description or None,
                mime_type=resource.mime_type,
            ).to_wire()
            for resource in self._registry.list_resources()
        ]
        return {"resources": resources}

    async def _resources_templates_list(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        templates = [
            ResourceTemplateDef(
                uri_template=resource.uri_pattern,
                name=resource.name,
                description=resource.description or None,
                mime_type=resource.mime_type,
            ).to_wire()
            for resource in self._registry.list_resource_templates()
        ]
        return {"resourceTemplates": templates}

    async def _resources_read(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        params = _params(ReadResourceParams, request)
        call.span.set_attribute(ATTR_RESOURCE_URI, params.uri)
        match = self._registry.match_resource(params.uri)
        if match is None:
            raise CapabilityNotFoundError("resource", params.uri)

        resource = match.descriptor
        try:
            value = await _invoke(resource.handler, match.params)
        except Exception as exc:
            logger.exception("Resource handler for %s failed", params.uri)
            raise InternalError(f"Failed to read resource {params.uri}: {exc}") from exc

        text = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        contents = ResourceContents(uri=params.uri, mime_type=resource.mime_type, text=text)
        return ReadResourceResult(contents=[contents]).to_wire()

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    async def _prompts_list(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        prompts = [
            PromptDef(
                name=prompt.name,
                description=prompt.description or None,
                arguments=[
                    PromptArgument(name=name, description=schema.description, required=schema.required)
                    for name, schema in prompt.input_schema.items()
                ],
            ).to_wire()
            for prompt in self._registry.list_prompts()
        ]
        return {"prompts": prompts}

    async def _prompts_get(self, request: JsonRpcRequest, call: _Call) -> dict[str, Any]:
        params = _params(GetPromptParams, request)
        call.span.set_attribute(ATTR_PROMPT_NAME, params.name)
        prompt = self._registry.find_prompt(params.name)
        if prompt is None:
            raise CapabilityNotFoundError("prompt", params.name)

        arguments = _validated(prompt.input_schema, params.arguments)
        try:
            conversation = coerce_prompt_output(await _invoke(prompt.handler, arguments))
        except Exception as exc:
            logger.exception("Prompt handler %s failed", prompt.name)
            raise InternalError(f"Failed to render prompt {prompt.name}: {exc}") from exc

        return GetPromptResult(
            description=prompt.description or None,
            messages=list(conversation.messages),
        ).to_wire()

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    @staticmethod
    def _error_result(
        request_id: JsonRpcId,
        exc: ProtocolError,
        scope: RequestScope | None = None,
    ) -> DispatchResult:
        error = JsonRpcError(code=int(exc.code), message=exc.message, data=exc.data)
        body = JsonRpcResponse(id=request_id, error=error).to_wire()
        return DispatchResult(exc.http_status, body, scope.notifications if scope is not None else [])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _params(model: type[P], request: JsonRpcRequest) -> P:
    """Validate ``request.params`` against the method's params model."""
    try:
        return model.model_validate(request.params)
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'params'}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidRequestError(f"Invalid params for {request.method}: {detail}") from exc


def _validated(schema: InputSchema, arguments: dict[str, Any]) -> dict[str, Any]:
    try:
        return validate_arguments(schema, arguments)
    except ArgumentValidationError as exc:
        raise InvalidRequestError(str(exc), data={"field": exc.field}) from exc


async def _invoke(handler: Callable[..., Any], argument: dict[str, Any]) -> Any:
    """Call a resource/prompt handler, passing *argument* only if it takes one."""
    value = handler(argument) if positional_arity(handler) >= 1 else handler()
    if inspect.isawaitable(value):
        value = await value
    return value


def _salvage_id(message: Any) -> JsonRpcId:
    """Best-effort id for an envelope that failed validation."""
    if isinstance(message, dict):
        candidate = message.get("id")
        if isinstance(candidate, (int, str)) and not isinstance(candidate, bool):
            return candidate
    return None


def _progress_token(request: JsonRpcRequest) -> str | int | None:
    meta = request.params.get("_meta")
    if not isinstance(meta, dict):
        return None
    try:
        return RequestMeta.model_validate(meta).progress_token
    except ValidationError:
        return None
