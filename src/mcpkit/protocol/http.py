"""FastAPI adapter exposing a :class:`ProtocolDispatcher` over HTTP.

One path serves the whole protocol.  ``POST`` carries JSON-RPC messages,
``OPTIONS`` answers CORS preflight without touching the body, and every
other verb is refused with a ``-32600`` envelope and HTTP 405.

Responses are plain JSON.  When the client advertises
``Accept: text/event-stream`` and the request produced notifications, the
notifications and the final response are written as one short-lived SSE
stream, notifications first.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from mcpkit.protocol.dispatcher import DispatchResult, ProtocolDispatcher
from mcpkit.protocol.errors import MethodNotAllowedError
from mcpkit.protocol.models import PROTOCOL_VERSION, JsonRpcError, JsonRpcResponse

if TYPE_CHECKING:
    from mcpkit.config import ServerSettings

logger = logging.getLogger(__name__)

RESPONSE_HEADERS = {
    "MCP-Protocol-Version": PROTOCOL_VERSION,
    "Access-Control-Allow-Origin": "*",
}

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, MCP-Protocol-Version",
    "Access-Control-Max-Age": "86400",
}

_ROUTED_VERBS = ["POST", "OPTIONS", "GET", "PUT", "DELETE", "PATCH", "HEAD"]


def create_app(dispatcher: ProtocolDispatcher, settings: ServerSettings | None = None) -> FastAPI:
    """Build the ASGI application serving *dispatcher* at ``settings.path``."""
    path = settings.path if settings is not None else "/"
    info = dispatcher.server_info
    app = FastAPI(title=info.name, version=info.version, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.dispatcher = dispatcher

    @app.api_route(path, methods=_ROUTED_VERBS)
    async def endpoint(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)
        if request.method != "POST":
            return _method_not_allowed(request.method)

        body = await request.body()
        result = await dispatcher.dispatch_raw(body)
        return _render(result, wants_stream=_accepts_event_stream(request))

    logger.debug("MCP endpoint for %s mounted at %s", info.name, path)
    return app


def _render(result: DispatchResult, *, wants_stream: bool) -> Response:
    if result.body is None:
        if result.notifications:
            logger.debug("Dropping %d notification(s) emitted by a notification request", len(result.notifications))
        return Response(status_code=202, headers=RESPONSE_HEADERS)

    if wants_stream and result.notifications:
        return StreamingResponse(
            _event_stream(result),
            status_code=result.status,
            media_type="text/event-stream",
            headers={**RESPONSE_HEADERS, "Cache-Control": "no-cache"},
        )

    if result.notifications:
        logger.debug("Client did not accept an event stream; %d notification(s) not delivered", len(result.notifications))
    return JSONResponse(result.body, status_code=result.status, headers=RESPONSE_HEADERS)


def _event_stream(result: DispatchResult) -> Iterator[str]:
    for message in [*result.notifications, result.body]:
        yield f"event: message\ndata: {json.dumps(message, ensure_ascii=False, default=str)}\n\n"


def _accepts_event_stream(request: Request) -> bool:
    return "text/event-stream" in request.headers.get("accept", "")


def _method_not_allowed(verb: str) -> JSONResponse:
    exc = MethodNotAllowedError(verb)
    body: dict[str, Any] = JsonRpcResponse(
        id=None,
        error=JsonRpcError(code=int(exc.code), message=exc.message),
    ).to_wire()
    return JSONResponse(
        body,
        status_code=exc.http_status,
        headers={**RESPONSE_HEADERS, "Allow": "POST, OPTIONS"},
    )
