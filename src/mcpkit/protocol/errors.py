"""JSON-RPC error types for the protocol layer.

Each error knows its JSON-RPC ``code`` and the HTTP status the endpoint
answers with; the dispatcher turns them into error envelopes.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes used by the server."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Base error for all failures reported as JSON-RPC errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    http_status: int = 500

    def __init__(self, message: str, *, data: dict[str, Any] | None = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)


class ParseError(ProtocolError):
    """The request body is not valid JSON."""

    code = ErrorCode.PARSE_ERROR
    http_status = 400

    def __init__(self, detail: str = "") -> None:
        super().__init__("Parse error - Invalid JSON" + (f": {detail}" if detail else ""))


class InvalidRequestError(ProtocolError):
    """The envelope or the method's params are malformed."""

    code = ErrorCode.INVALID_REQUEST
    http_status = 400


class MethodNotAllowedError(InvalidRequestError):
    """The HTTP verb is not POST."""

    http_status = 405

    def __init__(self, verb: str) -> None:
        self.verb = verb
        super().__init__(f"Invalid Request - Only POST allowed, got {verb}")


class MethodNotFoundError(ProtocolError):
    """The JSON-RPC method is missing or unsupported."""

    code = ErrorCode.METHOD_NOT_FOUND
    http_status = 400

    def __init__(self, method: object) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")


class CapabilityNotFoundError(ProtocolError):
    """A tool, resource, or prompt name does not resolve."""

    code = ErrorCode.METHOD_NOT_FOUND
    http_status = 404

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind}: {name}", data={kind: name})


class InternalError(ProtocolError):
    """An unexpected failure while serving the request."""

    code = ErrorCode.INTERNAL_ERROR
    http_status = 500
