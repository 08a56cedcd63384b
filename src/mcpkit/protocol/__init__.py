"""Protocol layer — JSON-RPC 2.0 envelopes, errors, dispatch, and HTTP."""

from mcpkit.protocol.dispatcher import DispatchResult, Method, ProtocolDispatcher
from mcpkit.protocol.errors import (
    CapabilityNotFoundError,
    ErrorCode,
    InternalError,
    InvalidRequestError,
    MethodNotAllowedError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from mcpkit.protocol.models import PROTOCOL_VERSION, JsonRpcRequest, JsonRpcResponse, ServerInfo

__all__ = [
    "PROTOCOL_VERSION",
    "CapabilityNotFoundError",
    "DispatchResult",
    "ErrorCode",
    "InternalError",
    "InvalidRequestError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "Method",
    "MethodNotAllowedError",
    "MethodNotFoundError",
    "ParseError",
    "ProtocolDispatcher",
    "ProtocolError",
    "ServerInfo",
]
