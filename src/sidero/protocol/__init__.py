"""MCP Protocol layer for JSON-RPC communication."""

from sidero.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcMessage,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    RequestId,
    encode_message,
    format_error,
    format_response,
    parse_message,
)
from sidero.protocol.lifecycle import MCP_PROTOCOL_VERSION, LifecycleManager
from sidero.protocol.prompts import PromptsHandler
from sidero.protocol.resources import ResourcesHandler
from sidero.protocol.tools import ToolsHandler, ToolsListResult
from sidero.protocol.transport import StdioTransport

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcMessage",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LifecycleManager",
    "MCP_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "PromptsHandler",
    "RequestId",
    "ResourcesHandler",
    "StdioTransport",
    "ToolsHandler",
    "ToolsListResult",
    "encode_message",
    "format_error",
    "format_response",
    "parse_message",
]
