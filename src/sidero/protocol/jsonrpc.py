"""JSON-RPC 2.0 message parsing and formatting.

Messages carry no explicit type tag. A decoded line is classified by the
fields it contains, in this order:

    method + id  -> JsonRpcRequest
    method       -> JsonRpcNotification
    result       -> JsonRpcResponse
    error        -> JsonRpcErrorResponse

Anything else, including text that is not JSON at all, is a parse error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

JSONRPC_VERSION = "2.0"

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# Correlation identifier: an integer stays an integer, a string stays a string.
RequestId = int | str


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonRpcError):
            return NotImplemented
        return (self.code, self.message, self.data) == (other.code, other.message, other.data)

    __hash__ = Exception.__hash__

    def __repr__(self) -> str:
        return f"JsonRpcError(code={self.code}, message={self.message!r}, data={self.data!r})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire error object, omitting absent data."""
        error_obj: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error_obj["data"] = self.data
        return error_obj


@dataclass(frozen=True)
class JsonRpcRequest:
    """Represents a JSON-RPC request (has id)."""

    id: RequestId
    method: str
    params: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            message["params"] = self.params
        return message


@dataclass(frozen=True)
class JsonRpcNotification:
    """Represents a JSON-RPC notification (no id)."""

    method: str
    params: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            message["params"] = self.params
        return message


@dataclass(frozen=True)
class JsonRpcResponse:
    """Represents a successful JSON-RPC response."""

    id: RequestId
    result: Any

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "result": self.result}


@dataclass(frozen=True)
class JsonRpcErrorResponse:
    """Represents a JSON-RPC error response.

    ``id`` is None only for errors that could not be tied to a request,
    such as an unparseable line.
    """

    id: RequestId | None
    error: JsonRpcError

    def to_dict(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "error": self.error.to_dict()}


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification | JsonRpcResponse | JsonRpcErrorResponse


def _is_request_id(value: Any) -> bool:
    """Check whether a decoded JSON value is a valid correlation identifier."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return _INT64_MIN <= value <= _INT64_MAX
    return isinstance(value, str)


def _parse_error(message: str) -> JsonRpcError:
    return JsonRpcError(PARSE_ERROR, f"Parse error: {message}")


def _decode_error_object(raw: Any) -> JsonRpcError:
    if not isinstance(raw, dict):
        raise _parse_error("error must be an object")
    code = raw.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        raise _parse_error("error code must be an integer")
    message = raw.get("message")
    if not isinstance(message, str):
        raise _parse_error("error message must be a string")
    return JsonRpcError(code, message, raw.get("data"))


def parse_message(raw: str) -> JsonRpcMessage:
    """Parse a JSON-RPC message from a string.

    Args:
        raw: Raw JSON string.

    Returns:
        Parsed request, notification, response or error response.

    Raises:
        JsonRpcError: With code PARSE_ERROR if the text is not JSON or
            matches none of the message shapes.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise _parse_error(str(e)) from e

    # Batches are not supported
    if not isinstance(data, dict):
        raise _parse_error("message must be an object")

    if data.get("jsonrpc") != JSONRPC_VERSION:
        raise _parse_error("jsonrpc must be '2.0'")

    if "method" in data:
        method = data["method"]
        if not isinstance(method, str):
            raise _parse_error("method must be a string")
        params = data.get("params")
        if "id" not in data:
            return JsonRpcNotification(method=method, params=params)
        if not _is_request_id(data["id"]):
            raise _parse_error("id must be an integer or a string")
        return JsonRpcRequest(id=data["id"], method=method, params=params)

    if "result" in data:
        if not _is_request_id(data.get("id")):
            raise _parse_error("response id must be an integer or a string")
        return JsonRpcResponse(id=data["id"], result=data["result"])

    if "error" in data:
        msg_id = data.get("id")
        if msg_id is not None and not _is_request_id(msg_id):
            raise _parse_error("error id must be an integer, a string or null")
        return JsonRpcErrorResponse(id=msg_id, error=_decode_error_object(data["error"]))

    raise _parse_error("message is not a request, notification, response or error")


def encode_message(message: JsonRpcMessage) -> str:
    """Serialize a message as a single line of compact ASCII JSON.

    Non-ASCII text, lone surrogates included, is written as \\u escapes.

    Args:
        message: Any of the four message variants.

    Returns:
        JSON string without a trailing newline.
    """
    return json.dumps(message.to_dict(), separators=(",", ":"))


def format_response(msg_id: RequestId, result: Any) -> str:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back.
        result: Result payload.

    Returns:
        JSON string.
    """
    return encode_message(JsonRpcResponse(id=msg_id, result=result))


def format_error(
    msg_id: RequestId | None,
    code: int,
    message: str,
    data: Any | None = None,
) -> str:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID (or None for parse errors).
        code: Error code.
        message: Error message.
        data: Optional error data.

    Returns:
        JSON string.
    """
    return encode_message(JsonRpcErrorResponse(id=msg_id, error=JsonRpcError(code, message, data)))
