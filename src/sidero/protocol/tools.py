"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, routing them through the plugin dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sidero.protocol.jsonrpc import INVALID_PARAMS, JsonRpcError

if TYPE_CHECKING:
    from sidero.plugins.dispatcher import ToolDispatcher


@dataclass
class ToolsListResult:
    """Result of tools/list request."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/list result format.
        """
        return {"tools": self.tools}


@dataclass(frozen=True)
class CallToolParams:
    """Decoded tools/call parameters."""

    name: str
    arguments: dict[str, Any]

    @classmethod
    def from_params(cls, params: Any) -> CallToolParams:
        """Decode raw request params.

        Arguments whose value is null are treated as absent.

        Raises:
            JsonRpcError: INVALID_PARAMS if the shape is wrong.
        """
        if not isinstance(params, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: expected an object")

        name = params.get("name")
        if not isinstance(name, str):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: 'name' must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: 'arguments' must be an object")

        return cls(
            name=name,
            arguments={key: value for key, value in arguments.items() if value is not None},
        )


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests.

    Routes requests through the plugin dispatcher and formats
    results in the MCP tools/call format.
    """

    def __init__(self, dispatcher: ToolDispatcher) -> None:
        """Initialize the handler.

        Args:
            dispatcher: Tool dispatcher for routing calls.
        """
        self._dispatcher = dispatcher

    def handle_list(self) -> ToolsListResult:
        """Handle tools/list request.

        Returns:
            ToolsListResult with all available tools.
        """
        return ToolsListResult(tools=self._dispatcher.list_tools())

    def handle_call(self, params: Any) -> dict[str, Any]:
        """Handle tools/call request.

        Args:
            params: Raw request params.

        Returns:
            Tool result in MCP tools/call format.

        Raises:
            JsonRpcError: For unknown tools, invalid arguments or failed calls.
        """
        call = CallToolParams.from_params(params)
        return self._dispatcher.call_tool(call.name, call.arguments).to_dict()
