"""Plugin base class and data structures.

Defines the interface that all tool plugins must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDefinition:
    """Definition of a tool provided by a plugin."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(hash=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolResult:
    """Result of a tool execution."""

    content: list[dict[str, Any]]
    is_error: bool | None = None

    @classmethod
    def text(cls, text: str) -> ToolResult:
        """Wrap a string as a single text content item."""
        return cls(content=[{"type": "text", "text": text}])

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format. ``isError`` is
            only present when it was set explicitly.
        """
        result: dict[str, Any] = {"content": self.content}
        if self.is_error is not None:
            result["isError"] = self.is_error
        return result


class PluginBase(ABC):
    """Abstract base class for all plugins.

    Plugins must implement this interface to provide tools
    to the MCP server.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plugin identifier."""
        pass

    @abstractmethod
    def get_tools(self) -> list[ToolDefinition]:
        """Return tool definitions provided by this plugin.

        Returns:
            List of ToolDefinition objects, in the order they are listed.
        """
        pass

    @abstractmethod
    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments, already validated against the
                tool's input schema.

        Returns:
            ToolResult with content.

        Raises:
            JsonRpcError: If the call fails. Collaborator failures use
                INTERNAL_ERROR.
        """
        pass

    def cleanup(self) -> None:  # noqa: B027
        """Release resources held by the plugin."""
