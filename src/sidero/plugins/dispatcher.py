"""Tool dispatcher - routes tool calls to the appropriate plugin.

The tool registry is built once from the plugins handed to the
constructor and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from sidero.plugins.base import PluginBase, ToolDefinition, ToolResult
from sidero.protocol.jsonrpc import INVALID_PARAMS, METHOD_NOT_FOUND, JsonRpcError


class ToolDispatcher:
    """Routes tool calls to registered plugins.

    Holds an immutable registry of tools in declaration order and
    validates arguments against each tool's input schema before the
    plugin sees them.
    """

    def __init__(self, plugins: Sequence[PluginBase]) -> None:
        """Initialize the dispatcher.

        Args:
            plugins: Plugins providing tools, in listing order.

        Raises:
            ValueError: If two plugins declare the same tool name.
        """
        self._plugins = tuple(plugins)

        definitions: list[ToolDefinition] = []
        tool_map: dict[str, tuple[PluginBase, Draft202012Validator]] = {}
        for plugin in self._plugins:
            for tool in plugin.get_tools():
                if tool.name in tool_map:
                    owner = tool_map[tool.name][0]
                    raise ValueError(
                        f"Duplicate tool name: {tool.name} "
                        f"(declared by {owner.name} and {plugin.name})"
                    )
                Draft202012Validator.check_schema(tool.input_schema)
                tool_map[tool.name] = (plugin, Draft202012Validator(tool.input_schema))
                definitions.append(tool)

        self._definitions = tuple(definitions)
        self._tool_map = MappingProxyType(tool_map)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all available tools in MCP format.

        Returns:
            List of tool definitions in MCP format.
        """
        return [tool.to_dict() for tool in self._definitions]

    def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Call a tool by name.

        Args:
            tool_name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            ToolResult from the tool execution.

        Raises:
            JsonRpcError: METHOD_NOT_FOUND for an unknown tool,
                INVALID_PARAMS when the arguments do not match the
                schema, or whatever the plugin raises.
        """
        entry = self._tool_map.get(tool_name)
        if entry is None:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Tool not found: {tool_name}")

        plugin, validator = entry
        errors = sorted(validator.iter_errors(arguments), key=_error_order)
        if errors:
            raise JsonRpcError(INVALID_PARAMS, _describe(errors[0]))

        return plugin.execute(tool_name, arguments)

    def cleanup(self) -> None:
        """Clean up all registered plugins."""
        for plugin in self._plugins:
            plugin.cleanup()


def _error_order(error: ValidationError) -> tuple[int, str]:
    # Report the shallowest problem first, then by field name for stable output
    return (len(error.absolute_path), str(list(error.absolute_path)))


def _describe(error: ValidationError) -> str:
    """Turn a schema violation into a message naming the offending field."""
    if error.validator == "required" and not error.absolute_path:
        missing = [name for name in error.validator_value if name not in error.instance]
        return f"Missing required argument: {', '.join(missing)}"
    if error.absolute_path:
        return f"Invalid {error.absolute_path[0]}: {error.message}"
    return f"Invalid arguments: {error.message}"
