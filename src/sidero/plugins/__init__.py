"""Plugin system for MCP tools."""

from sidero.plugins.base import PluginBase, ToolDefinition, ToolResult
from sidero.plugins.dispatcher import ToolDispatcher
from sidero.plugins.semgrep import SemgrepPlugin

__all__ = [
    "PluginBase",
    "SemgrepPlugin",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolResult",
]
