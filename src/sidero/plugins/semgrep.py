"""Semgrep plugin.

Provides the Semgrep tools: local scans through the Semgrep CLI and
findings from the Semgrep App API.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

from sidero.plugins.base import PluginBase, ToolDefinition, ToolResult
from sidero.protocol.jsonrpc import INTERNAL_ERROR, JsonRpcError
from sidero.semgrep.api import SemgrepAPIClient, SemgrepAPIError
from sidero.semgrep.cli import SemgrepCLI, SemgrepError

DEFAULT_TOKEN_ENV = "SEMGREP_APP_TOKEN"

_STRING_ARRAY = {"type": "array", "items": {"type": "string"}}

# Listing order is part of the tools/list contract
SEMGREP_TOOLS = (
    ToolDefinition(
        name="semgrep_scan",
        description="Run a Semgrep scan on specific paths",
        input_schema={
            "type": "object",
            "properties": {
                "paths": {**_STRING_ARRAY, "description": "List of file paths to scan"},
                "config": {"type": "string", "description": "Rule configuration"},
            },
            "required": ["paths"],
        },
    ),
    ToolDefinition(
        name="semgrep_scan_with_custom_rule",
        description="Run a scan with a custom ad-hoc rule",
        input_schema={
            "type": "object",
            "properties": {
                "rule": {"type": "string", "description": "YAML rule content"},
                "code_files": {**_STRING_ARRAY, "description": "Files to scan"},
            },
            "required": ["rule", "code_files"],
        },
    ),
    ToolDefinition(
        name="get_abstract_syntax_tree",
        description="Get the AST of a code snippet",
        input_schema={
            "type": "object",
            "properties": {
                "code": {"type": "string", "description": "Code content"},
                "language": {"type": "string", "description": "Language of the code"},
            },
            "required": ["code", "language"],
        },
    ),
    ToolDefinition(
        name="semgrep_findings",
        description="Fetch Semgrep findings",
        input_schema={
            "type": "object",
            "properties": {
                "issue_type": {"type": "string"},
                "status": {"type": "string"},
                "repos": _STRING_ARRAY,
                "severities": _STRING_ARRAY,
            },
            "required": [],
        },
    ),
    ToolDefinition(
        name="get_version",
        description="Get Semgrep version",
        input_schema={"type": "object", "properties": {}},
    ),
    ToolDefinition(
        name="supported_languages",
        description="List supported languages",
        input_schema={"type": "object", "properties": {}},
    ),
)


def build_findings_query(arguments: dict[str, Any]) -> dict[str, Any]:
    """Translate semgrep_findings arguments into API query parameters.

    ``repos`` is collapsed into one comma-separated value; every other
    non-null argument is passed through unchanged.
    """
    query: dict[str, Any] = {}
    for key, value in arguments.items():
        if key == "repos" and isinstance(value, list):
            query[key] = ",".join(item for item in value if isinstance(item, str))
        elif value is not None:
            query[key] = value
    return query


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


class SemgrepPlugin(PluginBase):
    """Semgrep tools backed by the CLI and the App API.

    The API token is looked up in ``environ`` on every findings call,
    so a missing token only affects that tool.
    """

    def __init__(
        self,
        cli: SemgrepCLI,
        api: SemgrepAPIClient,
        token_env: str = DEFAULT_TOKEN_ENV,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the plugin.

        Args:
            cli: Semgrep CLI wrapper.
            api: Semgrep App API client.
            token_env: Environment variable holding the API token.
            environ: Environment to read the token from (defaults to os.environ).
        """
        self._cli = cli
        self._api = api
        self._token_env = token_env
        self._environ = os.environ if environ is None else environ
        self._handlers = {
            "semgrep_scan": self._scan,
            "semgrep_scan_with_custom_rule": self._scan_with_custom_rule,
            "get_abstract_syntax_tree": self._get_abstract_syntax_tree,
            "semgrep_findings": self._findings,
            "get_version": self._get_version,
            "supported_languages": self._supported_languages,
        }

    @property
    def name(self) -> str:
        """Return plugin identifier."""
        return "semgrep"

    def get_tools(self) -> list[ToolDefinition]:
        """Return available tools in listing order."""
        return list(SEMGREP_TOOLS)

    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments, already schema-validated.

        Returns:
            ToolResult with a single text item.

        Raises:
            JsonRpcError: INTERNAL_ERROR carrying the collaborator's message.
        """
        handler = self._handlers.get(tool_name)
        if handler is None:
            raise JsonRpcError(INTERNAL_ERROR, f"Tool not handled by semgrep plugin: {tool_name}")

        try:
            return ToolResult.text(handler(arguments))
        except (SemgrepError, SemgrepAPIError) as e:
            raise JsonRpcError(INTERNAL_ERROR, str(e)) from e

    def cleanup(self) -> None:
        """Close the API client."""
        self._api.close()

    def _scan(self, arguments: dict[str, Any]) -> str:
        return _pretty(self._cli.scan(arguments.get("config"), arguments["paths"]))

    def _scan_with_custom_rule(self, arguments: dict[str, Any]) -> str:
        return _pretty(self._cli.scan_with_custom_rule(arguments["rule"], arguments["code_files"]))

    def _get_abstract_syntax_tree(self, arguments: dict[str, Any]) -> str:
        return _pretty(self._cli.dump_ast(arguments["code"], arguments["language"]))

    def _findings(self, arguments: dict[str, Any]) -> str:
        token = self._environ.get(self._token_env)
        if not token:
            # Server misconfiguration, not a client mistake
            raise JsonRpcError(INTERNAL_ERROR, f"{self._token_env} not set")
        return _pretty(self._api.get_findings(token, build_findings_query(arguments)))

    def _get_version(self, arguments: dict[str, Any]) -> str:
        return self._cli.get_version()

    def _supported_languages(self, arguments: dict[str, Any]) -> str:
        return ", ".join(self._cli.get_supported_languages())
