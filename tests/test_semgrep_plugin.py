"""Tests for the Semgrep tools plugin."""

import json
from unittest.mock import MagicMock

import pytest

from sidero.plugins.base import PluginBase
from sidero.plugins.dispatcher import ToolDispatcher
from sidero.plugins.semgrep import SemgrepPlugin, build_findings_query
from sidero.protocol.jsonrpc import INTERNAL_ERROR, INVALID_PARAMS, JsonRpcError
from sidero.semgrep.api import SemgrepAPIError
from sidero.semgrep.cli import SemgrepError


@pytest.fixture
def plugin(cli: MagicMock, api: MagicMock, environ: dict[str, str]) -> SemgrepPlugin:
    """Plugin wired to mocked collaborators."""
    return SemgrepPlugin(cli, api, environ=environ)


@pytest.fixture
def dispatcher(plugin: SemgrepPlugin) -> ToolDispatcher:
    """Dispatcher that validates arguments before the plugin runs."""
    return ToolDispatcher([plugin])


def _text(result) -> str:
    assert len(result.content) == 1
    assert result.content[0]["type"] == "text"
    return result.content[0]["text"]


class TestSemgrepPlugin:
    """Tests for SemgrepPlugin metadata."""

    def test_implements_plugin_interface(self, plugin: SemgrepPlugin):
        """Should implement PluginBase interface."""
        assert isinstance(plugin, PluginBase)
        assert plugin.name == "semgrep"

    def test_tool_order(self, plugin: SemgrepPlugin):
        """Should declare the tools in their fixed order."""
        assert [tool.name for tool in plugin.get_tools()] == [
            "semgrep_scan",
            "semgrep_scan_with_custom_rule",
            "get_abstract_syntax_tree",
            "semgrep_findings",
            "get_version",
            "supported_languages",
        ]

    def test_schemas_are_objects(self, plugin: SemgrepPlugin):
        """Should describe every input as a JSON object."""
        for tool in plugin.get_tools():
            assert tool.input_schema["type"] == "object"

    def test_cleanup_closes_api_client(self, plugin: SemgrepPlugin, api: MagicMock):
        """Should close the HTTP client on cleanup."""
        plugin.cleanup()

        api.close.assert_called_once()


class TestVersionAndLanguages:
    """Tests for the argument-less tools."""

    def test_get_version(self, dispatcher: ToolDispatcher):
        """Should return the version as text."""
        result = dispatcher.call_tool("get_version", {})

        assert _text(result) == "1.99.0"

    def test_supported_languages(self, dispatcher: ToolDispatcher):
        """Should join languages with a comma and a space."""
        result = dispatcher.call_tool("supported_languages", {})

        assert _text(result) == "python, go, rust"

    def test_collaborator_failure_is_internal_error(
        self, dispatcher: ToolDispatcher, cli: MagicMock
    ):
        """Should forward the collaborator message as an internal error."""
        cli.get_version.side_effect = SemgrepError("Failed to execute semgrep --version")

        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("get_version", {})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "Failed to execute semgrep --version"


class TestScan:
    """Tests for semgrep_scan."""

    def test_scans_paths(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should pass config and paths and pretty-print the report."""
        result = dispatcher.call_tool("semgrep_scan", {"paths": ["a.py"], "config": "auto"})

        cli.scan.assert_called_once_with("auto", ["a.py"])
        assert json.loads(_text(result)) == {"results": [], "errors": []}
        assert "\n  " in _text(result)

    def test_config_is_optional(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should scan without a config."""
        dispatcher.call_tool("semgrep_scan", {"paths": ["a.py"]})

        cli.scan.assert_called_once_with(None, ["a.py"])

    def test_accepts_empty_paths(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should accept an empty path list."""
        dispatcher.call_tool("semgrep_scan", {"paths": []})

        cli.scan.assert_called_once_with(None, [])

    def test_missing_paths(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should reject a call without paths."""
        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_scan", {})

        assert exc_info.value.code == INVALID_PARAMS
        assert "paths" in exc_info.value.message
        cli.scan.assert_not_called()

    def test_paths_must_be_strings(self, dispatcher: ToolDispatcher):
        """Should reject non-string path entries."""
        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_scan", {"paths": [1]})

        assert exc_info.value.code == INVALID_PARAMS
        assert "Invalid paths" in exc_info.value.message

    def test_scan_failure(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should report scan failures as internal errors."""
        cli.scan.side_effect = SemgrepError("Semgrep failed: bad config")

        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_scan", {"paths": ["."]})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "Semgrep failed: bad config"


class TestCustomRuleScan:
    """Tests for semgrep_scan_with_custom_rule."""

    def test_scans_with_rule(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should hand the rule text and files to the CLI."""
        result = dispatcher.call_tool(
            "semgrep_scan_with_custom_rule", {"rule": "rules: []", "code_files": ["x.go"]}
        )

        cli.scan_with_custom_rule.assert_called_once_with("rules: []", ["x.go"])
        assert json.loads(_text(result))["results"] == [{"check_id": "rule"}]

    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"rule": "r"},
            {"code_files": []},
            {"rule": 1, "code_files": []},
            {"rule": "r", "code_files": "x"},
        ],
    )
    def test_rejects_bad_arguments(self, dispatcher: ToolDispatcher, arguments):
        """Should reject missing or wrong-typed arguments."""
        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_scan_with_custom_rule", arguments)

        assert exc_info.value.code == INVALID_PARAMS


class TestAbstractSyntaxTree:
    """Tests for get_abstract_syntax_tree."""

    def test_dumps_ast(self, dispatcher: ToolDispatcher, cli: MagicMock):
        """Should return the AST as JSON text."""
        result = dispatcher.call_tool(
            "get_abstract_syntax_tree", {"code": "x = 1", "language": "python"}
        )

        cli.dump_ast.assert_called_once_with("x = 1", "python")
        assert json.loads(_text(result)) == {"Pr": []}

    @pytest.mark.parametrize("missing", ["code", "language"])
    def test_names_missing_field(self, dispatcher: ToolDispatcher, missing: str):
        """Should name the missing field."""
        arguments = {"code": "x = 1", "language": "python"}
        del arguments[missing]

        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("get_abstract_syntax_tree", arguments)

        assert exc_info.value.code == INVALID_PARAMS
        assert exc_info.value.message == f"Missing required argument: {missing}"


class TestFindings:
    """Tests for semgrep_findings."""

    def test_fetches_findings(self, dispatcher: ToolDispatcher, api: MagicMock):
        """Should call the API with the token and translated query."""
        result = dispatcher.call_tool(
            "semgrep_findings", {"repos": ["a/b", "c/d"], "status": "open"}
        )

        api.get_findings.assert_called_once_with(
            "test-token", {"repos": "a/b,c/d", "status": "open"}
        )
        assert json.loads(_text(result)) == {"findings": []}

    def test_missing_token_is_internal_error(self, cli: MagicMock, api: MagicMock):
        """Should treat a missing token as a server misconfiguration."""
        dispatcher = ToolDispatcher([SemgrepPlugin(cli, api, environ={})])

        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_findings", {})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "SEMGREP_APP_TOKEN not set"
        api.get_findings.assert_not_called()

    def test_custom_token_variable(self, cli: MagicMock, api: MagicMock):
        """Should read the token from the configured variable."""
        plugin = SemgrepPlugin(cli, api, token_env="MY_TOKEN", environ={"MY_TOKEN": "t"})

        ToolDispatcher([plugin]).call_tool("semgrep_findings", {})

        api.get_findings.assert_called_once_with("t", {})

    def test_api_failure(self, dispatcher: ToolDispatcher, api: MagicMock):
        """Should forward API failures as internal errors."""
        api.get_findings.side_effect = SemgrepAPIError("No deployments found for this token")

        with pytest.raises(JsonRpcError) as exc_info:
            dispatcher.call_tool("semgrep_findings", {})

        assert exc_info.value.code == INTERNAL_ERROR
        assert exc_info.value.message == "No deployments found for this token"


class TestBuildFindingsQuery:
    """Tests for findings query translation."""

    def test_joins_repos(self):
        """Should collapse repos into one comma-separated value."""
        query = build_findings_query({"repos": ["one", "two", "three"]})

        assert query == {"repos": "one,two,three"}

    def test_passes_other_arguments_through(self):
        """Should forward other arguments unchanged."""
        query = build_findings_query({"severities": ["high", "low"], "page": 2, "dedup": True})

        assert query == {"severities": ["high", "low"], "page": 2, "dedup": True}

    def test_drops_nulls(self):
        """Should skip null values."""
        query = build_findings_query({"status": None, "issue_type": "sast"})

        assert query == {"issue_type": "sast"}
