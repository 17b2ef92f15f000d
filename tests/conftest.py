"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from sidero.config import ServerConfig
from sidero.semgrep.api import SemgrepAPIClient
from sidero.semgrep.cli import SemgrepCLI
from sidero.server import MCPServer


@pytest.fixture
def cli() -> MagicMock:
    """Semgrep CLI stand-in with canned successful answers."""
    mock = MagicMock(spec=SemgrepCLI)
    mock.get_version.return_value = "1.99.0"
    mock.get_supported_languages.return_value = ["python", "go", "rust"]
    mock.scan.return_value = {"results": [], "errors": []}
    mock.scan_with_custom_rule.return_value = {"results": [{"check_id": "rule"}], "errors": []}
    mock.dump_ast.return_value = {"Pr": []}
    return mock


@pytest.fixture
def api() -> MagicMock:
    """Semgrep App API stand-in."""
    mock = MagicMock(spec=SemgrepAPIClient)
    mock.get_findings.return_value = {"findings": []}
    mock.fetch_url.return_value = "rules: []"
    return mock


@pytest.fixture
def environ() -> dict[str, str]:
    """Process environment seen by the findings tool."""
    return {"SEMGREP_APP_TOKEN": "test-token"}


@pytest.fixture
def server(cli: MagicMock, api: MagicMock, environ: dict[str, str]) -> MCPServer:
    """Server wired to mocked collaborators."""
    return MCPServer(config=ServerConfig(), cli=cli, api=api, environ=environ)
