"""Tests for the command-line entry point."""

import io
import json
from pathlib import Path

import pytest

from sidero import __version__
from sidero.main import main


@pytest.fixture
def stdio(monkeypatch: pytest.MonkeyPatch):
    """Replace the process streams with in-memory buffers."""
    streams = {"stdin": io.StringIO(), "stdout": io.StringIO(), "stderr": io.StringIO()}
    for name, stream in streams.items():
        monkeypatch.setattr(f"sys.{name}", stream)
    return streams


class TestMain:
    """Tests for main()."""

    def test_exits_cleanly_on_eof(self, stdio):
        """Should return 0 when stdin closes."""
        assert main([]) == 0
        assert "[sidero] Sidero MCP server started" in stdio["stderr"].getvalue()
        assert stdio["stdout"].getvalue() == ""

    def test_answers_requests(self, stdio):
        """Should serve requests read from stdin."""
        stdio["stdin"].write('{"jsonrpc": "2.0", "id": 1, "method": "resources/list"}\n')
        stdio["stdin"].seek(0)

        assert main([]) == 0

        reply = json.loads(stdio["stdout"].getvalue())
        assert reply["id"] == 1
        assert reply["result"]["resources"][0]["uri"] == "semgrep://rule/schema"

    def test_missing_config_file(self, stdio, tmp_path: Path):
        """Should fail with exit code 1 on a bad config path."""
        assert main(["--config", str(tmp_path / "absent.yaml")]) == 1
        assert "Error loading config" in stdio["stderr"].getvalue()

    def test_loads_config_file(self, stdio, tmp_path: Path):
        """Should start with settings from the file."""
        path = tmp_path / "sidero.yaml"
        path.write_text("api:\n  timeout: 10\n", encoding="utf-8")

        assert main(["-c", str(path)]) == 0
        assert str(path) in stdio["stderr"].getvalue()

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]):
        """Should print the package version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
