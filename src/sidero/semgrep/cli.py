"""Semgrep command-line wrapper.

Runs the ``semgrep`` binary as a subprocess and returns its parsed
output. Every failure is reported as a SemgrepError whose message is
meant to be shown to the client.
"""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

DEFAULT_TIMEOUT = 300.0


class SemgrepError(Exception):
    """Raised when a Semgrep invocation fails."""

    pass


class SemgrepCLI:
    """Thin wrapper around the Semgrep executable."""

    def __init__(self, binary: str = "semgrep", timeout: float | None = DEFAULT_TIMEOUT) -> None:
        """Initialize the wrapper.

        Args:
            binary: Name or path of the semgrep executable.
            timeout: Seconds to wait for each invocation (None waits forever).
        """
        self._binary = binary
        self._timeout = timeout

    def _run(self, args: list[str], action: str) -> subprocess.CompletedProcess[str]:
        command = [self._binary, *args]
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise SemgrepError(f"Semgrep timed out after {self._timeout}s: {action}") from e
        except OSError as e:
            raise SemgrepError(f"Failed to execute {action}: {e}") from e

    def get_version(self) -> str:
        """Return the output of ``semgrep --version``."""
        completed = self._run(["--version"], "semgrep --version")
        return completed.stdout.strip()

    def get_supported_languages(self) -> list[str]:
        """Return the languages Semgrep reports, one per output line."""
        completed = self._run(
            ["show", "supported-languages"], "semgrep show supported-languages"
        )
        return [line.strip() for line in completed.stdout.splitlines() if line.strip()]

    def scan(self, config: str | None, paths: list[str]) -> Any:
        """Scan paths and return Semgrep's JSON report.

        Args:
            config: Optional rule configuration passed as ``--config``.
            paths: Files or directories to scan.

        Returns:
            Decoded JSON output.
        """
        args = ["scan", "--json", "--experimental"]
        if config is not None:
            args.extend(["--config", config])
        args.extend(paths)
        return self._scan_output(self._run(args, "semgrep scan"))

    def scan_with_custom_rule(self, rule: str, code_files: list[str]) -> Any:
        """Scan files with a rule given as YAML text.

        The rule is written to a temporary file that is removed once the
        scan finishes.
        """
        with _temporary_file(rule, suffix=".yaml") as rule_path:
            args = ["scan", "--json", "--experimental", "--config", rule_path, *code_files]
            return self._scan_output(self._run(args, "semgrep scan"))

    def dump_ast(self, code: str, language: str) -> Any:
        """Return the generic AST Semgrep builds for a code snippet."""
        with _temporary_file(code) as code_path:
            completed = self._run(
                ["--dump-ast", "--json", "--experimental", "--lang", language, code_path],
                "semgrep --dump-ast",
            )

        if completed.returncode != 0:
            raise SemgrepError(f"Semgrep AST dump failed: {completed.stderr.strip()}")

        try:
            return json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise SemgrepError(f"Failed to parse Semgrep AST output: {e}") from e

    def _scan_output(self, completed: subprocess.CompletedProcess[str]) -> Any:
        # Semgrep exits non-zero for some failures while still printing a usable report
        if completed.returncode != 0 and not completed.stdout.strip():
            raise SemgrepError(f"Semgrep failed: {completed.stderr.strip()}")

        try:
            return json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise SemgrepError(f"Failed to parse Semgrep JSON output: {e}") from e


@contextmanager
def _temporary_file(content: str, suffix: str = "") -> Iterator[str]:
    """Write content to a named temporary file, yield its path, then delete it."""
    try:
        fd, path = tempfile.mkstemp(prefix="sidero-", suffix=suffix)
    except OSError as e:
        raise SemgrepError(f"Failed to create temporary file: {e}") from e
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise SemgrepError(f"Failed to write temporary file: {e}") from e
        yield path
    finally:
        if os.path.exists(path):
            os.unlink(path)
