"""Line-delimited stdio framing for the MCP server.

One JSON-RPC message per line in each direction. Diagnostics share the
process with the protocol stream, so they only ever go to stderr.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from typing import TextIO

LOG_PREFIX = "[sidero]"


class StdioTransport:
    """Frames JSON-RPC messages over stdin/stdout.

    Iterating a transport yields incoming messages until end of stream.
    Read and write failures are not caught here; the caller decides
    whether they are fatal.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Input stream (defaults to sys.stdin).
            stdout: Output stream (defaults to sys.stdout).
            stderr: Log stream (defaults to sys.stderr).
        """
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def __iter__(self) -> Iterator[str]:
        while (message := self.read_message()) is not None:
            yield message

    def read_message(self) -> str | None:
        """Return the next non-blank line, stripped, or None at end of stream."""
        for line in iter(self._stdin.readline, ""):
            message = line.strip()
            if message:
                return message
        return None

    def write_message(self, message: str) -> None:
        """Write one encoded message as a line and flush it.

        Args:
            message: Single-line JSON text.
        """
        self._stdout.write(f"{message}\n")
        self._stdout.flush()

    def log(self, message: str) -> None:
        """Write a diagnostic line to stderr.

        Characters the stream cannot encode (such as lone surrogates
        echoed from client input) are written as backslash escapes.

        Args:
            message: Log message.
        """
        encoding = getattr(self._stderr, "encoding", None)
        if not isinstance(encoding, str):
            encoding = "utf-8"
        line = f"{LOG_PREFIX} {message}\n"
        self._stderr.write(line.encode(encoding, "backslashreplace").decode(encoding))
        self._stderr.flush()
