"""MCP initialize handling.

Builds the initialize result and remembers who the client says it is.
Methods are served whether or not the handshake happened.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

# Protocol version advertised to every client
MCP_PROTOCOL_VERSION = "2024-11-05"

SERVER_NAME = "sidero"

# Reported when the analysis engine cannot be asked for its version
UNKNOWN_VERSION = "unknown"


def _default_capabilities() -> dict[str, Any]:
    return {"logging": {}, "tools": {"listChanged": False}}


@dataclass
class LifecycleManager:
    """Answers initialize requests.

    ``version_probe`` returns the server version to advertise; any
    exception it raises is replaced by ``"unknown"``.
    """

    version_probe: Callable[[], str]
    capabilities: dict[str, Any] = field(default_factory=_default_capabilities)
    client_info: dict[str, Any] | None = None

    def server_version(self) -> str:
        """Ask the version probe, falling back to ``"unknown"``."""
        try:
            return self.version_probe()
        except Exception:
            return UNKNOWN_VERSION

    def describe_client(self) -> str:
        """Return "name version" from the last clientInfo, for log lines."""
        if self.client_info is None:
            return "unidentified client"
        name = self.client_info.get("name")
        version = self.client_info.get("version")
        return " ".join(str(part) for part in (name or "unnamed client", version) if part)

    def handle_initialize(self, params: Any) -> dict[str, Any]:
        """Handle initialize request.

        Args:
            params: Initialize request parameters (may be None).

        Returns:
            Initialize response result.
        """
        client_info = params.get("clientInfo") if isinstance(params, dict) else None
        self.client_info = client_info if isinstance(client_info, dict) else None

        return {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": {"name": SERVER_NAME, "version": self.server_version()},
        }
