"""Sidero - Main entry point.

Serves Semgrep to MCP clients over stdio: requests arrive on stdin one
JSON object per line, replies leave on stdout the same way, and
diagnostics go to stderr.

CONFIGURATION
-------------
Without ``--config`` the defaults below apply. A YAML file may override
any of them; ``${VAR}`` references are expanded from the environment:

    semgrep:
      binary: semgrep
      timeout: 300
    api:
      base_url: https://semgrep.dev/api/v1
      token_env: SEMGREP_APP_TOKEN
      timeout: 30
    resources:
      rule_schema_url: https://raw.githubusercontent.com/...
      rule_url_template: https://semgrep.dev/c/r/{rule_id}

The semgrep_findings tool reads the API token from the variable named
by ``api.token_env`` when it is called; the other tools work without it.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sidero import __version__
from sidero.config import ConfigLoadError, ServerConfig, load_config
from sidero.protocol.transport import StdioTransport
from sidero.server import MCPServer


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="sidero",
        description="Semgrep MCP server over stdio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to a YAML configuration file (default: built-in settings)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"sidero {__version__}",
    )

    args = parser.parse_args(argv)

    transport = StdioTransport()

    try:
        config = load_config(args.config) if args.config else ServerConfig()
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    transport.log("Sidero MCP server started")
    transport.log(f"Config loaded from: {args.config or 'defaults'}")

    with MCPServer(config=config, log=transport.log) as server:
        try:
            server.serve(transport)
        except KeyboardInterrupt:
            transport.log("Interrupted, shutting down")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            transport.log(f"Error: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
