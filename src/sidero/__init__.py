"""Sidero - MCP server exposing Semgrep over stdio."""

__version__ = "0.1.0"
