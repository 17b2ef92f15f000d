"""Collaborators for the Semgrep CLI and the Semgrep App API."""

from sidero.semgrep.api import SemgrepAPIClient, SemgrepAPIError
from sidero.semgrep.cli import SemgrepCLI, SemgrepError

__all__ = [
    "SemgrepAPIClient",
    "SemgrepAPIError",
    "SemgrepCLI",
    "SemgrepError",
]
