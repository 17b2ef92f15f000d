"""Semgrep App API client.

Fetches findings for the deployment owning an API token, and raw
documents such as rule definitions and the rule schema.
"""

from __future__ import annotations

from typing import Any

import httpx

DEFAULT_BASE_URL = "https://semgrep.dev/api/v1"

# User agent to use for requests
USER_AGENT = "sidero/0.1 (Semgrep MCP server)"


class SemgrepAPIError(Exception):
    """Raised when a request to the Semgrep App API fails."""

    pass


class SemgrepAPIClient:
    """HTTP client for the Semgrep App API.

    Uses a single pooled ``httpx.Client``; call ``close()`` when done.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, without a trailing slash.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def get_findings(self, token: str, params: dict[str, Any]) -> Any:
        """Fetch findings for the token's first deployment.

        Args:
            token: Semgrep App API token.
            params: Query parameters forwarded verbatim.

        Returns:
            Decoded JSON response body.
        """
        slug = self._get_deployment_slug(token)
        url = f"{self._base_url}/deployments/{slug}/findings"

        try:
            response = self._client.get(url, headers=_auth_headers(token), params=params)
        except httpx.HTTPError as e:
            raise SemgrepAPIError(f"Failed to send request to Semgrep Findings API: {e}") from e

        if not response.is_success:
            raise SemgrepAPIError(
                f"API request failed with status {response.status_code}: {response.text}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise SemgrepAPIError(f"Failed to parse findings API response: {e}") from e

    def fetch_url(self, url: str) -> str:
        """Fetch a document and return its body as text."""
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise SemgrepAPIError(f"Failed to fetch URL: {url}: {e}") from e

        if not response.is_success:
            raise SemgrepAPIError(f"Request failed: {response.status_code}")

        return response.text

    def _get_deployment_slug(self, token: str) -> str:
        try:
            response = self._client.get(
                f"{self._base_url}/deployments", headers=_auth_headers(token)
            )
        except httpx.HTTPError as e:
            raise SemgrepAPIError(f"Failed to fetch deployments: {e}") from e

        if not response.is_success:
            raise SemgrepAPIError(f"Failed to fetch deployments: {response.status_code}")

        try:
            deployments = response.json()["deployments"]
            slugs = [deployment["slug"] for deployment in deployments]
        except (ValueError, KeyError, TypeError) as e:
            raise SemgrepAPIError(f"Failed to parse deployments response: {e}") from e

        if not slugs:
            raise SemgrepAPIError("No deployments found for this token")
        return str(slugs[0])


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Accept": "application/json"}
