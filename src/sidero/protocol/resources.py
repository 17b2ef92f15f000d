"""MCP resources/list and resources/read handlers.

Resource URIs understood by resources/read:

    semgrep://rule/schema         the Semgrep rule JSON schema
    semgrep://rule/<id>/yaml      a registry rule's YAML definition

Other ``semgrep://rule/`` URIs are malformed (INVALID_PARAMS); URIs
outside that prefix are unknown (METHOD_NOT_FOUND).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sidero.config import ServerConfig
from sidero.protocol.jsonrpc import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, JsonRpcError
from sidero.semgrep.api import SemgrepAPIClient, SemgrepAPIError

RULE_URI_PREFIX = "semgrep://rule/"
RULE_SCHEMA_URI = "semgrep://rule/schema"


@dataclass(frozen=True)
class ResourceDefinition:
    """A resource advertised through resources/list."""

    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"uri": self.uri, "name": self.name, "description": self.description}
        if self.mime_type is not None:
            data["mimeType"] = self.mime_type
        return data


RESOURCES = (
    ResourceDefinition(
        uri=RULE_SCHEMA_URI,
        name="Semgrep Rule Schema",
        description="JSON Schema for Semgrep Rules",
        mime_type="application/json",
    ),
)


def parse_rule_id(uri: str) -> str | None:
    """Extract ``<id>`` from ``semgrep://rule/<id>/yaml``, or None if the URI has another shape."""
    if not uri.startswith(RULE_URI_PREFIX):
        return None
    segments = uri[len(RULE_URI_PREFIX) :].split("/")
    if len(segments) != 2 or segments[1] != "yaml" or not segments[0]:
        return None
    return segments[0]


class ResourcesHandler:
    """Lists and fetches Semgrep resources."""

    def __init__(
        self,
        api: SemgrepAPIClient,
        config: ServerConfig,
        resources: tuple[ResourceDefinition, ...] = RESOURCES,
    ) -> None:
        self._api = api
        self._config = config
        self._resources = resources

    def handle_list(self) -> dict[str, Any]:
        return {"resources": [resource.to_dict() for resource in self._resources]}

    def handle_read(self, params: Any) -> dict[str, Any]:
        """Fetch a resource's text.

        Raises:
            JsonRpcError: INVALID_PARAMS for malformed requests or rule
                URIs, METHOD_NOT_FOUND for unknown URIs, INTERNAL_ERROR
                if the download fails.
        """
        if not isinstance(params, dict) or not isinstance(params.get("uri"), str):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: 'uri' must be a string")

        uri = params["uri"]
        url = self._resolve(uri)
        try:
            text = self._api.fetch_url(url)
        except SemgrepAPIError as e:
            raise JsonRpcError(INTERNAL_ERROR, str(e)) from e

        return {"contents": [{"uri": uri, "mimeType": "text/plain", "text": text}]}

    def _resolve(self, uri: str) -> str:
        if uri == RULE_SCHEMA_URI:
            return self._config.rule_schema_url

        if uri.startswith(RULE_URI_PREFIX):
            rule_id = parse_rule_id(uri)
            if rule_id is None:
                raise JsonRpcError(INVALID_PARAMS, f"Invalid resource URI: {uri}")
            return self._config.rule_url(rule_id)

        raise JsonRpcError(METHOD_NOT_FOUND, f"Resource not found: {uri}")
