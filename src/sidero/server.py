"""MCP Server - method dispatch and the stdio message loop.

Integrates all components into a complete MCP server.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from sidero.config import ServerConfig
from sidero.plugins.dispatcher import ToolDispatcher
from sidero.plugins.semgrep import SemgrepPlugin
from sidero.protocol.jsonrpc import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    format_error,
    format_response,
    parse_message,
)
from sidero.protocol.lifecycle import LifecycleManager
from sidero.protocol.prompts import PromptsHandler
from sidero.protocol.resources import ResourcesHandler
from sidero.protocol.tools import ToolsHandler
from sidero.protocol.transport import StdioTransport
from sidero.semgrep.api import SemgrepAPIClient
from sidero.semgrep.cli import SemgrepCLI

Handler = Callable[[Any], Any]


def _no_log(message: str) -> None:
    pass


class MCPServer:
    """MCP Server implementation.

    Provides a complete MCP server that handles:
    - The initialize handshake, logging who connected
    - Tool listing and execution
    - Prompt and resource listing and retrieval

    Requests are answered strictly in arrival order, one at a time.
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        cli: SemgrepCLI | None = None,
        api: SemgrepAPIClient | None = None,
        environ: Mapping[str, str] | None = None,
        log: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration (defaults apply when omitted).
            cli: Semgrep CLI wrapper; built from config when omitted.
            api: Semgrep App API client; built from config when omitted.
            environ: Environment holding the API token (defaults to os.environ).
            log: Diagnostic sink, typically StdioTransport.log.
        """
        self._config = config or ServerConfig()
        self._log = log or _no_log

        cli = cli or SemgrepCLI(
            binary=self._config.semgrep_binary, timeout=self._config.semgrep_timeout
        )
        api = api or SemgrepAPIClient(
            base_url=self._config.api_base_url, timeout=self._config.api_timeout
        )

        # Initialize components
        self._lifecycle = LifecycleManager(version_probe=cli.get_version)
        self._dispatcher = ToolDispatcher(
            [SemgrepPlugin(cli, api, token_env=self._config.api_token_env, environ=environ)]
        )
        self._tools_handler = ToolsHandler(self._dispatcher)
        self._prompts_handler = PromptsHandler()
        self._resources_handler = ResourcesHandler(api, self._config)

        self._methods: Mapping[str, Handler] = MappingProxyType(
            {
                "initialize": self._initialize,
                "tools/list": lambda params: self._tools_handler.handle_list().to_dict(),
                "tools/call": self._tools_handler.handle_call,
                "prompts/list": lambda params: self._prompts_handler.handle_list(),
                "prompts/get": self._prompts_handler.handle_get,
                "resources/list": lambda params: self._resources_handler.handle_list(),
                "resources/read": self._resources_handler.handle_read,
                # Some clients send this as a request; answer it with null
                "notifications/initialized": lambda params: None,
            }
        )

    def _initialize(self, params: Any) -> dict[str, Any]:
        result = self._lifecycle.handle_initialize(params)
        self._log(f"Initialize from {self._lifecycle.describe_client()}")
        return result

    def dispatch(self, method: str, params: Any) -> Any:
        """Run the handler registered for a method.

        Args:
            method: Exact, case-sensitive method name.
            params: Raw request params (may be None).

        Returns:
            Result payload.

        Raises:
            JsonRpcError: If the method is unknown or the handler fails.
        """
        handler = self._methods.get(method)
        if handler is None:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}")
        return handler(params)

    def handle_message(self, raw_message: str) -> str | None:
        """Handle an incoming JSON-RPC message.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Response string, or None when nothing must be sent back.
        """
        try:
            message = parse_message(raw_message)
        except JsonRpcError as e:
            self._log(f"Failed to parse message: {e.message}")
            return format_error(None, e.code, e.message)

        if isinstance(message, JsonRpcRequest):
            return self._handle_request(message)
        if isinstance(message, JsonRpcNotification):
            return self._handle_notification(message)

        # Responses and errors addressed to a server are ignored
        self._log("Ignoring response message from client")
        return None

    def _handle_notification(self, notification: JsonRpcNotification) -> None:
        """Handle a notification (no response).

        Args:
            notification: The notification to handle.
        """
        self._log(f"Notification received: {notification.method}")
        return None

    def _handle_request(self, request: JsonRpcRequest) -> str:
        """Handle a request and return response.

        Args:
            request: The request to handle.

        Returns:
            JSON-RPC response string.
        """
        try:
            result = self.dispatch(request.method, request.params)
        except JsonRpcError as e:
            self._log(f"{request.method} failed ({e.code}): {e.message}")
            return format_error(request.id, e.code, e.message, e.data)
        except Exception as e:
            self._log(f"{request.method} raised {type(e).__name__}: {e}")
            return format_error(request.id, INTERNAL_ERROR, str(e) or type(e).__name__)

        return format_response(request.id, result)

    def serve(self, transport: StdioTransport) -> None:
        """Answer messages until the input stream ends.

        Read and write failures propagate to the caller.

        Args:
            transport: Transport to read requests from and write replies to.
        """
        for message in transport:
            response = self.handle_message(message)
            if response is not None:
                transport.write_message(response)

        self._log("EOF received, shutting down")

    def close(self) -> None:
        """Close the server and clean up resources."""
        self._dispatcher.cleanup()

    def __enter__(self) -> MCPServer:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
