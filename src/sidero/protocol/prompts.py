"""MCP prompts/list and prompts/get handlers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sidero.protocol.jsonrpc import INVALID_PARAMS, METHOD_NOT_FOUND, JsonRpcError


@dataclass(frozen=True)
class PromptArgument:
    """A named argument accepted by a prompt."""

    name: str
    description: str | None = None
    required: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.required is not None:
            data["required"] = self.required
        return data


@dataclass(frozen=True)
class PromptDefinition:
    """A prompt template advertised through prompts/list.

    ``render`` receives the client's arguments (missing ones already set
    to the empty string) and returns the user message text.
    """

    name: str
    description: str | None
    arguments: tuple[PromptArgument, ...]
    title: str
    render: Callable[[dict[str, str]], str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [argument.to_dict() for argument in self.arguments],
        }


def _render_custom_rule(arguments: dict[str, str]) -> str:
    code = arguments["code"]
    language = arguments["language"]
    return (
        "You are an expert at writing Semgrep rules.\n\n"
        f"Code to analyze:\n```{language}\n{code}\n```\n\n"
        f"Language: {language}\n\n"
        "Create a Semgrep rule to detect issues in this code."
    )


PROMPTS = (
    PromptDefinition(
        name="write_custom_semgrep_rule",
        description="Helper to write a custom Semgrep rule",
        arguments=(
            PromptArgument(name="code", description="Code snippet", required=True),
            PromptArgument(name="language", description="Language", required=True),
        ),
        title="Write custom rule",
        render=_render_custom_rule,
    ),
)


class PromptsHandler:
    """Serves a fixed set of prompt templates."""

    def __init__(self, prompts: tuple[PromptDefinition, ...] = PROMPTS) -> None:
        self._prompts = {prompt.name: prompt for prompt in prompts}

    def handle_list(self) -> dict[str, Any]:
        return {"prompts": [prompt.to_dict() for prompt in self._prompts.values()]}

    def handle_get(self, params: Any) -> dict[str, Any]:
        """Render a prompt.

        Declared arguments the client leaves out render as empty strings.

        Raises:
            JsonRpcError: INVALID_PARAMS for a malformed request,
                METHOD_NOT_FOUND for an unknown prompt.
        """
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            raise JsonRpcError(INVALID_PARAMS, "Invalid params: 'name' must be a string")

        supplied = params.get("arguments")
        if supplied is None:
            supplied = {}
        if not isinstance(supplied, dict) or not all(
            isinstance(value, str) for value in supplied.values()
        ):
            raise JsonRpcError(
                INVALID_PARAMS, "Invalid params: 'arguments' must map names to strings"
            )

        prompt = self._prompts.get(params["name"])
        if prompt is None:
            raise JsonRpcError(METHOD_NOT_FOUND, f"Prompt not found: {params['name']}")

        arguments = {arg.name: supplied.get(arg.name, "") for arg in prompt.arguments}
        return {
            "description": prompt.title,
            "messages": [
                {"role": "user", "content": {"type": "text", "text": prompt.render(arguments)}}
            ],
        }
