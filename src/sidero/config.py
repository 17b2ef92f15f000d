"""Server configuration loader.

Settings come from an optional YAML file; anything not given there keeps
its default. String values may reference environment variables with
``${VAR}`` syntax.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

import yaml

RULE_SCHEMA_URL = (
    "https://raw.githubusercontent.com/semgrep/semgrep-interfaces"
    "/refs/heads/main/rule_schema_v1.yaml"
)
RULE_URL_TEMPLATE = "https://semgrep.dev/c/r/{rule_id}"


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        return env_value if env_value is not None else match.group(0)

    return pattern.sub(replacer, value)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigLoadError(f"'{name}' must be a mapping")
    return section


def _string(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ConfigLoadError(f"'{key}' must be a string")
    return expand_env_vars(value)


def _seconds(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        raise ConfigLoadError(f"'{key}' must be a positive number of seconds")
    return float(value)


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration.

    Immutable once loaded; shared by the collaborators built at start-up.
    """

    # Semgrep CLI
    semgrep_binary: str = "semgrep"
    semgrep_timeout: float = 300.0

    # Semgrep App API
    api_base_url: str = "https://semgrep.dev/api/v1"
    api_token_env: str = "SEMGREP_APP_TOKEN"
    api_timeout: float = 30.0

    # Resources
    rule_schema_url: str = RULE_SCHEMA_URL
    rule_url_template: str = RULE_URL_TEMPLATE

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig instance with defaults for missing settings.

        Raises:
            ConfigLoadError: If a setting has the wrong type.
        """
        defaults = cls()
        semgrep = _section(config, "semgrep")
        api = _section(config, "api")
        resources = _section(config, "resources")

        rule_url_template = _string(resources, "rule_url_template", defaults.rule_url_template)
        if "{rule_id}" not in rule_url_template:
            raise ConfigLoadError("'rule_url_template' must contain '{rule_id}'")

        return cls(
            semgrep_binary=_string(semgrep, "binary", defaults.semgrep_binary),
            semgrep_timeout=_seconds(semgrep, "timeout", defaults.semgrep_timeout),
            api_base_url=_string(api, "base_url", defaults.api_base_url),
            api_token_env=_string(api, "token_env", defaults.api_token_env),
            api_timeout=_seconds(api, "timeout", defaults.api_timeout),
            rule_schema_url=_string(resources, "rule_schema_url", defaults.rule_schema_url),
            rule_url_template=rule_url_template,
        )

    def rule_url(self, rule_id: str) -> str:
        """Return the download URL for a registry rule.

        The id is percent-encoded so it cannot add a path, query or fragment.
        """
        return self.rule_url_template.replace("{rule_id}", quote(rule_id, safe=""))


def load_config(path: Path) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the configuration YAML file.

    Returns:
        ServerConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    # An empty file means "all defaults"
    if config is None:
        return ServerConfig()

    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    return ServerConfig.from_dict(config)
