"""
Aggregator configuration — the standard MCP client config file.

The file maps server keys to launch commands. The key becomes the
namespace prefix of every tool that server exposes.

Example (servers.json):
    {
      "mcpServers": {
        "github": {
          "command": "npx",
          "args": ["-y", "@modelcontextprotocol/server-github"],
          "env": {"GITHUB_TOKEN": "${GITHUB_TOKEN}"}
        },
        "calc": {
          "command": "python",
          "args": ["-m", "mcp_aggregator.servers.calculator"]
        }
      }
    }

The same structure may be written as YAML.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .version import __version__
from .errors import ConfigError, ConfigErrorCode
from .models import ChildSpec
from .routing import DEFAULT_SEPARATOR, validate_separator

logger = logging.getLogger(__name__)

DEFAULT_SERVER_NAME = "mcp-aggregator"

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Z_][A-Z0-9_]*)")

EXAMPLE_CONFIG = """{
  "mcpServers": {
    "filesystem": {
      "command": "npx",
      "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"]
    }
  }
}"""


# ── Startup options ─────────────────────────────────────────

@dataclass
class RuntimeOptions:
    """Everything tunable at startup besides the child servers themselves."""
    separator: str = DEFAULT_SEPARATOR
    debug: bool = False
    log_file: str | None = None
    name: str = DEFAULT_SERVER_NAME
    version: str = __version__

    def __post_init__(self) -> None:
        validate_separator(self.separator)


# ── Config file ─────────────────────────────────────────────

@dataclass
class AggregatorConfig:
    """Validated, env-expanded set of child servers, in file order."""
    children: dict[str, ChildSpec] = field(default_factory=dict)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        env: Mapping[str, str] | None = None,
    ) -> AggregatorConfig:
        """Read, validate and env-expand a config file (.json or .yaml)."""
        return cls.from_dict(read_config_file(path), env=env)

    @classmethod
    def from_dict(
        cls,
        data: Any,
        env: Mapping[str, str] | None = None,
    ) -> AggregatorConfig:
        issues = validate_config(data)
        if issues:
            summary = "; ".join(f"{path}: {message}" for path, message in issues)
            raise ConfigError(
                f"Invalid configuration: {summary}",
                ConfigErrorCode.INVALID_SCHEMA,
                {"errors": [{"path": p, "message": m} for p, m in issues]},
            )

        expanded = expand_config_env_vars(data, env)
        children = {}
        for key, server in expanded["mcpServers"].items():
            children[key] = ChildSpec(
                command=server["command"],
                args=tuple(server.get("args", [])),
                env=dict(server.get("env", {})),
            )

        logger.info(f"Loaded {len(children)} child server(s): {list(children)}")
        return cls(children=children)

    @property
    def count(self) -> int:
        return len(self.children)


def read_config_file(path: str | Path) -> Any:
    """Parse a config file without validating its structure."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(
            f"Config file not found: {path}\n\n"
            f"Example: create a config file at the specified path:\n{EXAMPLE_CONFIG}",
            ConfigErrorCode.FILE_NOT_FOUND,
            {"path": str(path)},
        ) from None

    try:
        if path.suffix.lower() == ".json":
            return json.loads(content)
        return yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Invalid syntax in config file {path}: {e}\n\n"
            f"Example of a valid structure:\n{EXAMPLE_CONFIG}",
            ConfigErrorCode.INVALID_JSON,
            {"path": str(path), "error": str(e)},
        ) from e


def validate_config(data: Any) -> list[tuple[str, str]]:
    """
    Check the shape of a parsed config.

    Returns a list of (path, message) pairs; an empty list means valid.
    """
    if not isinstance(data, dict):
        return [("$", "Config must be an object")]

    if "mcpServers" not in data:
        return [("$.mcpServers", "Missing required field: mcpServers")]

    servers = data["mcpServers"]
    if not isinstance(servers, dict):
        return [("$.mcpServers", "mcpServers must be an object")]

    issues: list[tuple[str, str]] = []
    if not servers:
        issues.append(("$.mcpServers", "mcpServers must contain at least one server"))

    for key, server in servers.items():
        base = f"$.mcpServers.{key}"
        if not isinstance(server, dict):
            issues.append((base, "Server config must be an object"))
            continue

        if "command" not in server:
            issues.append((f"{base}.command", "Missing required field: command"))
        elif not isinstance(server["command"], str) or not server["command"].strip():
            issues.append((f"{base}.command", "command must be a non-empty string"))

        if "args" in server:
            args = server["args"]
            if not isinstance(args, list):
                issues.append((f"{base}.args", "args must be an array"))
            else:
                for i, arg in enumerate(args):
                    if not isinstance(arg, str):
                        issues.append((f"{base}.args[{i}]", "Each arg must be a string"))

        if "env" in server:
            env = server["env"]
            if not isinstance(env, dict):
                issues.append((f"{base}.env", "env must be an object"))
            else:
                for name, value in env.items():
                    if not isinstance(value, str):
                        issues.append((
                            f"{base}.env.{name}",
                            "Environment variable value must be a string",
                        ))

    return issues


# ── Environment variable expansion ──────────────────────────

def expand_env_vars(value: str, env: Mapping[str, str] | None = None) -> str:
    """
    Replace ${VAR} and $VAR references in a string.

    Raises ConfigError naming every variable that is not set.
    """
    env = os.environ if env is None else env
    missing: list[str] = []

    def _substitute(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        if name not in env:
            missing.append(name)
            return match.group(0)
        return env[name]

    expanded = ENV_VAR_PATTERN.sub(_substitute, value)

    if missing:
        plural = "s" if len(missing) > 1 else ""
        raise ConfigError(
            f"Missing environment variable{plural}: {', '.join(missing)}\n\n"
            f"Example: set the required variable before running:\n"
            f'  export {missing[0]}="value"',
            ConfigErrorCode.MISSING_ENV_VAR,
            {"variable": missing[0], "missing_variables": missing, "original_value": value},
        )
    return expanded


def expand_config_env_vars(obj: Any, env: Mapping[str, str] | None = None) -> Any:
    """Expand env references in every string of a nested config structure."""
    env = os.environ if env is None else env

    if isinstance(obj, str):
        return expand_env_vars(obj, env)
    if isinstance(obj, list):
        return [expand_config_env_vars(item, env) for item in obj]
    if isinstance(obj, dict):
        return {key: expand_config_env_vars(value, env) for key, value in obj.items()}
    return obj
