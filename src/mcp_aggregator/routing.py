"""
Tool name namespacing.

A namespaced tool name is "<server key><separator><tool name>", e.g.
"github:create_issue" or "github__create_issue". Parsing always splits
on the FIRST occurrence of the separator, so tool names that themselves
contain the separator survive the round trip.
"""

from __future__ import annotations

from .errors import ConfigError, ConfigErrorCode

DEFAULT_SEPARATOR = ":"


def validate_separator(separator: str | None) -> str:
    """Return the separator if usable, raise ConfigError otherwise."""
    if not separator:
        raise ConfigError(
            "Separator cannot be empty",
            ConfigErrorCode.INVALID_SEPARATOR,
            {"separator": separator},
        )
    if any(ch.isspace() for ch in separator):
        raise ConfigError(
            f"Separator cannot contain whitespace, got {separator!r}",
            ConfigErrorCode.INVALID_SEPARATOR,
            {"separator": separator},
        )
    return separator


def namespaced_name(server_key: str, tool_name: str, separator: str = DEFAULT_SEPARATOR) -> str:
    return f"{server_key}{separator}{tool_name}"


def parse_namespaced_name(
    name: str,
    separator: str = DEFAULT_SEPARATOR,
) -> tuple[str, str] | None:
    """
    Split a namespaced tool name into (server_key, tool_name).

    Returns None when the separator is missing, or when either side of
    the first separator would be empty.

        parse_namespaced_name("fs:read_file")           -> ("fs", "read_file")
        parse_namespaced_name("fs__read__file", "__")   -> ("fs", "read__file")
        parse_namespaced_name(":read_file")             -> None
    """
    index = name.find(separator)
    if index <= 0:
        return None

    tool_name = name[index + len(separator):]
    if not tool_name:
        return None

    return name[:index], tool_name
