"""
Exception types raised by the aggregator.

ConfigError:      the configuration or a startup option is unusable.
ChildServerError: a child server failed to spawn or to initialize.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .models import ErrorPhase


class ConfigErrorCode(str, Enum):
    FILE_NOT_FOUND = "file_not_found"
    INVALID_JSON = "invalid_json"
    INVALID_SCHEMA = "invalid_schema"
    MISSING_ENV_VAR = "missing_env_var"
    INVALID_SEPARATOR = "invalid_separator"


class ConfigError(Exception):
    """Configuration could not be read, parsed or validated."""

    def __init__(self, message: str, code: ConfigErrorCode, details: Any = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ChildServerError(Exception):
    """A child server failed during startup or initialization."""

    def __init__(
        self,
        message: str,
        server_key: str,
        phase: ErrorPhase,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.server_key = server_key
        self.phase = phase
        self.cause = cause
