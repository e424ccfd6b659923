"""
MCP Aggregator — many MCP servers behind one endpoint.

Every configured child server is spawned over stdio, and its tools are
re-announced under a namespace prefix ("<server key>:<tool name>").
Calls are routed back to the child that owns the tool.

Usage:
    from mcp_aggregator import Aggregator, AggregatorConfig, RuntimeOptions

    config = AggregatorConfig.from_file("servers.json")
    await Aggregator(config, RuntimeOptions(separator="__")).serve()

Or via CLI:
    mcp-aggregator --config servers.json --separator __
"""

import logging

from .version import __version__
from .models import (
    ChildHandle,
    ChildSpec,
    ChildStatus,
    ErrorPhase,
    RegistryEntry,
)
from .errors import ChildServerError, ConfigError, ConfigErrorCode
from .routing import (
    DEFAULT_SEPARATOR,
    namespaced_name,
    parse_namespaced_name,
    validate_separator,
)
from .resolver import resolve_command
from .config import AggregatorConfig, RuntimeOptions
from .registry import CapabilityRegistry
from .children import ChildConnection, ChildFleet, ChildSupervisor
from .server import AggregatorServer
from .aggregator import Aggregator

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core
    "Aggregator",
    "AggregatorServer",
    "CapabilityRegistry",
    "ChildConnection",
    "ChildFleet",
    "ChildSupervisor",
    # Config
    "AggregatorConfig",
    "RuntimeOptions",
    # Naming
    "DEFAULT_SEPARATOR",
    "namespaced_name",
    "parse_namespaced_name",
    "validate_separator",
    "resolve_command",
    # Models
    "ChildHandle",
    "ChildSpec",
    "RegistryEntry",
    # Enums
    "ChildStatus",
    "ErrorPhase",
    # Errors
    "ChildServerError",
    "ConfigError",
    "ConfigErrorCode",
    "__version__",
]
