"""
Data models for the MCP aggregator.

Enums and dataclasses shared by the fleet, the registry and the server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp import types

    from .children.transport import ChildConnection


# ── Enums ────────────────────────────────────────────────────

class ChildStatus(str, Enum):
    """Lifecycle of one child process. FAILED and STOPPED are terminal."""
    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"
    STOPPED = "stopped"


class ErrorPhase(str, Enum):
    STARTUP = "startup"
    INITIALIZATION = "initialization"
    RUNTIME = "runtime"


# ── Core data models ─────────────────────────────────────────

@dataclass(frozen=True)
class ChildSpec:
    """How to launch one child server, as written in the config file."""
    command: str
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class ChildHandle:
    """Runtime state of one configured child, owned by its supervisor."""
    key: str
    spec: ChildSpec
    connection: ChildConnection
    status: ChildStatus = ChildStatus.STARTING
    error: BaseException | None = None

    # Catalog announced by the child during startup
    tools: list[types.Tool] = field(default_factory=list)


@dataclass
class RegistryEntry:
    """Routing record for one namespaced tool."""
    connection: Any  # ChildConnection, or anything with an async call_tool()
    server_key: str
    original_name: str

    # Tool descriptor as announced to the client (name is namespaced)
    schema: types.Tool
