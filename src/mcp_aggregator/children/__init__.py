"""
Child server infrastructure.

Provides:
- ChildConnection — MCP client session over a subprocess's stdio pipes
- ChildSupervisor — lifecycle of one child (spawn, handshake, crash reporting)
- ChildFleet — fail-fast startup and shutdown of all configured children
"""

from .transport import ChildConnection
from .supervisor import ChildSupervisor
from .manager import ChildFleet

__all__ = [
    "ChildConnection",
    "ChildSupervisor",
    "ChildFleet",
]
