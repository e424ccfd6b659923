"""
Capability Registry — the merged, namespaced tool catalog.

Maps "<server key><separator><tool name>" to the child connection that
serves the tool. Entries are added in bulk when a child becomes ready
and removed in bulk when it crashes; they are never edited in place.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from mcp import types

from .models import RegistryEntry
from .routing import DEFAULT_SEPARATOR, namespaced_name, validate_separator

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    Catalog of every tool exposed by the ready child servers.

    Each entry knows:
    - Which child serves the tool (connection + server key)
    - The tool's original, unprefixed name (what the child expects)
    - The descriptor announced to the client (with the prefixed name)
    """

    def __init__(self, separator: str = DEFAULT_SEPARATOR):
        self.separator = validate_separator(separator)
        self._entries: dict[str, RegistryEntry] = {}

    def add_child(
        self,
        server_key: str,
        connection: Any,
        tools: Iterable[types.Tool],
    ) -> int:
        """
        Register every tool of one child under its namespace.

        A tool name that already contains the separator is prefixed like
        any other. Duplicate names within one child: the last one wins.
        """
        added: dict[str, RegistryEntry] = {}
        for tool in tools:
            prefixed = namespaced_name(server_key, tool.name, self.separator)
            added[prefixed] = RegistryEntry(
                connection=connection,
                server_key=server_key,
                original_name=tool.name,
                schema=tool.model_copy(update={"name": prefixed}),
            )

        self._entries.update(added)
        logger.info(f"Registered {len(added)} tool(s) from '{server_key}'")
        return len(added)

    def remove_child(self, server_key: str) -> int:
        """Drop every tool of one child. Unknown keys are a no-op."""
        prefix = f"{server_key}{self.separator}"
        doomed = [
            name
            for name, entry in self._entries.items()
            if name.startswith(prefix) and entry.server_key == server_key
        ]
        for name in doomed:
            del self._entries[name]

        if doomed:
            logger.info(f"Removed {len(doomed)} tool(s) from '{server_key}'")
        return len(doomed)

    def lookup(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def list_all(self) -> list[types.Tool]:
        """Snapshot of all announced tool descriptors (order not guaranteed)."""
        return [entry.schema for entry in self._entries.values()]

    def keys(self) -> list[str]:
        return list(self._entries)

    def stats(self) -> dict:
        server_counts: dict[str, int] = {}
        for entry in self._entries.values():
            server_counts[entry.server_key] = server_counts.get(entry.server_key, 0) + 1
        return {"total_tools": len(self._entries), "server_counts": server_counts}

    @property
    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries
