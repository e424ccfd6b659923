"""
Command resolution for child servers.

Children launched as "python" would otherwise run under whatever
interpreter PATH finds first, which is often not the one running the
aggregator (or nothing at all when the aggregator is started by a desktop
client with a minimal PATH). Bare interpreter names are rewritten to
sys.executable, and the tools installed next to it (pip, uv, ...) are
looked up in the interpreter's own bin directory (or its Scripts
folder on Windows).
"""

from __future__ import annotations

import logging
import os
import sys

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

RUNTIME_NAMES = frozenset({
    "python",
    "python3",
    f"python{sys.version_info.major}.{sys.version_info.minor}",
})

COMPANION_TOOLS = frozenset({"pip", "pip3", "uv", "uvx"})


def resolve_command(command: str) -> str:
    """
    Return the executable a child should be spawned with.

    Never raises: unknown names and tools that cannot be found next to
    the interpreter are returned unchanged and left to PATH lookup.
    """
    if os.path.isabs(command):
        return command

    runtime = sys.executable
    if not runtime:
        return command

    resolved = command
    if command in RUNTIME_NAMES:
        resolved = runtime
    elif command in COMPANION_TOOLS:
        resolved = _find_companion(command, os.path.dirname(runtime)) or command

    if resolved != command:
        logger.info(f"Resolved command '{command}' -> '{resolved}'")
    return resolved


def _find_companion(name: str, bin_dir: str) -> str | None:
    # A base Windows install keeps pip.exe in Scripts, a venv keeps it
    # next to python.exe.
    search_dirs = [bin_dir]
    candidates = [name]
    if IS_WINDOWS:
        search_dirs.append(os.path.join(bin_dir, "Scripts"))
        candidates.append(f"{name}.exe")

    for directory in search_dirs:
        for candidate in candidates:
            path = os.path.join(directory, candidate)
            if os.path.isfile(path) and os.access(path, os.X_OK):
                return path
    return None
