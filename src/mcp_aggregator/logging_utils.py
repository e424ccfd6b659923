"""
Logging setup for the aggregator process.

stdout carries the MCP protocol, so nothing may ever be logged there.
Warnings and errors always reach stderr; with debug enabled everything
is also appended to a log file.
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path

PACKAGE_LOGGER = "mcp_aggregator"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def default_log_file() -> Path:
    return Path(tempfile.gettempdir()) / f"mcp-aggregator-{os.getpid()}.log"


def setup_logging(debug: bool = False, log_file: str | Path | None = None) -> Path | None:
    """
    Configure the package logger.

    Returns the log file in use, or None when debug logging is off.
    Calling it again replaces the handlers installed by a previous call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(stderr_handler)

    # The SDK logs every request at INFO; keep it out of our sink.
    logging.getLogger("mcp").setLevel(logging.WARNING)

    if not debug:
        logger.setLevel(logging.WARNING)
        return None

    path = Path(log_file) if log_file else default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG)

    logger.debug(f"Debug logging to {path}")
    return path
