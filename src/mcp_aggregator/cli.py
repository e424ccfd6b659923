"""
Command-line entry point.

Usage:
    # Basic usage
    mcp-aggregator --config servers.json

    # Debug logging (written to a file; stdout stays protocol-only)
    mcp-aggregator --config servers.json --debug --log-file /var/log/mcp.log

    # Custom namespace separator: tools become "github__create_issue"
    mcp-aggregator --config servers.json --separator __
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .aggregator import Aggregator
from .config import DEFAULT_SERVER_NAME, AggregatorConfig, RuntimeOptions
from .logging_utils import setup_logging
from .routing import DEFAULT_SEPARATOR
from .version import __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-aggregator",
        description="Aggregate multiple MCP servers into one.",
    )
    parser.add_argument("--config", required=True, help="Path to the MCP configuration file (JSON or YAML)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Debug log file (default: <tmp>/mcp-aggregator-<pid>.log)")
    parser.add_argument("--name", default=DEFAULT_SERVER_NAME, help="Server name announced to the client")
    parser.add_argument("--server-version", default=__version__, help="Server version announced to the client")
    parser.add_argument(
        "--separator",
        default=DEFAULT_SEPARATOR,
        help=f"Separator between server key and tool name (default: '{DEFAULT_SEPARATOR}')",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    if not args.config.strip():
        build_parser().error("--config cannot be empty")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        options = RuntimeOptions(
            separator=args.separator,
            debug=args.debug,
            log_file=args.log_file,
            name=args.name,
            version=args.server_version,
        )
        setup_logging(options.debug, options.log_file)
        logger.debug(f"Config path: {args.config}")

        config = AggregatorConfig.from_file(args.config)
        asyncio.run(Aggregator(config, options).serve())
    except KeyboardInterrupt:
        logger.debug("Interrupted, shutting down")
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.debug("Fatal error", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
