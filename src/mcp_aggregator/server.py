"""
Aggregator MCP server — the single endpoint the client talks to.

tools/list answers from the registry. tools/call parses the namespace
prefix, looks the full name up in the registry and forwards the call to
the owning child with its original name. Arguments go out, and results
and child errors come back, untouched.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from .config import DEFAULT_SERVER_NAME
from .registry import CapabilityRegistry
from .routing import parse_namespaced_name
from .version import __version__

logger = logging.getLogger(__name__)


def _error(code: int, message: str) -> McpError:
    return McpError(types.ErrorData(code=code, message=message))


class AggregatorServer:
    """
    MCP server exposing the merged tool catalog of all child servers.

    Handlers are installed directly in the low-level request table so
    that errors raised here reach the client as JSON-RPC errors.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        name: str = DEFAULT_SERVER_NAME,
        version: str = __version__,
    ):
        self.registry = registry
        self.server = Server(name, version=version)
        self.server.request_handlers[types.ListToolsRequest] = self._handle_list_tools
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    @property
    def separator(self) -> str:
        return self.registry.separator

    def list_tools(self) -> list[types.Tool]:
        return self.registry.list_all()

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
    ) -> types.CallToolResult:
        """Route one tools/call to the child that owns the tool."""
        if parse_namespaced_name(name, self.separator) is None:
            raise _error(
                types.INVALID_REQUEST,
                f"Invalid tool name format. Expected 'serverKey{self.separator}toolName', "
                f"got '{name}'",
            )

        entry = self.registry.lookup(name)
        if entry is None:
            raise _error(types.METHOD_NOT_FOUND, f"Tool not found: {name}")

        try:
            return await entry.connection.call_tool(entry.original_name, arguments)
        except McpError:
            raise
        except Exception as e:
            logger.error(f"Error calling tool '{name}' on '{entry.server_key}': {e}")
            raise _error(types.INTERNAL_ERROR, f"Error calling tool '{name}': {e}") from e

    async def run_stdio(self) -> None:
        """Serve the client over this process's stdin/stdout until EOF."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )

    async def _handle_list_tools(self, request: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=self.list_tools()))

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(request.params.name, request.params.arguments)
        return types.ServerResult(result)
