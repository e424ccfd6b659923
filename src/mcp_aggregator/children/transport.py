"""
Transport layer for child servers.

Implements ChildConnection: an MCP client session over the stdin/stdout
pipes of a subprocess. Framing, request ids and the initialize handshake
belong to the mcp SDK; this module adds what the SDK does not expose,
namely noticing when the child goes away.

Everything the child writes travels through a small relay between the
stdio transport and the ClientSession. The relay reports transport
errors and end-of-stream to the callback given at construction, and
wakes any request still waiting on a child that can no longer answer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Callable, TypeVar

import anyio
from mcp import ClientSession, StdioServerParameters, types
from mcp.client.stdio import stdio_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

TransportErrorCallback = Callable[[BaseException], None]


class ChildConnection:
    """
    MCP client session to one child subprocess.

    The child runs as a subprocess. The SDK writes JSON-RPC requests to
    its stdin and reads responses from its stdout, one line per message.
    """

    def __init__(
        self,
        server_key: str,
        params: StdioServerParameters,
        on_transport_error: TransportErrorCallback | None = None,
    ):
        self.server_key = server_key
        self.params = params
        self._on_transport_error = on_transport_error
        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None
        self._relay_task: asyncio.Task | None = None
        self._closed = asyncio.Event()

    async def spawn(self) -> None:
        """Launch the subprocess and attach a client session to its pipes."""
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(
                stdio_client(self.params)
            )
            relay_send, relay_receive = anyio.create_memory_object_stream(0)
            self._relay_task = asyncio.create_task(
                self._relay(read_stream, relay_send),
                name=f"relay-{self.server_key}",
            )
            self._session = await stack.enter_async_context(
                ClientSession(relay_receive, write_stream)
            )
        except BaseException:
            await self._cancel_relay()
            await stack.aclose()
            raise

        self._stack = stack
        logger.debug(f"Spawned '{self.server_key}': {self.params.command} {self.params.args}")

    async def initialize(self) -> types.InitializeResult:
        return await self._guard(self._require_session().initialize())

    async def list_tools(self) -> list[types.Tool]:
        result = await self._guard(self._require_session().list_tools())
        return list(result.tools)

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
    ) -> types.CallToolResult:
        """Send tools/call exactly as given and return the child's result."""
        request = types.ClientRequest(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name=name, arguments=arguments),
            )
        )
        return await self._guard(
            self._require_session().send_request(request, types.CallToolResult)
        )

    async def close(self) -> None:
        """Close the session and terminate the subprocess."""
        await self._cancel_relay()
        self._closed.set()
        stack, self._stack = self._stack, None
        self._session = None
        if stack is not None:
            await stack.aclose()

    @property
    def is_alive(self) -> bool:
        return self._session is not None and not self._closed.is_set()

    # ── internals ──────────────────────────────────────────

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"Connection to '{self.server_key}' is not open")
        return self._session

    async def _relay(self, source, sink) -> None:
        try:
            async with sink:
                async for message in source:
                    if isinstance(message, Exception):
                        self._report(message)
                    await sink.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            # The session side was closed first.
            pass
        self._closed.set()
        self._report(ConnectionError(f"Child server '{self.server_key}' closed its output stream"))

    def _report(self, error: BaseException) -> None:
        if self._on_transport_error is None:
            return
        try:
            self._on_transport_error(error)
        except Exception:
            logger.exception(f"Transport error callback for '{self.server_key}' failed")

    async def _cancel_relay(self) -> None:
        task, self._relay_task = self._relay_task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _guard(self, awaitable: Awaitable[T]) -> T:
        """Await a request, failing fast if the child's stream ends first."""
        if self._closed.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise ConnectionError(f"Connection to child server '{self.server_key}' was closed")

        call = asyncio.ensure_future(awaitable)
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait({call, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            if not call.done():
                call.cancel()

        if call in done:
            return call.result()
        raise ConnectionError(f"Connection to child server '{self.server_key}' was closed")
