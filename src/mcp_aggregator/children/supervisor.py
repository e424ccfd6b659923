"""
Child Supervisor — spawn, handshake, health check and crash reporting
for a single child server.

    STARTING ──start()──> READY ──transport error──> FAILED
        │                   │
        └──start() fails──> FAILED        READY ──stop()──> STOPPED

There is no restart: a failed or stopped child stays that way.
"""

from __future__ import annotations

import logging
import os
from typing import Callable

from mcp import StdioServerParameters

from ..errors import ChildServerError
from ..models import ChildHandle, ChildSpec, ChildStatus, ErrorPhase
from ..resolver import resolve_command
from .transport import ChildConnection

logger = logging.getLogger(__name__)

CrashCallback = Callable[[str, BaseException], None]


class ChildSupervisor:
    """
    Owns the lifecycle of one child server process.

    on_crash is called at most once, when a child that reached READY loses
    its connection, with the server key and a RUNTIME-phase
    ChildServerError wrapping the transport error.
    """

    def __init__(self, server_key: str, spec: ChildSpec, on_crash: CrashCallback | None = None):
        self.server_key = server_key
        self.spec = spec
        self._on_crash = on_crash
        self.handle: ChildHandle | None = None

    async def start(self) -> ChildHandle:
        """Spawn the child, complete the handshake and fetch its tool list."""
        command = resolve_command(self.spec.command)
        env = {**os.environ, **self.spec.env}
        params = StdioServerParameters(command=command, args=list(self.spec.args), env=env)

        connection = ChildConnection(
            self.server_key, params, on_transport_error=self._on_transport_error
        )
        handle = ChildHandle(key=self.server_key, spec=self.spec, connection=connection)
        self.handle = handle

        try:
            await connection.spawn()
        except Exception as e:
            await self._abort(e)
            raise ChildServerError(
                f"Failed to start child server '{self.server_key}': {e}",
                self.server_key,
                ErrorPhase.STARTUP,
                e,
            ) from e

        try:
            await connection.initialize()
            tools = await connection.list_tools()
        except Exception as e:
            await self._abort(e)
            raise ChildServerError(
                f"Child server '{self.server_key}' failed to initialize: {e}",
                self.server_key,
                ErrorPhase.INITIALIZATION,
                e,
            ) from e

        handle.tools = tools
        handle.status = ChildStatus.READY
        logger.info(
            f"Started '{self.server_key}': tools={[t.name for t in tools]}"
        )
        return handle

    async def stop(self) -> None:
        """Close the connection. Never raises; problems are only logged."""
        handle = self.handle
        if handle is None or handle.status is ChildStatus.STOPPED:
            return

        if handle.status is not ChildStatus.FAILED:
            handle.status = ChildStatus.STOPPED
        try:
            await handle.connection.close()
        except Exception as e:
            logger.warning(f"Error shutting down '{self.server_key}': {e}")
        logger.info(f"Stopped '{self.server_key}'")

    @property
    def status(self) -> ChildStatus | None:
        return self.handle.status if self.handle else None

    async def _abort(self, error: BaseException) -> None:
        handle = self.handle
        handle.status = ChildStatus.FAILED
        handle.error = error
        try:
            await handle.connection.close()
        except Exception as e:
            logger.debug(f"Cleanup after failed start of '{self.server_key}': {e}")

    def _on_transport_error(self, error: BaseException) -> None:
        handle = self.handle
        if handle is None or handle.status is not ChildStatus.READY:
            return

        crash = ChildServerError(
            f"Child server '{self.server_key}' crashed: {error}",
            self.server_key,
            ErrorPhase.RUNTIME,
            error,
        )
        handle.status = ChildStatus.FAILED
        handle.error = crash
        logger.error(str(crash))

        if self._on_crash is not None:
            try:
                self._on_crash(self.server_key, crash)
            except Exception:
                logger.exception(f"Crash handler for '{self.server_key}' failed")
