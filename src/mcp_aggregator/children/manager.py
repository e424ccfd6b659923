"""
Child Fleet — starts, tracks and stops every configured child server.

Usage:
    registry = CapabilityRegistry(separator="__")
    fleet = ChildFleet(config.children, registry=registry)
    await fleet.start_all()      # fail-fast; registry is populated on success
    ...
    await fleet.stop_all()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from ..errors import ChildServerError
from ..models import ChildHandle, ChildSpec, ChildStatus, ErrorPhase
from .supervisor import ChildSupervisor

if TYPE_CHECKING:
    from ..registry import CapabilityRegistry

logger = logging.getLogger(__name__)


class ChildFleet:
    """
    Manages the lifecycle of all child server processes.

    Responsibilities:
    - Start children one at a time in config order, aborting on the first failure
    - Publish each ready child's tools to the registry
    - Withdraw a child's tools from the registry when it crashes
    - Graceful shutdown
    """

    def __init__(
        self,
        specs: Mapping[str, ChildSpec],
        registry: CapabilityRegistry | None = None,
    ):
        self._specs = dict(specs)
        self._registry = registry
        self._supervisors: dict[str, ChildSupervisor] = {}

    async def start_all(self) -> dict[str, ChildHandle]:
        """
        Start every configured child.

        If any child fails, the children already started are stopped, the
        remaining ones are never spawned, and that child's ChildServerError
        is raised.
        """
        handles: dict[str, ChildHandle] = {}

        for server_key, spec in self._specs.items():
            supervisor = ChildSupervisor(server_key, spec, on_crash=self._handle_crash)
            self._supervisors[server_key] = supervisor

            logger.info(f"Starting child server '{server_key}'...")
            try:
                handles[server_key] = await supervisor.start()
            except ChildServerError as e:
                logger.error(f"Failed to start '{server_key}': {e}")
                await self.stop_all()
                raise
            except Exception as e:
                logger.error(f"Unexpected error starting '{server_key}': {e}")
                await self.stop_all()
                raise ChildServerError(
                    f"Unexpected error starting '{server_key}': {e}",
                    server_key,
                    ErrorPhase.STARTUP,
                    e,
                ) from e

        if self._registry is not None:
            # A child may have crashed while a later one was starting; its
            # crash handler found nothing to withdraw, so skip it here.
            for server_key, handle in handles.items():
                if handle.status is ChildStatus.READY:
                    self._registry.add_child(server_key, handle.connection, handle.tools)

        logger.info(f"All {len(handles)} child servers started successfully")
        return handles

    async def stop_all(self) -> None:
        """Ask every child to stop. Individual failures are only logged."""
        # Newest first: each child's session scopes are nested inside the
        # ones opened before it.
        for server_key, supervisor in reversed(list(self._supervisors.items())):
            try:
                await supervisor.stop()
            except Exception as e:
                logger.warning(f"Failed to stop '{server_key}': {e}")

    def get(self, server_key: str) -> ChildHandle | None:
        supervisor = self._supervisors.get(server_key)
        return supervisor.handle if supervisor else None

    @property
    def handles(self) -> dict[str, ChildHandle]:
        return {
            key: s.handle for key, s in self._supervisors.items() if s.handle is not None
        }

    def list_children(self) -> dict[str, ChildStatus]:
        return {key: handle.status for key, handle in self.handles.items()}

    def is_running(self, server_key: str) -> bool:
        handle = self.get(server_key)
        return handle is not None and handle.status is ChildStatus.READY

    def _handle_crash(self, server_key: str, error: BaseException) -> None:
        if self._registry is None:
            return
        removed = self._registry.remove_child(server_key)
        logger.warning(
            f"Child server '{server_key}' is unavailable; withdrew {removed} tool(s)"
        )
