"""
Aggregator — wires config, fleet, registry and server together.

Pipeline:
    AggregatorConfig
      -> ChildFleet.start_all()      (fail-fast, config order)
      -> CapabilityRegistry          (populated by the fleet, pruned on crash)
      -> AggregatorServer.run_stdio()
      -> ChildFleet.stop_all()       (always, on the way out)
"""

from __future__ import annotations

import logging

from .children import ChildFleet
from .config import AggregatorConfig, RuntimeOptions
from .registry import CapabilityRegistry
from .server import AggregatorServer

logger = logging.getLogger(__name__)


class Aggregator:
    """One running aggregator instance."""

    def __init__(self, config: AggregatorConfig, options: RuntimeOptions | None = None):
        self.config = config
        self.options = options or RuntimeOptions()
        self.registry = CapabilityRegistry(separator=self.options.separator)
        self.fleet = ChildFleet(config.children, registry=self.registry)
        self.server = AggregatorServer(
            self.registry,
            name=self.options.name,
            version=self.options.version,
        )

    async def start(self) -> None:
        logger.debug(f"Starting {self.config.count} child server(s)")
        await self.fleet.start_all()
        logger.info(
            f"Serving {len(self.fleet.handles)} child servers with {self.registry.count} tools"
        )

    async def stop(self) -> None:
        logger.debug("Shutting down child servers")
        await self.fleet.stop_all()

    async def serve(self) -> None:
        """Start the children, serve stdio until the client disconnects, stop."""
        await self.start()
        try:
            await self.server.run_stdio()
        finally:
            await self.stop()
