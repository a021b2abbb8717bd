# backend/ldgrowth/workers/base_worker.py
"""
Lifecycle base for the components run by ``worker.py``.

A worker owns no loop of its own: ``start()`` hands over to ``initialize()``
and ``stop()`` to ``cleanup()``. Job timing belongs to the SchedulerWorker's
APScheduler instance.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from loguru import logger


class BaseWorker(ABC):
    """Named component with a start/stop lifecycle and a status report."""

    def __init__(self, name: str):
        self.name = name
        self.running = False

    async def start(self) -> None:
        logger.info(f"{self.name}: starting")
        self.running = True
        await self.initialize()

    async def stop(self) -> None:
        logger.info(f"{self.name}: stopping")
        self.running = False
        await self.cleanup()

    @abstractmethod
    async def initialize(self) -> None:
        """Acquire resources and register work."""

    @abstractmethod
    async def cleanup(self) -> None:
        """Release whatever initialize() acquired."""

    def get_status(self) -> Dict[str, Any]:
        """Snapshot used by health reporting; subclasses extend it."""
        return {
            "name": self.name,
            "running": self.running,
            "worker_type": type(self).__name__,
        }
