"""
Cancellable periodic background task.

Runs `tick()` every `interval_seconds` on the event loop, independent of
request handling. The wait between ticks listens to the stop event, so
`stop()` returns as soon as the current tick finishes instead of after a
full interval.
"""

import asyncio
from typing import Optional

from ticketgate.core.logging import get_logger
from ticketgate.core.metrics import record_worker_failure

logger = get_logger(__name__)


class PeriodicWorker:
    name = "periodic_worker"

    def __init__(self, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self._stopping = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    async def tick(self) -> None:
        raise NotImplementedError

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info("worker_started", worker=self.name, interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopping.set()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("worker_stopped", worker=self.name)

    async def run_once(self) -> None:
        """Run a single tick, logging instead of raising on failure."""
        try:
            await self.tick()
        except Exception:
            record_worker_failure(self.name, "tick")
            logger.exception("worker_tick_failed", worker=self.name)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            await self.run_once()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
