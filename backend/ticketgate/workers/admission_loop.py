"""
Admission loop: drains waiting rooms into active leases at a bounded rate.

Every interval (default 1s) the loop lists the active events and calls
AdmissionController.admit_batch once per event with the rate chosen by the
rate policy. One event failing (queue store error, bad data) is logged and
skipped; the remaining events still get their batch and the loop keeps
ticking.

The loop keeps nothing between ticks. After a restart it simply pops from
wherever the waiting rooms are.
"""

from typing import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.event_service import list_active_event_ids
from ticketgate.workers.periodic import PeriodicWorker
from ticketgate.core.logging import get_logger
from ticketgate.core.metrics import record_worker_failure

logger = get_logger(__name__)

# Admission rate policy: event id -> users to admit this tick.
# Extension point for rates derived from observed store latency/errors.
RatePolicy = Callable[[UUID], int]


def constant_rate(rate: int) -> RatePolicy:
    if rate < 0:
        raise ValueError("admission rate cannot be negative")

    def policy(event_id: UUID) -> int:
        return rate

    return policy


class AdmissionLoop(PeriodicWorker):
    name = "admission_loop"

    def __init__(
        self,
        controller: AdmissionController,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = 1.0,
        rate_policy: RatePolicy = constant_rate(500),
    ):
        super().__init__(interval_seconds)
        self.controller = controller
        self.session_factory = session_factory
        self.rate_policy = rate_policy

    async def tick(self) -> None:
        await self.admit_all()

    async def admit_all(self) -> int:
        """Admit one batch for every active event. Returns total admitted."""
        try:
            async with self.session_factory() as db:
                event_ids = await list_active_event_ids(db)
        except Exception:
            record_worker_failure(self.name, "tick")
            logger.exception("admission_events_unavailable")
            return 0

        total = 0
        for event_id in event_ids:
            try:
                total += await self.controller.admit_batch(event_id, self.rate_policy(event_id))
            except Exception:
                record_worker_failure(self.name, "event")
                logger.exception("admission_failed", event_id=str(event_id))
        return total
