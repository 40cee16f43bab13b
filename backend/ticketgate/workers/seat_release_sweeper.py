"""
Seat release sweeper.

A reservation that is never purchased would keep its seat Reserved forever.
This worker periodically returns seats reserved longer than the hold time
to Available. The hold time defaults to the admission lease TTL: by the
time a seat is released its holder's lease has expired too.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticketgate.services.reservation_service import release_expired_reservations
from ticketgate.services.cache_service import invalidate_event_cache
from ticketgate.workers.periodic import PeriodicWorker


class SeatReleaseSweeper(PeriodicWorker):
    name = "seat_release_sweeper"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hold_seconds: int = 300,
        interval_seconds: float = 30.0,
    ):
        super().__init__(interval_seconds)
        self.session_factory = session_factory
        self.hold_seconds = hold_seconds

    async def tick(self) -> None:
        await self.sweep()

    async def sweep(self) -> int:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=self.hold_seconds)
        async with self.session_factory() as db:
            released = await release_expired_reservations(db, cutoff)
        if released:
            await invalidate_event_cache()
        return released
