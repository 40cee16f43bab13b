"""
Read-side queries over events and seats.
"""

from uuid import UUID

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.models.event import Event
from ticketgate.models.seat import Seat, SeatStatus


async def list_active_events(db: AsyncSession) -> list[tuple[Event, int]]:
    """
    Active events with their current number of Available seats.

    Uses ix_events_is_active for the filter and ix_seats_event_status for
    the outer join.
    """
    available = func.count(Seat.id)
    query = (
        select(Event, available)
        .outerjoin(
            Seat,
            and_(Seat.event_id == Event.id, Seat.status == SeatStatus.AVAILABLE),
        )
        .where(Event.is_active.is_(True))
        .group_by(Event.id)
        .order_by(Event.sale_start_time.asc())
    )
    result = await db.execute(query)
    return [(event, count) for event, count in result.all()]


async def list_active_event_ids(db: AsyncSession) -> list[UUID]:
    """Ids of every active event, for the admission loop."""
    result = await db.execute(select(Event.id).where(Event.is_active.is_(True)))
    return list(result.scalars().all())


async def get_seat_map(db: AsyncSession, event_id: UUID) -> list[Seat]:
    """All seats of an event ordered by section, row, seat. Empty for unknown events."""
    result = await db.execute(
        select(Seat)
        .where(Seat.event_id == event_id)
        .order_by(Seat.section, Seat.row_number, Seat.seat_number)
    )
    return list(result.scalars().all())
