"""
Admission control: the waiting room in front of the reservation engine.

FLOW
====

  join  ->  [ waiting room: FIFO list per event ]  ->  admit_batch  ->  lease
                                                    (admission loop,
                                                     N users / interval)

  - Joining appends to the tail of the event's list. No idempotency: a
    duplicate entry costs one admission slot and nothing else.
  - The admission loop pops a bounded batch from the head every interval and
    gives each popped user a lease key with a TTL.
  - Holding a lease is the gate for reserving seats. Leases expire on their
    own; purchase removes them early.

Why a queue instead of letting everyone at the seats:
  The database only ever sees the admitted users, so a burst of 50k clients
  turns into ADMISSION_RATE reservation attempts per second instead of a
  retry storm against a handful of hot rows.

Known weaknesses (accepted):
  - Order is only fair within one event.
  - Nothing stops a user who was admitted from joining again.
"""

from typing import Optional
from uuid import UUID

from ticketgate.services.interfaces.queue_store import QueueStore
from ticketgate.core.config import settings
from ticketgate.core.logging import get_logger
from ticketgate.core.metrics import queue_joins, record_admitted

logger = get_logger(__name__)

WAITING_ROOM_KEY = "event:queue:waiting"
ACTIVE_SESSION_KEY = "session"
ACTIVE_MARKER = "active"


def waiting_room_key(event_id: UUID) -> str:
    return f"{WAITING_ROOM_KEY}:{event_id}"


def lease_prefix(event_id: UUID) -> str:
    return f"{ACTIVE_SESSION_KEY}:{event_id}:"


def lease_key(event_id: UUID, user_id: UUID) -> str:
    return f"{lease_prefix(event_id)}{user_id}"


class AdmissionController:
    """
    Waiting room and lease operations for all events.

    Holds no state of its own; everything lives in the queue store, so any
    number of API processes and admission workers can share one store.
    """

    def __init__(self, store: QueueStore, lease_ttl_seconds: int = settings.ACTIVE_SESSION_TTL_SECONDS):
        self.store = store
        self.lease_ttl_seconds = lease_ttl_seconds

    async def join_waiting_room(self, user_id: UUID, event_id: UUID) -> bool:
        """Append user to the tail of the event's waiting room."""
        length = await self.store.push(waiting_room_key(event_id), str(user_id))
        queue_joins.inc()
        logger.info("queue_joined", user_id=str(user_id), event_id=str(event_id), queue_length=length)
        return True

    async def get_queue_position(self, user_id: UUID, event_id: UUID) -> Optional[int]:
        """
        Zero-based position of the user's first entry.

        None means not waiting: never joined, or already admitted.
        """
        return await self.store.position_of(waiting_room_key(event_id), str(user_id))

    async def get_queue_length(self, event_id: UUID) -> int:
        return await self.store.length(waiting_room_key(event_id))

    async def is_active(self, user_id: UUID, event_id: UUID) -> bool:
        """Whether the user currently holds an unexpired lease for the event."""
        return await self.store.exists(lease_key(event_id, user_id))

    async def remove_active_session(self, user_id: UUID, event_id: UUID) -> bool:
        """Drop the user's lease (after purchase). True if a lease existed."""
        removed = await self.store.delete(lease_key(event_id, user_id))
        if removed:
            logger.info("active_session_removed", user_id=str(user_id), event_id=str(event_id))
        return removed

    async def admit_batch(self, event_id: UUID, admission_rate: int) -> int:
        """
        Promote up to admission_rate users from the head of the waiting room.

        Safe to call from several workers at once: the store pops each entry
        for exactly one caller.

        Returns:
            Number of users admitted (min(admission_rate, waiting))
        """
        if admission_rate <= 0:
            return 0

        admitted = await self.store.pop_into_leases(
            waiting_room_key(event_id),
            admission_rate,
            lease_prefix(event_id),
            ACTIVE_MARKER,
            self.lease_ttl_seconds,
        )
        count = len(admitted)
        record_admitted(count)
        if count:
            logger.info("users_admitted", event_id=str(event_id), count=count, rate=admission_rate)
        return count
