"""
Reservation engine: seat state transitions with optimistic concurrency.

CONCURRENCY STRATEGY: Row-Version Compare-And-Swap
==================================================

Problem:
  Two admitted users select the same seat. Both read status=Available,
  both write status=Reserved. Result: one seat, two owners.

Solution:
  Every seat row carries a `version` column.

  1. Read the requested seats (current column values, never the identity map)
  2. For each seat:
       UPDATE seats
          SET status = 'Reserved', user_id = :user, reserved_at = :now,
              version = version + 1
        WHERE id = :id AND version = :version_we_read
  3. If the summed rows_affected is smaller than the number of seats, some
     other writer got there first -> roll back everything and report
     CONCURRENCY_CONFLICT

  Zero rows affected is the conflict signal. It is an expected, frequent
  outcome on hot seats and is returned as a result, not raised. There is no
  retry: the seat is gone, the caller has to pick another one.

  No row locks are held between the read and the write, so a slow client
  never serializes everybody else queued on the same seat.

Purchase does not need the version: its UPDATE is conditioned on
`status = 'Reserved' AND user_id = :user`, and only one caller can ever
move a seat out of that exact state.

Every failed unit of work is rolled back before returning, so callers never
see a half-applied reservation or purchase.
"""

import enum
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.models.seat import Seat, SeatStatus
from ticketgate.models.order import Order
from ticketgate.core.config import settings
from ticketgate.core.logging import get_logger
from ticketgate.core.metrics import record_reservation, record_purchase, reservation_latency, seats_released

logger = get_logger(__name__)

PAYMENT_COMPLETED = "Completed"


class ReservationResult(str, enum.Enum):
    SUCCESS = "success"
    INVALID_SEATS = "invalid_seats"
    ALREADY_TAKEN = "already_taken"
    CONCURRENCY_CONFLICT = "concurrency_conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class PurchaseResult:
    success: bool
    order_id: Optional[UUID] = None
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, order_id: UUID) -> "PurchaseResult":
        return cls(success=True, order_id=order_id)

    @classmethod
    def invalid_seats(cls) -> "PurchaseResult":
        return cls(success=False, error="Invalid seats")

    @classmethod
    def failed(cls) -> "PurchaseResult":
        return cls(success=False, error="Purchase failed")


async def load_event_seats(db: AsyncSession, event_id: UUID, seat_ids: Iterable[int]) -> list[Seat]:
    """
    Load the given seats of one event in id order, refreshing anything
    already in the session.

    The id order fixes the order of the per-row UPDATEs, so two overlapping
    reservations never lock the same rows in opposite orders.
    """
    result = await db.execute(
        select(Seat)
        .where(Seat.id.in_(list(seat_ids)), Seat.event_id == event_id)
        .order_by(Seat.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def reserve_seats(
    db: AsyncSession,
    user_id: UUID,
    event_id: UUID,
    seat_ids: Iterable[int],
) -> ReservationResult:
    """
    Move every requested seat from Available to Reserved for user_id, or none.

    The caller must already have checked the user's active lease.
    """
    requested = set(seat_ids)
    started = time.perf_counter()
    outcome = await _reserve(db, user_id, event_id, requested)
    reservation_latency.observe(time.perf_counter() - started)
    record_reservation(outcome.value)
    return outcome


async def _reserve(
    db: AsyncSession,
    user_id: UUID,
    event_id: UUID,
    requested: set[int],
) -> ReservationResult:
    if not requested:
        return ReservationResult.INVALID_SEATS

    try:
        seats = await load_event_seats(db, event_id, requested)

        if len(seats) != len(requested):
            await db.rollback()
            logger.warning(
                "reservation_invalid_seats",
                user_id=str(user_id),
                event_id=str(event_id),
                requested=len(requested),
                found=len(seats),
            )
            return ReservationResult.INVALID_SEATS

        if any(seat.status != SeatStatus.AVAILABLE for seat in seats):
            await db.rollback()
            logger.info("reservation_already_taken", user_id=str(user_id), event_id=str(event_id))
            return ReservationResult.ALREADY_TAKEN

        now = datetime.now(timezone.utc)
        updated = 0
        for seat in seats:
            update_result = await db.execute(
                update(Seat)
                .where(Seat.id == seat.id, Seat.version == seat.version)
                .values(
                    status=SeatStatus.RESERVED,
                    user_id=user_id,
                    reserved_at=now,
                    version=Seat.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            updated += update_result.rowcount

        if updated != len(seats):
            await db.rollback()
            logger.info(
                "reservation_conflict",
                user_id=str(user_id),
                event_id=str(event_id),
                seat_ids=sorted(requested),
                expected=len(seats),
                updated=updated,
            )
            return ReservationResult.CONCURRENCY_CONFLICT

        await db.commit()

    except OperationalError as e:
        await db.rollback()
        logger.error("reservation_store_unavailable", user_id=str(user_id), event_id=str(event_id), error=str(e))
        return ReservationResult.STORE_UNAVAILABLE
    except Exception:
        await db.rollback()
        logger.exception(
            "reservation_failed",
            user_id=str(user_id),
            event_id=str(event_id),
            seat_ids=sorted(requested),
        )
        return ReservationResult.ERROR

    logger.info("seats_reserved", user_id=str(user_id), event_id=str(event_id), count=len(requested))
    return ReservationResult.SUCCESS


async def purchase_reserved_seats(
    db: AsyncSession,
    user_id: UUID,
    seat_ids: Iterable[int],
    price_per_seat: Decimal = settings.SEAT_PRICE,
) -> PurchaseResult:
    """
    Sell seats the user holds in Reserved and record one Order for them.

    Fails with invalid seats if any seat is not Reserved by this user
    (never reserved, someone else's, already sold, or released on expiry).
    """
    requested = set(seat_ids)
    if not requested:
        record_purchase("invalid_seats")
        return PurchaseResult.invalid_seats()

    try:
        update_result = await db.execute(
            update(Seat)
            .where(
                Seat.id.in_(list(requested)),
                Seat.status == SeatStatus.RESERVED,
                Seat.user_id == user_id,
            )
            .values(status=SeatStatus.SOLD, version=Seat.version + 1)
            .execution_options(synchronize_session=False)
        )

        if update_result.rowcount != len(requested):
            await db.rollback()
            logger.warning(
                "purchase_invalid_seats",
                user_id=str(user_id),
                requested=len(requested),
                reserved=update_result.rowcount,
            )
            record_purchase("invalid_seats")
            return PurchaseResult.invalid_seats()

        order = Order(
            user_id=user_id,
            total_amount=price_per_seat * len(requested),
            payment_status=PAYMENT_COMPLETED,
        )
        db.add(order)
        await db.flush()
        order_id = order.id
        await db.commit()

    except Exception:
        await db.rollback()
        logger.exception("purchase_failed", user_id=str(user_id), seat_ids=sorted(requested))
        record_purchase("failed")
        return PurchaseResult.failed()

    logger.info(
        "seats_purchased",
        user_id=str(user_id),
        order_id=str(order_id),
        count=len(requested),
        amount=str(price_per_seat * len(requested)),
    )
    record_purchase("success")
    return PurchaseResult.succeeded(order_id)


async def release_expired_reservations(db: AsyncSession, older_than: datetime) -> int:
    """
    Return seats reserved before `older_than` and never purchased to Available.

    One conditional UPDATE: a seat purchased in the meantime is no longer
    Reserved and is left alone. The version bump makes any reservation that
    read the seat before the release lose its compare-and-swap.
    """
    result = await db.execute(
        update(Seat)
        .where(Seat.status == SeatStatus.RESERVED, Seat.reserved_at < older_than)
        .values(
            status=SeatStatus.AVAILABLE,
            user_id=None,
            reserved_at=None,
            version=Seat.version + 1,
        )
        .execution_options(synchronize_session=False)
    )
    released = result.rowcount
    await db.commit()

    if released:
        seats_released.inc(released)
        logger.info("reservations_released", count=released, older_than=older_than.isoformat())
    return released
