"""
Seat model, the only row contended by concurrent writers.

Key design decisions:
- `version` is the optimistic concurrency token. It is never bumped by the
  ORM; the reservation engine writes `version = version + 1` in the same
  conditional UPDATE that checks the previously read value
- CHECK constraint mirrors the ownership invariant: an Available seat has no
  owner, a Reserved or Sold seat always has one
- Composite index on (event_id, status) serves both the seat map and the
  available-seat counts on the event listing
"""

import enum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
    Uuid,
)
from sqlalchemy.orm import relationship

from ticketgate.db.base import Base


class SeatStatus(str, enum.Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    SOLD = "Sold"


class Seat(Base):
    __tablename__ = "seats"

    # BIGSERIAL on PostgreSQL; SQLite only autoincrements INTEGER primary keys
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    section = Column(String(50), nullable=False)
    row_number = Column(String(10), nullable=False)
    seat_number = Column(String(10), nullable=False)
    status = Column(
        Enum(
            SeatStatus,
            name="seat_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=SeatStatus.AVAILABLE,
    )
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reserved_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    event = relationship("Event", back_populates="seats")
    user = relationship("User", back_populates="seats")

    __table_args__ = (
        CheckConstraint(
            "(status = 'Available' AND user_id IS NULL) OR "
            "(status IN ('Reserved', 'Sold') AND user_id IS NOT NULL)",
            name="check_seat_owner_matches_status",
        ),
        Index("ix_seats_event_status", "event_id", "status"),
        Index("ix_seats_user_id", "user_id"),
        Index("ix_seats_reserved_at", "reserved_at", postgresql_where=text("status = 'Reserved'")),
    )

    def __repr__(self) -> str:
        return f"<Seat(id={self.id}, event={self.event_id}, status={self.status}, version={self.version})>"
