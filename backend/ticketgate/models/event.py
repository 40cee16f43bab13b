"""
Event model.

Key design decisions:
- Events are deactivated (`is_active = false`) rather than deleted so seats
  and orders keep their parent
- Index on `is_active`: the admission loop lists active events every tick
- No denormalized seat counter; availability is counted from seat rows so
  there is exactly one place a seat's state lives
"""

import uuid

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from ticketgate.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    total_seats = Column(Integer, nullable=False)
    sale_start_time = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    seats = relationship("Seat", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("total_seats >= 0", name="check_total_seats_non_negative"),
        Index("ix_events_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, active={self.is_active})>"
