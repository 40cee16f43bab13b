"""
Pydantic schemas for event listing and seat map responses.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ticketgate.models.seat import SeatStatus


class EventResponse(BaseModel):
    id: UUID
    name: str
    total_seats: int
    sale_start_time: datetime
    is_active: bool
    available_seats: int


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    cached: bool = False


class SeatResponse(BaseModel):
    id: int
    section: str
    row_number: str
    seat_number: str
    status: SeatStatus
    reserved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
