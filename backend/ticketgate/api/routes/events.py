"""
Event endpoints: active event listing (Redis cached) and seat maps, plus
the per-event waiting room.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.api.dependencies import get_admission_controller
from ticketgate.db.session import get_db
from ticketgate.schemas.event import EventResponse, EventListResponse, SeatResponse
from ticketgate.schemas.queue import (
    JoinQueueRequest, JoinQueueResponse, QueuePositionResponse, ActiveStatusResponse,
)
from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.event_service import list_active_events, get_seat_map
from ticketgate.services.cache_service import get_cached_events, set_cached_events
from ticketgate.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(db: AsyncSession = Depends(get_db)):
    """
    List active events with their available seat counts.
    Served from Redis when cached; the cache is dropped whenever seat
    states change.
    """
    cached = await get_cached_events()
    if cached is not None:
        return EventListResponse(events=cached, total=len(cached), cached=True)

    rows = await list_active_events(db)
    events = [
        EventResponse(
            id=event.id,
            name=event.name,
            total_seats=event.total_seats,
            sale_start_time=event.sale_start_time,
            is_active=event.is_active,
            available_seats=available,
        )
        for event, available in rows
    ]

    await set_cached_events([e.model_dump(mode="json") for e in events])
    return EventListResponse(events=events, total=len(events))


@router.get("/{event_id}/seats", response_model=list[SeatResponse])
async def seat_map_endpoint(event_id: UUID, db: AsyncSession = Depends(get_db)):
    """Seat map with live status. Not cached."""
    return await get_seat_map(db, event_id)


@router.post("/{event_id}/queue/join", response_model=JoinQueueResponse)
async def join_queue_endpoint(
    event_id: UUID,
    request: JoinQueueRequest,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """
    Join the event's waiting room.

    Joining twice is allowed and simply adds a second entry.
    """
    if request.event_id != event_id or request.user_id.int == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request",
        )

    await controller.join_waiting_room(request.user_id, event_id)
    return JoinQueueResponse(message="Joined waiting room", event_id=event_id, user_id=request.user_id)


@router.get("/{event_id}/queue/position/{user_id}", response_model=QueuePositionResponse)
async def queue_position_endpoint(
    event_id: UUID,
    user_id: UUID,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Zero-based position in the waiting room; 404 once admitted or if never queued."""
    position = await controller.get_queue_position(user_id, event_id)
    if position is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not in queue",
        )
    length = await controller.get_queue_length(event_id)
    return QueuePositionResponse(position=position, queue_length=length, event_id=event_id, user_id=user_id)


@router.get("/{event_id}/queue/active/{user_id}", response_model=ActiveStatusResponse)
async def active_status_endpoint(
    event_id: UUID,
    user_id: UUID,
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Whether the user currently holds an active session for the event."""
    is_active = await controller.is_active(user_id, event_id)
    return ActiveStatusResponse(is_active=is_active, event_id=event_id, user_id=user_id)
