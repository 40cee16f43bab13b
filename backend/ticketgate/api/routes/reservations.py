"""
Reservation endpoints. Reserving is gated on an active session from the
waiting room; the engine itself does not re-check it.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.api.dependencies import get_admission_controller
from ticketgate.db.session import get_db
from ticketgate.schemas.reservation import (
    ReserveSeatsRequest, PurchaseSeatsRequest, ReserveSeatsResponse, PurchaseResponse,
)
from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.reservation_service import (
    ReservationResult, reserve_seats, purchase_reserved_seats,
)
from ticketgate.services.cache_service import invalidate_event_cache
from ticketgate.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/reservations", tags=["Reservations"])

# Conflict and taken look the same to clients; metrics keep them apart
RESERVATION_ERRORS = {
    ReservationResult.INVALID_SEATS: (status.HTTP_400_BAD_REQUEST, "Invalid seats selected"),
    ReservationResult.ALREADY_TAKEN: (status.HTTP_409_CONFLICT, "Some of these seats are already taken"),
    ReservationResult.CONCURRENCY_CONFLICT: (status.HTTP_409_CONFLICT, "Seats were just reserved by another user"),
    ReservationResult.STORE_UNAVAILABLE: (status.HTTP_503_SERVICE_UNAVAILABLE, "Reservations temporarily unavailable"),
    ReservationResult.ERROR: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Reservation failed"),
}


@router.post("/reserve", response_model=ReserveSeatsResponse)
async def reserve_endpoint(
    request: ReserveSeatsRequest,
    db: AsyncSession = Depends(get_db),
    controller: AdmissionController = Depends(get_admission_controller),
):
    """
    Reserve seats for an admitted user.

    All-or-nothing: either every requested seat becomes Reserved for the
    user or none changes. Losing a race to another user returns 409.
    """
    if not await controller.is_active(request.user_id, request.event_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User must be in active session to reserve seats",
        )

    result = await reserve_seats(db, request.user_id, request.event_id, request.seat_ids)
    if result is not ReservationResult.SUCCESS:
        status_code, detail = RESERVATION_ERRORS[result]
        raise HTTPException(status_code=status_code, detail=detail)

    await invalidate_event_cache()
    return ReserveSeatsResponse(
        message="Seats reserved successfully",
        seat_ids=sorted(set(request.seat_ids)),
    )


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase_endpoint(
    request: PurchaseSeatsRequest,
    db: AsyncSession = Depends(get_db),
    controller: AdmissionController = Depends(get_admission_controller),
):
    """Finalize reserved seats into an order."""
    result = await purchase_reserved_seats(db, request.user_id, request.seat_ids)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.error or "Purchase failed",
        )

    await invalidate_event_cache()
    if request.event_id is not None:
        await controller.remove_active_session(request.user_id, request.event_id)

    return PurchaseResponse(message="Purchase successful", order_id=result.order_id)
