from ticketgate.schemas.user import LoginResponse
from ticketgate.schemas.event import EventResponse, EventListResponse, SeatResponse
from ticketgate.schemas.queue import (
    JoinQueueRequest, JoinQueueResponse, QueuePositionResponse, ActiveStatusResponse,
)
from ticketgate.schemas.reservation import (
    ReserveSeatsRequest, PurchaseSeatsRequest, ReserveSeatsResponse, PurchaseResponse,
)

__all__ = [
    "LoginResponse",
    "EventResponse", "EventListResponse", "SeatResponse",
    "JoinQueueRequest", "JoinQueueResponse", "QueuePositionResponse", "ActiveStatusResponse",
    "ReserveSeatsRequest", "PurchaseSeatsRequest", "ReserveSeatsResponse", "PurchaseResponse",
]
