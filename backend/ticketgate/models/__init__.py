from ticketgate.models.user import User
from ticketgate.models.event import Event
from ticketgate.models.seat import Seat, SeatStatus
from ticketgate.models.order import Order

__all__ = ["User", "Event", "Seat", "SeatStatus", "Order"]
