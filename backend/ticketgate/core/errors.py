"""
Application error taxonomy.

Expected outcomes of the reservation engine (taken seats, lost races) are
result values, not exceptions; see services.reservation_service. The
exceptions here cover faults that cross layers.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class TicketGateError(Exception):
    """Base error with a code, a user-safe message and an HTTP status."""

    status_code: int = 500

    def __init__(self, code: ErrorCode, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class StoreUnavailableError(TicketGateError):
    """A backing store (queue or inventory) could not be reached."""

    status_code = 503

    def __init__(self, store: str, operation: str):
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message=f"{store} temporarily unavailable",
        )
        self.store = store
        self.operation = operation
