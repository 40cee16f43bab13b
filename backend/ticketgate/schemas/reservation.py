"""
Pydantic schemas for reservation and purchase requests/responses.
Request bodies accept snake_case or camelCase keys.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

REQUEST_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReserveSeatsRequest(BaseModel):
    model_config = REQUEST_CONFIG

    user_id: UUID
    event_id: UUID
    seat_ids: list[int]


class PurchaseSeatsRequest(BaseModel):
    model_config = REQUEST_CONFIG

    user_id: UUID
    seat_ids: list[int]
    # When present, the user's active session for this event ends on success
    event_id: Optional[UUID] = None


class ReserveSeatsResponse(BaseModel):
    message: str
    seat_ids: list[int]


class PurchaseResponse(BaseModel):
    message: str
    order_id: UUID
