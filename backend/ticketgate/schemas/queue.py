"""
Pydantic schemas for the waiting room endpoints.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JoinQueueRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: UUID
    event_id: UUID


class JoinQueueResponse(BaseModel):
    message: str
    event_id: UUID
    user_id: UUID


class QueuePositionResponse(BaseModel):
    position: int
    queue_length: int
    event_id: UUID
    user_id: UUID


class ActiveStatusResponse(BaseModel):
    is_active: bool
    event_id: UUID
    user_id: UUID
