"""
Pydantic schemas for the demo login.
"""

from uuid import UUID

from pydantic import BaseModel


class LoginResponse(BaseModel):
    user_id: UUID
    email: str
