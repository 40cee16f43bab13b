"""
User model. Contact and credential fields are opaque to the reservation core.
"""

import uuid

from sqlalchemy import Column, String, DateTime, Uuid, func
from sqlalchemy.orm import relationship

from ticketgate.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    seats = relationship("Seat", back_populates="user")
    orders = relationship("Order", back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
