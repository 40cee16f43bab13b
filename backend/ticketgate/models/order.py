"""
Order model. Written once by a successful purchase and never updated.
"""

import uuid

from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, CheckConstraint, Uuid, func
from sqlalchemy.orm import relationship

from ticketgate.db.base import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    total_amount = Column(Numeric(18, 2), nullable=False)
    payment_status = Column(String(50), nullable=False, default="Pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="orders")

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="check_order_amount_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, user={self.user_id}, amount={self.total_amount}, status={self.payment_status})>"
