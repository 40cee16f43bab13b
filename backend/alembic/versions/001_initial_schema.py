"""Initial schema: users, events, seats, orders with indexes and constraints.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("sale_start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_seats >= 0", name="check_total_seats_non_negative"),
    )
    # The admission loop lists active events once per second
    op.create_index("ix_events_is_active", "events", ["is_active"])

    # Seats table
    op.create_table(
        "seats",
        sa.Column("id", sa.BigInteger(), sa.Identity(always=True), primary_key=True),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("section", sa.String(50), nullable=False),
        sa.Column("row_number", sa.String(10), nullable=False),
        sa.Column("seat_number", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'Available'")),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reserved_at", sa.DateTime(timezone=True), nullable=True),
        # Optimistic concurrency token, bumped by every reservation engine write
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint(
            "(status = 'Available' AND user_id IS NULL) OR "
            "(status IN ('Reserved', 'Sold') AND user_id IS NOT NULL)",
            name="check_seat_owner_matches_status",
        ),
    )
    # Seat map and available counts filter by event and status together
    op.create_index("ix_seats_event_status", "seats", ["event_id", "status"])
    op.create_index("ix_seats_user_id", "seats", ["user_id"])
    # Release sweeper: WHERE status = 'Reserved' AND reserved_at < cutoff
    op.create_index(
        "ix_seats_reserved_at",
        "seats",
        ["reserved_at"],
        postgresql_where=sa.text("status = 'Reserved'"),
    )

    # Orders table
    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("total_amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("payment_status", sa.String(50), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_amount >= 0", name="check_order_amount_non_negative"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])


def downgrade() -> None:
    op.drop_table("orders")
    op.drop_table("seats")
    op.drop_table("events")
    op.drop_table("users")
