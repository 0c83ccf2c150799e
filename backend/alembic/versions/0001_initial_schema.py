"""Resources, availability windows, reservations and billing.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "resources",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "resource_type",
            sa.String(length=64),
            nullable=False,
            server_default="room",
        ),
        sa.Column("description", sa.String(length=1024)),
        sa.Column("capacity", sa.Integer()),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        *_timestamps(),
    )

    op.create_table(
        "resource_availability",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "resource_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        *_timestamps(),
        sa.CheckConstraint("start_time < end_time", name="ck_window_start_before_end"),
        sa.CheckConstraint(
            "day_of_week >= 0 AND day_of_week <= 6", name="ck_window_day_of_week"
        ),
    )
    op.create_index(
        "ix_resource_availability_resource_id",
        "resource_availability",
        ["resource_id"],
    )

    reservation_status = sa.Enum(
        "PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", name="reservationstatus"
    )
    op.create_table(
        "reservations",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "resource_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500)),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "status",
            reservation_status,
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("attendees", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("details", sa.JSON()),
        *_timestamps(),
        sa.CheckConstraint("end_at > start_at", name="ck_reservation_end_after_start"),
    )
    op.create_index("ix_reservations_user_id", "reservations", ["user_id"])
    op.create_index(
        "ix_reservations_resource_span",
        "reservations",
        ["resource_id", "start_at", "end_at"],
    )

    op.create_table(
        "subscription_plans",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "grace_period_days", sa.Integer(), nullable=False, server_default="2"
        ),
        sa.Column(
            "penalty_base_rate",
            sa.Numeric(6, 4),
            nullable=False,
            server_default="0.05",
        ),
        sa.Column(
            "penalty_daily_rate",
            sa.Numeric(6, 4),
            nullable=False,
            server_default="0.005",
        ),
        sa.Column(
            "max_penalty_rate",
            sa.Numeric(6, 4),
            nullable=False,
            server_default="0.50",
        ),
        *_timestamps(),
    )

    subscription_status = sa.Enum(
        "ACTIVE", "PAST_DUE", "SUSPENDED", "CANCELLED", name="subscriptionstatus"
    )
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False, unique=True),
        sa.Column(
            "plan_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("subscription_plans.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "status",
            subscription_status,
            nullable=False,
            server_default="ACTIVE",
        ),
        sa.Column("grace_period_end", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    payment_status = sa.Enum("PENDING", "PAID", "FAILED", name="paymentstatus")
    op.create_table(
        "payments",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "subscription_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("subscriptions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column(
            "status", payment_status, nullable=False, server_default="PENDING"
        ),
        sa.Column("penalty_fee", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index(
        "ix_payments_status_due_date", "payments", ["status", "due_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_payments_status_due_date", table_name="payments")
    op.drop_index("ix_payments_user_id", table_name="payments")
    op.drop_table("payments")
    op.drop_table("subscriptions")
    op.drop_table("subscription_plans")
    op.drop_index("ix_reservations_resource_span", table_name="reservations")
    op.drop_index("ix_reservations_user_id", table_name="reservations")
    op.drop_table("reservations")
    op.drop_index(
        "ix_resource_availability_resource_id", table_name="resource_availability"
    )
    op.drop_table("resource_availability")
    op.drop_table("resources")

    bind = op.get_bind()
    for enum_name in ("paymentstatus", "subscriptionstatus", "reservationstatus"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
