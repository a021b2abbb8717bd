"""Create evaluation scheduling schema

Revision ID: 001_create_scheduling_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates the tables read and written by the evaluation
scheduler: stores, users (employees), templates, settings, evaluations and
notifications. Evaluation creation is made idempotent by a unique
scheduling_key.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_create_scheduling_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create the scheduling tables and their indexes."""

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.VARCHAR(255), nullable=False),
        sa.Column(
            "timezone",
            sa.VARCHAR(64),
            nullable=False,
            server_default="America/New_York",
        ),
        sa.Column("business_hours_start", sa.SmallInteger(), nullable=True),
        sa.Column("business_hours_end", sa.SmallInteger(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "business_hours_start IS NULL OR business_hours_end IS NULL "
            "OR business_hours_end > business_hours_start",
            name="ck_stores_business_hours_order",
        ),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.VARCHAR(100), nullable=False, server_default=""),
        sa.Column("last_name", sa.VARCHAR(100), nullable=False, server_default=""),
        sa.Column("email", sa.VARCHAR(255), nullable=True),
        sa.Column(
            "position", sa.VARCHAR(50), nullable=False, server_default="Team Member"
        ),
        sa.Column("status", sa.VARCHAR(20), nullable=False, server_default="active"),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("evaluator_id", sa.Integer(), nullable=True),
        sa.Column(
            "is_on_leave", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("leave_start_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("leave_end_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "role_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "store_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("next_evaluation_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "scheduling_calculated_at", sa.TIMESTAMP(timezone=True), nullable=True
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["evaluator_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_users_store_status", "users", ["store_id", "status"])
    op.create_index("idx_users_store_position", "users", ["store_id", "position"])

    op.create_table(
        "templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.VARCHAR(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_templates_store_active", "templates", ["store_id", "is_active"])

    op.create_table(
        "settings",
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column(
            "evaluations",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("store_id"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "evaluations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("evaluator_id", sa.Integer(), nullable=True),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("template_id", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.VARCHAR(30),
            nullable=False,
            server_default="pending_self_evaluation",
        ),
        sa.Column("scheduled_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("completed_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "scheduling_type", sa.VARCHAR(10), nullable=False, server_default="manual"
        ),
        sa.Column("base_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("base_date_source", sa.VARCHAR(30), nullable=True),
        sa.Column("priority_score", sa.Integer(), nullable=True),
        sa.Column("scheduling_key", sa.VARCHAR(120), nullable=True),
        sa.Column("reminder_sent_at", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["employee_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["evaluator_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["template_id"], ["templates.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("scheduling_key", name="uq_evaluations_scheduling_key"),
    )
    op.create_index(
        "idx_evaluations_employee", "evaluations", ["employee_id", "scheduled_date"]
    )
    op.create_index(
        "idx_evaluations_evaluator_day",
        "evaluations",
        ["evaluator_id", "store_id", "scheduled_date"],
    )
    op.create_index(
        "idx_evaluations_reminder_due",
        "evaluations",
        ["scheduled_date"],
        postgresql_where=sa.text("reminder_sent_at IS NULL"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.VARCHAR(50), nullable=False),
        sa.Column("title", sa.VARCHAR(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("evaluation_id", sa.Integer(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["evaluation_id"], ["evaluations.id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        "idx_notifications_user_unread", "notifications", ["user_id", "is_read"]
    )


def downgrade() -> None:
    """Drop the scheduling tables."""
    op.drop_index("idx_notifications_user_unread", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("idx_evaluations_reminder_due", table_name="evaluations")
    op.drop_index("idx_evaluations_evaluator_day", table_name="evaluations")
    op.drop_index("idx_evaluations_employee", table_name="evaluations")
    op.drop_table("evaluations")

    op.drop_table("settings")

    op.drop_index("idx_templates_store_active", table_name="templates")
    op.drop_table("templates")

    op.drop_index("idx_users_store_position", table_name="users")
    op.drop_index("idx_users_store_status", table_name="users")
    op.drop_table("users")

    op.drop_table("stores")
