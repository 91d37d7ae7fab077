"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def _franchise_fk() -> sa.Column:
    return sa.Column("franchise_id", sa.Uuid, sa.ForeignKey("franchise.id"), nullable=False)


def upgrade() -> None:
    """Create franchise, identity, vehicle and maintenance tables."""
    op.create_table(
        "franchise",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        _created_at(),
    )

    op.create_table(
        "user",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("full_name", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "franchise_membership",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid, sa.ForeignKey("user.id"), nullable=False),
        sa.Column("franchise_id", sa.Uuid, sa.ForeignKey("franchise.id"), nullable=False),
        sa.Column("role", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
    )
    op.create_index(
        "idx_membership_user_active",
        "franchise_membership",
        ["user_id", "is_active", "created_at"],
    )

    op.create_table(
        "session_token",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        sa.Column(
            "user_id", sa.Uuid, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("token", sa.Text, nullable=False, unique=True),
        _created_at(),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "vehicle",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        _franchise_fk(),
        sa.Column("vehicle_number", sa.Text, nullable=False),
        sa.Column("make", sa.Text, nullable=True),
        sa.Column("model", sa.Text, nullable=True),
        sa.Column("year", sa.Integer, nullable=True),
        sa.Column("current_mileage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.Text, nullable=False, server_default="active"),
        _created_at(),
        sa.UniqueConstraint(
            "franchise_id", "vehicle_number", name="uq_vehicle_franchise_number"
        ),
    )
    op.create_index("ix_vehicle_franchise_id", "vehicle", ["franchise_id"])

    op.create_table(
        "vehicle_issue",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        _franchise_fk(),
        sa.Column("vehicle_id", sa.Uuid, sa.ForeignKey("vehicle.id"), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="open"),
        _created_at(),
    )
    op.create_index("ix_vehicle_issue_franchise_id", "vehicle_issue", ["franchise_id"])
    op.create_index("idx_issue_vehicle", "vehicle_issue", ["vehicle_id", "created_at"])

    op.create_table(
        "maintenance_policy",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        _franchise_fk(),
        sa.Column("maintenance_type", sa.Text, nullable=False),
        sa.Column("default_interval_miles", sa.Integer, nullable=True),
        sa.Column("default_interval_days", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "franchise_id", "maintenance_type", name="uq_policy_franchise_type"
        ),
    )
    op.create_index("ix_maintenance_policy_franchise_id", "maintenance_policy", ["franchise_id"])

    op.create_table(
        "scheduled_maintenance",
        sa.Column("id", sa.Uuid, primary_key=True, nullable=False),
        _franchise_fk(),
        sa.Column("vehicle_id", sa.Uuid, sa.ForeignKey("vehicle.id"), nullable=True),
        sa.Column("maintenance_type", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("due_date", sa.Date, nullable=True),
        sa.Column("due_mileage", sa.Integer, nullable=True),
        sa.Column("interval_miles", sa.Integer, nullable=True),
        sa.Column("interval_days", sa.Integer, nullable=True),
        sa.Column("completed", sa.Boolean, nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_scheduled_maintenance_franchise_id", "scheduled_maintenance", ["franchise_id"]
    )
    op.create_index(
        "idx_scheduled_franchise_type",
        "scheduled_maintenance",
        ["franchise_id", "maintenance_type"],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("scheduled_maintenance")
    op.drop_table("maintenance_policy")
    op.drop_table("vehicle_issue")
    op.drop_table("vehicle")
    op.drop_table("session_token")
    op.drop_table("franchise_membership")
    op.drop_table("user")
    op.drop_table("franchise")
