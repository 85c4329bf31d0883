"""create plant registry and monthly maintenance tracking tables

Revision ID: 7d3e1a9c4b20
Revises:
Create Date: 2025-02-24 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "7d3e1a9c4b20"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


TRACKING_STATUSES = ("PENDING", "COMPLETED", "MISSED", "RESCHEDULED")
FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY")


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_departments_id", "departments", ["id"])
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)
    op.create_index("ix_departments_is_active", "departments", ["is_active"])

    op.create_table(
        "sheds",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "department_id",
            sa.Integer(),
            sa.ForeignKey("departments.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=32), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("department_id", "name", name="uq_sheds_department_name"),
    )
    op.create_index("ix_sheds_id", "sheds", ["id"])
    op.create_index("ix_sheds_department_id", "sheds", ["department_id"])
    op.create_index("ix_sheds_is_active", "sheds", ["is_active"])

    op.create_table(
        "cranes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "shed_id",
            sa.Integer(),
            sa.ForeignKey("sheds.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("crane_number", sa.String(length=64), nullable=False),
        sa.Column(
            "maintenance_frequency",
            sa.Enum(*FREQUENCIES, name="maintenance_frequency_enum", native_enum=False),
            nullable=False,
            server_default="MONTHLY",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("shed_id", "crane_number", name="uq_cranes_shed_number"),
    )
    op.create_index("ix_cranes_id", "cranes", ["id"])
    op.create_index("ix_cranes_shed_id", "cranes", ["shed_id"])
    op.create_index("ix_cranes_active_shed", "cranes", ["is_active", "shed_id"])

    op.create_table(
        "monthly_maintenance_tracking",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "crane_id",
            sa.Integer(),
            sa.ForeignKey("cranes.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("department_code", sa.String(length=10), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*TRACKING_STATUSES, name="tracking_status_enum", native_enum=False),
            nullable=False,
            server_default="PENDING",
        ),
        sa.Column("scheduled_start", sa.Date(), nullable=False),
        sa.Column("scheduled_end", sa.Date(), nullable=False),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("completed_in_reschedule", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("submission_ref", sa.String(length=64), nullable=True),
        sa.Column("manually_marked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("marked_by", sa.String(length=64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("crane_id", "year", "month", name="uq_mmt_crane_month"),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_mmt_month_range"),
        sa.CheckConstraint("scheduled_start <= scheduled_end", name="ck_mmt_window_order"),
    )
    op.create_index("ix_monthly_maintenance_tracking_id", "monthly_maintenance_tracking", ["id"])
    op.create_index("ix_monthly_maintenance_tracking_crane_id", "monthly_maintenance_tracking", ["crane_id"])
    op.create_index(
        "ix_mmt_department_month",
        "monthly_maintenance_tracking",
        ["department_code", "year", "month"],
    )
    op.create_index("ix_mmt_status", "monthly_maintenance_tracking", ["status"])


def downgrade() -> None:
    op.drop_index("ix_mmt_status", table_name="monthly_maintenance_tracking")
    op.drop_index("ix_mmt_department_month", table_name="monthly_maintenance_tracking")
    op.drop_index("ix_monthly_maintenance_tracking_crane_id", table_name="monthly_maintenance_tracking")
    op.drop_index("ix_monthly_maintenance_tracking_id", table_name="monthly_maintenance_tracking")
    op.drop_table("monthly_maintenance_tracking")

    op.drop_index("ix_cranes_active_shed", table_name="cranes")
    op.drop_index("ix_cranes_shed_id", table_name="cranes")
    op.drop_index("ix_cranes_id", table_name="cranes")
    op.drop_table("cranes")

    op.drop_index("ix_sheds_is_active", table_name="sheds")
    op.drop_index("ix_sheds_department_id", table_name="sheds")
    op.drop_index("ix_sheds_id", table_name="sheds")
    op.drop_table("sheds")

    op.drop_index("ix_departments_is_active", table_name="departments")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_index("ix_departments_id", table_name="departments")
    op.drop_table("departments")
