# backend/cranedb/apps/maintenance_schedule/models.py
#
# Monthly maintenance tracking ledger: one row per (crane, year, month).
#
# - scheduled_start / scheduled_end are frozen when the row is created, so
#   later changes to the department windows never rewrite history.
# - department_code is denormalised from the crane's shed for fast filtering.
# - Status uses a non-native enum to avoid Postgres enum lifecycle issues in Alembic.
# - Rows are never deleted; retired cranes keep their history.

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from ...database import Base


class TrackingStatusEnum(str, Enum):
    """Monthly maintenance status of one crane."""
    PENDING = "PENDING"          # window not yet elapsed, no inspection
    COMPLETED = "COMPLETED"      # inspected inside its own window
    MISSED = "MISSED"            # window elapsed without an inspection
    RESCHEDULED = "RESCHEDULED"  # inspected during the catch-up period


COMPLETION_STATUSES = (TrackingStatusEnum.COMPLETED, TrackingStatusEnum.RESCHEDULED)


class MaintenanceTracking(Base):
    __tablename__ = "monthly_maintenance_tracking"

    __table_args__ = (
        UniqueConstraint("crane_id", "year", "month", name="uq_mmt_crane_month"),
        Index("ix_mmt_department_month", "department_code", "year", "month"),
        Index("ix_mmt_status", "status"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_mmt_month_range"),
        CheckConstraint("scheduled_start <= scheduled_end", name="ck_mmt_window_order"),
    )

    id = Column(Integer, primary_key=True, index=True)

    crane_id = Column(
        Integer,
        ForeignKey("cranes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    department_code = Column(String(10), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    status = Column(
        SQLEnum(
            TrackingStatusEnum,
            name="tracking_status_enum",
            native_enum=False,
        ),
        nullable=False,
        default=TrackingStatusEnum.PENDING,
    )

    scheduled_start = Column(Date, nullable=False)
    scheduled_end = Column(Date, nullable=False)

    completed_date = Column(Date, nullable=True)
    completed_in_reschedule = Column(Boolean, nullable=False, default=False)

    # Opaque reference to the inspection submission that completed this month.
    submission_ref = Column(String(64), nullable=True)

    # Administrator override
    manually_marked = Column(Boolean, nullable=False, default=False)
    marked_by = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    crane = relationship("Crane", lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<MaintenanceTracking id={self.id} crane_id={self.crane_id} "
            f"period={self.year}-{self.month:02d} status={self.status}>"
        )
