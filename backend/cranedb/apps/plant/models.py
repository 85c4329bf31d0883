# backend/cranedb/apps/plant/models.py
#
# ORM models for the plant registry:
# - Department : maintenance department owning a group of sheds (HSM, HBM, PTM, ...).
# - Shed       : physical bay / building inside a department.
# - Crane      : overhead crane installed in a shed; the unit of inspection.
#
# The maintenance scheduler only reads these tables. Department codes double
# as the scheduling key, so they are unique and short.

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from ...database import Base


class MaintenanceFrequencyEnum(str, Enum):
    """How often a crane is inspected."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class Department(Base):
    """
    Plant department.

    Only departments whose `code` has a calendar window (HSM, HBM, PTM) take
    part in the monthly maintenance schedule; others (fabrication, pump house)
    are kept for inspections and reporting.
    """

    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(10), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    sort_order = Column(Integer, nullable=False, default=100)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    sheds = relationship(
        "Shed",
        back_populates="department",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Department id={self.id} code={self.code}>"


class Shed(Base):
    __tablename__ = "sheds"

    __table_args__ = (
        UniqueConstraint("department_id", "name", name="uq_sheds_department_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    department_id = Column(
        Integer,
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    code = Column(String(32), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    department = relationship("Department", back_populates="sheds", lazy="joined")
    cranes = relationship("Crane", back_populates="shed", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Shed id={self.id} name={self.name}>"


class Crane(Base):
    """
    A single crane. Cranes are never deleted; retired cranes are flagged
    inactive so their maintenance history stays joinable.
    """

    __tablename__ = "cranes"

    __table_args__ = (
        UniqueConstraint("shed_id", "crane_number", name="uq_cranes_shed_number"),
        Index("ix_cranes_active_shed", "is_active", "shed_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    shed_id = Column(
        Integer,
        ForeignKey("sheds.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    crane_number = Column(String(64), nullable=False)

    maintenance_frequency = Column(
        SQLEnum(
            MaintenanceFrequencyEnum,
            name="maintenance_frequency_enum",
            native_enum=False,
        ),
        nullable=False,
        default=MaintenanceFrequencyEnum.MONTHLY,
    )
    is_active = Column(Boolean, nullable=False, default=True)

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

    shed = relationship("Shed", back_populates="cranes", lazy="joined")

    def __repr__(self) -> str:
        return f"<Crane id={self.id} crane_number={self.crane_number} shed_id={self.shed_id}>"
