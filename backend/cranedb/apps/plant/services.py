from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models


@dataclass(frozen=True)
class ActiveMachine:
    crane_id: int
    department_code: str


def _active_crane_query():
    return (
        select(models.Crane.id, models.Department.code)
        .join(models.Shed, models.Crane.shed_id == models.Shed.id)
        .join(models.Department, models.Shed.department_id == models.Department.id)
        .where(
            models.Crane.is_active.is_(True),
            models.Shed.is_active.is_(True),
        )
    )


def list_active_machines(db: Session) -> List[ActiveMachine]:
    """All active cranes with the code of the department that owns their shed."""
    stmt = _active_crane_query().order_by(models.Crane.id)
    return [
        ActiveMachine(crane_id=crane_id, department_code=code)
        for crane_id, code in db.execute(stmt).all()
    ]


def get_machine_department(db: Session, crane_id: int) -> Optional[str]:
    """Department code for an active crane, or None if unknown / inactive."""
    stmt = _active_crane_query().where(models.Crane.id == crane_id)
    row = db.execute(stmt).first()
    return row[1] if row else None


def get_crane(db: Session, crane_id: int) -> Optional[models.Crane]:
    return db.get(models.Crane, crane_id)
