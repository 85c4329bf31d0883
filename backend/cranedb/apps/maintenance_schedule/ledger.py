# backend/cranedb/apps/maintenance_schedule/ledger.py
#
# Persistence and query surface for the monthly tracking ledger.
#
# Responsibilities:
# - Create tracking rows (lazily per crane, or in bulk per month) with the
#   department window frozen at creation time.
# - Department listings, summaries and the catch-up (missed) list.
# - Status mutations: completion from an inspection, administrator override,
#   and the expiry sweep that demotes PENDING rows to MISSED.
#
# Functions flush but never commit; the caller owns the transaction so that
# each public operation is applied atomically or not at all.

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterator, List, Optional, Tuple, Union

from sqlalchemy import and_, case, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..plant import models as plant_models
from ..plant import services as plant_services
from . import schemas, windows
from .errors import (
    ConstraintViolationError,
    InvalidDepartmentError,
    InvalidStatusError,
    MachineNotFoundError,
    RecordNotFoundError,
)
from .models import COMPLETION_STATUSES, MaintenanceTracking, TrackingStatusEnum

logger = logging.getLogger(__name__)

_UNIQUE_KEY = ["crane_id", "year", "month"]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InitializeMonthResult:
    year: int
    month: int
    created_count: int
    total_cranes: int
    skipped_count: int


@dataclass(frozen=True)
class SweepResult:
    as_of: date
    expired_departments: List[str] = field(default_factory=list)
    catchup_started: bool = False
    total_missed: int = 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@contextmanager
def _store_operation(operation: str, **context) -> Iterator[None]:
    """Log store failures with the operation name; integrity errors become retryable."""
    try:
        yield
    except IntegrityError as exc:
        logger.warning(
            "Maintenance ledger constraint violation",
            extra={"operation": operation, **context},
        )
        raise ConstraintViolationError(operation, str(exc.orig)) from exc
    except SQLAlchemyError:
        logger.exception(
            "Maintenance ledger operation failed",
            extra={"operation": operation, **context},
        )
        raise


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def maintenance_department(value: windows.DepartmentLike) -> windows.DepartmentCode:
    code = windows.coerce_department(value)
    if code not in windows.DEPARTMENT_SCHEDULE:
        raise InvalidDepartmentError(value)
    return code


def coerce_status(value: Union[TrackingStatusEnum, str]) -> TrackingStatusEnum:
    if isinstance(value, TrackingStatusEnum):
        return value
    try:
        return TrackingStatusEnum(str(value).strip().upper())
    except ValueError:
        raise InvalidStatusError(value) from None


def _department_order():
    # Workflow order (HSM, HBM, PTM), not alphabetical.
    return case(
        {code.value: index for index, code in enumerate(windows.MAINTENANCE_DEPARTMENTS)},
        value=MaintenanceTracking.department_code,
        else_=len(windows.MAINTENANCE_DEPARTMENTS),
    )


def _status_count(status: TrackingStatusEnum):
    return func.coalesce(
        func.sum(case((MaintenanceTracking.status == status, 1), else_=0)),
        0,
    )


def _summary_columns():
    return (
        func.count(MaintenanceTracking.id).label("total"),
        _status_count(TrackingStatusEnum.COMPLETED).label("completed"),
        _status_count(TrackingStatusEnum.PENDING).label("pending"),
        _status_count(TrackingStatusEnum.MISSED).label("missed"),
        _status_count(TrackingStatusEnum.RESCHEDULED).label("rescheduled"),
    )


def _summary_from_row(department_code: str, row) -> schemas.TrackingSummaryRead:
    return schemas.TrackingSummaryRead(
        department_code=department_code,
        total=int(row.total or 0) if row is not None else 0,
        completed=int(row.completed or 0) if row is not None else 0,
        pending=int(row.pending or 0) if row is not None else 0,
        missed=int(row.missed or 0) if row is not None else 0,
        rescheduled=int(row.rescheduled or 0) if row is not None else 0,
    )


def _insert_if_absent(
    db: Session,
    *,
    crane_id: int,
    department_code: str,
    year: int,
    month: int,
) -> bool:
    """
    INSERT ... ON CONFLICT DO NOTHING for the (crane, year, month) key.
    Returns True when this call created the row.
    """
    window = windows.department_window(department_code, year, month)
    values = {
        "crane_id": crane_id,
        "department_code": window.department.value,
        "year": year,
        "month": month,
        "status": TrackingStatusEnum.PENDING,
        "scheduled_start": window.start_date,
        "scheduled_end": window.end_date,
    }
    table = MaintenanceTracking.__table__
    dialect = db.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        dialect_insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
        stmt = dialect_insert(table).values(**values).on_conflict_do_nothing(index_elements=_UNIQUE_KEY)
        result = db.execute(stmt)
        return result.rowcount == 1

    # Other backends: a savepoint absorbs the duplicate-key race.
    try:
        with db.begin_nested():
            db.execute(insert(table).values(**values))
        return True
    except IntegrityError:
        return False


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def get_record(db: Session, *, crane_id: int, year: int, month: int) -> Optional[MaintenanceTracking]:
    stmt = select(MaintenanceTracking).where(
        MaintenanceTracking.crane_id == crane_id,
        MaintenanceTracking.year == year,
        MaintenanceTracking.month == month,
    )
    return db.execute(stmt).scalars().first()


def ensure_exists_with_flag(
    db: Session,
    *,
    crane_id: int,
    year: int,
    month: int,
) -> Tuple[MaintenanceTracking, bool]:
    with _store_operation("ensure_exists", crane_id=crane_id, year=year, month=month):
        record = get_record(db, crane_id=crane_id, year=year, month=month)
        if record is not None:
            return record, False

        department_code = plant_services.get_machine_department(db, crane_id)
        if department_code is None:
            raise MachineNotFoundError(crane_id)

        created = _insert_if_absent(
            db,
            crane_id=crane_id,
            department_code=department_code,
            year=year,
            month=month,
        )
        # Either our row or the one a concurrent caller won the insert with.
        record = get_record(db, crane_id=crane_id, year=year, month=month)

    if record is None:
        raise ConstraintViolationError("ensure_exists", "tracking row vanished after insert")
    if created:
        logger.info(
            "Created maintenance tracking record",
            extra={"crane_id": crane_id, "year": year, "month": month, "department_code": department_code},
        )
    return record, created


def ensure_exists(db: Session, *, crane_id: int, year: int, month: int) -> MaintenanceTracking:
    """Return the crane's record for the month, creating a PENDING one if absent."""
    record, _ = ensure_exists_with_flag(db, crane_id=crane_id, year=year, month=month)
    return record


def initialize_month(db: Session, *, year: int, month: int) -> InitializeMonthResult:
    """
    Create PENDING records for every active crane of a maintenance department.
    Idempotent: existing rows are left untouched.
    """
    windows.last_day_of_month(year, month)  # rejects an invalid month early

    with _store_operation("initialize_month", year=year, month=month):
        machines = plant_services.list_active_machines(db)
        existing = set(
            db.execute(
                select(MaintenanceTracking.crane_id).where(
                    MaintenanceTracking.year == year,
                    MaintenanceTracking.month == month,
                )
            ).scalars()
        )

        created_count = 0
        skipped_count = 0
        for machine in machines:
            if not windows.is_maintenance_department(machine.department_code):
                skipped_count += 1
                continue
            if machine.crane_id in existing:
                continue
            if _insert_if_absent(
                db,
                crane_id=machine.crane_id,
                department_code=machine.department_code,
                year=year,
                month=month,
            ):
                created_count += 1
        db.flush()

    logger.info(
        "Initialized maintenance tracking month",
        extra={
            "year": year,
            "month": month,
            "created_count": created_count,
            "total_cranes": len(machines),
        },
    )
    return InitializeMonthResult(
        year=year,
        month=month,
        created_count=created_count,
        total_cranes=len(machines),
        skipped_count=skipped_count,
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def get_by_department(
    db: Session,
    *,
    department: windows.DepartmentLike,
    year: int,
    month: int,
) -> List[schemas.TrackedCraneRead]:
    code = maintenance_department(department)
    stmt = (
        select(
            MaintenanceTracking,
            plant_models.Crane.crane_number,
            plant_models.Shed.name,
            plant_models.Shed.code,
        )
        .join(plant_models.Crane, MaintenanceTracking.crane_id == plant_models.Crane.id)
        .join(plant_models.Shed, plant_models.Crane.shed_id == plant_models.Shed.id)
        .where(
            MaintenanceTracking.department_code == code.value,
            MaintenanceTracking.year == year,
            MaintenanceTracking.month == month,
            plant_models.Crane.is_active.is_(True),
        )
        .order_by(plant_models.Shed.name, plant_models.Crane.crane_number)
    )
    with _store_operation("get_by_department", department_code=code.value, year=year, month=month):
        rows = db.execute(stmt).all()

    return [
        schemas.TrackedCraneRead(
            crane_id=record.crane_id,
            crane_number=crane_number,
            shed_name=shed_name,
            shed_code=shed_code,
            status=record.status,
            scheduled_start=record.scheduled_start,
            scheduled_end=record.scheduled_end,
            completed_date=record.completed_date,
            completed_in_reschedule=record.completed_in_reschedule,
            manually_marked=record.manually_marked,
            marked_by=record.marked_by,
            notes=record.notes,
        )
        for record, crane_number, shed_name, shed_code in rows
    ]


def get_summary(
    db: Session,
    *,
    department: windows.DepartmentLike,
    year: int,
    month: int,
) -> schemas.TrackingSummaryRead:
    code = maintenance_department(department)
    stmt = select(*_summary_columns()).where(
        MaintenanceTracking.department_code == code.value,
        MaintenanceTracking.year == year,
        MaintenanceTracking.month == month,
    )
    with _store_operation("get_summary", department_code=code.value, year=year, month=month):
        row = db.execute(stmt).one()
    return _summary_from_row(code.value, row)


def get_all_summaries(db: Session, *, year: int, month: int) -> List[schemas.TrackingSummaryRead]:
    """One summary per maintenance department, in workflow order."""
    stmt = (
        select(MaintenanceTracking.department_code, *_summary_columns())
        .where(MaintenanceTracking.year == year, MaintenanceTracking.month == month)
        .group_by(MaintenanceTracking.department_code)
    )
    with _store_operation("get_all_summaries", year=year, month=month):
        rows: Dict[str, object] = {row.department_code: row for row in db.execute(stmt).all()}

    return [
        _summary_from_row(code.value, rows.get(code.value))
        for code in windows.MAINTENANCE_DEPARTMENTS
    ]


def get_missed(db: Session, *, year: int, month: int) -> List[schemas.MissedCraneRead]:
    """Cranes still owing this month's inspection (MISSED or PENDING)."""
    stmt = (
        select(
            MaintenanceTracking,
            plant_models.Crane.crane_number,
            plant_models.Shed.name,
            plant_models.Department.name,
        )
        .join(plant_models.Crane, MaintenanceTracking.crane_id == plant_models.Crane.id)
        .join(plant_models.Shed, plant_models.Crane.shed_id == plant_models.Shed.id)
        .join(plant_models.Department, plant_models.Shed.department_id == plant_models.Department.id)
        .where(
            MaintenanceTracking.year == year,
            MaintenanceTracking.month == month,
            MaintenanceTracking.status.in_([TrackingStatusEnum.MISSED, TrackingStatusEnum.PENDING]),
            plant_models.Crane.is_active.is_(True),
        )
        .order_by(_department_order(), plant_models.Shed.name, plant_models.Crane.crane_number)
    )
    with _store_operation("get_missed", year=year, month=month):
        rows = db.execute(stmt).all()

    return [
        schemas.MissedCraneRead(
            tracking_id=record.id,
            crane_id=record.crane_id,
            crane_number=crane_number,
            department=record.department_code,
            department_name=department_name,
            shed_name=shed_name,
            status=record.status,
            original_window=schemas.OriginalWindowRead(
                start=record.scheduled_start,
                end=record.scheduled_end,
            ),
        )
        for record, crane_number, shed_name, department_name in rows
    ]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def _require_record(db: Session, *, crane_id: int, year: int, month: int) -> MaintenanceTracking:
    record = get_record(db, crane_id=crane_id, year=year, month=month)
    if record is None:
        raise RecordNotFoundError(crane_id, year, month)
    return record


def mark_completed(
    db: Session,
    *,
    crane_id: int,
    year: int,
    month: int,
    submission_ref: Optional[str],
    completed_at: Union[date, datetime],
) -> MaintenanceTracking:
    """
    Record an inspection for the month. Status is derived from the completion
    date only; the current status is not consulted (a MISSED crane inspected
    during catch-up becomes RESCHEDULED).
    """
    completed_on = _as_date(completed_at)
    in_catchup = windows.is_catchup_period(completed_on)

    with _store_operation("mark_completed", crane_id=crane_id, year=year, month=month):
        record = _require_record(db, crane_id=crane_id, year=year, month=month)
        previous = record.status
        record.status = TrackingStatusEnum.RESCHEDULED if in_catchup else TrackingStatusEnum.COMPLETED
        record.completed_date = completed_on
        record.completed_in_reschedule = in_catchup
        record.submission_ref = submission_ref
        db.flush()

    logger.info(
        "Maintenance completion recorded",
        extra={
            "crane_id": crane_id,
            "year": year,
            "month": month,
            "from_status": previous.value if previous else None,
            "to_status": record.status.value,
            "in_catchup": in_catchup,
        },
    )
    return record


def manual_override(
    db: Session,
    *,
    crane_id: int,
    year: int,
    month: int,
    status: Union[TrackingStatusEnum, str],
    actor: Optional[str],
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> MaintenanceTracking:
    """
    Administrator escape hatch: set any status unconditionally.

    - completed_in_reschedule follows the new status (True only for RESCHEDULED).
    - completed_date is stamped with `today` when completing and none exists.
    - notes=None keeps the existing notes.
    """
    new_status = coerce_status(status)
    stamp = today or date.today()

    with _store_operation("manual_override", crane_id=crane_id, year=year, month=month):
        record = _require_record(db, crane_id=crane_id, year=year, month=month)
        previous = record.status
        record.status = new_status
        record.manually_marked = True
        record.marked_by = actor
        if notes is not None:
            record.notes = notes
        record.completed_in_reschedule = new_status == TrackingStatusEnum.RESCHEDULED
        if new_status in COMPLETION_STATUSES and record.completed_date is None:
            record.completed_date = stamp
        db.flush()

    logger.info(
        "Maintenance status overridden",
        extra={
            "crane_id": crane_id,
            "year": year,
            "month": month,
            "actor": actor,
            "from_status": previous.value if previous else None,
            "to_status": new_status.value,
        },
    )
    return record


def sweep_expired(db: Session, *, as_of: Union[date, datetime]) -> SweepResult:
    """
    Demote PENDING rows of as_of's month to MISSED:
    - per department, once its window has fully elapsed;
    - every remaining PENDING row once the catch-up period has begun.

    Each update only touches rows still PENDING, so repeated or concurrent
    sweeps are harmless.
    """
    as_of = _as_date(as_of)
    year, month = as_of.year, as_of.month
    catchup_started = windows.is_catchup_period(as_of)
    expired = [
        code.value
        for code in windows.MAINTENANCE_DEPARTMENTS
        if windows.has_window_passed(code, as_of)
    ]

    conditions = [
        MaintenanceTracking.year == year,
        MaintenanceTracking.month == month,
        MaintenanceTracking.status == TrackingStatusEnum.PENDING,
    ]
    if not catchup_started:
        if not expired:
            return SweepResult(as_of=as_of)
        conditions.append(MaintenanceTracking.department_code.in_(expired))

    stmt = (
        update(MaintenanceTracking)
        .where(and_(*conditions))
        .values(status=TrackingStatusEnum.MISSED)
        .execution_options(synchronize_session="evaluate")
    )
    with _store_operation("sweep_expired", year=year, month=month):
        result = db.execute(stmt)
        db.flush()

    total_missed = result.rowcount or 0
    logger.info(
        "Expired maintenance windows swept",
        extra={
            "as_of": as_of.isoformat(),
            "expired_departments": expired,
            "catchup_started": catchup_started,
            "total_missed": total_missed,
        },
    )
    return SweepResult(
        as_of=as_of,
        expired_departments=expired,
        catchup_started=catchup_started,
        total_missed=total_missed,
    )
