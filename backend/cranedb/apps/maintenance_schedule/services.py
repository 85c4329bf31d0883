# backend/cranedb/apps/maintenance_schedule/services.py
#
# Business-facing layer over the calendar windows and the tracking ledger.
#
# Responsibilities:
# - Views used by the calendar screen, department dashboards and the
#   reschedule panel (calendar, department status, missed list, active window).
# - Advisory window checks for inspection submissions.
# - The single automatic transition: an inspection was recorded.
# - Administrator overrides and the daily expiry sweep.
#
# As in the ledger, nothing here commits; routers and jobs own the transaction.

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..plant import services as plant_services
from . import ledger, schemas, windows
from .errors import MachineNotFoundError
from .models import MaintenanceTracking, TrackingStatusEnum

logger = logging.getLogger(__name__)

# Plant-local timezone; "today" and naive-vs-aware timestamps resolve here.
SCHEDULE_TIMEZONE = os.getenv("SCHEDULE_TIMEZONE", "Asia/Kolkata")


def plant_today() -> date:
    return datetime.now(ZoneInfo(SCHEDULE_TIMEZONE)).date()


def _local_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(ZoneInfo(SCHEDULE_TIMEZONE))
        return value.date()
    return value


def _window_read(window: windows.DepartmentWindow) -> schemas.DepartmentWindowRead:
    return schemas.DepartmentWindowRead.model_validate(window)


# ---------------------------------------------------------------------------
# Calendar views
# ---------------------------------------------------------------------------


def get_calendar(db: Session, *, year: int, month: int) -> schemas.CalendarRead:
    schedule = [
        schemas.CalendarDayRead(
            day=day.day,
            on_date=day.date,
            department=day.department.value,
            color=windows.DEPARTMENT_COLORS[day.department]["hex"],
        )
        for day in windows.month_schedule(year, month)
    ]
    summaries = ledger.get_all_summaries(db, year=year, month=month)
    return schemas.CalendarRead(
        year=year,
        month=month,
        month_name=date(year, month, 1).strftime("%B"),
        schedule=schedule,
        department_windows={
            code.value: _window_read(window)
            for code, window in windows.all_department_windows(year, month).items()
        },
        department_colors={
            code.value: schemas.DepartmentColorRead(**colors)
            for code, colors in windows.DEPARTMENT_COLORS.items()
        },
        summaries={summary.department_code: summary for summary in summaries},
    )


def get_active_window(on_date: Optional[date] = None) -> schemas.ActiveWindowRead:
    status = windows.active_window_status(on_date or plant_today())
    colors = windows.DEPARTMENT_COLORS[status.active_department]
    return schemas.ActiveWindowRead(
        active_department=status.active_department.value,
        year=status.year,
        month=status.month,
        month_name=status.month_name,
        current_day=status.current_day,
        window_start=status.window.start_day,
        window_end=status.window.end_day,
        window_start_date=status.window.start_date,
        window_end_date=status.window.end_date,
        is_catchup=status.is_catchup,
        color=schemas.DepartmentColorRead(**colors),
    )


def get_department_status(
    db: Session,
    *,
    department: windows.DepartmentLike,
    year: int,
    month: int,
) -> schemas.DepartmentStatusRead:
    """
    Department dashboard. Initialises the month first so cranes added since
    the last initialisation show up as PENDING.
    """
    code = ledger.maintenance_department(department)
    window = windows.department_window(code, year, month)
    ledger.initialize_month(db, year=year, month=month)
    cranes = ledger.get_by_department(db, department=code, year=year, month=month)
    summary = ledger.get_summary(db, department=code, year=year, month=month)
    return schemas.DepartmentStatusRead(
        department=code.value,
        year=year,
        month=month,
        window=_window_read(window),
        summary=summary,
        cranes=cranes,
    )


def get_missed_machines(db: Session, *, year: int, month: int) -> schemas.RescheduleListRead:
    catchup = windows.department_window(windows.DepartmentCode.CATCHUP, year, month)
    missed = ledger.get_missed(db, year=year, month=month)
    return schemas.RescheduleListRead(
        year=year,
        month=month,
        reschedule_window=_window_read(catchup),
        missed_cranes=missed,
        count=len(missed),
    )


def get_crane_status(db: Session, *, crane_id: int, year: int, month: int) -> MaintenanceTracking:
    return ledger.ensure_exists(db, crane_id=crane_id, year=year, month=month)


# ---------------------------------------------------------------------------
# Inspection events
# ---------------------------------------------------------------------------


def check_inspection_window(
    db: Session,
    *,
    crane_id: int,
    inspection_date: Optional[Union[date, datetime]] = None,
) -> schemas.WindowCheckRead:
    """
    Is an inspection of `crane_id` on `inspection_date` inside the crane's
    department window (or the catch-up period)? Advisory only.
    """
    checked_on = _local_date(inspection_date) if inspection_date else plant_today()

    crane_department = plant_services.get_machine_department(db, crane_id)
    if crane_department is None:
        raise MachineNotFoundError(crane_id)

    code = windows.coerce_department(crane_department)
    active = windows.resolve_department_for_date(checked_on)
    allowed = windows.is_in_window(checked_on, code)
    crane_window = windows.department_window(code, checked_on.year, checked_on.month)

    warning = None
    if not allowed:
        warning = (
            f"This crane belongs to {code.value} department. The maintenance window "
            f"for {code.value} is {crane_window.start_date.isoformat()} to "
            f"{crane_window.end_date.isoformat()}."
        )
        logger.info(
            "Inspection outside department window",
            extra={"crane_id": crane_id, "active_department": active.value, "crane_department": code.value},
        )

    return schemas.WindowCheckRead(
        crane_id=crane_id,
        crane_department=code.value,
        inspection_date=checked_on,
        active_department=active.value,
        allowed=allowed,
        is_catchup=active == windows.DepartmentCode.CATCHUP,
        crane_window=_window_read(crane_window),
        warning=warning,
    )


def on_inspection_recorded(
    db: Session,
    *,
    crane_id: int,
    submission_ref: Optional[str],
    recorded_at: Union[date, datetime],
) -> MaintenanceTracking:
    """Mark the crane's month as done; the month is taken from `recorded_at`."""
    recorded_on = _local_date(recorded_at)
    ledger.ensure_exists(db, crane_id=crane_id, year=recorded_on.year, month=recorded_on.month)
    return ledger.mark_completed(
        db,
        crane_id=crane_id,
        year=recorded_on.year,
        month=recorded_on.month,
        submission_ref=submission_ref,
        completed_at=recorded_on,
    )


# ---------------------------------------------------------------------------
# Administration / operations
# ---------------------------------------------------------------------------


def mark_status(
    db: Session,
    *,
    crane_id: int,
    year: int,
    month: int,
    status: Union[TrackingStatusEnum, str],
    actor: Optional[str],
    notes: Optional[str] = None,
) -> MaintenanceTracking:
    status = ledger.coerce_status(status)
    ledger.ensure_exists(db, crane_id=crane_id, year=year, month=month)
    return ledger.manual_override(
        db,
        crane_id=crane_id,
        year=year,
        month=month,
        status=status,
        actor=actor,
        notes=notes,
        today=plant_today(),
    )


def initialize_month(db: Session, *, year: int, month: int) -> ledger.InitializeMonthResult:
    return ledger.initialize_month(db, year=year, month=month)


def daily_maintenance(db: Session, *, as_of: Optional[date] = None) -> ledger.SweepResult:
    """
    Expiry sweep for one calendar day. Meant to run once a day, but safe to
    repeat: the sweep only touches rows that are still PENDING.
    """
    return ledger.sweep_expired(db, as_of=as_of or plant_today())


update_expired = daily_maintenance
