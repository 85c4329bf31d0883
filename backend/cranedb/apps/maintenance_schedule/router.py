# backend/cranedb/apps/maintenance_schedule/router.py

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db
from ...security import SCHEDULE_ADMIN_ROLES, CurrentActor, require_roles
from . import services
from .errors import (
    ConstraintViolationError,
    InvalidDepartmentError,
    InvalidStatusError,
    MachineNotFoundError,
    RecordNotFoundError,
)
from .schemas import (
    ActiveWindowRead,
    CalendarRead,
    DepartmentStatusRead,
    InitializeMonthRequest,
    InitializeMonthResultRead,
    InspectionRecordedRequest,
    MarkStatusRequest,
    RescheduleListRead,
    SweepResultRead,
    TrackingRecordRead,
    UpdateExpiredRequest,
    WindowCheckRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/maintenance-schedule",
    tags=["maintenance_schedule"],
)


@contextmanager
def _handle_errors(db: Session, action: str) -> Iterator[None]:
    """
    Map domain errors to HTTP responses and roll back the request's work.
    Anything unexpected becomes an explicit 500, never an empty result.
    """
    try:
        yield
    except HTTPException:
        db.rollback()
        raise
    except (MachineNotFoundError, RecordNotFoundError) as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except (InvalidDepartmentError, InvalidStatusError) as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except ConstraintViolationError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{exc}; retry the request")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Maintenance schedule request failed", extra={"action": action})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}",
        )


def _resolve_period(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    today = services.plant_today()
    return (year or today.year, month or today.month)


# ---------------------------------------------------------------------------
# Calendar + status views
# ---------------------------------------------------------------------------


@router.get("/calendar", response_model=CalendarRead)
def get_calendar(
    year: Optional[int] = Query(default=None, ge=2020, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> CalendarRead:
    target_year, target_month = _resolve_period(year, month)
    with _handle_errors(db, "fetch calendar data"):
        return services.get_calendar(db, year=target_year, month=target_month)


@router.get("/status", response_model=DepartmentStatusRead)
def get_department_status(
    department_code: str,
    year: Optional[int] = Query(default=None, ge=2020, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> DepartmentStatusRead:
    target_year, target_month = _resolve_period(year, month)
    with _handle_errors(db, "fetch department status"):
        result = services.get_department_status(
            db,
            department=department_code,
            year=target_year,
            month=target_month,
        )
        db.commit()
    return result


@router.get("/reschedule", response_model=RescheduleListRead)
def get_reschedule_cranes(
    year: Optional[int] = Query(default=None, ge=2020, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> RescheduleListRead:
    target_year, target_month = _resolve_period(year, month)
    with _handle_errors(db, "fetch reschedule cranes"):
        return services.get_missed_machines(db, year=target_year, month=target_month)


@router.get("/active-window", response_model=ActiveWindowRead)
def get_active_window(on_date: Optional[date] = None) -> ActiveWindowRead:
    return services.get_active_window(on_date)


@router.get("/check-window", response_model=WindowCheckRead)
def check_window(
    crane_id: int,
    inspection_date: Optional[date] = None,
    db: Session = Depends(get_db),
) -> WindowCheckRead:
    with _handle_errors(db, "check window"):
        return services.check_inspection_window(
            db,
            crane_id=crane_id,
            inspection_date=inspection_date,
        )


@router.get("/crane/{crane_id}", response_model=TrackingRecordRead)
def get_crane_status(
    crane_id: int,
    year: Optional[int] = Query(default=None, ge=2020, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
) -> TrackingRecordRead:
    target_year, target_month = _resolve_period(year, month)
    with _handle_errors(db, "fetch crane status"):
        record = services.get_crane_status(db, crane_id=crane_id, year=target_year, month=target_month)
        db.commit()
        db.refresh(record)
    return TrackingRecordRead.model_validate(record)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


@router.post("/mark-status", response_model=TrackingRecordRead)
def mark_status(
    payload: MarkStatusRequest,
    db: Session = Depends(get_db),
    current_actor: CurrentActor = Depends(require_roles(*SCHEDULE_ADMIN_ROLES)),
) -> TrackingRecordRead:
    with _handle_errors(db, "update status"):
        record = services.mark_status(
            db,
            crane_id=payload.crane_id,
            year=payload.year,
            month=payload.month,
            status=payload.status,
            actor=current_actor.id,
            notes=payload.notes,
        )
        db.commit()
        db.refresh(record)
    return TrackingRecordRead.model_validate(record)


@router.post("/initialize", response_model=InitializeMonthResultRead)
def initialize_month(
    payload: Optional[InitializeMonthRequest] = None,
    db: Session = Depends(get_db),
    current_actor: CurrentActor = Depends(require_roles(*SCHEDULE_ADMIN_ROLES)),
) -> InitializeMonthResultRead:
    payload = payload or InitializeMonthRequest()
    target_year, target_month = _resolve_period(payload.year, payload.month)
    with _handle_errors(db, "initialize month tracking"):
        result = services.initialize_month(db, year=target_year, month=target_month)
        db.commit()
    return InitializeMonthResultRead.model_validate(result)


@router.post("/update-expired", response_model=SweepResultRead)
def update_expired(
    payload: Optional[UpdateExpiredRequest] = None,
    db: Session = Depends(get_db),
    current_actor: CurrentActor = Depends(require_roles(*SCHEDULE_ADMIN_ROLES)),
) -> SweepResultRead:
    as_of = payload.as_of if payload else None
    with _handle_errors(db, "update expired statuses"):
        result = services.update_expired(db, as_of=as_of)
        db.commit()
    return SweepResultRead.model_validate(result)


@router.post(
    "/inspections/recorded",
    response_model=TrackingRecordRead,
    status_code=status.HTTP_200_OK,
)
def inspection_recorded(
    payload: InspectionRecordedRequest,
    db: Session = Depends(get_db),
) -> TrackingRecordRead:
    """
    Hook for the inspection module: a submission for this crane was stored.
    """
    with _handle_errors(db, "record inspection"):
        record = services.on_inspection_recorded(
            db,
            crane_id=payload.crane_id,
            submission_ref=payload.submission_ref,
            recorded_at=payload.recorded_at,
        )
        db.commit()
        db.refresh(record)
    return TrackingRecordRead.model_validate(record)
