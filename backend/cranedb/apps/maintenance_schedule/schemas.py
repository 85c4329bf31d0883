# backend/cranedb/apps/maintenance_schedule/schemas.py
#
# Schemas for the maintenance schedule module:
# - Calendar / window views (pure calendar arithmetic).
# - Tracking records, department status lists and summaries.
# - Request bodies for overrides, month initialisation and inspection hooks.

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import TrackingStatusEnum


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


class DepartmentWindowRead(BaseModel):
    start_day: int
    end_day: int
    start_date: date
    end_date: date

    model_config = ConfigDict(from_attributes=True)


class DepartmentColorRead(BaseModel):
    bg: str
    text: str
    border: str
    hex: str


class CalendarDayRead(BaseModel):
    day: int
    on_date: date
    department: str
    color: Optional[str] = None


class TrackingSummaryRead(BaseModel):
    department_code: str
    total: int = 0
    completed: int = 0
    pending: int = 0
    missed: int = 0
    rescheduled: int = 0


class CalendarRead(BaseModel):
    year: int
    month: int
    month_name: str
    schedule: List[CalendarDayRead]
    department_windows: Dict[str, DepartmentWindowRead]
    department_colors: Dict[str, DepartmentColorRead]
    summaries: Dict[str, TrackingSummaryRead]


class ActiveWindowRead(BaseModel):
    active_department: str
    year: int
    month: int
    month_name: str
    current_day: int
    window_start: int
    window_end: int
    window_start_date: date
    window_end_date: date
    is_catchup: bool
    color: Optional[DepartmentColorRead] = None


class WindowCheckRead(BaseModel):
    """
    Advisory result: out-of-window inspections are flagged, never blocked.
    """

    crane_id: int
    crane_department: str
    inspection_date: date
    active_department: str
    allowed: bool
    is_catchup: bool
    crane_window: DepartmentWindowRead
    warning: Optional[str] = None


# ---------------------------------------------------------------------------
# Tracking records
# ---------------------------------------------------------------------------


class TrackingRecordRead(BaseModel):
    id: int
    crane_id: int
    department_code: str
    year: int
    month: int
    status: TrackingStatusEnum
    scheduled_start: date
    scheduled_end: date
    completed_date: Optional[date] = None
    completed_in_reschedule: bool = False
    submission_ref: Optional[str] = None
    manually_marked: bool = False
    marked_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TrackedCraneRead(BaseModel):
    crane_id: int
    crane_number: str
    shed_name: str
    shed_code: Optional[str] = None
    status: TrackingStatusEnum
    scheduled_start: date
    scheduled_end: date
    completed_date: Optional[date] = None
    completed_in_reschedule: bool = False
    manually_marked: bool = False
    marked_by: Optional[str] = None
    notes: Optional[str] = None


class DepartmentStatusRead(BaseModel):
    department: str
    year: int
    month: int
    window: DepartmentWindowRead
    summary: TrackingSummaryRead
    cranes: List[TrackedCraneRead]


class OriginalWindowRead(BaseModel):
    start: date
    end: date


class MissedCraneRead(BaseModel):
    tracking_id: int
    crane_id: int
    crane_number: str
    department: str
    department_name: str
    shed_name: str
    status: TrackingStatusEnum
    original_window: OriginalWindowRead


class RescheduleListRead(BaseModel):
    year: int
    month: int
    reschedule_window: DepartmentWindowRead
    missed_cranes: List[MissedCraneRead]
    count: int


# ---------------------------------------------------------------------------
# Requests / operation results
# ---------------------------------------------------------------------------


class MarkStatusRequest(BaseModel):
    crane_id: int
    year: int = Field(ge=2020, le=2100)
    month: int = Field(ge=1, le=12)
    status: TrackingStatusEnum
    notes: Optional[str] = None


class InitializeMonthRequest(BaseModel):
    year: Optional[int] = Field(default=None, ge=2020, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)


class InitializeMonthResultRead(BaseModel):
    year: int
    month: int
    created_count: int
    total_cranes: int
    skipped_count: int

    model_config = ConfigDict(from_attributes=True)


class UpdateExpiredRequest(BaseModel):
    as_of: Optional[date] = None


class SweepResultRead(BaseModel):
    as_of: date
    expired_departments: List[str]
    catchup_started: bool
    total_missed: int

    model_config = ConfigDict(from_attributes=True)


class InspectionRecordedRequest(BaseModel):
    """Sent by the inspection module after a submission is stored."""

    crane_id: int
    submission_ref: Optional[str] = Field(default=None, max_length=64)
    recorded_at: datetime
