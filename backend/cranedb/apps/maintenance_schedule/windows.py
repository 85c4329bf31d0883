# backend/cranedb/apps/maintenance_schedule/windows.py
#
# Calendar arithmetic for the monthly maintenance rota.
#
# Every month is split into fixed day-of-month windows:
#   days  1-5   -> HSM
#   days  6-12  -> HBM
#   days 13-23  -> PTM
#   days 24-end -> CATCHUP (shared reschedule period, 5-8 days long)
#
# Everything here is a pure function of its arguments: no I/O, no clock.

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Union

from .errors import InvalidDepartmentError


class DepartmentCode(str, Enum):
    HSM = "HSM"
    HBM = "HBM"
    PTM = "PTM"
    CATCHUP = "CATCHUP"  # pseudo-department: shared reschedule period


class DayRange(NamedTuple):
    start_day: int
    end_day: int


# Fixed windows. Order is the workflow order used for summaries and listings.
DEPARTMENT_SCHEDULE: Dict[DepartmentCode, DayRange] = {
    DepartmentCode.HSM: DayRange(1, 5),
    DepartmentCode.HBM: DayRange(6, 12),
    DepartmentCode.PTM: DayRange(13, 23),
}

MAINTENANCE_DEPARTMENTS: List[DepartmentCode] = list(DEPARTMENT_SCHEDULE)

CATCHUP_START_DAY = 24

DEPARTMENT_COLORS: Dict[DepartmentCode, Dict[str, str]] = {
    DepartmentCode.HSM: {"bg": "bg-blue-100", "text": "text-blue-800", "border": "border-blue-300", "hex": "#3B82F6"},
    DepartmentCode.HBM: {"bg": "bg-green-100", "text": "text-green-800", "border": "border-green-300", "hex": "#10B981"},
    DepartmentCode.PTM: {"bg": "bg-orange-100", "text": "text-orange-800", "border": "border-orange-300", "hex": "#F97316"},
    DepartmentCode.CATCHUP: {"bg": "bg-purple-100", "text": "text-purple-800", "border": "border-purple-300", "hex": "#8B5CF6"},
}

DepartmentLike = Union[DepartmentCode, str]


@dataclass(frozen=True)
class DepartmentWindow:
    department: DepartmentCode
    start_day: int
    end_day: int
    start_date: date
    end_date: date

    def contains(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date


@dataclass(frozen=True)
class ScheduleDay:
    day: int
    date: date
    department: DepartmentCode


@dataclass(frozen=True)
class ActiveWindowStatus:
    active_department: DepartmentCode
    year: int
    month: int
    month_name: str
    current_day: int
    window: DepartmentWindow

    @property
    def is_catchup(self) -> bool:
        return self.active_department == DepartmentCode.CATCHUP


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def coerce_department(value: DepartmentLike) -> DepartmentCode:
    """Normalise a department code; unknown codes raise InvalidDepartmentError."""
    if isinstance(value, DepartmentCode):
        return value
    try:
        return DepartmentCode(str(value).strip().upper())
    except ValueError:
        raise InvalidDepartmentError(value) from None


def is_maintenance_department(value: DepartmentLike) -> bool:
    try:
        return coerce_department(value) in DEPARTMENT_SCHEDULE
    except InvalidDepartmentError:
        return False


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in (year, month); month is 1-indexed."""
    return calendar.monthrange(year, month)[1]


def resolve_department_for_date(value: Union[date, datetime]) -> DepartmentCode:
    day = _as_date(value).day
    for department, day_range in DEPARTMENT_SCHEDULE.items():
        if day_range.start_day <= day <= day_range.end_day:
            return department
    return DepartmentCode.CATCHUP


def department_window(department: DepartmentLike, year: int, month: int) -> DepartmentWindow:
    code = coerce_department(department)
    if code == DepartmentCode.CATCHUP:
        start_day, end_day = CATCHUP_START_DAY, last_day_of_month(year, month)
    else:
        start_day, end_day = DEPARTMENT_SCHEDULE[code]
    return DepartmentWindow(
        department=code,
        start_day=start_day,
        end_day=end_day,
        start_date=date(year, month, start_day),
        end_date=date(year, month, end_day),
    )


def all_department_windows(year: int, month: int) -> Dict[DepartmentCode, DepartmentWindow]:
    return {code: department_window(code, year, month) for code in DepartmentCode}


def is_catchup_period(value: Union[date, datetime]) -> bool:
    return resolve_department_for_date(value) == DepartmentCode.CATCHUP


def is_in_window(value: Union[date, datetime], department: DepartmentLike) -> bool:
    """
    True when `value` falls in `department`'s own window or in the catch-up
    period, which counts for every department.
    """
    code = coerce_department(department)
    active = resolve_department_for_date(value)
    return active == code or active == DepartmentCode.CATCHUP


def has_window_passed(department: DepartmentLike, as_of: Union[date, datetime]) -> bool:
    """True once the department's window in as_of's month has fully elapsed."""
    as_of = _as_date(as_of)
    window = department_window(department, as_of.year, as_of.month)
    return as_of.day > window.end_day


def month_schedule(year: int, month: int) -> List[ScheduleDay]:
    schedule = []
    for day in range(1, last_day_of_month(year, month) + 1):
        current = date(year, month, day)
        schedule.append(
            ScheduleDay(day=day, date=current, department=resolve_department_for_date(current))
        )
    return schedule


def active_window_status(value: Union[date, datetime]) -> ActiveWindowStatus:
    value = _as_date(value)
    active = resolve_department_for_date(value)
    return ActiveWindowStatus(
        active_department=active,
        year=value.year,
        month=value.month,
        month_name=calendar.month_name[value.month],
        current_day=value.day,
        window=department_window(active, value.year, value.month),
    )
