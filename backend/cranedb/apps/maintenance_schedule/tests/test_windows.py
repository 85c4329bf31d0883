from datetime import date, datetime

import pytest

from cranedb.apps.maintenance_schedule import windows
from cranedb.apps.maintenance_schedule.errors import InvalidDepartmentError
from cranedb.apps.maintenance_schedule.windows import DepartmentCode


@pytest.mark.parametrize(
    "day, expected",
    [
        (1, DepartmentCode.HSM),
        (5, DepartmentCode.HSM),
        (6, DepartmentCode.HBM),
        (12, DepartmentCode.HBM),
        (13, DepartmentCode.PTM),
        (23, DepartmentCode.PTM),
        (24, DepartmentCode.CATCHUP),
        (31, DepartmentCode.CATCHUP),
    ],
)
def test_resolve_department_boundaries(day, expected):
    assert windows.resolve_department_for_date(date(2025, 3, day)) == expected


def test_every_day_of_a_month_resolves_to_one_department():
    schedule = windows.month_schedule(2025, 1)
    assert [entry.day for entry in schedule] == list(range(1, 32))
    counts = {}
    for entry in schedule:
        counts[entry.department] = counts.get(entry.department, 0) + 1
    assert counts == {
        DepartmentCode.HSM: 5,
        DepartmentCode.HBM: 7,
        DepartmentCode.PTM: 11,
        DepartmentCode.CATCHUP: 8,
    }


def test_resolve_accepts_datetimes():
    assert windows.resolve_department_for_date(datetime(2025, 3, 9, 23, 59)) == DepartmentCode.HBM


@pytest.mark.parametrize(
    "year, month, days",
    [(2024, 2, 29), (2023, 2, 28), (2025, 4, 30), (2025, 12, 31)],
)
def test_last_day_of_month(year, month, days):
    assert windows.last_day_of_month(year, month) == days


def test_catchup_window_tracks_month_length():
    leap = windows.department_window("CATCHUP", 2024, 2)
    assert (leap.start_day, leap.end_day) == (24, 29)
    assert leap.end_date == date(2024, 2, 29)

    short = windows.department_window(DepartmentCode.CATCHUP, 2023, 2)
    assert short.end_date == date(2023, 2, 28)


def test_department_window_dates():
    window = windows.department_window("hbm", 2025, 3)
    assert window.department == DepartmentCode.HBM
    assert window.start_date == date(2025, 3, 6)
    assert window.end_date == date(2025, 3, 12)
    assert window.contains(date(2025, 3, 9))
    assert not window.contains(date(2025, 3, 13))


def test_unknown_department_is_rejected():
    with pytest.raises(InvalidDepartmentError):
        windows.department_window("XYZ", 2025, 3)
    with pytest.raises(ValueError):
        windows.coerce_department("")
    assert not windows.is_maintenance_department("FAB")
    assert not windows.is_maintenance_department("CATCHUP")
    assert windows.is_maintenance_department(" ptm ")


def test_is_in_window_own_window_and_catchup():
    assert windows.is_in_window(date(2025, 3, 9), "HBM")
    assert not windows.is_in_window(date(2025, 3, 20), "HBM")
    assert not windows.is_in_window(date(2025, 3, 3), "HBM")
    for code in windows.MAINTENANCE_DEPARTMENTS:
        assert windows.is_in_window(date(2025, 3, 27), code)


def test_has_window_passed():
    assert not windows.has_window_passed("HSM", date(2025, 3, 5))
    assert windows.has_window_passed("HSM", date(2025, 3, 6))
    assert not windows.has_window_passed("PTM", date(2025, 3, 23))
    assert windows.has_window_passed("PTM", date(2025, 3, 24))


def test_all_department_windows_covers_catchup():
    result = windows.all_department_windows(2025, 3)
    assert list(result) == [
        DepartmentCode.HSM,
        DepartmentCode.HBM,
        DepartmentCode.PTM,
        DepartmentCode.CATCHUP,
    ]
    assert result[DepartmentCode.CATCHUP].end_day == 31


def test_active_window_status():
    status = windows.active_window_status(date(2025, 3, 27))
    assert status.is_catchup
    assert status.month_name == "March"
    assert status.current_day == 27
    assert status.window.start_date == date(2025, 3, 24)
    assert status.window.end_date == date(2025, 3, 31)

    status = windows.active_window_status(date(2025, 3, 2))
    assert status.active_department == DepartmentCode.HSM
    assert not status.is_catchup


def test_every_department_has_colors():
    for code in DepartmentCode:
        assert set(windows.DEPARTMENT_COLORS[code]) == {"bg", "text", "border", "hex"}
