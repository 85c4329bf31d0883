from datetime import date, datetime, timezone

import pytest

from cranedb.apps.maintenance_schedule import ledger, services
from cranedb.apps.maintenance_schedule.errors import InvalidDepartmentError, MachineNotFoundError
from cranedb.apps.maintenance_schedule.models import TrackingStatusEnum


def test_hbm_crane_inspected_inside_window(db_session, plant):
    crane_id = plant.cranes.hbm_1.id

    check = services.check_inspection_window(db_session, crane_id=crane_id, inspection_date=date(2025, 3, 9))
    assert check.allowed is True
    assert check.warning is None
    assert check.active_department == "HBM"

    record = services.on_inspection_recorded(
        db_session,
        crane_id=crane_id,
        submission_ref="INS-1001",
        recorded_at=datetime(2025, 3, 9, 14, 0),
    )
    assert record.status == TrackingStatusEnum.COMPLETED
    assert record.year == 2025 and record.month == 3
    assert record.scheduled_start == date(2025, 3, 6)
    assert record.scheduled_end == date(2025, 3, 12)


def test_hbm_crane_missed_then_rescheduled(db_session, plant):
    crane_id = plant.cranes.hbm_1.id
    services.initialize_month(db_session, year=2025, month=3)

    result = services.daily_maintenance(db_session, as_of=date(2025, 3, 13))
    assert "HBM" in result.expired_departments
    assert ledger.get_record(db_session, crane_id=crane_id, year=2025, month=3).status == TrackingStatusEnum.MISSED

    reschedule = services.get_missed_machines(db_session, year=2025, month=3)
    assert crane_id in [row.crane_id for row in reschedule.missed_cranes]
    assert reschedule.count == len(reschedule.missed_cranes)
    assert reschedule.reschedule_window.start_date == date(2025, 3, 24)
    assert reschedule.reschedule_window.end_date == date(2025, 3, 31)

    record = services.on_inspection_recorded(
        db_session,
        crane_id=crane_id,
        submission_ref="INS-2002",
        recorded_at=date(2025, 3, 27),
    )
    assert record.status == TrackingStatusEnum.RESCHEDULED
    assert record.completed_in_reschedule is True

    reschedule = services.get_missed_machines(db_session, year=2025, month=3)
    assert crane_id not in [row.crane_id for row in reschedule.missed_cranes]


def test_check_window_outside_department_window_warns(db_session, plant):
    check = services.check_inspection_window(
        db_session,
        crane_id=plant.cranes.hbm_1.id,
        inspection_date=date(2025, 3, 20),
    )
    assert check.allowed is False
    assert check.active_department == "PTM"
    assert check.crane_department == "HBM"
    assert "HBM" in check.warning
    assert "2025-03-06" in check.warning
    assert "2025-03-12" in check.warning


def test_check_window_catchup_is_allowed_for_everyone(db_session, plant):
    check = services.check_inspection_window(
        db_session,
        crane_id=plant.cranes.hsm_1.id,
        inspection_date=date(2025, 3, 28),
    )
    assert check.allowed is True
    assert check.is_catchup is True


def test_check_window_unknown_crane(db_session, plant):
    with pytest.raises(MachineNotFoundError):
        services.check_inspection_window(db_session, crane_id=424242, inspection_date=date(2025, 3, 9))


def test_inspection_timestamp_is_read_in_plant_time(db_session, plant, monkeypatch):
    monkeypatch.setattr(services, "SCHEDULE_TIMEZONE", "Asia/Kolkata")
    # 2025-03-31 20:00 UTC is 2025-04-01 01:30 in the plant.
    record = services.on_inspection_recorded(
        db_session,
        crane_id=plant.cranes.hsm_1.id,
        submission_ref=None,
        recorded_at=datetime(2025, 3, 31, 20, 0, tzinfo=timezone.utc),
    )
    assert (record.year, record.month) == (2025, 4)
    assert record.completed_date == date(2025, 4, 1)
    assert record.status == TrackingStatusEnum.COMPLETED


def test_department_status_initializes_month(db_session, plant):
    status = services.get_department_status(db_session, department="ptm", year=2025, month=5)
    assert status.department == "PTM"
    assert status.window.start_date == date(2025, 5, 13)
    assert status.window.end_date == date(2025, 5, 23)
    assert [crane.crane_number for crane in status.cranes] == ["PTM-01"]
    assert status.summary.total == 1
    assert status.summary.pending == 1


def test_department_status_rejects_unknown_department(db_session, plant):
    with pytest.raises(InvalidDepartmentError):
        services.get_department_status(db_session, department="XYZ", year=2025, month=5)


def test_calendar_view(db_session, plant):
    services.initialize_month(db_session, year=2024, month=2)
    calendar = services.get_calendar(db_session, year=2024, month=2)
    assert calendar.month_name == "February"
    assert len(calendar.schedule) == 29
    assert calendar.schedule[0].department == "HSM"
    assert calendar.schedule[-1].department == "CATCHUP"
    assert calendar.department_windows["CATCHUP"].end_date == date(2024, 2, 29)
    assert list(calendar.summaries) == ["HSM", "HBM", "PTM"]
    assert calendar.summaries["HSM"].total == 3


def test_active_window_for_given_date():
    active = services.get_active_window(date(2025, 3, 9))
    assert active.active_department == "HBM"
    assert active.window_start == 6
    assert active.window_end == 12
    assert active.is_catchup is False
    assert active.color.hex == "#10B981"


def test_mark_status_creates_record_and_overrides(db_session, plant, monkeypatch):
    monkeypatch.setattr(services, "plant_today", lambda: date(2025, 3, 15))
    record = services.mark_status(
        db_session,
        crane_id=plant.cranes.hsm_3.id,
        year=2025,
        month=3,
        status="RESCHEDULED",
        actor="planner-1",
        notes="Done during shutdown",
    )
    assert record.status == TrackingStatusEnum.RESCHEDULED
    assert record.completed_in_reschedule is True
    assert record.completed_date == date(2025, 3, 15)
    assert record.manually_marked is True
    assert record.marked_by == "planner-1"


def test_daily_maintenance_defaults_to_plant_today(db_session, plant, monkeypatch):
    monkeypatch.setattr(services, "plant_today", lambda: date(2025, 3, 24))
    services.initialize_month(db_session, year=2025, month=3)
    result = services.update_expired(db_session)
    assert result.as_of == date(2025, 3, 24)
    assert result.catchup_started is True
    assert result.total_missed == 6
