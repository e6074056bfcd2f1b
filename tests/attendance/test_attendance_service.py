from __future__ import annotations

from datetime import date, time

import pytest

from src.payroll_system.payroll_system.attendance.calculator.base import WorkedTimeCalculator
from src.payroll_system.payroll_system.attendance.service import AttendanceService
from src.payroll_system.payroll_system.core.enums import TeacherStatus
from src.payroll_system.payroll_system.core.exceptions import NotFoundError, ValidationError
from tests.fakes import InMemoryAttendance, InMemoryTeachers, make_teacher


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def service(attendance) -> AttendanceService:
    teachers = InMemoryTeachers(
        make_teacher(1, name="Ayesha"),
        make_teacher(2, name="Bilal"),
        make_teacher(3, name="Left", status=TeacherStatus.INACTIVE),
    )
    return AttendanceService(attendance, teachers)


def test_record_parses_times(service, attendance):
    attendance_id = service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="08:00", time_out="13:15:00")

    entry = attendance.by_id[attendance_id]
    assert entry.time_in == time(8, 0)
    assert entry.time_out == time(13, 15)


def test_record_validation(service):
    with pytest.raises(ValidationError, match="Select a teacher"):
        service.record(teacher_id=None, work_date=date(2025, 3, 3))
    with pytest.raises(NotFoundError):
        service.record(teacher_id=9, work_date=date(2025, 3, 3))
    with pytest.raises(ValidationError, match="inactive"):
        service.record(teacher_id=3, work_date=date(2025, 3, 3))
    with pytest.raises(ValidationError, match="HH:MM"):
        service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="8am")
    with pytest.raises(ValidationError, match="before"):
        service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="10:00", time_out="09:00")


def test_one_entry_per_teacher_per_day(service):
    service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="08:00")

    with pytest.raises(ValidationError, match="already recorded"):
        service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="09:00")


def test_update_keeps_unspecified_fields(service, attendance):
    attendance_id = service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="08:00", notes="late bus")

    service.update(attendance_id=attendance_id, time_out="12:00")

    entry = attendance.by_id[attendance_id]
    assert entry.time_in == time(8, 0)
    assert entry.time_out == time(12, 0)
    assert entry.notes == "late bus"
    with pytest.raises(ValidationError):
        service.update(attendance_id=attendance_id, time_out="07:00")
    with pytest.raises(NotFoundError):
        service.update(attendance_id=99, time_out="12:00")


def test_list_month_formats_rows(service):
    service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="08:00", time_out="12:30")
    service.record(teacher_id=1, work_date=date(2025, 4, 1), time_in="08:00", time_out="12:30")

    rows = service.list_month(month="2025-03")

    assert rows == [
        {
            "attendance_id": 1,
            "teacher_id": 1,
            "date": "2025-03-03",
            "time_in": "08:00",
            "time_out": "12:30",
            "worked_hours": "04:30",
            "notes": "",
        }
    ]


def test_monthly_summary_sorted_by_worked_time(service):
    service.record(teacher_id=1, work_date=date(2025, 3, 3), time_in="08:00", time_out="10:00")
    service.record(teacher_id=2, work_date=date(2025, 3, 3), time_in="08:00", time_out="14:00")
    service.record(teacher_id=2, work_date=date(2025, 3, 4), time_in="08:00")

    summary = service.monthly_summary(month="2025-03")

    assert [s.teacher_name for s in summary] == ["Bilal", "Ayesha"]
    assert summary[0].days_recorded == 2
    assert summary[0].days_complete == 1
    assert summary[0].total_hours == "06:00"


def test_custom_calculator_is_used(attendance):
    class FlatCalculator(WorkedTimeCalculator):
        def worked_minutes(self, entry):
            return 60

    service = AttendanceService(attendance, InMemoryTeachers(make_teacher()), calculator=FlatCalculator())
    service.record(teacher_id=1, work_date=date(2025, 3, 3))

    assert service.monthly_summary(month="2025-03")[0].total_minutes == 60
