from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_month
from ..core.exceptions import NotFoundError, ValidationError
from ..teachers.repository import TeacherRepository
from .calculator.base import WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .model import AttendanceEntry, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        teachers: TeacherRepository,
        *,
        calculator: Optional[WorkedTimeCalculator] = None,
    ):
        self._attendance = attendance
        self._teachers = teachers
        self._calculator = calculator or StandardWorkedTimeCalculator()

    @staticmethod
    def _parse_time(value) -> Optional[time]:
        if isinstance(value, time) or value is None:
            return value
        try:
            return parse_hhmm(value)
        except ValueError:
            raise ValidationError("Invalid time (HH:MM)")

    @staticmethod
    def _check_order(time_in: Optional[time], time_out: Optional[time]) -> None:
        if time_in and time_out and time_out < time_in:
            raise ValidationError("Time out cannot be before time in")

    def record(
        self,
        *,
        teacher_id: int,
        work_date: date,
        time_in=None,
        time_out=None,
        notes: str = "",
    ) -> int:
        if not teacher_id:
            raise ValidationError("Select a teacher")
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        if not teacher.is_active:
            raise ValidationError("Teacher is inactive")

        t_in = self._parse_time(time_in)
        t_out = self._parse_time(time_out)
        self._check_order(t_in, t_out)

        if self._attendance.get_for_teacher_and_date(teacher.teacher_id, work_date):
            raise ValidationError("Attendance already recorded for this date")

        attendance_id = self._attendance.create(
            teacher_id=teacher.teacher_id,
            work_date=work_date,
            time_in=t_in,
            time_out=t_out,
            notes=(notes or "").strip(),
        )
        logger.debug("attendance %s recorded for teacher %s on %s", attendance_id, teacher.teacher_id, work_date)
        return attendance_id

    def update(self, *, attendance_id: int, time_in=None, time_out=None, notes: Optional[str] = None) -> None:
        entry = self._attendance.get_by_id(int(attendance_id))
        if not entry:
            raise NotFoundError("Attendance record not found")

        t_in = self._parse_time(time_in) if time_in is not None else entry.time_in
        t_out = self._parse_time(time_out) if time_out is not None else entry.time_out
        self._check_order(t_in, t_out)

        self._attendance.update(
            attendance_id=entry.attendance_id,
            time_in=t_in,
            time_out=t_out,
            notes=notes.strip() if notes is not None else entry.notes,
        )

    def list_month(self, *, month, teacher_id: Optional[int] = None) -> list[dict]:
        month = require_month(month)
        entries = self._attendance.list_range(
            start_date=month.first_day(),
            end_date=month.last_day(),
            teacher_id=int(teacher_id) if teacher_id is not None else None,
        )
        return [self._to_ui(e) for e in entries]

    def monthly_summary(self, *, month) -> list[AttendanceSummary]:
        month = require_month(month)
        entries = self._attendance.list_range(start_date=month.first_day(), end_date=month.last_day())
        names = {t.teacher_id: t.name for t in self._teachers.list_all()}

        totals: dict[int, dict] = {}
        for e in entries:
            s = totals.get(e.teacher_id)
            if not s:
                s = {"days_recorded": 0, "days_complete": 0, "total_minutes": 0}
                totals[e.teacher_id] = s
            s["days_recorded"] += 1
            if e.time_in and e.time_out:
                s["days_complete"] += 1
            s["total_minutes"] += self._calculator.worked_minutes(e)

        summary = [
            AttendanceSummary(
                teacher_id=teacher_id,
                teacher_name=names.get(teacher_id, "Unknown"),
                days_recorded=s["days_recorded"],
                days_complete=s["days_complete"],
                total_minutes=s["total_minutes"],
            )
            for teacher_id, s in totals.items()
        ]
        summary.sort(key=lambda x: x.total_minutes, reverse=True)
        return summary

    def _to_ui(self, e: AttendanceEntry) -> dict:
        minutes = self._calculator.worked_minutes(e)
        return {
            "attendance_id": e.attendance_id,
            "teacher_id": e.teacher_id,
            "date": e.work_date.strftime("%Y-%m-%d"),
            "time_in": e.time_in.strftime("%H:%M") if e.time_in else "-",
            "time_out": e.time_out.strftime("%H:%M") if e.time_out else "-",
            "worked_hours": f"{minutes // 60:02d}:{minutes % 60:02d}",
            "notes": e.notes,
        }
