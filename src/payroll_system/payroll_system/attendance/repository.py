from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def get_for_teacher_and_date(self, teacher_id: int, work_date: date) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        work_date: date,
        time_in: Optional[time],
        time_out: Optional[time],
        notes: str = "",
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        attendance_id: int,
        time_in: Optional[time],
        time_out: Optional[time],
        notes: str = "",
    ) -> bool:
        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        teacher_id: Optional[int] = None,
    ) -> Sequence[AttendanceEntry]:
        raise NotImplementedError
