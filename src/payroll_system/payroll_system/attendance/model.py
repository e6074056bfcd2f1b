from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional


@dataclass(frozen=True)
class AttendanceEntry:
    """Thực thể miền (domain): Giờ vào/ra trong ngày của giáo viên."""

    attendance_id: int
    teacher_id: int
    work_date: date
    time_in: Optional[time]
    time_out: Optional[time]
    notes: str = ""


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model: tổng hợp chấm công theo tháng cho một giáo viên."""

    teacher_id: int
    teacher_name: str
    days_recorded: int
    days_complete: int
    total_minutes: int

    @property
    def total_hours(self) -> str:
        return f"{self.total_minutes // 60:02d}:{self.total_minutes % 60:02d}"
