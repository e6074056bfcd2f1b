from __future__ import annotations

from datetime import datetime

from ..model import AttendanceEntry
from .base import WorkedTimeCalculator


class StandardWorkedTimeCalculator(WorkedTimeCalculator):
    """Standard rule: out - in, not below 0; 0 when a timing is missing."""

    def worked_minutes(self, entry: AttendanceEntry) -> int:
        if not entry.time_in or not entry.time_out:
            return 0
        start = datetime.combine(entry.work_date, entry.time_in)
        end = datetime.combine(entry.work_date, entry.time_out)
        minutes = int((end - start).total_seconds() // 60)
        return max(minutes, 0)
