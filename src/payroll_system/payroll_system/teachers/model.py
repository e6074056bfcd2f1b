from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import TeacherStatus


@dataclass(frozen=True)
class Teacher:
    """Thực thể miền (domain): Giáo viên.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    teacher_id: int
    name: str
    monthly_salary: Decimal
    status: TeacherStatus = TeacherStatus.ACTIVE
    contact: str = ""
    cnic: str = ""
    joining_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status == TeacherStatus.ACTIVE
