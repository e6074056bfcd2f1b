from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import TeacherStatus
from .model import Teacher


class TeacherRepository(Protocol):
    """Giao diện repository cho Teacher.

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực tiếp DB cụ thể.
    """

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def list_all(self, *, status: Optional[TeacherStatus] = None) -> Sequence[Teacher]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        contact: str,
        cnic: str,
        joining_date: Optional[date],
        monthly_salary: Decimal,
        status: TeacherStatus,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        teacher_id: int,
        name: str,
        contact: str,
        cnic: str,
        joining_date: Optional[date],
        monthly_salary: Decimal,
    ) -> bool:
        raise NotImplementedError

    def set_status(self, teacher_id: int, *, status: TeacherStatus) -> bool:
        raise NotImplementedError

    def delete_by_id(self, teacher_id: int) -> bool:
        raise NotImplementedError

    def has_payroll_history(self, teacher_id: int) -> bool:
        """True when salary, loan or advance rows reference the teacher."""

        raise NotImplementedError
