from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_non_empty, require_positive_amount
from ..core.enums import TeacherStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import Teacher
from .repository import TeacherRepository

logger = logging.getLogger(__name__)


class TeacherService:
    """Use case: manage the teacher registry (admin)."""

    def __init__(self, teachers: TeacherRepository):
        self._teachers = teachers

    def get(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher

    def list_teachers(self, *, active_only: bool = False) -> Sequence[Teacher]:
        return self._teachers.list_all(status=TeacherStatus.ACTIVE if active_only else None)

    def create_teacher(
        self,
        *,
        name: str,
        monthly_salary,
        contact: str = "",
        cnic: str = "",
        joining_date: Optional[date] = None,
        status: TeacherStatus = TeacherStatus.ACTIVE,
    ) -> int:
        name = require_non_empty(name, "Name")
        salary = require_positive_amount(monthly_salary, "Monthly salary")

        teacher_id = self._teachers.create(
            name=name,
            contact=(contact or "").strip(),
            cnic=(cnic or "").strip(),
            joining_date=joining_date,
            monthly_salary=salary,
            status=TeacherStatus(status),
        )
        logger.info("teacher %s created (salary=%s)", teacher_id, salary)
        return teacher_id

    def update_teacher(
        self,
        *,
        teacher_id: int,
        name: str,
        monthly_salary,
        contact: str = "",
        cnic: str = "",
        joining_date: Optional[date] = None,
    ) -> None:
        self.get(teacher_id)
        name = require_non_empty(name, "Name")
        salary = require_positive_amount(monthly_salary, "Monthly salary")

        if not self._teachers.update(
            teacher_id=int(teacher_id),
            name=name,
            contact=(contact or "").strip(),
            cnic=(cnic or "").strip(),
            joining_date=joining_date,
            monthly_salary=salary,
        ):
            raise ValidationError("Failed to update teacher")

    def set_status(self, *, teacher_id: int, status: TeacherStatus) -> None:
        self.get(teacher_id)
        try:
            status = TeacherStatus(status)
        except ValueError:
            raise ValidationError("Status must be 'active' or 'inactive'")
        self._teachers.set_status(int(teacher_id), status=status)
        logger.info("teacher %s status -> %s", teacher_id, status.value)

    def delete_teacher(self, *, teacher_id: int) -> None:
        self.get(teacher_id)
        if self._teachers.has_payroll_history(int(teacher_id)):
            raise ValidationError("Teacher has salary or loan history; set the teacher inactive instead")
        if not self._teachers.delete_by_id(int(teacher_id)):
            raise ValidationError("Failed to delete teacher")
        logger.info("teacher %s deleted", teacher_id)
