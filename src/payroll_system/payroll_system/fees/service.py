from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import Month, today_local
from ..common.validators import require_month, require_non_empty, require_non_negative_amount, require_positive_amount
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import FeeType, PaymentMode, PayStatus, StudentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..payroll.engine import classify_payment
from .model import FeePayment, FeeStructure, PendingFeeReport, PendingFeeRow, Student
from .receipts import receipt_number
from .repository import FeePaymentRepository, FeeStructureRepository, StudentRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeeService:
    """Use case: student fee collection and pending-fee tracking."""

    def __init__(
        self,
        students: StudentRepository,
        structures: FeeStructureRepository,
        payments: FeePaymentRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._students = students
        self._structures = structures
        self._payments = payments
        self._clock = clock

    # Students
    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def list_students(self, *, class_grade: Optional[str] = None, active_only: bool = False) -> Sequence[Student]:
        return self._students.list_all(
            status=StudentStatus.ACTIVE if active_only else None,
            class_grade=class_grade or None,
        )

    def register_student(
        self,
        *,
        student_code: str,
        name: str,
        class_grade: str,
        guardian_name: str = "",
        contact: str = "",
        enrollment_date: Optional[date] = None,
    ) -> int:
        student_code = require_non_empty(student_code, "Student code")
        name = require_non_empty(name, "Name")
        class_grade = require_non_empty(class_grade, "Class")

        if self._students.get_by_code(student_code):
            raise ValidationError("Student code already exists")

        student_id = self._students.create(
            student_code=student_code,
            name=name,
            class_grade=class_grade,
            guardian_name=(guardian_name or "").strip(),
            contact=(contact or "").strip(),
            enrollment_date=enrollment_date,
        )
        logger.info("student %s registered in class %s", student_id, class_grade)
        return student_id

    def set_student_status(self, *, student_id: int, status) -> None:
        self.get_student(student_id)
        try:
            status = StudentStatus(status)
        except ValueError:
            raise ValidationError("Status must be 'active' or 'inactive'")
        self._students.set_status(int(student_id), status=status)

    # Fee structures
    def list_fee_structures(self) -> Sequence[FeeStructure]:
        return self._structures.list_all()

    def set_fee_structure(self, *, class_grade: str, fee_type, amount) -> int:
        class_grade = require_non_empty(class_grade, "Class")
        try:
            fee_type = FeeType(fee_type)
        except ValueError:
            raise ValidationError("Fee type must be 'tuition' or 'registration'")
        amount = require_non_negative_amount(amount, "Fee amount")

        fee_id = self._structures.upsert(class_grade=class_grade, fee_type=fee_type, amount=amount)
        logger.info("fee structure %s/%s set to %s", class_grade, fee_type.value, amount)
        return fee_id

    def delete_fee_structure(self, *, fee_id: int) -> None:
        if not self._structures.delete(fee_id=int(fee_id)):
            raise NotFoundError("Fee structure not found")

    # Payments
    def record_payment(
        self,
        *,
        student_id: int,
        amount,
        fee_month,
        fee_type=FeeType.TUITION,
        payment_mode=PaymentMode.CASH,
        paid_on: Optional[date] = None,
        notes: str = "",
    ) -> FeePayment:
        if not student_id:
            raise ValidationError("Select a student")
        student = self.get_student(student_id)
        amount = require_positive_amount(amount, "Amount")
        month = require_month(fee_month, "Fee month")
        try:
            fee_type = FeeType(fee_type)
            payment_mode = PaymentMode(payment_mode)
        except ValueError:
            raise ValidationError("Invalid fee type or payment mode")

        receipt = receipt_number(self._clock())
        if self._payments.get_by_receipt(receipt):
            raise ValidationError("Duplicate receipt number, please retry")

        paid_on = paid_on or today_local()
        payment_id = self._payments.create(
            student_id=student.student_id,
            fee_type=fee_type,
            amount_paid=amount,
            paid_on=paid_on,
            fee_month=month,
            receipt_number=receipt,
            payment_mode=payment_mode,
            notes=(notes or "").strip(),
        )
        logger.info("fee payment %s (%s) recorded for student %s month %s", payment_id, receipt, student.student_id, month)
        return FeePayment(
            payment_id=payment_id,
            student_id=student.student_id,
            fee_type=fee_type,
            amount_paid=amount,
            paid_on=paid_on,
            fee_month=month,
            receipt_number=receipt,
            payment_mode=payment_mode,
            notes=(notes or "").strip(),
        )

    def list_payments(self, *, student_id: Optional[int] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[FeePayment]:
        return self._payments.list_recent(student_id=int(student_id) if student_id else None, limit=int(limit))

    def pending_fees(self, *, month, class_grade: Optional[str] = None) -> PendingFeeReport:
        """Active students whose payments for ``month`` do not cover the tuition fee.

        Every fee type paid for the month counts toward the total; students
        whose class has no tuition structure expect 0 and are dropped.
        """
        month: Month = require_month(month)
        students = self._students.list_all(status=StudentStatus.ACTIVE, class_grade=class_grade or None)

        tuition = {
            s.class_grade: s.amount for s in self._structures.list_all() if s.fee_type == FeeType.TUITION
        }
        paid: dict[int, Decimal] = {}
        for p in self._payments.list_for_month(month):
            paid[p.student_id] = paid.get(p.student_id, ZERO) + p.amount_paid

        rows = []
        for student in students:
            expected = tuition.get(student.class_grade, ZERO)
            paid_amount = paid.get(student.student_id, ZERO)
            status = classify_payment(expected=expected, paid=paid_amount)
            if status == PayStatus.PAID:
                continue
            rows.append(
                PendingFeeRow(
                    student=student,
                    expected_fee=expected,
                    paid_amount=paid_amount,
                    pending_amount=max(ZERO, expected - paid_amount),
                    status=status,
                )
            )
        return PendingFeeReport(month=month, rows=rows)
