from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import Month
from ..core.enums import FeeType, PaymentMode, PayStatus, StudentStatus


@dataclass(frozen=True)
class Student:
    """Thực thể miền (domain): Học sinh."""

    student_id: int
    student_code: str
    name: str
    class_grade: str
    status: StudentStatus = StudentStatus.ACTIVE
    guardian_name: str = ""
    contact: str = ""
    enrollment_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE


@dataclass(frozen=True)
class FeeStructure:
    """Mức phí theo lớp và loại phí."""

    fee_id: int
    class_grade: str
    fee_type: FeeType
    amount: Decimal


@dataclass(frozen=True)
class FeePayment:
    """Thực thể miền (domain): Phiếu thu học phí."""

    payment_id: int
    student_id: int
    fee_type: FeeType
    amount_paid: Decimal
    paid_on: date
    fee_month: Month
    receipt_number: str
    payment_mode: PaymentMode = PaymentMode.CASH
    notes: str = ""


@dataclass(frozen=True)
class PendingFeeRow:
    student: Student
    expected_fee: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    status: PayStatus


@dataclass(frozen=True)
class PendingFeeReport:
    month: Month
    rows: list[PendingFeeRow] = field(default_factory=list)

    @property
    def total_pending(self) -> Decimal:
        return sum((r.pending_amount for r in self.rows), Decimal("0"))
