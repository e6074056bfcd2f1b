from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import Month
from ..core.enums import FeeType, PaymentMode, StudentStatus
from .model import FeePayment, FeeStructure, Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_code(self, student_code: str) -> Optional[Student]:
        raise NotImplementedError

    def list_all(self, *, status: Optional[StudentStatus] = None, class_grade: Optional[str] = None) -> Sequence[Student]:
        raise NotImplementedError

    def create(
        self,
        *,
        student_code: str,
        name: str,
        class_grade: str,
        guardian_name: str,
        contact: str,
        enrollment_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        raise NotImplementedError


class FeeStructureRepository(Protocol):
    def get(self, *, class_grade: str, fee_type: FeeType) -> Optional[FeeStructure]:
        raise NotImplementedError

    def list_all(self) -> Sequence[FeeStructure]:
        raise NotImplementedError

    def upsert(self, *, class_grade: str, fee_type: FeeType, amount: Decimal) -> int:
        """Create or update the fee for (class, fee type). Returns fee_id."""

        raise NotImplementedError

    def delete(self, *, fee_id: int) -> bool:
        raise NotImplementedError


class FeePaymentRepository(Protocol):
    def create(
        self,
        *,
        student_id: int,
        fee_type: FeeType,
        amount_paid: Decimal,
        paid_on: date,
        fee_month: Month,
        receipt_number: str,
        payment_mode: PaymentMode,
        notes: str = "",
    ) -> int:
        raise NotImplementedError

    def get_by_receipt(self, receipt_number: str) -> Optional[FeePayment]:
        raise NotImplementedError

    def list_for_month(self, month: Month) -> Sequence[FeePayment]:
        raise NotImplementedError

    def list_recent(self, *, student_id: Optional[int] = None, limit: int = 200) -> Sequence[FeePayment]:
        raise NotImplementedError
