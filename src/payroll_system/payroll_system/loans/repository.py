from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import Month
from ..core.enums import LoanStatus, PaymentMode
from .model import Advance, Loan
from .policies.base import RepaymentPolicy


class LoanRepository(Protocol):
    """Loan ledger."""

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int, *, status: Optional[LoanStatus] = None) -> Sequence[Loan]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Loan]:
        """All active loans across teachers (pending-salary screen)."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Loan]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        amount: Decimal,
        repayment: RepaymentPolicy,
        date_issued: date,
        notes: str = "",
    ) -> int:
        """Create an active loan with remaining == amount. Returns loan_id."""

        raise NotImplementedError

    def update_balance(
        self,
        *,
        loan_id: int,
        remaining: Decimal,
        status: LoanStatus,
        notes: Optional[str] = None,
    ) -> bool:
        """Admin-only override of the remaining balance."""

        raise NotImplementedError


class AdvanceRepository(Protocol):
    """Advance ledger."""

    def list_for_teacher_month(self, teacher_id: int, month: Month) -> Sequence[Advance]:
        raise NotImplementedError

    def list_for_month(self, month: Month) -> Sequence[Advance]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Advance]:
        raise NotImplementedError

    def create(
        self,
        *,
        teacher_id: int,
        month: Month,
        amount: Decimal,
        date_given: date,
        payment_mode: PaymentMode,
        notes: str = "",
    ) -> int:
        raise NotImplementedError

    def delete(self, *, advance_id: int) -> bool:
        raise NotImplementedError
