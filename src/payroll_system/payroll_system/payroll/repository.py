from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..common.datetime_utils import Month
from .model import LoanBalanceUpdate, NewSalaryRecord, SalaryRecord


class SalaryRepository(Protocol):
    """Salary ledger (append-only)."""

    def list_for_teacher_month(self, teacher_id: int, month: Month) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def list_for_month(self, month: Month) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def list_history(
        self,
        *,
        teacher_id: Optional[int] = None,
        month: Optional[Month] = None,
        limit: int = 200,
    ) -> Sequence[SalaryRecord]:
        raise NotImplementedError

    def commit_pay_run(
        self,
        *,
        record: NewSalaryRecord,
        loan_updates: Sequence[LoanBalanceUpdate],
        expected_already_paid: Decimal,
    ) -> int:
        """Insert the salary record and apply loan balance updates atomically.

        Implementations must verify that the month's paid total and each loan's
        ``remaining`` still match the snapshot the pay run was computed from,
        and raise ``StaleSnapshotError`` (writing nothing) otherwise.
        Returns salary_id.
        """

        raise NotImplementedError
