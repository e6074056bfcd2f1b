from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import Month
from ..core.enums import LoanStatus, PaymentMode, PayoffKind, PayStatus
from ..loans.model import Loan


@dataclass(frozen=True)
class SalaryRecord:
    """Thực thể miền (domain): Bản ghi trả lương (bất biến sau khi tạo).

    Có thể có nhiều bản ghi cho cùng (giáo viên, tháng) khi trả từng phần.
    """

    salary_id: int
    teacher_id: int
    month: Month
    base_salary: Decimal
    loan_deduction: Decimal
    net_paid: Decimal
    date_paid: date
    advance_deduction: Decimal = Decimal("0")
    other_deduction: Decimal = Decimal("0")
    payment_mode: PaymentMode = PaymentMode.CASH
    notes: str = ""
    receipt_url: str = ""
    proof_image_url: str = ""

    @property
    def total_deduction(self) -> Decimal:
        return self.loan_deduction + self.advance_deduction + self.other_deduction


@dataclass(frozen=True)
class NewSalaryRecord:
    """Salary record not yet persisted (no id)."""

    teacher_id: int
    month: Month
    base_salary: Decimal
    loan_deduction: Decimal
    advance_deduction: Decimal
    other_deduction: Decimal
    net_paid: Decimal
    date_paid: date
    payment_mode: PaymentMode
    notes: str = ""
    receipt_url: str = ""
    proof_image_url: str = ""


@dataclass(frozen=True)
class LoanDeduction:
    loan_id: int
    candidate: Decimal
    deducted: Decimal


@dataclass(frozen=True)
class PayBreakdown:
    """Result of ``compute_expected_pay`` for one teacher and month."""

    teacher_id: int
    month: Month
    base_salary: Decimal
    loan_deduction: Decimal
    advance_deduction: Decimal
    other_deduction: Decimal
    expected_salary: Decimal
    already_paid: Decimal
    pending_amount: Decimal
    status: PayStatus
    loan_lines: tuple[LoanDeduction, ...] = ()
    loan_deduction_settled: bool = False

    @property
    def is_negative(self) -> bool:
        """Deductions exceed base pay (misconfigured loans/advances)."""
        return self.expected_salary < 0

    @property
    def anomalies(self) -> tuple[str, ...]:
        if self.is_negative:
            return ("negative_expected_salary",)
        return ()


@dataclass(frozen=True)
class LoanBalanceUpdate:
    loan_id: int
    previous_remaining: Decimal
    deducted: Decimal
    new_remaining: Decimal
    new_status: LoanStatus


@dataclass(frozen=True)
class PaymentApplication:
    """Result of ``apply_payment``: new loan values, never the mutated inputs."""

    loans: tuple[Loan, ...]
    updates: tuple[LoanBalanceUpdate, ...]
    applied: Decimal
    unapplied: Decimal

    @property
    def paid_off_loan_ids(self) -> tuple[int, ...]:
        return tuple(u.loan_id for u in self.updates if u.new_status == LoanStatus.PAID)


@dataclass(frozen=True)
class PayoffEstimate:
    kind: PayoffKind
    month: Optional[Month] = None
    months_remaining: Optional[int] = None
    loan_id: Optional[int] = None
    rate_based: bool = False

    def label(self) -> str:
        if self.kind == PayoffKind.COMPLETED:
            return "Completed"
        if self.kind == PayoffKind.MANUAL or self.month is None:
            return "Manual"
        return self.month.first_day().strftime("%b %Y")


@dataclass(frozen=True)
class PendingSalaryRow:
    breakdown: PayBreakdown
    teacher_name: str
    contact: str = ""
    cnic: str = ""
    payoff: Optional[PayoffEstimate] = None


@dataclass(frozen=True)
class PendingSalaryReport:
    month: Month
    rows: list[PendingSalaryRow] = field(default_factory=list)
    active_teachers: int = 0

    @property
    def total_pending(self) -> Decimal:
        return sum((r.breakdown.pending_amount for r in self.rows), Decimal("0"))


@dataclass(frozen=True)
class PayRunResult:
    record: SalaryRecord
    breakdown: PayBreakdown
    application: PaymentApplication


@dataclass(frozen=True)
class LoanOverview:
    loan: Loan
    payoff: PayoffEstimate
    repayment_label: str


@dataclass(frozen=True)
class TeacherLoanSummary:
    teacher_id: int
    loans: list[LoanOverview]
    total_remaining: Decimal
    payoff: Optional[PayoffEstimate]
