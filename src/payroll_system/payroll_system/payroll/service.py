from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Month, today_local
from ..common.money import format_pkr
from ..common.validators import (
    require_month,
    require_non_negative_amount,
    require_positive_amount,
)
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_REPAYMENT_PERCENTAGE
from ..core.enums import LoanStatus, PaymentMode, PayStatus, RepaymentType, TeacherStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..loans.model import Advance, Loan
from ..loans.policies.base import RepaymentPolicy
from ..loans.policies.custom_amount import CustomAmountRepayment
from ..loans.policies.manual import ManualRepayment
from ..loans.policies.percentage import PercentageRepayment
from ..loans.policies.specific_month import SpecificMonthRepayment
from ..loans.repository import AdvanceRepository, LoanRepository
from ..teachers.model import Teacher
from ..teachers.repository import TeacherRepository
from .engine import (
    LoanOrderKey,
    apply_loan_lines,
    apply_payment,
    compute_expected_pay,
    creation_order,
    estimate_loan_payoff,
    is_auto_deductible,
    summarize_payoff,
)
from .model import (
    LoanOverview,
    NewSalaryRecord,
    PayBreakdown,
    PayRunResult,
    PendingSalaryReport,
    PendingSalaryRow,
    SalaryRecord,
    TeacherLoanSummary,
)
from .repository import SalaryRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PayrollService:
    """Use cases around salaries, loans and advances.

    Validation happens here, at the boundary; ``engine`` only computes.
    """

    def __init__(
        self,
        teachers: TeacherRepository,
        loans: LoanRepository,
        advances: AdvanceRepository,
        salaries: SalaryRepository,
        *,
        order_key: LoanOrderKey = creation_order,
    ):
        self._teachers = teachers
        self._loans = loans
        self._advances = advances
        self._salaries = salaries
        self._order_key = order_key

    def _get_teacher(self, teacher_id: int) -> Teacher:
        if not teacher_id:
            raise ValidationError("Select a teacher")
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher

    def _breakdown(
        self,
        teacher: Teacher,
        month: Month,
        loans: Sequence[Loan],
        advances: Sequence[Advance],
        records: Sequence[SalaryRecord],
        *,
        base_salary_override: Optional[Decimal] = None,
        other_deduction: Decimal = ZERO,
        loan_deduction_override: Optional[Decimal] = None,
    ) -> PayBreakdown:
        # The first payment of a month settles its loan deduction and base;
        # later partial payments reuse them instead of deducting loans again.
        own_records = [r for r in records if r.teacher_id == teacher.teacher_id and r.month == month]
        if own_records:
            if loan_deduction_override is None:
                loan_deduction_override = sum((r.loan_deduction for r in own_records), ZERO)
            if base_salary_override is None:
                base_salary_override = own_records[0].base_salary
            other_deduction = other_deduction + sum((r.other_deduction for r in own_records), ZERO)

        breakdown = compute_expected_pay(
            teacher,
            month,
            loans,
            advances,
            salary_records=own_records,
            base_salary_override=base_salary_override,
            other_deduction=other_deduction,
            loan_deduction_override=loan_deduction_override,
        )
        if breakdown.is_negative:
            logger.warning(
                "teacher %s month %s: deductions exceed base salary (expected=%s, loans=%s, advances=%s)",
                teacher.teacher_id,
                month,
                breakdown.expected_salary,
                breakdown.loan_deduction,
                breakdown.advance_deduction,
            )
        return breakdown

    def expected_pay(
        self,
        *,
        teacher_id: int,
        month,
        base_salary_override=None,
        other_deduction=ZERO,
    ) -> PayBreakdown:
        month = require_month(month)
        teacher = self._get_teacher(teacher_id)
        override = None
        if base_salary_override not in (None, ""):
            override = require_positive_amount(base_salary_override, "Base salary")

        return self._breakdown(
            teacher,
            month,
            self._loans.list_for_teacher(teacher.teacher_id, status=LoanStatus.ACTIVE),
            self._advances.list_for_teacher_month(teacher.teacher_id, month),
            self._salaries.list_for_teacher_month(teacher.teacher_id, month),
            base_salary_override=override,
            other_deduction=require_non_negative_amount(other_deduction, "Other deduction"),
        )

    def pending_salaries(self, *, month, today: Optional[date] = None) -> PendingSalaryReport:
        """Unpaid and partially paid salaries of active teachers for ``month``."""
        month = require_month(month)
        today = today or today_local()

        active = [t for t in self._teachers.list_all(status=TeacherStatus.ACTIVE) if t.is_active]

        loans_by_teacher: dict[int, list[Loan]] = defaultdict(list)
        for loan in self._loans.list_active():
            loans_by_teacher[loan.teacher_id].append(loan)
        advances = list(self._advances.list_for_month(month))
        records_by_teacher: dict[int, list[SalaryRecord]] = defaultdict(list)
        for r in self._salaries.list_for_month(month):
            records_by_teacher[r.teacher_id].append(r)

        rows: list[PendingSalaryRow] = []
        for teacher in active:
            teacher_loans = loans_by_teacher.get(teacher.teacher_id, [])
            breakdown = self._breakdown(
                teacher,
                month,
                teacher_loans,
                advances,
                records_by_teacher.get(teacher.teacher_id, []),
            )
            if breakdown.status == PayStatus.PAID:
                continue
            rows.append(
                PendingSalaryRow(
                    breakdown=breakdown,
                    teacher_name=teacher.name,
                    contact=teacher.contact,
                    cnic=teacher.cnic,
                    payoff=summarize_payoff(teacher_loans, breakdown.base_salary, today),
                )
            )

        return PendingSalaryReport(month=month, rows=rows, active_teachers=len(active))

    def pay_salary(
        self,
        *,
        teacher_id: int,
        month,
        amount,
        payment_mode: PaymentMode | str = PaymentMode.CASH,
        notes: str = "",
        proof_image_url: str = "",
        receipt_url: str = "",
        other_deduction=ZERO,
        base_salary_override=None,
        loan_deduction_override=None,
        date_paid: Optional[date] = None,
    ) -> PayRunResult:
        """Record one salary payment and apply the month's loan deduction.

        Rejects overpayment (amount above the pending balance). The salary
        record and the loan balance updates are committed together.
        """
        month = require_month(month)
        amount = require_positive_amount(amount, "Amount")
        try:
            payment_mode = PaymentMode(payment_mode)
        except ValueError:
            raise ValidationError("Payment mode must be 'cash' or 'online'")
        proof_image_url = (proof_image_url or "").strip()
        if payment_mode == PaymentMode.ONLINE and not proof_image_url:
            raise ValidationError("Please upload payment proof for online payment")
        other = require_non_negative_amount(other_deduction, "Other deduction")
        base_override = None
        if base_salary_override not in (None, ""):
            base_override = require_positive_amount(base_salary_override, "Base salary")
        loan_override = None
        if loan_deduction_override not in (None, ""):
            loan_override = require_non_negative_amount(loan_deduction_override, "Loan deduction")

        teacher = self._get_teacher(teacher_id)
        if not teacher.is_active:
            raise ValidationError("Teacher is inactive")

        loans = list(self._loans.list_for_teacher(teacher.teacher_id, status=LoanStatus.ACTIVE))
        advances = list(self._advances.list_for_teacher_month(teacher.teacher_id, month))
        records = list(self._salaries.list_for_teacher_month(teacher.teacher_id, month))
        first_payment = not records

        if not first_payment and loan_override is not None:
            raise ValidationError(f"Loan deduction for {month} was already settled by an earlier payment")
        due_loans = [loan for loan in loans if is_auto_deductible(loan, month)]
        if loan_override is not None:
            outstanding = sum((loan.remaining for loan in due_loans), ZERO)
            if loan_override > outstanding:
                raise ValidationError(f"Loan deduction cannot exceed outstanding loans ({format_pkr(outstanding)})")

        breakdown = self._breakdown(
            teacher,
            month,
            loans,
            advances,
            records,
            base_salary_override=base_override,
            other_deduction=other,
            loan_deduction_override=loan_override,
        )
        if amount > breakdown.pending_amount:
            raise ValidationError(
                f"Maximum payable amount is {format_pkr(breakdown.pending_amount)} (advance salary already deducted)"
            )

        if not first_payment:
            application = apply_loan_lines(loans, ())
        elif loan_override is None:
            application = apply_loan_lines(loans, breakdown.loan_lines)
        else:
            application = apply_payment(due_loans, loan_override, order_key=self._order_key)

        new_record = NewSalaryRecord(
            teacher_id=teacher.teacher_id,
            month=month,
            base_salary=breakdown.base_salary,
            loan_deduction=application.applied,
            advance_deduction=breakdown.advance_deduction if first_payment else ZERO,
            other_deduction=other,
            net_paid=amount,
            date_paid=date_paid or today_local(),
            payment_mode=payment_mode,
            notes=(notes or "").strip(),
            receipt_url=(receipt_url or "").strip(),
            proof_image_url=proof_image_url,
        )
        salary_id = self._salaries.commit_pay_run(
            record=new_record,
            loan_updates=application.updates,
            expected_already_paid=breakdown.already_paid,
        )

        logger.info(
            "salary %s paid: teacher=%s month=%s amount=%s loan_deduction=%s paid_off=%s",
            salary_id,
            teacher.teacher_id,
            month,
            amount,
            application.applied,
            list(application.paid_off_loan_ids),
        )
        record = SalaryRecord(salary_id=salary_id, **vars(new_record))
        return PayRunResult(record=record, breakdown=breakdown, application=application)

    def salary_history(
        self,
        *,
        teacher_id: Optional[int] = None,
        month=None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[SalaryRecord]:
        month = require_month(month) if month else None
        return self._salaries.list_history(
            teacher_id=int(teacher_id) if teacher_id is not None else None,
            month=month,
            limit=int(limit),
        )

    # Loans

    @staticmethod
    def _build_policy(
        repayment_type,
        *,
        repayment_month=None,
        repayment_percentage=None,
        repayment_amount=None,
    ) -> RepaymentPolicy:
        try:
            tag = RepaymentType(repayment_type or RepaymentType.MANUAL.value)
        except ValueError:
            raise ValidationError("Unknown repayment method")

        if tag == RepaymentType.SPECIFIC_MONTH:
            if not repayment_month:
                raise ValidationError("Select the return month")
            return SpecificMonthRepayment(month=require_month(repayment_month, "Return month"))
        if tag == RepaymentType.PERCENTAGE:
            try:
                pct = require_positive_amount(repayment_percentage, "Percentage")
            except ValidationError:
                raise ValidationError("Enter a valid percentage (1-100)")
            if pct > MAX_REPAYMENT_PERCENTAGE:
                raise ValidationError("Enter a valid percentage (1-100)")
            return PercentageRepayment(percentage=pct)
        if tag == RepaymentType.CUSTOM_AMOUNT:
            try:
                amount = require_positive_amount(repayment_amount, "Amount")
            except ValidationError:
                raise ValidationError("Enter a valid monthly deduction amount")
            return CustomAmountRepayment(amount=amount)
        return ManualRepayment()

    def register_loan(
        self,
        *,
        teacher_id: int,
        amount,
        repayment_type=RepaymentType.MANUAL,
        repayment_month=None,
        repayment_percentage=None,
        repayment_amount=None,
        date_issued: Optional[date] = None,
        notes: str = "",
    ) -> int:
        if not teacher_id:
            raise ValidationError("Select teacher and enter amount")
        try:
            principal = require_positive_amount(amount, "Amount")
        except ValidationError:
            raise ValidationError("Select teacher and enter amount")
        teacher = self._get_teacher(teacher_id)
        if not teacher.is_active:
            raise ValidationError("Teacher is inactive")

        policy = self._build_policy(
            repayment_type,
            repayment_month=repayment_month,
            repayment_percentage=repayment_percentage,
            repayment_amount=repayment_amount,
        )
        loan_id = self._loans.create(
            teacher_id=teacher.teacher_id,
            amount=principal,
            repayment=policy,
            date_issued=date_issued or today_local(),
            notes=(notes or "").strip(),
        )
        logger.info("loan %s registered: teacher=%s amount=%s policy=%s", loan_id, teacher.teacher_id, principal, policy)
        return loan_id

    def override_loan_balance(self, *, loan_id: int, remaining, notes: Optional[str] = None) -> Loan:
        """Explicit administrative write of a loan balance (manual loans, corrections)."""
        loan = self._loans.get_by_id(int(loan_id))
        if not loan:
            raise NotFoundError("Loan not found")
        new_remaining = require_non_negative_amount(remaining, "Remaining")
        if new_remaining > loan.amount:
            raise ValidationError(f"Remaining cannot exceed the loan amount ({format_pkr(loan.amount)})")

        status = LoanStatus.PAID if new_remaining == 0 else LoanStatus.ACTIVE
        if loan.status == LoanStatus.PAID and status == LoanStatus.ACTIVE:
            logger.warning("loan %s reactivated by admin override (remaining=%s)", loan.loan_id, new_remaining)

        notes = notes.strip() if notes is not None else None
        if not self._loans.update_balance(loan_id=loan.loan_id, remaining=new_remaining, status=status, notes=notes):
            raise ValidationError("Failed to update loan")
        logger.info("loan %s balance overridden: %s -> %s", loan.loan_id, loan.remaining, new_remaining)
        return replace(
            loan,
            remaining=new_remaining,
            status=status,
            notes=notes if notes is not None else loan.notes,
        )

    def list_loans(self, *, teacher_id: Optional[int] = None) -> Sequence[Loan]:
        if teacher_id is None:
            return self._loans.list_all()
        return self._loans.list_for_teacher(int(teacher_id))

    def loan_summary(self, *, teacher_id: int, today: Optional[date] = None) -> TeacherLoanSummary:
        teacher = self._get_teacher(teacher_id)
        today = today or today_local()
        loans = list(self._loans.list_for_teacher(teacher.teacher_id, status=LoanStatus.ACTIVE))

        overview = [
            LoanOverview(
                loan=loan,
                payoff=estimate_loan_payoff(loan, teacher.monthly_salary, today),
                repayment_label=loan.repayment.describe(),
            )
            for loan in loans
        ]
        return TeacherLoanSummary(
            teacher_id=teacher.teacher_id,
            loans=overview,
            total_remaining=sum((loan.remaining for loan in loans), ZERO),
            payoff=summarize_payoff(loans, teacher.monthly_salary, today),
        )

    # Advances

    def record_advance(
        self,
        *,
        teacher_id: int,
        month,
        amount,
        date_given: Optional[date] = None,
        payment_mode: PaymentMode | str = PaymentMode.CASH,
        notes: str = "",
    ) -> int:
        month = require_month(month)
        value = require_positive_amount(amount, "Amount")
        try:
            payment_mode = PaymentMode(payment_mode)
        except ValueError:
            raise ValidationError("Payment mode must be 'cash' or 'online'")
        teacher = self._get_teacher(teacher_id)
        if not teacher.is_active:
            raise ValidationError("Teacher is inactive")

        advance_id = self._advances.create(
            teacher_id=teacher.teacher_id,
            month=month,
            amount=value,
            date_given=date_given or today_local(),
            payment_mode=payment_mode,
            notes=(notes or "").strip(),
        )
        logger.info("advance %s recorded: teacher=%s month=%s amount=%s", advance_id, teacher.teacher_id, month, value)
        return advance_id

    def delete_advance(self, *, advance_id: int) -> None:
        if not self._advances.delete(advance_id=int(advance_id)):
            raise NotFoundError("Advance not found")
        logger.info("advance %s deleted", advance_id)

    def list_advances(self, *, teacher_id: int) -> Sequence[Advance]:
        return self._advances.list_for_teacher(int(teacher_id))
