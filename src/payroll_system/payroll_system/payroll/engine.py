"""Payroll amortization engine.

Pure functions over an immutable snapshot of teacher, loan, advance and salary
state. Nothing here performs I/O, reads the clock or mutates its inputs:
``PayrollService`` fetches the snapshot, calls these functions and persists the
results.

Money is ``Decimal`` throughout; rate-based deductions are rounded half-up to
the paisa by the repayment policies.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import ROUND_CEILING, Decimal
from typing import Any, Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import Month
from ..core.enums import LoanStatus, PayoffKind, PayStatus
from ..loans.model import Advance, Loan
from ..loans.policies.specific_month import SpecificMonthRepayment
from ..teachers.model import Teacher
from .model import (
    LoanBalanceUpdate,
    LoanDeduction,
    PayBreakdown,
    PaymentApplication,
    PayoffEstimate,
    SalaryRecord,
)

ZERO = Decimal("0")

LoanOrderKey = Callable[[Loan], Any]


def creation_order(loan: Loan) -> tuple:
    """Default distribution order: oldest loan first, ``loan_id`` breaks ties."""
    return (loan.created_at or datetime.min, loan.loan_id)


def classify_payment(*, expected: Decimal, paid: Decimal) -> PayStatus:
    if paid >= expected:
        return PayStatus.PAID
    if paid > 0:
        return PayStatus.PARTIAL
    return PayStatus.UNPAID


def loan_deduction_for_month(loan: Loan, *, base_salary: Decimal, target_month: Month) -> LoanDeduction:
    """Candidate deduction for one loan, clamped to what the loan still owes."""
    if not loan.is_active or loan.remaining <= 0:
        return LoanDeduction(loan_id=loan.loan_id, candidate=ZERO, deducted=ZERO)

    candidate = loan.repayment.candidate_deduction(
        remaining=loan.remaining,
        base_salary=base_salary,
        target_month=target_month,
    )
    candidate = max(candidate, ZERO)
    return LoanDeduction(loan_id=loan.loan_id, candidate=candidate, deducted=min(candidate, loan.remaining))


def compute_expected_pay(
    teacher: Teacher,
    target_month: Month | str,
    active_loans: Iterable[Loan],
    advances_for_month: Iterable[Advance],
    *,
    salary_records: Iterable[SalaryRecord] = (),
    base_salary_override: Optional[Decimal] = None,
    other_deduction: Decimal = ZERO,
    loan_deduction_override: Optional[Decimal] = None,
) -> PayBreakdown:
    """Expected net pay for ``teacher`` in ``target_month`` and its breakdown.

    Rows that belong to another teacher or month are ignored, so callers may
    pass wider collections. Loans are evaluated independently; there is no
    shared cap across loans.

    ``base_salary_override`` replaces the teacher's base for this computation
    only. ``loan_deduction_override`` is a loan deduction already settled for
    the month by an earlier partial payment; when given, the per-loan lines
    are still reported but the override is used for the totals.

    The expected salary is never floored: a negative value is reported through
    ``PayBreakdown.is_negative`` so misconfigured loans stay visible.
    """
    month = Month.of(target_month)
    base_salary = teacher.monthly_salary if base_salary_override is None else Decimal(base_salary_override)

    lines = tuple(
        loan_deduction_for_month(loan, base_salary=base_salary, target_month=month)
        for loan in active_loans
        if loan.teacher_id == teacher.teacher_id
    )
    if loan_deduction_override is None:
        loan_deduction = sum((line.deducted for line in lines), ZERO)
    else:
        loan_deduction = Decimal(loan_deduction_override)

    advance_deduction = sum(
        (a.amount for a in advances_for_month if a.teacher_id == teacher.teacher_id and a.month == month),
        ZERO,
    )
    other = Decimal(other_deduction)
    expected = base_salary - loan_deduction - advance_deduction - other

    already_paid = sum(
        (r.net_paid for r in salary_records if r.teacher_id == teacher.teacher_id and r.month == month),
        ZERO,
    )

    return PayBreakdown(
        teacher_id=teacher.teacher_id,
        month=month,
        base_salary=base_salary,
        loan_deduction=loan_deduction,
        advance_deduction=advance_deduction,
        other_deduction=other,
        expected_salary=expected,
        already_paid=already_paid,
        pending_amount=max(ZERO, expected - already_paid),
        status=classify_payment(expected=expected, paid=already_paid),
        loan_lines=lines,
        loan_deduction_settled=loan_deduction_override is not None,
    )


def is_auto_deductible(loan: Loan, target_month: Month) -> bool:
    """A pay run for ``target_month`` may touch this loan's balance.

    Manual loans never qualify and specific-month loans only in their month.
    """
    return loan.is_active and loan.remaining > 0 and loan.repayment.is_due(target_month=target_month)


def _deduct(loan: Loan, amount: Decimal) -> tuple[Loan, LoanBalanceUpdate]:
    new_remaining = loan.remaining - amount
    new_status = LoanStatus.PAID if new_remaining == 0 else LoanStatus.ACTIVE
    update = LoanBalanceUpdate(
        loan_id=loan.loan_id,
        previous_remaining=loan.remaining,
        deducted=amount,
        new_remaining=new_remaining,
        new_status=new_status,
    )
    return replace(loan, remaining=new_remaining, status=new_status), update


def apply_payment(
    active_loans: Iterable[Loan],
    loan_deduction_total: Decimal,
    *,
    order_key: LoanOrderKey = creation_order,
) -> PaymentApplication:
    """Distribute a pay run's loan deduction across loans in ``order_key`` order.

    Used when an administrator overrides the month's total; callers pass only
    the loans eligible this month (see ``is_auto_deductible``). Each loan
    absorbs ``min(budget, remaining)``; a loan reaching exactly zero becomes
    ``paid``. Paid loans are skipped and never reactivated. The inputs are not
    mutated: new ``Loan`` values are returned.
    """
    budget = Decimal(loan_deduction_total)
    if budget < 0:
        raise ValueError("loan_deduction_total cannot be negative")

    total = budget
    out: list[Loan] = []
    updates: list[LoanBalanceUpdate] = []

    for loan in sorted(active_loans, key=order_key):
        if budget <= 0 or not loan.is_active or loan.remaining <= 0:
            out.append(loan)
            continue

        deduct = min(budget, loan.remaining)
        budget -= deduct
        new_loan, update = _deduct(loan, deduct)
        out.append(new_loan)
        updates.append(update)

    return PaymentApplication(
        loans=tuple(out),
        updates=tuple(updates),
        applied=total - budget,
        unapplied=budget,
    )


def apply_loan_lines(active_loans: Iterable[Loan], loan_lines: Iterable[LoanDeduction]) -> PaymentApplication:
    """Apply each loan's own clamped deduction from ``compute_expected_pay``.

    Loans without a positive line are returned unchanged.
    """
    by_loan = {line.loan_id: line.deducted for line in loan_lines}
    out: list[Loan] = []
    updates: list[LoanBalanceUpdate] = []

    for loan in active_loans:
        deduct = min(by_loan.get(loan.loan_id, ZERO), loan.remaining)
        if deduct <= 0 or not loan.is_active:
            out.append(loan)
            continue
        new_loan, update = _deduct(loan, deduct)
        out.append(new_loan)
        updates.append(update)

    applied = sum((u.deducted for u in updates), ZERO)
    return PaymentApplication(loans=tuple(out), updates=tuple(updates), applied=applied, unapplied=ZERO)


def estimate_loan_payoff(loan: Loan, base_salary: Decimal, current_date: date | Month) -> PayoffEstimate:
    """Advisory payoff projection for display; never authoritative."""
    if loan.status == LoanStatus.PAID or loan.remaining <= 0:
        return PayoffEstimate(kind=PayoffKind.COMPLETED, loan_id=loan.loan_id, months_remaining=0)

    if isinstance(loan.repayment, SpecificMonthRepayment):
        return PayoffEstimate(kind=PayoffKind.MONTH, month=loan.repayment.month, loan_id=loan.loan_id)

    rate = loan.repayment.monthly_rate(base_salary=Decimal(base_salary))
    if rate is None or rate <= 0:
        return PayoffEstimate(kind=PayoffKind.MANUAL, loan_id=loan.loan_id)

    months = int((loan.remaining / rate).to_integral_value(rounding=ROUND_CEILING))
    return PayoffEstimate(
        kind=PayoffKind.MONTH,
        month=Month.of(current_date).add_months(months),
        months_remaining=months,
        loan_id=loan.loan_id,
        rate_based=True,
    )


def summarize_payoff(
    loans: Sequence[Loan],
    base_salary: Decimal,
    current_date: date | Month,
) -> Optional[PayoffEstimate]:
    """One payoff label for a teacher holding several loans.

    Estimates are computed per loan. The furthest ``specific_month`` date wins
    when any exists, otherwise the furthest rate-based date; ``None`` when the
    teacher has no active loans.
    """
    active = [loan for loan in loans if loan.is_active]
    if not active:
        return None

    estimates = [estimate_loan_payoff(loan, base_salary, current_date) for loan in active]
    if all(e.kind == PayoffKind.COMPLETED for e in estimates):
        return PayoffEstimate(kind=PayoffKind.COMPLETED, months_remaining=0)

    fixed = [e for e in estimates if e.kind == PayoffKind.MONTH and not e.rate_based]
    if fixed:
        return max(fixed, key=lambda e: e.month)

    projected = [e for e in estimates if e.kind == PayoffKind.MONTH]
    if projected:
        return max(projected, key=lambda e: e.month)

    return PayoffEstimate(kind=PayoffKind.MANUAL)
