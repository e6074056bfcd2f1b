from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.common.datetime_utils import Month
from src.payroll_system.payroll_system.core.enums import LoanStatus, PaymentMode, PayStatus, TeacherStatus
from src.payroll_system.payroll_system.core.exceptions import NotFoundError, StaleSnapshotError, ValidationError
from src.payroll_system.payroll_system.loans.model import Advance
from src.payroll_system.payroll_system.loans.policies.custom_amount import CustomAmountRepayment
from src.payroll_system.payroll_system.loans.policies.manual import ManualRepayment
from src.payroll_system.payroll_system.loans.policies.percentage import PercentageRepayment
from src.payroll_system.payroll_system.loans.policies.specific_month import SpecificMonthRepayment
from src.payroll_system.payroll_system.payroll.service import PayrollService
from tests.fakes import InMemoryTeachers, make_loan, make_teacher

D = Decimal


@pytest.fixture
def service(teachers_repo, loans_repo, advances_repo, salaries_repo) -> PayrollService:
    return PayrollService(teachers_repo, loans_repo, advances_repo, salaries_repo)


def test_full_payment_deducts_loan_and_closes_it(service, loans_repo, salaries_repo):
    loans_repo.by_id[1] = make_loan(1, PercentageRepayment(percentage=D("10")), amount="3000")

    result = service.pay_salary(teacher_id=1, month="2025-03", amount="47000", date_paid=date(2025, 3, 31))

    assert result.record.loan_deduction == D("3000")
    assert result.record.net_paid == D("47000")
    assert result.application.paid_off_loan_ids == (1,)
    assert loans_repo.by_id[1].remaining == D("0")
    assert loans_repo.by_id[1].status == LoanStatus.PAID
    assert len(salaries_repo.records) == 1


def test_overpayment_is_rejected(service, advances_repo):
    advances_repo.by_id[1] = Advance(advance_id=1, teacher_id=1, month=Month(2025, 3), amount=D("5000"))

    with pytest.raises(ValidationError) as e:
        service.pay_salary(teacher_id=1, month="2025-03", amount="46000")

    assert "Rs. 45,000" in str(e.value)


def test_online_payment_requires_proof(service):
    with pytest.raises(ValidationError, match="payment proof"):
        service.pay_salary(teacher_id=1, month="2025-03", amount="1000", payment_mode="online")

    result = service.pay_salary(
        teacher_id=1, month="2025-03", amount="1000", payment_mode="online", proof_image_url="https://x/proof.png"
    )
    assert result.record.payment_mode == PaymentMode.ONLINE


def test_invalid_inputs_are_rejected(service):
    with pytest.raises(ValidationError):
        service.pay_salary(teacher_id=1, month="2025-3", amount="1000")
    with pytest.raises(ValidationError):
        service.pay_salary(teacher_id=1, month="2025-03", amount="0")
    with pytest.raises(ValidationError):
        service.pay_salary(teacher_id=1, month="2025-03", amount="10", payment_mode="cheque")
    with pytest.raises(NotFoundError):
        service.pay_salary(teacher_id=42, month="2025-03", amount="10")


def test_inactive_teacher_cannot_be_paid(loans_repo, advances_repo, salaries_repo):
    teachers = InMemoryTeachers(make_teacher(status=TeacherStatus.INACTIVE))
    service = PayrollService(teachers, loans_repo, advances_repo, salaries_repo)

    with pytest.raises(ValidationError, match="inactive"):
        service.pay_salary(teacher_id=1, month="2025-03", amount="100")


def test_partial_payments_deduct_loan_once(service, loans_repo, salaries_repo):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("5000")), amount="20000")

    first = service.pay_salary(teacher_id=1, month="2025-03", amount="20000")
    assert first.record.loan_deduction == D("5000")
    assert loans_repo.by_id[1].remaining == D("15000")

    pending = service.expected_pay(teacher_id=1, month="2025-03")
    assert pending.loan_deduction == D("5000")
    assert pending.pending_amount == D("25000")
    assert pending.status == PayStatus.PARTIAL

    second = service.pay_salary(teacher_id=1, month="2025-03", amount="25000")
    assert second.record.loan_deduction == D("0")
    assert loans_repo.by_id[1].remaining == D("15000")

    assert service.expected_pay(teacher_id=1, month="2025-03").status == PayStatus.PAID
    with pytest.raises(ValidationError):
        service.pay_salary(teacher_id=1, month="2025-03", amount="1")


def test_loan_override_on_first_payment(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("4000")), amount="4000")
    loans_repo.by_id[2] = make_loan(2, CustomAmountRepayment(amount=D("6000")), amount="6000")

    result = service.pay_salary(teacher_id=1, month="2025-03", amount="43000", loan_deduction_override="7000")

    assert result.record.loan_deduction == D("7000")
    assert loans_repo.by_id[1].status == LoanStatus.PAID
    assert loans_repo.by_id[2].remaining == D("3000")


def test_loan_override_is_bounded_and_only_on_first_payment(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("1000")), amount="2000")

    with pytest.raises(ValidationError, match="outstanding"):
        service.pay_salary(teacher_id=1, month="2025-03", amount="100", loan_deduction_override="2500")

    service.pay_salary(teacher_id=1, month="2025-03", amount="100")
    with pytest.raises(ValidationError, match="already settled"):
        service.pay_salary(teacher_id=1, month="2025-03", amount="100", loan_deduction_override="500")


def test_advance_is_recorded_on_first_payment_only(service, advances_repo):
    advances_repo.by_id[1] = Advance(advance_id=1, teacher_id=1, month=Month(2025, 3), amount=D("5000"))

    first = service.pay_salary(teacher_id=1, month="2025-03", amount="20000")
    second = service.pay_salary(teacher_id=1, month="2025-03", amount="25000")

    assert first.record.advance_deduction == D("5000")
    assert second.record.advance_deduction == D("0")


def test_stale_snapshot_propagates_and_writes_nothing(service, loans_repo, salaries_repo, monkeypatch):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("5000")), amount="20000")
    original = loans_repo.list_for_teacher

    def snapshot_then_concurrent_write(teacher_id, *, status=None):
        rows = original(teacher_id, status=status)
        loans_repo.update_balance(loan_id=1, remaining=D("15000"), status=LoanStatus.ACTIVE)
        return rows

    monkeypatch.setattr(loans_repo, "list_for_teacher", snapshot_then_concurrent_write)

    with pytest.raises(StaleSnapshotError):
        service.pay_salary(teacher_id=1, month="2025-03", amount="1000")
    assert salaries_repo.records == []


def test_pending_salaries_skips_paid_and_inactive(loans_repo, advances_repo, salaries_repo):
    teachers = InMemoryTeachers(
        make_teacher(1, salary="30000", name="Ayesha"),
        make_teacher(2, salary="20000", name="Bilal"),
        make_teacher(3, salary="25000", name="Inactive", status=TeacherStatus.INACTIVE),
    )
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("2000")), amount="4000")
    service = PayrollService(teachers, loans_repo, advances_repo, salaries_repo)
    service.pay_salary(teacher_id=2, month="2025-03", amount="20000")

    report = service.pending_salaries(month="2025-03", today=date(2025, 3, 10))

    assert report.active_teachers == 2
    assert [r.teacher_name for r in report.rows] == ["Ayesha"]
    assert report.rows[0].breakdown.pending_amount == D("28000")
    assert report.rows[0].payoff.month == Month(2025, 5)
    assert report.total_pending == D("28000")


def test_register_loan_validation(service):
    with pytest.raises(ValidationError, match="Select teacher and enter amount"):
        service.register_loan(teacher_id=1, amount="0")
    with pytest.raises(ValidationError, match="Select the return month"):
        service.register_loan(teacher_id=1, amount="1000", repayment_type="specific_month")
    with pytest.raises(ValidationError, match="percentage"):
        service.register_loan(teacher_id=1, amount="1000", repayment_type="percentage", repayment_percentage="150")
    with pytest.raises(ValidationError, match="monthly deduction"):
        service.register_loan(teacher_id=1, amount="1000", repayment_type="custom_amount", repayment_amount="-5")
    with pytest.raises(ValidationError, match="Unknown repayment method"):
        service.register_loan(teacher_id=1, amount="1000", repayment_type="weekly")


def test_register_loan_starts_active_with_full_remaining(service, loans_repo):
    loan_id = service.register_loan(
        teacher_id=1, amount="12000", repayment_type="percentage", repayment_percentage="10", notes=" eid "
    )

    loan = loans_repo.by_id[loan_id]
    assert loan.remaining == loan.amount == D("12000")
    assert loan.status == LoanStatus.ACTIVE
    assert loan.repayment == PercentageRepayment(percentage=D("10"))
    assert loan.notes == "eid"


def test_override_loan_balance(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("1000")), amount="5000", remaining="0", status=LoanStatus.PAID)

    with pytest.raises(ValidationError):
        service.override_loan_balance(loan_id=1, remaining="6000")

    loan = service.override_loan_balance(loan_id=1, remaining="2500", notes="correction")
    assert loan.status == LoanStatus.ACTIVE
    assert loans_repo.by_id[1].remaining == D("2500")
    assert loans_repo.by_id[1].notes == "correction"

    assert service.override_loan_balance(loan_id=1, remaining="0").status == LoanStatus.PAID
    with pytest.raises(NotFoundError):
        service.override_loan_balance(loan_id=99, remaining="0")


def test_loan_summary(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, CustomAmountRepayment(amount=D("1000")), amount="3000")
    loans_repo.by_id[2] = make_loan(2, PercentageRepayment(percentage=D("10")), amount="10000")

    summary = service.loan_summary(teacher_id=1, today=date(2025, 1, 20))

    assert summary.total_remaining == D("13000")
    assert [o.repayment_label for o in summary.loans] == ["Rs. 1,000/month", "10% of salary/month"]
    assert summary.payoff.month == Month(2025, 4)


def test_advances_lifecycle(service, advances_repo):
    advance_id = service.record_advance(teacher_id=1, month="2025-04", amount="5000")

    assert service.expected_pay(teacher_id=1, month="2025-04").advance_deduction == D("5000")
    assert [a.advance_id for a in service.list_advances(teacher_id=1)] == [advance_id]

    service.delete_advance(advance_id=advance_id)
    assert advances_repo.by_id == {}
    with pytest.raises(NotFoundError):
        service.delete_advance(advance_id=advance_id)


def test_salary_history_filters(service):
    service.pay_salary(teacher_id=1, month="2025-02", amount="100", date_paid=date(2025, 2, 28))
    service.pay_salary(teacher_id=1, month="2025-03", amount="200", date_paid=date(2025, 3, 31))

    assert [r.net_paid for r in service.salary_history(teacher_id=1)] == [D("200"), D("100")]
    assert [r.net_paid for r in service.salary_history(month="2025-02")] == [D("100")]


def test_pay_run_leaves_manual_loan_untouched(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, ManualRepayment(), amount="100000", created_at=datetime(2024, 1, 10))
    loans_repo.by_id[2] = make_loan(2, PercentageRepayment(percentage=D("10")), amount="100000", created_at=datetime(2024, 6, 1))

    result = service.pay_salary(teacher_id=1, month="2025-03", amount="45000")

    assert result.record.loan_deduction == D("5000")
    assert loans_repo.by_id[1].remaining == D("100000")
    assert loans_repo.by_id[2].remaining == D("95000")
    assert [u.loan_id for u in result.application.updates] == [2]


def test_specific_month_loan_waits_for_its_month(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, SpecificMonthRepayment(month=Month(2025, 6)), amount="20000", created_at=datetime(2024, 1, 10))
    loans_repo.by_id[2] = make_loan(2, PercentageRepayment(percentage=D("10")), amount="100000", created_at=datetime(2024, 6, 1))

    service.pay_salary(teacher_id=1, month="2025-05", amount="45000")
    assert loans_repo.by_id[1].remaining == D("20000")
    assert loans_repo.by_id[2].remaining == D("95000")

    result = service.pay_salary(teacher_id=1, month="2025-06", amount="25000")
    assert result.record.loan_deduction == D("25000")
    assert loans_repo.by_id[1].remaining == D("0")
    assert loans_repo.by_id[1].status == LoanStatus.PAID
    assert loans_repo.by_id[2].remaining == D("90000")


def test_loan_override_skips_loans_not_due(service, loans_repo):
    loans_repo.by_id[1] = make_loan(1, ManualRepayment(), amount="100000", created_at=datetime(2024, 1, 10))
    loans_repo.by_id[2] = make_loan(2, SpecificMonthRepayment(month=Month(2025, 9)), amount="8000", created_at=datetime(2024, 2, 1))
    loans_repo.by_id[3] = make_loan(3, CustomAmountRepayment(amount=D("4000")), amount="4000", created_at=datetime(2024, 6, 1))

    with pytest.raises(ValidationError, match="outstanding"):
        service.pay_salary(teacher_id=1, month="2025-03", amount="100", loan_deduction_override="4500")

    result = service.pay_salary(teacher_id=1, month="2025-03", amount="1000", loan_deduction_override="3000")

    assert result.record.loan_deduction == D("3000")
    assert loans_repo.by_id[1].remaining == D("100000")
    assert loans_repo.by_id[2].remaining == D("8000")
    assert loans_repo.by_id[3].remaining == D("1000")
