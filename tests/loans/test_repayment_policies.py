from __future__ import annotations

from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.common.datetime_utils import Month
from src.payroll_system.payroll_system.core.enums import RepaymentType
from src.payroll_system.payroll_system.loans.policies.custom_amount import CustomAmountRepayment
from src.payroll_system.payroll_system.loans.policies.factory import RepaymentPolicyFactory
from src.payroll_system.payroll_system.loans.policies.manual import ManualRepayment
from src.payroll_system.payroll_system.loans.policies.percentage import PercentageRepayment
from src.payroll_system.payroll_system.loans.policies.specific_month import SpecificMonthRepayment

D = Decimal


@pytest.fixture
def factory() -> RepaymentPolicyFactory:
    return RepaymentPolicyFactory()


@pytest.mark.parametrize(
    "columns, expected",
    [
        ({"repayment_type": "specific_month", "repayment_month": "2025-06"}, SpecificMonthRepayment(Month(2025, 6))),
        ({"repayment_type": "percentage", "repayment_percentage": "12.50"}, PercentageRepayment(D("12.50"))),
        ({"repayment_type": "custom_amount", "repayment_amount": 4000}, CustomAmountRepayment(D("4000"))),
        ({"repayment_type": "manual"}, ManualRepayment()),
    ],
)
def test_factory_builds_each_variant(factory, columns, expected):
    assert factory.from_columns(**columns) == expected


def test_factory_falls_back_to_manual(factory):
    assert factory.from_columns(repayment_type=None) == ManualRepayment()
    assert factory.from_columns(repayment_type="weekly") == ManualRepayment()
    assert factory.from_columns(repayment_type="specific_month", repayment_month=None) == ManualRepayment()


def test_factory_keeps_missing_rate_as_zero(factory):
    policy = factory.from_columns(repayment_type="custom_amount", repayment_amount=None)

    assert policy == CustomAmountRepayment(D("0"))
    assert policy.monthly_rate(base_salary=D("50000")) == D("0")


def test_to_columns_round_trips_variant_fields(factory):
    columns = factory.to_columns(SpecificMonthRepayment(Month(2025, 6)))

    assert columns == {
        "repayment_type": RepaymentType.SPECIFIC_MONTH.value,
        "repayment_month": "2025-06",
        "repayment_percentage": None,
        "repayment_amount": None,
    }
    assert factory.from_columns(**columns) == SpecificMonthRepayment(Month(2025, 6))


def test_candidate_deductions():
    march = Month(2025, 3)

    assert PercentageRepayment(D("10")).candidate_deduction(remaining=D("1"), base_salary=D("33333"), target_month=march) == D("3333.30")
    assert CustomAmountRepayment(D("750")).candidate_deduction(remaining=D("1"), base_salary=D("0"), target_month=march) == D("750")
    assert SpecificMonthRepayment(march).candidate_deduction(remaining=D("900"), base_salary=D("0"), target_month=march) == D("900")
    assert ManualRepayment().candidate_deduction(remaining=D("900"), base_salary=D("0"), target_month=march) == D("0")
    assert ManualRepayment().monthly_rate(base_salary=D("50000")) is None


def test_describe_labels():
    assert PercentageRepayment(D("12.50")).describe() == "12.5% of salary/month"
    assert CustomAmountRepayment(D("4000")).describe() == "Rs. 4,000/month"
    assert SpecificMonthRepayment(Month(2025, 6)).describe() == "Full return in 2025-06"
    assert ManualRepayment().describe() == "Manual"
