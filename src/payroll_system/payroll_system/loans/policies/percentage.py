from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional

from ...common.datetime_utils import Month
from ...common.money import quantize
from ...core.enums import RepaymentType
from .base import RepaymentPolicy


@dataclass(frozen=True)
class PercentageRepayment(RepaymentPolicy):
    """Deduct a percentage of the month's base salary (not of the balance)."""

    percentage: Decimal
    repayment_type: ClassVar[RepaymentType] = RepaymentType.PERCENTAGE

    def candidate_deduction(self, *, remaining: Decimal, base_salary: Decimal, target_month: Month) -> Decimal:
        return self.monthly_rate(base_salary=base_salary)

    def monthly_rate(self, *, base_salary: Decimal) -> Optional[Decimal]:
        return quantize(base_salary * self.percentage / Decimal("100"))

    def describe(self) -> str:
        return f"{self.percentage.normalize():f}% of salary/month"
