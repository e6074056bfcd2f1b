from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from ...common.datetime_utils import Month
from ...core.enums import RepaymentType
from .base import RepaymentPolicy


@dataclass(frozen=True)
class SpecificMonthRepayment(RepaymentPolicy):
    """Full remaining balance is due in one designated month."""

    month: Month
    repayment_type: ClassVar[RepaymentType] = RepaymentType.SPECIFIC_MONTH

    def candidate_deduction(self, *, remaining: Decimal, base_salary: Decimal, target_month: Month) -> Decimal:
        return remaining if target_month == self.month else Decimal("0")

    def is_due(self, *, target_month: Month) -> bool:
        return target_month == self.month

    def describe(self) -> str:
        return f"Full return in {self.month}"
