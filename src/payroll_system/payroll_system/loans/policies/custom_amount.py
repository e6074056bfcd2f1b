from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional

from ...common.datetime_utils import Month
from ...common.money import format_pkr
from ...core.enums import RepaymentType
from .base import RepaymentPolicy


@dataclass(frozen=True)
class CustomAmountRepayment(RepaymentPolicy):
    """Deduct a fixed amount every pay run."""

    amount: Decimal
    repayment_type: ClassVar[RepaymentType] = RepaymentType.CUSTOM_AMOUNT

    def candidate_deduction(self, *, remaining: Decimal, base_salary: Decimal, target_month: Month) -> Decimal:
        return self.amount

    def monthly_rate(self, *, base_salary: Decimal) -> Optional[Decimal]:
        return self.amount

    def describe(self) -> str:
        return f"{format_pkr(self.amount)}/month"
