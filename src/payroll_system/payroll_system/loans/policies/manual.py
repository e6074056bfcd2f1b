from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from ...common.datetime_utils import Month
from ...core.enums import RepaymentType
from .base import RepaymentPolicy


@dataclass(frozen=True)
class ManualRepayment(RepaymentPolicy):
    """Never auto-deducted; balance changes only through an explicit admin write."""

    repayment_type: ClassVar[RepaymentType] = RepaymentType.MANUAL

    def candidate_deduction(self, *, remaining: Decimal, base_salary: Decimal, target_month: Month) -> Decimal:
        return Decimal("0")

    def is_due(self, *, target_month: Month) -> bool:
        return False

    def describe(self) -> str:
        return "Manual"
