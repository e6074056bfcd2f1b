from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ...common.datetime_utils import Month
from ...common.money import to_decimal
from ...core.enums import RepaymentType
from .base import RepaymentPolicy
from .custom_amount import CustomAmountRepayment
from .manual import ManualRepayment
from .percentage import PercentageRepayment
from .specific_month import SpecificMonthRepayment

logger = logging.getLogger(__name__)


@dataclass
class RepaymentPolicyFactory:
    """Factory Pattern: build a policy from its stored tag + columns, and back."""

    def from_columns(
        self,
        *,
        repayment_type: Optional[str],
        repayment_month: Optional[str] = None,
        repayment_percentage: Any = None,
        repayment_amount: Any = None,
    ) -> RepaymentPolicy:
        try:
            tag = RepaymentType(repayment_type or RepaymentType.MANUAL.value)
        except ValueError:
            logger.warning("unknown repayment_type %r, treating loan as manual", repayment_type)
            return ManualRepayment()

        if tag == RepaymentType.SPECIFIC_MONTH:
            if not repayment_month:
                logger.warning("specific_month loan without repayment_month, treating as manual")
                return ManualRepayment()
            return SpecificMonthRepayment(month=Month.of(repayment_month))

        # A missing rate is kept as a zero rate so the misconfiguration stays visible.
        if tag == RepaymentType.PERCENTAGE:
            return PercentageRepayment(percentage=to_decimal(repayment_percentage))
        if tag == RepaymentType.CUSTOM_AMOUNT:
            return CustomAmountRepayment(amount=to_decimal(repayment_amount))
        return ManualRepayment()

    def to_columns(self, policy: RepaymentPolicy) -> dict:
        columns: dict = {
            "repayment_type": policy.repayment_type.value,
            "repayment_month": None,
            "repayment_percentage": None,
            "repayment_amount": None,
        }
        if isinstance(policy, SpecificMonthRepayment):
            columns["repayment_month"] = str(policy.month)
        elif isinstance(policy, PercentageRepayment):
            columns["repayment_percentage"] = policy.percentage
        elif isinstance(policy, CustomAmountRepayment):
            columns["repayment_amount"] = policy.amount
        return columns
