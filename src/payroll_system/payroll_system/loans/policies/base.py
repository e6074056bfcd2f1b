from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import ClassVar, Optional

from ...common.datetime_utils import Month
from ...core.enums import RepaymentType


class RepaymentPolicy(ABC):
    """Strategy Pattern: encapsulate how a loan is deducted from a pay run.

    Each concrete policy is a frozen dataclass carrying only the fields its
    repayment type needs.
    """

    repayment_type: ClassVar[RepaymentType]

    @abstractmethod
    def candidate_deduction(self, *, remaining: Decimal, base_salary: Decimal, target_month: Month) -> Decimal:
        """Unclamped deduction this loan asks for in ``target_month``."""

        raise NotImplementedError

    def is_due(self, *, target_month: Month) -> bool:
        """Whether a pay run for ``target_month`` may deduct from this loan."""

        return True

    def monthly_rate(self, *, base_salary: Decimal) -> Optional[Decimal]:
        """Recurring per-month deduction, or None when the policy has no fixed rate."""

        return None

    @abstractmethod
    def describe(self) -> str:
        raise NotImplementedError
