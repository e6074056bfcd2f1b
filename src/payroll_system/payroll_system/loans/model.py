from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import Month
from ..core.enums import LoanStatus, PaymentMode
from .policies.base import RepaymentPolicy


@dataclass(frozen=True)
class Loan:
    """Thực thể miền (domain): Khoản vay của giáo viên.

    ``amount`` cố định khi tạo; ``remaining`` chỉ giảm dần, 0 <= remaining <= amount.
    """

    loan_id: int
    teacher_id: int
    amount: Decimal
    remaining: Decimal
    repayment: RepaymentPolicy
    status: LoanStatus = LoanStatus.ACTIVE
    date_issued: Optional[date] = None
    created_at: Optional[datetime] = None
    notes: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE


@dataclass(frozen=True)
class Advance:
    """Thực thể miền (domain): Ứng lương.

    ``month`` là tháng lương được khấu trừ, không phải ngày đưa tiền.
    """

    advance_id: int
    teacher_id: int
    month: Month
    amount: Decimal
    date_given: Optional[date] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    notes: str = ""
