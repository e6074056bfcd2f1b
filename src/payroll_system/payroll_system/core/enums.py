from __future__ import annotations

from enum import Enum


class TeacherStatus(str, Enum):
    """Trạng thái giáo viên; inactive bị loại khỏi bảng lương."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class LoanStatus(str, Enum):
    """Vòng đời khoản vay: active -> paid (không quay lại)."""

    ACTIVE = "active"
    PAID = "paid"


class RepaymentType(str, Enum):
    """Tag lưu trong CSDL cho chính sách trả nợ."""

    SPECIFIC_MONTH = "specific_month"
    PERCENTAGE = "percentage"
    CUSTOM_AMOUNT = "custom_amount"
    MANUAL = "manual"


class PaymentMode(str, Enum):
    CASH = "cash"
    ONLINE = "online"


class PayStatus(str, Enum):
    """Phân loại tình trạng thanh toán theo tháng (lương hoặc học phí)."""

    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class FeeType(str, Enum):
    TUITION = "tuition"
    REGISTRATION = "registration"


class PayoffKind(str, Enum):
    """Kết quả ước tính ngày tất toán khoản vay."""

    COMPLETED = "completed"
    MONTH = "month"
    MANUAL = "manual"
