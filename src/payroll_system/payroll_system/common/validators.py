from __future__ import annotations

from decimal import Decimal

from ..core.exceptions import ValidationError
from .datetime_utils import Month
from .money import to_decimal


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_amount(value, field_name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Enter a valid {field_name.lower()}")
    return amount


def require_non_negative_amount(value, field_name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def require_month(value, field_name: str = "Month") -> Month:
    try:
        return Month.of(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be in YYYY-MM format")
