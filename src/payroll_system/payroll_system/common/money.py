from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..core.constants import CURRENCY_LABEL, MONEY_QUANTUM


def to_decimal(value) -> Decimal:
    """Coerce DB/JSON numbers into Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def format_pkr(amount) -> str:
    """Format as Pakistani Rupees, e.g. ``Rs. 15,000``."""
    value = quantize(to_decimal(amount))
    if value == value.to_integral_value():
        return f"{CURRENCY_LABEL} {int(value):,}"
    return f"{CURRENCY_LABEL} {value:,.2f}"
