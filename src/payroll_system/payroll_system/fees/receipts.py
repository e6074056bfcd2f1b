from __future__ import annotations

from datetime import datetime, timezone

from ..core.constants import RECEIPT_PREFIX

_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def receipt_number(now: datetime) -> str:
    """``RCP-`` followed by the epoch milliseconds of ``now`` in base 36."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{RECEIPT_PREFIX}-{to_base36(millis)}"
