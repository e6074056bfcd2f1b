from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True, order=True)
class Month:
    """Calendar month identifier (no day component), exchanged as ``YYYY-MM``."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month number: {self.month}")
        if not 1 <= self.year <= 9999:
            raise ValueError(f"Invalid year: {self.year}")

    @classmethod
    def parse(cls, value: str) -> "Month":
        m = _MONTH_RE.match((value or "").strip())
        if not m:
            raise ValueError(f"Invalid month identifier: {value!r} (expected YYYY-MM)")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def of(cls, value: "Month | date | str") -> "Month":
        if isinstance(value, Month):
            return value
        if isinstance(value, (date, datetime)):
            return cls(value.year, value.month)
        return cls.parse(value)

    def add_months(self, count: int) -> "Month":
        index = self.year * 12 + (self.month - 1) + int(count)
        return Month(index // 12, index % 12 + 1)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return self.add_months(1).first_day() - timedelta(days=1)

    def label(self) -> str:
        """Human label, e.g. ``March 2025``."""
        return self.first_day().strftime("%B %Y")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str):
    """Parse HH:MM (or HH:MM:SS) into time; blank -> None."""
    v = (value or "").strip()
    if not v:
        return None
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now().date()
