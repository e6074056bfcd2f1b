from datetime import date

import pytest

from src.payroll_system.payroll_system.common.datetime_utils import Month, parse_hhmm


def test_parse_and_str():
    assert Month.parse("2025-03") == Month(2025, 3)
    assert str(Month(2025, 3)) == "2025-03"


def test_str_zero_pads_small_years():
    assert str(Month(5, 1)) == "0005-01"
    assert Month.parse(str(Month(5, 1))) == Month(5, 1)


@pytest.mark.parametrize("value", ["2025-3", "2025-13", "03-2025", "", "2025-03-01"])
def test_parse_rejects_malformed(value):
    with pytest.raises(ValueError):
        Month.parse(value)


def test_of_accepts_dates_and_months():
    assert Month.of(date(2025, 12, 31)) == Month(2025, 12)
    assert Month.of(Month(2024, 1)) == Month(2024, 1)


def test_add_months_crosses_years():
    assert Month(2025, 11).add_months(3) == Month(2026, 2)
    assert Month(2025, 1).add_months(-1) == Month(2024, 12)


def test_month_bounds_and_label():
    feb = Month(2024, 2)

    assert feb.first_day() == date(2024, 2, 1)
    assert feb.last_day() == date(2024, 2, 29)
    assert feb.label() == "February 2024"
    assert Month(2025, 1) < Month(2025, 2) < Month(2026, 1)


def test_parse_hhmm():
    assert parse_hhmm("  ") is None
    assert parse_hhmm("07:05").minute == 5
    assert parse_hhmm("07:05:30").second == 30
