"""Drive the payroll services without Flask.

Controllers are a thin JSON layer; the rules live in the services. Run after
``scripts/init_db.py`` and ``scripts/seed_db.py``.
"""

import importlib
import logging
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.common.datetime_utils import Month
from src.payroll_system.payroll_system.common.money import format_pkr
from src.payroll_system.payroll_system.container import build_container


def main():
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    month = Month.of(date.today())
    report = container.payroll_service.pending_salaries(month=month)
    print(f"Pending salaries for {month.label()}: {format_pkr(report.total_pending)}")
    for row in report.rows:
        b = row.breakdown
        payoff = row.payoff.label() if row.payoff else "-"
        print(
            f"  {row.teacher_name:<20} base={format_pkr(b.base_salary)} loans={format_pkr(b.loan_deduction)} "
            f"advances={format_pkr(b.advance_deduction)} pending={format_pkr(b.pending_amount)} payoff={payoff}"
        )

    fees = container.fee_service.pending_fees(month=month)
    print(f"Pending fees: {len(fees.rows)} students, {format_pkr(fees.total_pending)}")


if __name__ == "__main__":
    main()
