from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Month
from ..common.money import to_decimal
from ..core.enums import LoanStatus, PaymentMode
from ..core.exceptions import NotFoundError, StaleSnapshotError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LoanBalanceUpdate, NewSalaryRecord, SalaryRecord
from .repository import SalaryRepository

_COLUMNS = """
    salary_id, teacher_id, month, base_salary, loan_deduction, advance_deduction,
    other_deduction, net_paid, date_paid, payment_mode, notes, receipt_url, proof_image_url
"""


def row_to_salary(row: dict) -> SalaryRecord:
    return SalaryRecord(
        salary_id=int(row["salary_id"]),
        teacher_id=int(row["teacher_id"]),
        month=Month.parse(row["month"]),
        base_salary=to_decimal(row["base_salary"]),
        loan_deduction=to_decimal(row["loan_deduction"]),
        advance_deduction=to_decimal(row.get("advance_deduction")),
        other_deduction=to_decimal(row.get("other_deduction")),
        net_paid=to_decimal(row["net_paid"]),
        date_paid=row["date_paid"],
        payment_mode=PaymentMode(row.get("payment_mode") or PaymentMode.CASH.value),
        notes=row.get("notes") or "",
        receipt_url=row.get("receipt_url") or "",
        proof_image_url=row.get("proof_image_url") or "",
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_teacher_month(self, teacher_id: int, month: Month) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_salaries WHERE teacher_id=%s AND month=%s ORDER BY salary_id ASC",
                (int(teacher_id), str(month)),
            )
            return [row_to_salary(r) for r in fetchall(cur)]

    def list_for_month(self, month: Month) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_salaries WHERE month=%s ORDER BY salary_id ASC",
                (str(month),),
            )
            return [row_to_salary(r) for r in fetchall(cur)]

    def list_history(
        self,
        *,
        teacher_id: Optional[int] = None,
        month: Optional[Month] = None,
        limit: int = 200,
    ) -> Sequence[SalaryRecord]:
        clauses = ["1=1"]
        params: list[object] = []
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))
        if month is not None:
            clauses.append("month=%s")
            params.append(str(month))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM teacher_salaries
                WHERE {" AND ".join(clauses)}
                ORDER BY date_paid DESC, salary_id DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [row_to_salary(r) for r in fetchall(cur)]

    def commit_pay_run(
        self,
        *,
        record: NewSalaryRecord,
        loan_updates: Sequence[LoanBalanceUpdate],
        expected_already_paid: Decimal,
    ) -> int:
        with db_cursor(self._conn_factory, isolation_level="READ COMMITTED") as (_, cur):
            # Row lock serializes pay runs per teacher until commit/rollback.
            cur.execute("SELECT teacher_id FROM teachers WHERE teacher_id=%s FOR UPDATE", (int(record.teacher_id),))
            if not fetchone(cur):
                raise NotFoundError("Teacher not found")

            cur.execute(
                "SELECT COALESCE(SUM(net_paid), 0) AS paid FROM teacher_salaries WHERE teacher_id=%s AND month=%s",
                (int(record.teacher_id), str(record.month)),
            )
            paid = to_decimal((fetchone(cur) or {}).get("paid"))
            if paid != expected_already_paid:
                raise StaleSnapshotError("Salary for this month changed while paying; reload and try again")

            for u in loan_updates:
                cur.execute(
                    """
                    UPDATE teacher_loans
                    SET remaining=%s, status=%s
                    WHERE loan_id=%s AND remaining=%s AND status=%s
                    """,
                    (u.new_remaining, u.new_status.value, int(u.loan_id), u.previous_remaining, LoanStatus.ACTIVE.value),
                )
                if cur.rowcount != 1:
                    raise StaleSnapshotError(f"Loan {u.loan_id} changed while paying; reload and try again")

            cur.execute(
                """
                INSERT INTO teacher_salaries(
                    teacher_id, month, base_salary, loan_deduction, advance_deduction, other_deduction,
                    net_paid, date_paid, payment_mode, notes, receipt_url, proof_image_url
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(record.teacher_id),
                    str(record.month),
                    record.base_salary,
                    record.loan_deduction,
                    record.advance_deduction,
                    record.other_deduction,
                    record.net_paid,
                    record.date_paid,
                    record.payment_mode.value,
                    record.notes,
                    record.receipt_url,
                    record.proof_image_url,
                ),
            )
            return int(cur.lastrowid)
