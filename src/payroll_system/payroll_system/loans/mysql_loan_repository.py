from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import to_decimal
from ..core.enums import LoanStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Loan
from .policies.base import RepaymentPolicy
from .policies.factory import RepaymentPolicyFactory
from .repository import LoanRepository

_COLUMNS = """
    loan_id, teacher_id, amount, remaining, status, date_issued, created_at, notes,
    repayment_type, repayment_month, repayment_percentage, repayment_amount
"""


def row_to_loan(row: dict, policies: RepaymentPolicyFactory) -> Loan:
    return Loan(
        loan_id=int(row["loan_id"]),
        teacher_id=int(row["teacher_id"]),
        amount=to_decimal(row["amount"]),
        remaining=to_decimal(row["remaining"]),
        status=LoanStatus(row["status"]),
        date_issued=row.get("date_issued"),
        created_at=row.get("created_at"),
        notes=row.get("notes") or "",
        repayment=policies.from_columns(
            repayment_type=row.get("repayment_type"),
            repayment_month=row.get("repayment_month"),
            repayment_percentage=row.get("repayment_percentage"),
            repayment_amount=row.get("repayment_amount"),
        ),
    )


class MySQLLoanRepository(LoanRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, policies: RepaymentPolicyFactory | None = None):
        self._conn_factory = conn_factory
        self._policies = policies or RepaymentPolicyFactory()

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teacher_loans WHERE loan_id=%s", (int(loan_id),))
            row = fetchone(cur)
            return row_to_loan(row, self._policies) if row else None

    def list_for_teacher(self, teacher_id: int, *, status: Optional[LoanStatus] = None) -> Sequence[Loan]:
        clauses = ["teacher_id=%s"]
        params: list[object] = [int(teacher_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM teacher_loans
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at ASC, loan_id ASC
                """,
                tuple(params),
            )
            return [row_to_loan(r, self._policies) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Loan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_loans WHERE status=%s ORDER BY created_at ASC, loan_id ASC",
                (LoanStatus.ACTIVE.value,),
            )
            return [row_to_loan(r, self._policies) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Loan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teacher_loans ORDER BY created_at DESC, loan_id DESC")
            return [row_to_loan(r, self._policies) for r in fetchall(cur)]

    def create(
        self,
        *,
        teacher_id: int,
        amount: Decimal,
        repayment: RepaymentPolicy,
        date_issued: date,
        notes: str = "",
    ) -> int:
        columns = self._policies.to_columns(repayment)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_loans(
                    teacher_id, amount, remaining, status, date_issued, notes,
                    repayment_type, repayment_month, repayment_percentage, repayment_amount
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(teacher_id),
                    amount,
                    amount,
                    LoanStatus.ACTIVE.value,
                    date_issued,
                    notes,
                    columns["repayment_type"],
                    columns["repayment_month"],
                    columns["repayment_percentage"],
                    columns["repayment_amount"],
                ),
            )
            return int(cur.lastrowid)

    def update_balance(
        self,
        *,
        loan_id: int,
        remaining: Decimal,
        status: LoanStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if notes is None:
                cur.execute(
                    "UPDATE teacher_loans SET remaining=%s, status=%s WHERE loan_id=%s",
                    (remaining, status.value, int(loan_id)),
                )
            else:
                cur.execute(
                    "UPDATE teacher_loans SET remaining=%s, status=%s, notes=%s WHERE loan_id=%s",
                    (remaining, status.value, notes, int(loan_id)),
                )
            return cur.rowcount > 0
