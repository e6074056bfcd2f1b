from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Month
from ..common.money import to_decimal
from ..core.enums import FeeType, PaymentMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FeePayment, FeeStructure
from .repository import FeePaymentRepository, FeeStructureRepository

_PAYMENT_COLUMNS = "payment_id, student_id, fee_type, amount_paid, paid_on, fee_month, receipt_number, payment_mode, notes"


def row_to_structure(r: dict) -> FeeStructure:
    return FeeStructure(
        fee_id=int(r["fee_id"]),
        class_grade=r["class_grade"],
        fee_type=FeeType(r["fee_type"]),
        amount=to_decimal(r["amount"]),
    )


def row_to_payment(r: dict) -> FeePayment:
    return FeePayment(
        payment_id=int(r["payment_id"]),
        student_id=int(r["student_id"]),
        fee_type=FeeType(r["fee_type"]),
        amount_paid=to_decimal(r["amount_paid"]),
        paid_on=r["paid_on"],
        fee_month=Month.parse(r["fee_month"]),
        receipt_number=r["receipt_number"],
        payment_mode=PaymentMode(r.get("payment_mode") or PaymentMode.CASH.value),
        notes=r.get("notes") or "",
    )


class MySQLFeeStructureRepository(FeeStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, class_grade: str, fee_type: FeeType) -> Optional[FeeStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT fee_id, class_grade, fee_type, amount FROM fee_structures WHERE class_grade=%s AND fee_type=%s",
                (class_grade, fee_type.value),
            )
            r = fetchone(cur)
            return row_to_structure(r) if r else None

    def list_all(self) -> Sequence[FeeStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT fee_id, class_grade, fee_type, amount FROM fee_structures ORDER BY class_grade, fee_type")
            return [row_to_structure(r) for r in fetchall(cur)]

    def upsert(self, *, class_grade: str, fee_type: FeeType, amount: Decimal) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fee_structures(class_grade, fee_type, amount)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE amount=VALUES(amount)
                """,
                (class_grade, fee_type.value, amount),
            )

            # If it was an update, lastrowid can be 0; fetch fee_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT fee_id FROM fee_structures WHERE class_grade=%s AND fee_type=%s",
                (class_grade, fee_type.value),
            )
            r = fetchone(cur)
            return int(r["fee_id"]) if r else 0

    def delete(self, *, fee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM fee_structures WHERE fee_id=%s", (int(fee_id),))
            return cur.rowcount > 0


class MySQLFeePaymentRepository(FeePaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        student_id: int,
        fee_type: FeeType,
        amount_paid: Decimal,
        paid_on: date,
        fee_month: Month,
        receipt_number: str,
        payment_mode: PaymentMode,
        notes: str = "",
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO fee_payments(
                    student_id, fee_type, amount_paid, paid_on, fee_month, receipt_number, payment_mode, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    fee_type.value,
                    amount_paid,
                    paid_on,
                    str(fee_month),
                    receipt_number,
                    payment_mode.value,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def get_by_receipt(self, receipt_number: str) -> Optional[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PAYMENT_COLUMNS} FROM fee_payments WHERE receipt_number=%s", (receipt_number,))
            r = fetchone(cur)
            return row_to_payment(r) if r else None

    def list_for_month(self, month: Month) -> Sequence[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PAYMENT_COLUMNS} FROM fee_payments WHERE fee_month=%s ORDER BY payment_id ASC",
                (str(month),),
            )
            return [row_to_payment(r) for r in fetchall(cur)]

    def list_recent(self, *, student_id: Optional[int] = None, limit: int = 200) -> Sequence[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_id is None:
                cur.execute(
                    f"SELECT {_PAYMENT_COLUMNS} FROM fee_payments ORDER BY paid_on DESC, payment_id DESC LIMIT %s",
                    (int(limit),),
                )
            else:
                cur.execute(
                    f"""
                    SELECT {_PAYMENT_COLUMNS}
                    FROM fee_payments
                    WHERE student_id=%s
                    ORDER BY paid_on DESC, payment_id DESC
                    LIMIT %s
                    """,
                    (int(student_id), int(limit)),
                )
            return [row_to_payment(r) for r in fetchall(cur)]
