from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from ..common.datetime_utils import Month
from ..common.money import to_decimal
from ..core.enums import PaymentMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Advance
from .repository import AdvanceRepository

_COLUMNS = "advance_id, teacher_id, month, amount, date_given, payment_mode, notes"


def row_to_advance(row: dict) -> Advance:
    return Advance(
        advance_id=int(row["advance_id"]),
        teacher_id=int(row["teacher_id"]),
        month=Month.parse(row["month"]),
        amount=to_decimal(row["amount"]),
        date_given=row.get("date_given"),
        payment_mode=PaymentMode(row.get("payment_mode") or PaymentMode.CASH.value),
        notes=row.get("notes") or "",
    )


class MySQLAdvanceRepository(AdvanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_teacher_month(self, teacher_id: int, month: Month) -> Sequence[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_advances WHERE teacher_id=%s AND month=%s ORDER BY advance_id ASC",
                (int(teacher_id), str(month)),
            )
            return [row_to_advance(r) for r in fetchall(cur)]

    def list_for_month(self, month: Month) -> Sequence[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_advances WHERE month=%s ORDER BY advance_id ASC",
                (str(month),),
            )
            return [row_to_advance(r) for r in fetchall(cur)]

    def list_for_teacher(self, teacher_id: int) -> Sequence[Advance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_advances WHERE teacher_id=%s ORDER BY created_at DESC, advance_id DESC",
                (int(teacher_id),),
            )
            return [row_to_advance(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        teacher_id: int,
        month: Month,
        amount: Decimal,
        date_given: date,
        payment_mode: PaymentMode,
        notes: str = "",
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_advances(teacher_id, month, amount, date_given, payment_mode, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(teacher_id), str(month), amount, date_given, payment_mode.value, notes),
            )
            return int(cur.lastrowid)

    def delete(self, *, advance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teacher_advances WHERE advance_id=%s", (int(advance_id),))
            return cur.rowcount > 0
