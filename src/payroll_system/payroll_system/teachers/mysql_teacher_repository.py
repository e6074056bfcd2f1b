from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import to_decimal
from ..core.enums import TeacherStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = "teacher_id, name, contact, cnic, joining_date, monthly_salary, status"


def row_to_teacher(row: dict) -> Teacher:
    return Teacher(
        teacher_id=int(row["teacher_id"]),
        name=row["name"],
        contact=row.get("contact") or "",
        cnic=row.get("cnic") or "",
        joining_date=row.get("joining_date"),
        monthly_salary=to_decimal(row["monthly_salary"]),
        status=TeacherStatus(row["status"]),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            row = fetchone(cur)
            return row_to_teacher(row) if row else None

    def list_all(self, *, status: Optional[TeacherStatus] = None) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"SELECT {_COLUMNS} FROM teachers ORDER BY created_at DESC, teacher_id DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM teachers WHERE status=%s ORDER BY created_at DESC, teacher_id DESC",
                    (status.value,),
                )
            return [row_to_teacher(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        contact: str,
        cnic: str,
        joining_date: Optional[date],
        monthly_salary: Decimal,
        status: TeacherStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(name, contact, cnic, joining_date, monthly_salary, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, contact, cnic, joining_date, monthly_salary, status.value),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        teacher_id: int,
        name: str,
        contact: str,
        cnic: str,
        joining_date: Optional[date],
        monthly_salary: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teachers
                SET name=%s, contact=%s, cnic=%s, joining_date=%s, monthly_salary=%s
                WHERE teacher_id=%s
                """,
                (name, contact, cnic, joining_date, monthly_salary, int(teacher_id)),
            )
            return cur.rowcount > 0

    def set_status(self, teacher_id: int, *, status: TeacherStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE teachers SET status=%s WHERE teacher_id=%s", (status.value, int(teacher_id)))
            return cur.rowcount > 0

    def delete_by_id(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            return cur.rowcount > 0

    def has_payroll_history(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT EXISTS(SELECT 1 FROM teacher_salaries WHERE teacher_id=%s)
                    OR EXISTS(SELECT 1 FROM teacher_loans WHERE teacher_id=%s)
                    OR EXISTS(SELECT 1 FROM teacher_advances WHERE teacher_id=%s) AS has_history
                """,
                (int(teacher_id),) * 3,
            )
            row = fetchone(cur)
        return bool(row and row["has_history"])
