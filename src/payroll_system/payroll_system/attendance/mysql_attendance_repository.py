from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceEntry
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, teacher_id, work_date, time_in, time_out, notes"


def row_to_entry(r: dict) -> AttendanceEntry:
    return AttendanceEntry(
        attendance_id=int(r["attendance_id"]),
        teacher_id=int(r["teacher_id"]),
        work_date=r["work_date"],
        time_in=normalize_mysql_time(r.get("time_in")),
        time_out=normalize_mysql_time(r.get("time_out")),
        notes=r.get("notes") or "",
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teacher_attendance WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return row_to_entry(r) if r else None

    def get_for_teacher_and_date(self, teacher_id: int, work_date: date) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM teacher_attendance WHERE teacher_id=%s AND work_date=%s",
                (int(teacher_id), work_date),
            )
            r = fetchone(cur)
            return row_to_entry(r) if r else None

    def create(
        self,
        *,
        teacher_id: int,
        work_date: date,
        time_in: Optional[time],
        time_out: Optional[time],
        notes: str = "",
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_attendance(teacher_id, work_date, time_in, time_out, notes)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(teacher_id), work_date, time_in, time_out, notes),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        attendance_id: int,
        time_in: Optional[time],
        time_out: Optional[time],
        notes: str = "",
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_attendance
                SET time_in=%s, time_out=%s, notes=%s
                WHERE attendance_id=%s
                """,
                (time_in, time_out, notes, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        teacher_id: Optional[int] = None,
    ) -> Sequence[AttendanceEntry]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM teacher_attendance
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date DESC, teacher_id ASC
                """,
                tuple(params),
            )
            return [row_to_entry(r) for r in fetchall(cur)]
