from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import StudentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, student_code, name, guardian_name, contact, class_grade, enrollment_date, status"


def row_to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        student_code=r["student_code"],
        name=r["name"],
        class_grade=r["class_grade"],
        status=StudentStatus(r["status"]),
        guardian_name=r.get("guardian_name") or "",
        contact=r.get("contact") or "",
        enrollment_date=r.get("enrollment_date"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return row_to_student(r) if r else None

    def get_by_code(self, student_code: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_code=%s", (student_code,))
            r = fetchone(cur)
            return row_to_student(r) if r else None

    def list_all(self, *, status: Optional[StudentStatus] = None, class_grade: Optional[str] = None) -> Sequence[Student]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if class_grade:
            clauses.append("class_grade=%s")
            params.append(class_grade)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE {' AND '.join(clauses)} ORDER BY class_grade ASC, name ASC",
                tuple(params),
            )
            return [row_to_student(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        student_code: str,
        name: str,
        class_grade: str,
        guardian_name: str,
        contact: str,
        enrollment_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(student_code, name, guardian_name, contact, class_grade, enrollment_date, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (student_code, name, guardian_name, contact, class_grade, enrollment_date, StudentStatus.ACTIVE.value),
            )
            return int(cur.lastrowid)

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE students SET status=%s WHERE student_id=%s", (status.value, int(student_id)))
            return cur.rowcount > 0
