from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .fees.mysql_fee_repository import MySQLFeePaymentRepository, MySQLFeeStructureRepository
from .fees.mysql_student_repository import MySQLStudentRepository
from .fees.service import FeeService
from .loans.mysql_advance_repository import MySQLAdvanceRepository
from .loans.mysql_loan_repository import MySQLLoanRepository
from .loans.policies.factory import RepaymentPolicyFactory
from .payroll.mysql_salary_repository import MySQLSalaryRepository
from .payroll.service import PayrollService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.service import TeacherService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    teachers_repo: MySQLTeacherRepository
    loans_repo: MySQLLoanRepository
    advances_repo: MySQLAdvanceRepository
    salaries_repo: MySQLSalaryRepository
    attendance_repo: MySQLAttendanceRepository
    students_repo: MySQLStudentRepository
    fee_structures_repo: MySQLFeeStructureRepository
    fee_payments_repo: MySQLFeePaymentRepository

    teacher_service: TeacherService
    payroll_service: PayrollService
    attendance_service: AttendanceService
    fee_service: FeeService


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", 0)),
    )
    conn = DatabaseConnection.get_instance(config)

    teachers_repo = MySQLTeacherRepository(conn)
    loans_repo = MySQLLoanRepository(conn, policies=RepaymentPolicyFactory())
    advances_repo = MySQLAdvanceRepository(conn)
    salaries_repo = MySQLSalaryRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    fee_structures_repo = MySQLFeeStructureRepository(conn)
    fee_payments_repo = MySQLFeePaymentRepository(conn)

    teacher_service = TeacherService(teachers_repo)
    payroll_service = PayrollService(teachers_repo, loans_repo, advances_repo, salaries_repo)
    attendance_service = AttendanceService(attendance_repo, teachers_repo)
    fee_service = FeeService(students_repo, fee_structures_repo, fee_payments_repo)

    return Container(
        conn=conn,
        teachers_repo=teachers_repo,
        loans_repo=loans_repo,
        advances_repo=advances_repo,
        salaries_repo=salaries_repo,
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        fee_structures_repo=fee_structures_repo,
        fee_payments_repo=fee_payments_repo,
        teacher_service=teacher_service,
        payroll_service=payroll_service,
        attendance_service=attendance_service,
        fee_service=fee_service,
    )
