"""In-memory repository fakes shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from src.payroll_system.payroll_system.attendance.model import AttendanceEntry
from src.payroll_system.payroll_system.common.datetime_utils import Month
from src.payroll_system.payroll_system.core.enums import LoanStatus, StudentStatus, TeacherStatus
from src.payroll_system.payroll_system.core.exceptions import StaleSnapshotError
from src.payroll_system.payroll_system.fees.model import FeePayment, FeeStructure, Student
from src.payroll_system.payroll_system.loans.model import Advance, Loan
from src.payroll_system.payroll_system.payroll.model import SalaryRecord
from src.payroll_system.payroll_system.teachers.model import Teacher


class InMemoryTeachers:
    def __init__(self, *teachers: Teacher):
        self.by_id: dict[int, Teacher] = {t.teacher_id: t for t in teachers}
        self._id = max(self.by_id, default=0)
        self.with_history: set[int] = set()

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self.by_id.get(teacher_id)

    def list_all(self, *, status=None):
        return [t for t in self.by_id.values() if status is None or t.status == status]

    def create(self, *, name, contact, cnic, joining_date, monthly_salary, status) -> int:
        self._id += 1
        self.by_id[self._id] = Teacher(
            teacher_id=self._id,
            name=name,
            monthly_salary=monthly_salary,
            status=status,
            contact=contact,
            cnic=cnic,
            joining_date=joining_date,
        )
        return self._id

    def update(self, *, teacher_id, name, contact, cnic, joining_date, monthly_salary) -> bool:
        t = self.by_id.get(teacher_id)
        if not t:
            return False
        self.by_id[teacher_id] = replace(
            t, name=name, contact=contact, cnic=cnic, joining_date=joining_date, monthly_salary=monthly_salary
        )
        return True

    def set_status(self, teacher_id: int, *, status: TeacherStatus) -> bool:
        self.by_id[teacher_id] = replace(self.by_id[teacher_id], status=status)
        return True

    def delete_by_id(self, teacher_id: int) -> bool:
        return self.by_id.pop(teacher_id, None) is not None

    def has_payroll_history(self, teacher_id: int) -> bool:
        return teacher_id in self.with_history


class InMemoryLoans:
    def __init__(self, *loans: Loan):
        self.by_id: dict[int, Loan] = {loan.loan_id: loan for loan in loans}
        self._id = max(self.by_id, default=0)

    def get_by_id(self, loan_id: int) -> Optional[Loan]:
        return self.by_id.get(loan_id)

    def list_for_teacher(self, teacher_id: int, *, status=None):
        return [
            loan
            for loan in self.by_id.values()
            if loan.teacher_id == teacher_id and (status is None or loan.status == status)
        ]

    def list_active(self):
        return [loan for loan in self.by_id.values() if loan.status == LoanStatus.ACTIVE]

    def list_all(self):
        return list(self.by_id.values())

    def create(self, *, teacher_id, amount, repayment, date_issued, notes="") -> int:
        self._id += 1
        self.by_id[self._id] = Loan(
            loan_id=self._id,
            teacher_id=teacher_id,
            amount=amount,
            remaining=amount,
            repayment=repayment,
            date_issued=date_issued,
            created_at=datetime(2025, 1, 1, 0, 0, self._id % 60),
            notes=notes,
        )
        return self._id

    def update_balance(self, *, loan_id, remaining, status, notes=None) -> bool:
        loan = self.by_id.get(loan_id)
        if not loan:
            return False
        self.by_id[loan_id] = replace(
            loan, remaining=remaining, status=status, notes=notes if notes is not None else loan.notes
        )
        return True


class InMemoryAdvances:
    def __init__(self, *advances: Advance):
        self.by_id: dict[int, Advance] = {a.advance_id: a for a in advances}
        self._id = max(self.by_id, default=0)

    def list_for_teacher_month(self, teacher_id: int, month: Month):
        return [a for a in self.by_id.values() if a.teacher_id == teacher_id and a.month == month]

    def list_for_month(self, month: Month):
        return [a for a in self.by_id.values() if a.month == month]

    def list_for_teacher(self, teacher_id: int):
        return [a for a in self.by_id.values() if a.teacher_id == teacher_id]

    def create(self, *, teacher_id, month, amount, date_given, payment_mode, notes="") -> int:
        self._id += 1
        self.by_id[self._id] = Advance(
            advance_id=self._id,
            teacher_id=teacher_id,
            month=month,
            amount=amount,
            date_given=date_given,
            payment_mode=payment_mode,
            notes=notes,
        )
        return self._id

    def delete(self, *, advance_id: int) -> bool:
        return self.by_id.pop(advance_id, None) is not None


class InMemorySalaries:
    """Salary ledger that applies loan updates to ``loans`` like the MySQL commit does."""

    def __init__(self, loans: InMemoryLoans, *records: SalaryRecord):
        self.loans = loans
        self.records: list[SalaryRecord] = list(records)
        self._id = max((r.salary_id for r in self.records), default=0)

    def list_for_teacher_month(self, teacher_id: int, month: Month):
        return [r for r in self.records if r.teacher_id == teacher_id and r.month == month]

    def list_for_month(self, month: Month):
        return [r for r in self.records if r.month == month]

    def list_history(self, *, teacher_id=None, month=None, limit=200):
        rows = [
            r
            for r in self.records
            if (teacher_id is None or r.teacher_id == teacher_id) and (month is None or r.month == month)
        ]
        rows.sort(key=lambda r: (r.date_paid, r.salary_id), reverse=True)
        return rows[:limit]

    def commit_pay_run(self, *, record, loan_updates, expected_already_paid) -> int:
        paid = sum(
            (r.net_paid for r in self.list_for_teacher_month(record.teacher_id, record.month)),
            Decimal("0"),
        )
        if paid != expected_already_paid:
            raise StaleSnapshotError("Salary for this month was updated by someone else; reload and try again")
        for u in loan_updates:
            loan = self.loans.by_id[u.loan_id]
            if loan.remaining != u.previous_remaining or loan.status != LoanStatus.ACTIVE:
                raise StaleSnapshotError("Loan balance changed; reload and try again")

        for u in loan_updates:
            self.loans.update_balance(loan_id=u.loan_id, remaining=u.new_remaining, status=u.new_status)
        self._id += 1
        self.records.append(SalaryRecord(salary_id=self._id, **vars(record)))
        return self._id


class InMemoryAttendance:
    def __init__(self):
        self.by_id: dict[int, AttendanceEntry] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceEntry]:
        return self.by_id.get(attendance_id)

    def get_for_teacher_and_date(self, teacher_id: int, work_date: date) -> Optional[AttendanceEntry]:
        for e in self.by_id.values():
            if e.teacher_id == teacher_id and e.work_date == work_date:
                return e
        return None

    def create(self, *, teacher_id, work_date, time_in, time_out, notes="") -> int:
        self._id += 1
        self.by_id[self._id] = AttendanceEntry(
            attendance_id=self._id,
            teacher_id=teacher_id,
            work_date=work_date,
            time_in=time_in,
            time_out=time_out,
            notes=notes,
        )
        return self._id

    def update(self, *, attendance_id, time_in, time_out, notes="") -> bool:
        self.by_id[attendance_id] = replace(self.by_id[attendance_id], time_in=time_in, time_out=time_out, notes=notes)
        return True

    def list_range(self, *, start_date, end_date, teacher_id=None):
        return [
            e
            for e in self.by_id.values()
            if start_date <= e.work_date <= end_date and (teacher_id is None or e.teacher_id == teacher_id)
        ]


class InMemoryStudents:
    def __init__(self, *students: Student):
        self.by_id: dict[int, Student] = {s.student_id: s for s in students}
        self._id = max(self.by_id, default=0)

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.by_id.get(student_id)

    def get_by_code(self, student_code: str) -> Optional[Student]:
        return next((s for s in self.by_id.values() if s.student_code == student_code), None)

    def list_all(self, *, status=None, class_grade=None):
        return [
            s
            for s in self.by_id.values()
            if (status is None or s.status == status) and (class_grade is None or s.class_grade == class_grade)
        ]

    def create(self, *, student_code, name, class_grade, guardian_name, contact, enrollment_date) -> int:
        self._id += 1
        self.by_id[self._id] = Student(
            student_id=self._id,
            student_code=student_code,
            name=name,
            class_grade=class_grade,
            guardian_name=guardian_name,
            contact=contact,
            enrollment_date=enrollment_date,
        )
        return self._id

    def set_status(self, student_id: int, *, status: StudentStatus) -> bool:
        self.by_id[student_id] = replace(self.by_id[student_id], status=status)
        return True


class InMemoryFeeStructures:
    def __init__(self):
        self.by_key: dict[tuple, FeeStructure] = {}
        self._id = 0

    def get(self, *, class_grade, fee_type):
        return self.by_key.get((class_grade, fee_type))

    def list_all(self):
        return list(self.by_key.values())

    def upsert(self, *, class_grade, fee_type, amount) -> int:
        existing = self.by_key.get((class_grade, fee_type))
        if existing:
            fee_id = existing.fee_id
        else:
            self._id += 1
            fee_id = self._id
        self.by_key[(class_grade, fee_type)] = FeeStructure(
            fee_id=fee_id, class_grade=class_grade, fee_type=fee_type, amount=amount
        )
        return fee_id

    def delete(self, *, fee_id: int) -> bool:
        for key, f in list(self.by_key.items()):
            if f.fee_id == fee_id:
                del self.by_key[key]
                return True
        return False


class InMemoryFeePayments:
    def __init__(self):
        self.payments: list[FeePayment] = []

    def create(self, *, student_id, fee_type, amount_paid, paid_on, fee_month, receipt_number, payment_mode, notes="") -> int:
        payment_id = len(self.payments) + 1
        self.payments.append(
            FeePayment(
                payment_id=payment_id,
                student_id=student_id,
                fee_type=fee_type,
                amount_paid=amount_paid,
                paid_on=paid_on,
                fee_month=fee_month,
                receipt_number=receipt_number,
                payment_mode=payment_mode,
                notes=notes,
            )
        )
        return payment_id

    def get_by_receipt(self, receipt_number: str):
        return next((p for p in self.payments if p.receipt_number == receipt_number), None)

    def list_for_month(self, month: Month):
        return [p for p in self.payments if p.fee_month == month]

    def list_recent(self, *, student_id=None, limit=200):
        rows = [p for p in self.payments if student_id is None or p.student_id == student_id]
        return list(reversed(rows))[:limit]


def make_teacher(teacher_id: int = 1, salary: str = "50000", **kw) -> Teacher:
    return Teacher(teacher_id=teacher_id, name=kw.pop("name", f"Teacher {teacher_id}"), monthly_salary=Decimal(salary), **kw)


def make_loan(loan_id: int, repayment, *, teacher_id: int = 1, amount: str = "100000", remaining: Optional[str] = None, **kw) -> Loan:
    return Loan(
        loan_id=loan_id,
        teacher_id=teacher_id,
        amount=Decimal(amount),
        remaining=Decimal(remaining if remaining is not None else amount),
        repayment=repayment,
        created_at=kw.pop("created_at", datetime(2025, 1, 1, 9, 0, loan_id)),
        **kw,
    )
