from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.http import iso, json_body, json_endpoint, money, ok, optional_date, optional_int
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..loans.model import Advance, Loan
from ..loans.policies.factory import RepaymentPolicyFactory
from .model import PayBreakdown, PayoffEstimate, SalaryRecord

_policies = RepaymentPolicyFactory()


def breakdown_json(b: PayBreakdown) -> dict:
    return {
        "teacher_id": b.teacher_id,
        "month": str(b.month),
        "base_salary": money(b.base_salary),
        "loan_deduction": money(b.loan_deduction),
        "advance_deduction": money(b.advance_deduction),
        "other_deduction": money(b.other_deduction),
        "expected_salary": money(b.expected_salary),
        "already_paid": money(b.already_paid),
        "pending_amount": money(b.pending_amount),
        "status": b.status.value,
        "loan_deduction_settled": b.loan_deduction_settled,
        "anomalies": list(b.anomalies),
        "loans": [
            {"loan_id": line.loan_id, "candidate": money(line.candidate), "deducted": money(line.deducted)}
            for line in b.loan_lines
        ],
    }


def payoff_json(p: Optional[PayoffEstimate]) -> Optional[dict]:
    if p is None:
        return None
    return {
        "kind": p.kind.value,
        "month": str(p.month) if p.month else None,
        "months_remaining": p.months_remaining,
        "label": p.label(),
    }


def record_json(r: SalaryRecord) -> dict:
    return {
        "salary_id": r.salary_id,
        "teacher_id": r.teacher_id,
        "month": str(r.month),
        "base_salary": money(r.base_salary),
        "loan_deduction": money(r.loan_deduction),
        "advance_deduction": money(r.advance_deduction),
        "other_deduction": money(r.other_deduction),
        "net_paid": money(r.net_paid),
        "date_paid": iso(r.date_paid),
        "payment_mode": r.payment_mode.value,
        "notes": r.notes,
        "receipt_url": r.receipt_url,
        "proof_image_url": r.proof_image_url,
    }


def loan_json(loan: Loan) -> dict:
    return {
        "loan_id": loan.loan_id,
        "teacher_id": loan.teacher_id,
        "amount": money(loan.amount),
        "remaining": money(loan.remaining),
        "status": loan.status.value,
        "date_issued": iso(loan.date_issued),
        "notes": loan.notes,
        "repayment": {
            k: (str(v) if v is not None else None) for k, v in _policies.to_columns(loan.repayment).items()
        },
        "repayment_label": loan.repayment.describe(),
    }


def advance_json(a: Advance) -> dict:
    return {
        "advance_id": a.advance_id,
        "teacher_id": a.teacher_id,
        "month": str(a.month),
        "amount": money(a.amount),
        "date_given": iso(a.date_given),
        "payment_mode": a.payment_mode.value,
        "notes": a.notes,
    }


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    # Salaries
    @app.route("/api/payroll/pending", methods=["GET"], endpoint="payroll_pending")
    @json_endpoint
    def payroll_pending():
        report = service.pending_salaries(month=request.args.get("month", ""))
        return ok(
            {
                "month": str(report.month),
                "active_teachers": report.active_teachers,
                "total_pending": money(report.total_pending),
                "rows": [
                    {
                        "teacher_name": row.teacher_name,
                        "contact": row.contact,
                        "cnic": row.cnic,
                        "payoff": payoff_json(row.payoff),
                        **breakdown_json(row.breakdown),
                    }
                    for row in report.rows
                ],
            }
        )

    @app.route("/api/payroll/expected", methods=["GET"], endpoint="payroll_expected")
    @json_endpoint
    def payroll_expected():
        breakdown = service.expected_pay(
            teacher_id=optional_int(request.args.get("teacher_id"), "Teacher"),
            month=request.args.get("month", ""),
            base_salary_override=request.args.get("base_salary") or None,
            other_deduction=request.args.get("other_deduction") or 0,
        )
        return ok(breakdown_json(breakdown))

    @app.route("/api/payroll/pay", methods=["POST"], endpoint="payroll_pay")
    @json_endpoint
    def payroll_pay():
        data = json_body()
        result = service.pay_salary(
            teacher_id=optional_int(data.get("teacher_id"), "Teacher"),
            month=data.get("month", ""),
            amount=data.get("amount"),
            payment_mode=data.get("payment_mode", "cash"),
            notes=data.get("notes", ""),
            proof_image_url=data.get("proof_image_url", ""),
            receipt_url=data.get("receipt_url", ""),
            other_deduction=data.get("other_deduction") or 0,
            base_salary_override=data.get("base_salary") or None,
            loan_deduction_override=data.get("loan_deduction"),
            date_paid=optional_date(data.get("date_paid"), "Payment date"),
        )
        return ok(
            {
                "record": record_json(result.record),
                "breakdown": breakdown_json(result.breakdown),
                "loans_updated": [
                    {
                        "loan_id": u.loan_id,
                        "deducted": money(u.deducted),
                        "remaining": money(u.new_remaining),
                        "status": u.new_status.value,
                    }
                    for u in result.application.updates
                ],
                "paid_off_loan_ids": list(result.application.paid_off_loan_ids),
            },
            "Salary payment recorded",
            201,
        )

    @app.route("/api/payroll/history", methods=["GET"], endpoint="payroll_history")
    @json_endpoint
    def payroll_history():
        records = service.salary_history(
            teacher_id=optional_int(request.args.get("teacher_id"), "Teacher"),
            month=request.args.get("month") or None,
            limit=optional_int(request.args.get("limit"), "Limit") or DEFAULT_HISTORY_LIMIT,
        )
        return ok([record_json(r) for r in records])

    # Loans
    @app.route("/api/loans", methods=["GET"], endpoint="loans_list")
    @json_endpoint
    def loans_list():
        loans = service.list_loans(teacher_id=optional_int(request.args.get("teacher_id"), "Teacher"))
        return ok([loan_json(loan) for loan in loans])

    @app.route("/api/loans", methods=["POST"], endpoint="loans_create")
    @json_endpoint
    def loans_create():
        data = json_body()
        loan_id = service.register_loan(
            teacher_id=optional_int(data.get("teacher_id"), "Teacher"),
            amount=data.get("amount"),
            repayment_type=data.get("repayment_type", "manual"),
            repayment_month=data.get("repayment_month") or None,
            repayment_percentage=data.get("repayment_percentage"),
            repayment_amount=data.get("repayment_amount"),
            date_issued=optional_date(data.get("date_issued"), "Loan date"),
            notes=data.get("notes", ""),
        )
        return ok({"loan_id": loan_id}, "Loan added", 201)

    @app.route("/api/loans/<int:loan_id>/balance", methods=["POST"], endpoint="loans_override")
    @json_endpoint
    def loans_override(loan_id: int):
        data = json_body()
        loan = service.override_loan_balance(loan_id=loan_id, remaining=data.get("remaining"), notes=data.get("notes"))
        return ok(loan_json(loan), "Loan balance updated")

    @app.route("/api/teachers/<int:teacher_id>/loans/summary", methods=["GET"], endpoint="loans_summary")
    @json_endpoint
    def loans_summary(teacher_id: int):
        summary = service.loan_summary(teacher_id=teacher_id)
        return ok(
            {
                "teacher_id": summary.teacher_id,
                "total_remaining": money(summary.total_remaining),
                "payoff": payoff_json(summary.payoff),
                "loans": [
                    {**loan_json(o.loan), "payoff": payoff_json(o.payoff)}
                    for o in summary.loans
                ],
            }
        )

    # Advances
    @app.route("/api/teachers/<int:teacher_id>/advances", methods=["GET"], endpoint="advances_list")
    @json_endpoint
    def advances_list(teacher_id: int):
        return ok([advance_json(a) for a in service.list_advances(teacher_id=teacher_id)])

    @app.route("/api/advances", methods=["POST"], endpoint="advances_create")
    @json_endpoint
    def advances_create():
        data = json_body()
        advance_id = service.record_advance(
            teacher_id=optional_int(data.get("teacher_id"), "Teacher"),
            month=data.get("month", ""),
            amount=data.get("amount"),
            date_given=optional_date(data.get("date_given"), "Date given"),
            payment_mode=data.get("payment_mode", "cash"),
            notes=data.get("notes", ""),
        )
        return ok({"advance_id": advance_id}, "Advance recorded", 201)

    @app.route("/api/advances/<int:advance_id>", methods=["DELETE"], endpoint="advances_delete")
    @json_endpoint
    def advances_delete(advance_id: int):
        service.delete_advance(advance_id=advance_id)
        return ok(message="Advance deleted")
