from __future__ import annotations

from flask import Flask, request

from ..common.http import iso, json_body, json_endpoint, money, ok, optional_date, optional_int
from ..container import Container
from .model import FeePayment, Student


def student_json(s: Student) -> dict:
    return {
        "student_id": s.student_id,
        "student_code": s.student_code,
        "name": s.name,
        "guardian_name": s.guardian_name,
        "contact": s.contact,
        "class_grade": s.class_grade,
        "enrollment_date": iso(s.enrollment_date),
        "status": s.status.value,
    }


def payment_json(p: FeePayment) -> dict:
    return {
        "payment_id": p.payment_id,
        "student_id": p.student_id,
        "fee_type": p.fee_type.value,
        "amount_paid": money(p.amount_paid),
        "paid_on": iso(p.paid_on),
        "fee_month": str(p.fee_month),
        "receipt_number": p.receipt_number,
        "payment_mode": p.payment_mode.value,
        "notes": p.notes,
    }


def register(app: Flask, container: Container) -> None:
    service = container.fee_service

    # Students
    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @json_endpoint
    def students_list():
        students = service.list_students(
            class_grade=request.args.get("class") or None,
            active_only=request.args.get("active") in ("1", "true", "yes"),
        )
        return ok([student_json(s) for s in students])

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @json_endpoint
    def students_create():
        data = json_body()
        student_id = service.register_student(
            student_code=data.get("student_code", ""),
            name=data.get("name", ""),
            class_grade=data.get("class_grade", ""),
            guardian_name=data.get("guardian_name", ""),
            contact=data.get("contact", ""),
            enrollment_date=optional_date(data.get("enrollment_date"), "Enrollment date"),
        )
        return ok({"student_id": student_id}, "Student added", 201)

    @app.route("/api/students/<int:student_id>/status", methods=["POST"], endpoint="students_status")
    @json_endpoint
    def students_status(student_id: int):
        data = json_body()
        service.set_student_status(student_id=student_id, status=data.get("status", ""))
        return ok(message="Status updated")

    # Fee structures
    @app.route("/api/fees/structures", methods=["GET"], endpoint="fee_structures_list")
    @json_endpoint
    def fee_structures_list():
        return ok(
            [
                {
                    "fee_id": f.fee_id,
                    "class_grade": f.class_grade,
                    "fee_type": f.fee_type.value,
                    "amount": money(f.amount),
                }
                for f in service.list_fee_structures()
            ]
        )

    @app.route("/api/fees/structures", methods=["POST"], endpoint="fee_structures_set")
    @json_endpoint
    def fee_structures_set():
        data = json_body()
        fee_id = service.set_fee_structure(
            class_grade=data.get("class_grade", ""),
            fee_type=data.get("fee_type", ""),
            amount=data.get("amount"),
        )
        return ok({"fee_id": fee_id}, "Fee structure saved")

    @app.route("/api/fees/structures/<int:fee_id>", methods=["DELETE"], endpoint="fee_structures_delete")
    @json_endpoint
    def fee_structures_delete(fee_id: int):
        service.delete_fee_structure(fee_id=fee_id)
        return ok(message="Fee structure deleted")

    # Payments
    @app.route("/api/fees/payments", methods=["GET"], endpoint="fee_payments_list")
    @json_endpoint
    def fee_payments_list():
        payments = service.list_payments(student_id=optional_int(request.args.get("student_id"), "Student"))
        return ok([payment_json(p) for p in payments])

    @app.route("/api/fees/payments", methods=["POST"], endpoint="fee_payments_create")
    @json_endpoint
    def fee_payments_create():
        data = json_body()
        payment = service.record_payment(
            student_id=optional_int(data.get("student_id"), "Student"),
            amount=data.get("amount"),
            fee_month=data.get("fee_month", ""),
            fee_type=data.get("fee_type", "tuition"),
            payment_mode=data.get("payment_mode", "cash"),
            paid_on=optional_date(data.get("paid_on"), "Payment date"),
            notes=data.get("notes", ""),
        )
        return ok(payment_json(payment), f"Payment recorded, receipt {payment.receipt_number}", 201)

    @app.route("/api/fees/pending", methods=["GET"], endpoint="fees_pending")
    @json_endpoint
    def fees_pending():
        report = service.pending_fees(
            month=request.args.get("month", ""),
            class_grade=request.args.get("class") or None,
        )
        return ok(
            {
                "month": str(report.month),
                "total_pending": money(report.total_pending),
                "rows": [
                    {
                        "student": student_json(r.student),
                        "expected_fee": money(r.expected_fee),
                        "paid_amount": money(r.paid_amount),
                        "pending_amount": money(r.pending_amount),
                        "status": r.status.value,
                    }
                    for r in report.rows
                ],
            }
        )
