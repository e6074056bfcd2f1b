from __future__ import annotations

from flask import Flask, request

from ..common.http import json_body, json_endpoint, ok, optional_date, optional_int
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @json_endpoint
    def attendance_list():
        rows = service.list_month(
            month=request.args.get("month", ""),
            teacher_id=optional_int(request.args.get("teacher_id"), "Teacher"),
        )
        return ok(rows)

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_record")
    @json_endpoint
    def attendance_record():
        data = json_body()
        work_date = optional_date(data.get("date"))
        if work_date is None:
            raise ValidationError("Date is required")
        attendance_id = service.record(
            teacher_id=optional_int(data.get("teacher_id"), "Teacher"),
            work_date=work_date,
            time_in=data.get("time_in"),
            time_out=data.get("time_out"),
            notes=data.get("notes", ""),
        )
        return ok({"attendance_id": attendance_id}, "Attendance recorded", 201)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @json_endpoint
    def attendance_update(attendance_id: int):
        data = json_body()
        service.update(
            attendance_id=attendance_id,
            time_in=data.get("time_in"),
            time_out=data.get("time_out"),
            notes=data.get("notes"),
        )
        return ok(message="Attendance updated")

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @json_endpoint
    def attendance_summary():
        summary = service.monthly_summary(month=request.args.get("month", ""))
        return ok(
            [
                {
                    "teacher_id": s.teacher_id,
                    "teacher_name": s.teacher_name,
                    "days_recorded": s.days_recorded,
                    "days_complete": s.days_complete,
                    "total_hours": s.total_hours,
                }
                for s in summary
            ]
        )
