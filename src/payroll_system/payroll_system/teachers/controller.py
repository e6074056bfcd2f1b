from __future__ import annotations

from flask import Flask, request

from ..common.http import iso, json_body, json_endpoint, money, ok, optional_date
from ..container import Container
from .model import Teacher


def teacher_json(t: Teacher) -> dict:
    return {
        "teacher_id": t.teacher_id,
        "name": t.name,
        "contact": t.contact,
        "cnic": t.cnic,
        "joining_date": iso(t.joining_date),
        "monthly_salary": money(t.monthly_salary),
        "status": t.status.value,
    }


def register(app: Flask, container: Container) -> None:
    service = container.teacher_service

    @app.route("/api/teachers", methods=["GET"], endpoint="teachers_list")
    @json_endpoint
    def teachers_list():
        active_only = request.args.get("active") in ("1", "true", "yes")
        return ok([teacher_json(t) for t in service.list_teachers(active_only=active_only)])

    @app.route("/api/teachers/<int:teacher_id>", methods=["GET"], endpoint="teachers_get")
    @json_endpoint
    def teachers_get(teacher_id: int):
        return ok(teacher_json(service.get(teacher_id)))

    @app.route("/api/teachers", methods=["POST"], endpoint="teachers_create")
    @json_endpoint
    def teachers_create():
        data = json_body()
        teacher_id = service.create_teacher(
            name=data.get("name", ""),
            monthly_salary=data.get("monthly_salary"),
            contact=data.get("contact", ""),
            cnic=data.get("cnic", ""),
            joining_date=optional_date(data.get("joining_date"), "Joining date"),
        )
        return ok({"teacher_id": teacher_id}, "Teacher added", 201)

    @app.route("/api/teachers/<int:teacher_id>", methods=["PUT"], endpoint="teachers_update")
    @json_endpoint
    def teachers_update(teacher_id: int):
        data = json_body()
        service.update_teacher(
            teacher_id=teacher_id,
            name=data.get("name", ""),
            monthly_salary=data.get("monthly_salary"),
            contact=data.get("contact", ""),
            cnic=data.get("cnic", ""),
            joining_date=optional_date(data.get("joining_date"), "Joining date"),
        )
        return ok(message="Teacher updated")

    @app.route("/api/teachers/<int:teacher_id>/status", methods=["POST"], endpoint="teachers_status")
    @json_endpoint
    def teachers_status(teacher_id: int):
        data = json_body()
        service.set_status(teacher_id=teacher_id, status=data.get("status", ""))
        return ok(message="Status updated")

    @app.route("/api/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="teachers_delete")
    @json_endpoint
    def teachers_delete(teacher_id: int):
        service.delete_teacher(teacher_id=teacher_id)
        return ok(message="Teacher deleted")
