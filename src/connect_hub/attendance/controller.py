from __future__ import annotations

from flask import Flask, request

from ..auth.guard import Guards, current_actor
from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, json_response
from ..common.pagination import PageRequest
from ..common.validators import optional_str
from ..container import Container
from ..core.exceptions import ValidationError
from ..core.policy import Action
from ..storage.model import UploadFile
from .model import AttendanceFilter


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    attendance = container.attendance_service

    @app.post("/connect-attendance", endpoint="attendance_create")
    @guards.requires(Action.ATTENDANCE_CREATE)
    def attendance_create():
        body = json_body()
        record = attendance.create(
            actor=current_actor(),
            group_id=body.get("group_id", ""),
            date=body.get("date", ""),
            notes=body.get("notes"),
            photo=UploadFile.from_werkzeug(request.files.get("photo_file")),
        )
        return json_response(record.to_dict(), 201)

    @app.get("/connect-attendance", endpoint="attendance_list")
    @guards.requires(Action.ATTENDANCE_READ)
    def attendance_list():
        flt = AttendanceFilter(
            group_id=optional_str(request.args.get("group_id")),
            start_date=parse_optional_date(request.args.get("start_date")),
            end_date=parse_optional_date(request.args.get("end_date")),
        )
        page = attendance.list(flt, PageRequest.from_args(request.args))
        return json_response(page.to_dict(lambda r: r.to_dict()))

    @app.get("/connect-attendance/<attendance_id>", endpoint="attendance_get")
    @guards.requires(Action.ATTENDANCE_READ)
    def attendance_get(attendance_id: str):
        return json_response(attendance.get(attendance_id).to_dict())

    @app.put("/connect-attendance/<attendance_id>", endpoint="attendance_update")
    @guards.requires(Action.ATTENDANCE_UPDATE)
    def attendance_update(attendance_id: str):
        body = json_body()
        if "group_id" in body:
            raise ValidationError("group_id cannot be changed")
        record = attendance.update(
            actor=current_actor(),
            attendance_id=attendance_id,
            date=body.get("date") or None,
            notes=body.get("notes"),
            photo=UploadFile.from_werkzeug(request.files.get("photo_file")),
        )
        return json_response(record.to_dict())

    @app.delete("/connect-attendance/<attendance_id>", endpoint="attendance_delete")
    @guards.requires(Action.ATTENDANCE_DELETE)
    def attendance_delete(attendance_id: str):
        attendance.delete(actor=current_actor(), attendance_id=attendance_id)
        return json_response({"message": "Attendance record deleted"})
