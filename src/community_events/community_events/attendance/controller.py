from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.http import (
    as_datetime,
    as_int,
    current_user_id,
    json_body,
    login_required,
    ok,
    require_field,
    staff_required,
)
from ..container import Container
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def _status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(str(value).upper())
    except ValueError:
        raise ValidationError(f"Invalid status: {value}")


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance", methods=["GET"], endpoint="query_attendance")
    @staff_required
    def query_attendance():
        args = request.args
        page = container.attendance_service.query_attendance(
            event_id=as_int(args["event_id"], "event_id") if args.get("event_id") else None,
            status=_status(args["status"]) if args.get("status") else None,
            search=args.get("search"),
            start_date=as_datetime(args.get("start_date"), "start_date"),
            end_date=as_datetime(args.get("end_date"), "end_date"),
            page=as_int(args.get("page", 1), "page"),
            limit=as_int(args.get("limit", 10), "limit"),
        )
        return ok(
            {
                "items": page.items,
                "pagination": {
                    "page": page.page,
                    "limit": page.limit,
                    "total": page.total,
                    "total_pages": page.total_pages,
                },
            }
        )

    @app.route("/attendance/check-in", methods=["POST"], endpoint="check_in")
    @staff_required
    def check_in():
        data = json_body()
        record = container.attendance_service.check_in(
            as_int(require_field(data, "event_id"), "event_id"),
            as_int(require_field(data, "user_id"), "user_id"),
            notes=data.get("notes"),
        )
        return ok(record, "User checked in successfully")

    @app.route("/attendance/check-out", methods=["POST"], endpoint="check_out")
    @staff_required
    def check_out():
        data = json_body()
        record = container.attendance_service.check_out(
            as_int(require_field(data, "event_id"), "event_id"),
            as_int(require_field(data, "user_id"), "user_id"),
            notes=data.get("notes"),
        )
        return ok(record, "User checked out successfully")

    @app.route("/events/<int:event_id>/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance(event_id: int):
        record = container.attendance_service.mark_attendance(event_id, current_user_id())
        return ok(record, "Attendance marked successfully")

    @app.route("/events/<int:event_id>/attendance", methods=["GET"], endpoint="event_attendance")
    @staff_required
    def event_attendance(event_id: int):
        return ok(list(container.attendance_service.list_for_event(event_id)))
