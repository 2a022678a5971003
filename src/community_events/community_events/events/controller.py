from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from flask import Flask, request

from ..common.http import (
    as_bool,
    as_datetime,
    as_int,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    require_field,
    staff_required,
)
from ..container import Container
from ..core.enums import EventCategory
from ..core.exceptions import ValidationError
from .model import NewEvent

_DATE_FIELDS = ("start_date", "end_date", "registration_deadline")


def _category(value: Any) -> EventCategory:
    try:
        return EventCategory(str(value).upper())
    except ValueError:
        raise ValidationError(f"Invalid category: {value}")


def _parse_changes(data: Mapping[str, Any]) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key in _DATE_FIELDS:
            changes[key] = as_datetime(value, key)
        elif key == "category":
            changes[key] = _category(value)
        elif key in ("registration_required", "is_active"):
            changes[key] = as_bool(value)
        elif key == "max_attendees":
            changes[key] = None if value in (None, "") else as_int(value, key)
        else:
            changes[key] = value
    for key in ("start_date", "end_date"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} is required")
    return changes


def _new_event(data: Mapping[str, Any]) -> NewEvent:
    unknown = set(data) - {f.name for f in fields(NewEvent)}
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    for name in ("title", "start_date", "end_date", "location", "category"):
        require_field(data, name)
    return NewEvent(**_parse_changes(data))


def register(app: Flask, container: Container) -> None:
    @app.route("/events", methods=["GET"], endpoint="list_events")
    def list_events():
        args = request.args
        page = container.event_service.list_events(
            category=_category(args["category"]) if args.get("category") else None,
            is_active=as_bool(args["is_active"]) if "is_active" in args else None,
            search=args.get("search"),
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

    @app.route("/events", methods=["POST"], endpoint="create_event")
    @staff_required
    def create_event():
        event = container.event_service.create_event(
            current_role=current_role(),
            created_by=current_user_id(),
            data=_new_event(json_body()),
        )
        return ok(event, "Event created", 201)

    @app.route("/events/<int:event_id>", methods=["GET"], endpoint="get_event")
    def get_event(event_id: int):
        return ok(container.event_service.get_event(event_id))

    @app.route("/events/<int:event_id>", methods=["PUT"], endpoint="update_event")
    @login_required
    def update_event(event_id: int):
        event = container.event_service.update_event(
            event_id=event_id,
            current_user_id=current_user_id(),
            current_role=current_role(),
            changes=_parse_changes(json_body()),
        )
        return ok(event, "Event updated")

    @app.route("/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    @login_required
    def delete_event(event_id: int):
        container.event_service.delete_event(
            event_id=event_id,
            current_user_id=current_user_id(),
            current_role=current_role(),
        )
        return ok(message="Event deleted")
