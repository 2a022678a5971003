from __future__ import annotations

import logging
from dataclasses import fields
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_positive_int, require_non_empty
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import ErrorCode, EventCategory, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.repository import UserRepository
from .model import Event, EventPage, NewEvent
from .policy import ensure_not_started, require_event
from .repository import EventRepository

logger = logging.getLogger(__name__)


def _validate_window(
    *,
    start_date: datetime,
    end_date: datetime,
    registration_deadline: Optional[datetime],
) -> None:
    if end_date <= start_date:
        raise ValidationError("End date must be after start date")
    if registration_deadline is not None and registration_deadline > start_date:
        raise ValidationError("Registration deadline must not be after the start date")


class EventService:
    """Use case: manage the event catalog (staff) and browse it (everyone)."""

    def __init__(self, events: EventRepository, users: Optional[UserRepository] = None):
        self._events = events
        self._users = users

    def get_event(self, event_id: int) -> Event:
        return require_event(self._events.get_by_id(int(event_id)))

    def list_events(
        self,
        *,
        category: Optional[EventCategory] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> EventPage:
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        items, total = self._events.list_events(
            category=category,
            is_active=is_active,
            search=(search or "").strip() or None,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return EventPage(items=list(items), total=total, page=page, limit=limit)

    def create_event(self, *, current_role: Role, created_by: int, data: NewEvent) -> Event:
        if not current_role.is_staff:
            raise AuthorizationError("Only administrators can create events")

        title = require_non_empty(data.title, "Title")
        location = require_non_empty(data.location, "Location")
        max_attendees = optional_positive_int(data.max_attendees, "Max attendees")
        _validate_window(
            start_date=data.start_date,
            end_date=data.end_date,
            registration_deadline=data.registration_deadline,
        )

        cleaned = NewEvent(
            title=title,
            start_date=data.start_date,
            end_date=data.end_date,
            location=location,
            category=data.category,
            description=(data.description or "").strip() or None,
            max_attendees=max_attendees,
            registration_required=bool(data.registration_required),
            registration_deadline=data.registration_deadline,
            is_active=bool(data.is_active),
        )
        event_id = self._events.create_event(data=cleaned, created_by=int(created_by))
        logger.info("Event %s created by user %s", event_id, created_by)
        return self.get_event(event_id)

    def _check_owner(self, event: Event, *, current_user_id: int, current_role: Role, action: str) -> None:
        if current_role == Role.USER and event.created_by != int(current_user_id):
            raise AuthorizationError(f"You can only {action} events you created")

        if current_role == Role.SUBADMIN and self._users is not None:
            owner = self._users.get_by_id(event.created_by)
            if owner is not None and owner.role == Role.ADMIN:
                raise AuthorizationError(f"Subadmin cannot {action} admin events")

    def update_event(
        self,
        *,
        event_id: int,
        current_user_id: int,
        current_role: Role,
        changes: Mapping[str, Any],
    ) -> Event:
        event = self.get_event(event_id)
        self._check_owner(event, current_user_id=current_user_id, current_role=current_role, action="update")

        allowed = {f.name for f in fields(NewEvent)}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        changes = dict(changes)
        if "title" in changes:
            changes["title"] = require_non_empty(changes["title"], "Title")
        if "location" in changes:
            changes["location"] = require_non_empty(changes["location"], "Location")
        if "max_attendees" in changes:
            changes["max_attendees"] = optional_positive_int(changes["max_attendees"], "Max attendees")
            if changes["max_attendees"] is not None and changes["max_attendees"] < event.current_attendees:
                raise ValidationError(
                    "Max attendees cannot be lower than the number of registrations",
                    ErrorCode.CAPACITY_BELOW_ATTENDEES,
                )

        _validate_window(
            start_date=changes.get("start_date", event.start_date),
            end_date=changes.get("end_date", event.end_date),
            registration_deadline=changes.get("registration_deadline", event.registration_deadline),
        )

        if not self._events.update_event(event_id=event.event_id, changes=changes):
            raise ValidationError(
                "Max attendees cannot be lower than the number of registrations",
                ErrorCode.CAPACITY_BELOW_ATTENDEES,
            )
        logger.info("Event %s updated by user %s", event.event_id, current_user_id)
        return self.get_event(event.event_id)

    def delete_event(
        self,
        *,
        event_id: int,
        current_user_id: int,
        current_role: Role,
        now: Optional[datetime] = None,
    ) -> None:
        now = now or now_local()
        event = self.get_event(event_id)
        ensure_not_started(event, now, "Cannot delete events that have already started")
        self._check_owner(event, current_user_id=current_user_id, current_role=current_role, action="delete")

        if not self._events.delete_event(event.event_id):
            raise ValidationError("Failed to delete event")
        logger.info("Event %s deleted by user %s", event.event_id, current_user_id)
