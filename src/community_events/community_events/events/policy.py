"""Event-state checks shared by registration, attendance and QR check-in."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import ErrorCode
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Event


def require_event(event: Optional[Event]) -> Event:
    if event is None:
        raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)
    return event


def ensure_active(event: Event) -> None:
    if not event.is_active:
        raise ValidationError("Event is not active", ErrorCode.EVENT_NOT_ACTIVE)


def ensure_ongoing(event: Event, now: datetime) -> None:
    """Check-in window is [start_date, end_date] inclusive."""
    ensure_active(event)
    if event.start_date > now:
        raise ValidationError("Event has not started yet", ErrorCode.EVENT_NOT_STARTED)
    if event.end_date < now:
        raise ValidationError("Event has already ended", ErrorCode.EVENT_ENDED)


def ensure_not_started(event: Event, now: datetime, message: str) -> None:
    if event.has_started(now):
        raise ValidationError(message, ErrorCode.EVENT_ALREADY_STARTED)


def ensure_registration_open(event: Event, now: datetime) -> None:
    if event.registration_closed(now):
        raise ValidationError("Registration deadline has passed", ErrorCode.REGISTRATION_DEADLINE_PASSED)


def capacity_exceeded() -> ValidationError:
    return ValidationError("Event is at full capacity. Registration is closed.", ErrorCode.CAPACITY_EXCEEDED)


def already_registered() -> ConflictError:
    return ConflictError("Already registered for this event", ErrorCode.ALREADY_REGISTERED)
