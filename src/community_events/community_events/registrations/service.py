from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import ErrorCode
from ..core.exceptions import NotFoundError, ValidationError
from ..events.model import Event
from ..events.policy import (
    already_registered,
    capacity_exceeded,
    ensure_active,
    ensure_not_started,
    ensure_registration_open,
    require_event,
)
from ..events.repository import EventRepository
from .model import Registration, ReserveOutcome
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


def raise_for_outcome(outcome: ReserveOutcome) -> None:
    """Translate a failed slot reservation into the matching domain error."""
    if outcome == ReserveOutcome.RESERVED:
        return
    if outcome == ReserveOutcome.ALREADY_REGISTERED:
        raise already_registered()
    if outcome == ReserveOutcome.CAPACITY_EXCEEDED:
        raise capacity_exceeded()
    raise NotFoundError("Event not found", ErrorCode.EVENT_NOT_FOUND)


class RegistrationService:
    """Registration ledger: capacity-bounded registration and cancellation."""

    def __init__(self, events: EventRepository, registrations: RegistrationRepository):
        self._events = events
        self._registrations = registrations

    def _load_event(self, event_id: int) -> Event:
        return require_event(self._events.get_by_id(int(event_id)))

    def register(self, event_id: int, user_id: int, *, now: Optional[datetime] = None) -> Registration:
        now = now or now_local()
        event = self._load_event(event_id)

        ensure_active(event)
        if not event.registration_required:
            raise ValidationError("Registration is not required for this event", ErrorCode.REGISTRATION_NOT_REQUIRED)
        ensure_not_started(event, now, "Cannot register for events that have already started")
        ensure_registration_open(event, now)

        if self._registrations.get(event.event_id, int(user_id)):
            raise already_registered()
        # Fast rejection on the snapshot; the reservation below re-checks atomically.
        if event.is_full:
            raise capacity_exceeded()

        outcome = self._registrations.reserve(event_id=event.event_id, user_id=int(user_id), registered_at=now)
        raise_for_outcome(outcome)
        logger.info("User %s registered for event %s", user_id, event.event_id)

        registration = self._registrations.get(event.event_id, int(user_id))
        if registration is None:
            raise NotFoundError("Registration not found", ErrorCode.REGISTRATION_NOT_FOUND)
        return registration

    def cancel(self, event_id: int, user_id: int, *, now: Optional[datetime] = None) -> None:
        now = now or now_local()
        if not self._registrations.get(int(event_id), int(user_id)):
            raise NotFoundError("Registration not found", ErrorCode.REGISTRATION_NOT_FOUND)

        event = self._load_event(event_id)
        ensure_not_started(event, now, "Cannot cancel registration for events that have started")

        if not self._registrations.release(event_id=event.event_id, user_id=int(user_id)):
            raise NotFoundError("Registration not found", ErrorCode.REGISTRATION_NOT_FOUND)
        logger.info("User %s cancelled registration for event %s", user_id, event.event_id)

    def list_for_user(self, user_id: int) -> Sequence[Registration]:
        return self._registrations.list_for_user(int(user_id))
