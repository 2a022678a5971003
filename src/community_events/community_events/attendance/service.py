from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_SEARCH_LENGTH
from ..core.enums import AttendanceStatus, ErrorCode, RegistrationStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..events.model import Event
from ..events.policy import ensure_ongoing, require_event
from ..events.repository import EventRepository
from ..registrations.repository import RegistrationRepository
from .model import AttendancePage, AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def already_checked_in() -> ConflictError:
    return ConflictError("User already checked in", ErrorCode.ALREADY_CHECKED_IN)


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    return (notes or "").strip() or None


class AttendanceService:
    """Attendance tracker: check-in / check-out transitions per (event, user)."""

    def __init__(
        self,
        events: EventRepository,
        registrations: RegistrationRepository,
        attendance: AttendanceRepository,
    ):
        self._events = events
        self._registrations = registrations
        self._attendance = attendance

    def require_confirmed_registration(self, event: Event, user_id: int) -> None:
        if not event.registration_required:
            return
        registration = self._registrations.get(event.event_id, int(user_id))
        if not registration:
            raise ValidationError("User is not registered for this event", ErrorCode.USER_NOT_REGISTERED)
        if registration.status != RegistrationStatus.CONFIRMED:
            raise ValidationError("User registration is not confirmed", ErrorCode.REGISTRATION_NOT_CONFIRMED)

    def ensure_not_checked_in(self, event_id: int, user_id: int) -> None:
        existing = self._attendance.get(int(event_id), int(user_id))
        if existing and existing.is_checked_in:
            raise already_checked_in()

    def _get_record(self, event_id: int, user_id: int) -> AttendanceRecord:
        record = self._attendance.get(int(event_id), int(user_id))
        if record is None:
            raise NotFoundError("Attendance record not found", ErrorCode.ATTENDANCE_NOT_FOUND)
        return record

    def check_in(
        self,
        event_id: int,
        user_id: int,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        event = require_event(self._events.get_by_id(int(event_id)))
        ensure_ongoing(event, now)
        self.require_confirmed_registration(event, user_id)
        self.ensure_not_checked_in(event.event_id, user_id)

        if not self._attendance.record_check_in(
            event_id=event.event_id,
            user_id=int(user_id),
            check_in_time=now,
            notes=_clean_notes(notes),
        ):
            raise already_checked_in()

        logger.info("User %s checked in to event %s", user_id, event.event_id)
        return self._get_record(event.event_id, user_id)

    def mark_attendance(self, event_id: int, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        """Self-service variant of check-in used by members themselves."""
        return self.check_in(event_id, user_id, now=now)

    def check_out(
        self,
        event_id: int,
        user_id: int,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        record = self._attendance.get(int(event_id), int(user_id))
        if record is None:
            raise NotFoundError("Attendance record not found", ErrorCode.ATTENDANCE_NOT_FOUND)
        if not record.is_checked_in:
            raise ValidationError("User has not checked in yet", ErrorCode.NOT_CHECKED_IN)
        if record.check_out_time is not None:
            raise ConflictError("User already checked out", ErrorCode.ALREADY_CHECKED_OUT)

        if not self._attendance.record_check_out(
            event_id=int(event_id),
            user_id=int(user_id),
            check_out_time=now,
            notes=_clean_notes(notes),
        ):
            raise ConflictError("User already checked out", ErrorCode.ALREADY_CHECKED_OUT)

        logger.info("User %s checked out of event %s", user_id, event_id)
        return self._get_record(event_id, user_id)

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        require_event(self._events.get_by_id(int(event_id)))
        return self._attendance.list_for_event(int(event_id))

    def query_attendance(
        self,
        *,
        event_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> AttendancePage:
        """Attendance across events, filtered and paginated (latest check-in first).

        `start_date`/`end_date` bound the check-in time, both inclusive.
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        search = (search or "").strip() or None
        if search is not None and len(search) > MAX_SEARCH_LENGTH:
            raise ValidationError("Search term too long")

        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        items, total = self._attendance.search(
            event_id=int(event_id) if event_id is not None else None,
            status=status,
            search=search,
            checked_in_from=start_date,
            checked_in_to=end_date,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return AttendancePage(items=list(items), total=total, page=page, limit=limit)
