from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..events.policy import require_event
from ..events.repository import EventRepository
from .model import DashboardStats, EventStats
from .repository import StatsRepository


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class DashboardService:
    """Read-only reporting for staff."""

    def __init__(self, events: EventRepository, stats: StatsRepository):
        self._events = events
        self._stats = stats

    def dashboard_stats(self, *, now: Optional[datetime] = None) -> DashboardStats:
        now = now or now_local()
        return self._stats.dashboard_stats(now=now, month_start=month_start(now))

    def event_stats(self, event_id: int) -> EventStats:
        event = require_event(self._events.get_by_id(int(event_id)))
        checked_in, checked_out = self._stats.attendance_counts(event.event_id)
        registrations = event.current_attendees

        spots_left = None
        if event.max_attendees is not None:
            spots_left = max(0, event.max_attendees - registrations)

        # Share of registrants who showed up; undefined without registrations.
        rate = None
        if registrations:
            rate = round(100.0 * (checked_in + checked_out) / registrations, 1)

        return EventStats(
            event_id=event.event_id,
            registrations=registrations,
            max_attendees=event.max_attendees,
            spots_left=spots_left,
            checked_in=checked_in,
            checked_out=checked_out,
            attendance_rate=rate,
        )
