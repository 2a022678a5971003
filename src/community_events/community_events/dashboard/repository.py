from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .model import DashboardStats


class StatsRepository(Protocol):
    def dashboard_stats(self, *, now: datetime, month_start: datetime) -> DashboardStats:
        """Upcoming: starts after `now`. Past: ended before `now`.

        Active registrations are CONFIRMED ones for upcoming events.
        """

        raise NotImplementedError

    def attendance_counts(self, event_id: int) -> tuple[int, int]:
        """(currently checked in, checked out) for one event."""

        raise NotImplementedError
