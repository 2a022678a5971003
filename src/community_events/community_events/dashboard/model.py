from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DashboardStats:
    """Community-wide counters for the staff dashboard."""

    total_users: int
    total_events: int
    upcoming_events: int
    past_events: int
    total_attendance: int
    this_month_attendance: int
    active_registrations: int


@dataclass(frozen=True)
class EventStats:
    event_id: int
    registrations: int
    max_attendees: Optional[int]
    spots_left: Optional[int]
    checked_in: int
    checked_out: int
    attendance_rate: Optional[float]
