from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventCategory


@dataclass(frozen=True)
class Event:
    """Domain entity: a community event.

    `current_attendees` is a denormalized counter of CONFIRMED registrations,
    maintained only by the registration ledger.
    """

    event_id: int
    title: str
    start_date: datetime
    end_date: datetime
    location: str
    category: EventCategory
    created_by: int
    description: Optional[str] = None
    max_attendees: Optional[int] = None
    current_attendees: int = 0
    registration_required: bool = False
    registration_deadline: Optional[datetime] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_full(self) -> bool:
        return self.max_attendees is not None and self.current_attendees >= self.max_attendees

    def has_started(self, now: datetime) -> bool:
        return now >= self.start_date

    def registration_closed(self, now: datetime) -> bool:
        return self.registration_deadline is not None and now >= self.registration_deadline


@dataclass(frozen=True)
class NewEvent:
    """Validated input for creating an event."""

    title: str
    start_date: datetime
    end_date: datetime
    location: str
    category: EventCategory
    description: Optional[str] = None
    max_attendees: Optional[int] = None
    registration_required: bool = False
    registration_deadline: Optional[datetime] = None
    is_active: bool = True


@dataclass(frozen=True)
class EventPage:
    items: list[Event]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
