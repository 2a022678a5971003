from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import EventCategory
from .model import Event, NewEvent


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def create_event(self, *, data: NewEvent, created_by: int) -> int:
        raise NotImplementedError

    def update_event(self, *, event_id: int, changes: Mapping[str, Any]) -> bool:
        """Apply column changes. Never touches `current_attendees`."""

        raise NotImplementedError

    def delete_event(self, event_id: int) -> bool:
        raise NotImplementedError

    def list_events(
        self,
        *,
        category: Optional[EventCategory] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[Event], int]:
        """Return one page of events (ordered by start date) and the total count."""

        raise NotImplementedError
