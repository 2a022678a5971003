from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Registration, ReserveOutcome


class RegistrationRepository(Protocol):
    def get(self, event_id: int, user_id: int) -> Optional[Registration]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Registration]:
        raise NotImplementedError

    def reserve(self, *, event_id: int, user_id: int, registered_at: datetime) -> ReserveOutcome:
        """Create a CONFIRMED registration and increment `current_attendees`.

        Both writes commit together or not at all. The increment is bounded by
        `max_attendees`, so concurrent callers can never overbook an event.
        """

        raise NotImplementedError

    def release(self, *, event_id: int, user_id: int) -> bool:
        """Delete the registration and decrement `current_attendees` atomically.

        Returns False when no registration existed.
        """

        raise NotImplementedError
