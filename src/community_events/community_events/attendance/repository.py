from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, CheckInOutcome


class AttendanceRepository(Protocol):
    def get(self, event_id: int, user_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def search(
        self,
        *,
        event_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        search: Optional[str] = None,
        checked_in_from: Optional[datetime] = None,
        checked_in_to: Optional[datetime] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[Sequence[AttendanceRecord], int]:
        """Filtered page of records plus the total match count.

        `search` matches the attendee's first or last name, email or phone.
        """

        raise NotImplementedError

    def record_check_in(
        self,
        *,
        event_id: int,
        user_id: int,
        check_in_time: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        """Create or update the record only while it has no check-in time.

        Returns False if the user is already checked in. `notes=None` keeps prior notes.
        """

        raise NotImplementedError

    def record_check_out(
        self,
        *,
        event_id: int,
        user_id: int,
        check_out_time: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        """Set the check-out time only while checked in and not yet checked out."""

        raise NotImplementedError

    def register_and_check_in(
        self,
        *,
        event_id: int,
        user_id: int,
        at: datetime,
        notes: Optional[str] = None,
    ) -> CheckInOutcome:
        """Claim a registration slot and check in as one transaction.

        An existing registration is reused; a full event or an existing
        check-in aborts the whole transaction.
        """

        raise NotImplementedError
