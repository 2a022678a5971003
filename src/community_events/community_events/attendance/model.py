from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: physical presence of one user at one event.

    State machine: no record -> CHECKED_IN -> CHECKED_OUT (terminal).
    """

    attendance_id: int
    event_id: int
    user_id: int
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    notes: Optional[str] = None

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_time is not None


class CheckInOutcome(str, Enum):
    CHECKED_IN = "CHECKED_IN"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"


@dataclass(frozen=True)
class AttendancePage:
    items: list[AttendanceRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
