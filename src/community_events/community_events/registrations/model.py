from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..core.enums import RegistrationStatus


@dataclass(frozen=True)
class Registration:
    """Domain entity: a confirmed claim on one capacity slot of an event."""

    event_id: int
    user_id: int
    status: RegistrationStatus
    registration_date: datetime


class ReserveOutcome(str, Enum):
    """Result of the atomic create-registration-and-increment step."""

    RESERVED = "RESERVED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
