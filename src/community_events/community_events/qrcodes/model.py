from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import QRCodeType


@dataclass(frozen=True)
class QRCode:
    """Persisted check-in credential. At most one active row per event."""

    qr_id: int
    event_id: int
    qr_data: str
    type: QRCodeType
    expires_at: datetime
    is_active: bool
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class IssuedToken:
    """What the issuer hands back to staff: the token and how to reach it."""

    event_id: int
    token: str
    checkin_url: str
    qr_image: str
    expires_at: datetime
    type: QRCodeType


@dataclass(frozen=True)
class TokenCheck:
    """Read-model returned by token validation (shown on the check-in page)."""

    event_id: int
    event_title: str
    start_date: datetime
    end_date: datetime
    registration_required: bool
    registration_deadline: Optional[datetime]
    max_attendees: Optional[int]
    current_attendees: int
    expires_at: datetime
    is_valid: bool = True
