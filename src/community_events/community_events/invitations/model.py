from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Role
from ..users.contact import Contact


@dataclass(frozen=True)
class Invitation:
    """Pending offer to join the community with a given role.

    `token` is a random hex string for email invitations and a short numeric
    code for phone-only invitations.
    """

    invitation_id: int
    contact: Contact
    role: Role
    token: str
    invited_by: int
    invited_at: datetime
    expires_at: datetime
    is_accepted: bool = False
    accepted_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_pending(self, now: datetime) -> bool:
        return not self.is_accepted and not self.is_expired(now)


@dataclass(frozen=True)
class BulkInviteItem:
    email: Optional[str]
    phone: Optional[str]
    role: Optional[str]
    message: str
    code: Optional[str] = None


@dataclass(frozen=True)
class BulkInviteResult:
    succeeded: list[BulkInviteItem] = field(default_factory=list)
    failed: list[BulkInviteItem] = field(default_factory=list)
