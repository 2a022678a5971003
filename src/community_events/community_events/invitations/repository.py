from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from ..users.contact import Contact
from .model import Invitation


class InvitationRepository(Protocol):
    def create_invitation(
        self,
        *,
        contact: Contact,
        role: Role,
        token: str,
        invited_by: int,
        invited_at: datetime,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[Invitation]:
        """Most recent invitation carrying this token, accepted or not."""

        raise NotImplementedError

    def find_pending(self, *, email: Optional[str], phone: Optional[str], now: datetime) -> Optional[Invitation]:
        """Unaccepted, unexpired invitation sharing the email or the phone."""

        raise NotImplementedError

    def list_invitations(self) -> Sequence[Invitation]:
        raise NotImplementedError

    def update_token(self, invitation_id: int, token: str) -> None:
        raise NotImplementedError

    def delete(self, invitation_id: int) -> bool:
        raise NotImplementedError

    def mark_accepted(self, invitation_id: int, accepted_at: datetime) -> bool:
        """Flip to accepted only if still pending. Returns False if it already was."""

        raise NotImplementedError

    def reopen(self, invitation_id: int) -> None:
        """Undo `mark_accepted`."""

        raise NotImplementedError
