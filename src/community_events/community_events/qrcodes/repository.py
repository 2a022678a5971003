from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import QRCodeType
from .model import QRCode


class QRCodeRepository(Protocol):
    def replace_active(
        self,
        *,
        event_id: int,
        qr_data: str,
        type: QRCodeType,
        expires_at: datetime,
        created_at: datetime,
    ) -> int:
        """Deactivate every active code of the event and insert the new one, atomically."""

        raise NotImplementedError

    def find_active(self, *, event_id: int, qr_data: str) -> Optional[QRCode]:
        raise NotImplementedError

    def get_active_for_event(self, event_id: int) -> Optional[QRCode]:
        raise NotImplementedError

    def deactivate(self, qr_id: int) -> bool:
        raise NotImplementedError

    def deactivate_expired(self, now: datetime) -> int:
        """Deactivate active codes with expires_at < now. Returns how many changed."""

        raise NotImplementedError
