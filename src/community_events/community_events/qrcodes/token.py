"""Check-in token wire format.

    event-checkin:<event_id>:<issued_at_ms>:<hex hmac-sha256>

The HMAC is computed over the first three segments with the server QR secret.
"""

from __future__ import annotations

import hashlib
import hmac
import re
from dataclasses import dataclass

from ..core.constants import QR_TOKEN_PREFIX
from ..core.enums import ErrorCode
from ..core.exceptions import ValidationError

_HEX_SHA256 = re.compile(r"^[0-9a-f]{64}$")


def sign_payload(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True)
class CheckinToken:
    event_id: str
    issued_at_ms: int
    signature: str

    @property
    def payload(self) -> str:
        return f"{QR_TOKEN_PREFIX}:{self.event_id}:{self.issued_at_ms}"

    @classmethod
    def issue(cls, *, event_id: int, issued_at_ms: int, secret: str) -> "CheckinToken":
        unsigned = cls(event_id=str(event_id), issued_at_ms=int(issued_at_ms), signature="")
        return cls(
            event_id=unsigned.event_id,
            issued_at_ms=unsigned.issued_at_ms,
            signature=sign_payload(unsigned.payload, secret),
        )

    def encode(self) -> str:
        return f"{self.payload}:{self.signature}"

    @classmethod
    def decode(cls, raw: str) -> "CheckinToken":
        parts = (raw or "").strip().split(":")
        if len(parts) != 4 or parts[0] != QR_TOKEN_PREFIX:
            raise ValidationError("Invalid token format", ErrorCode.INVALID_TOKEN_FORMAT)

        _, event_id, issued_at, signature = parts
        if not event_id or not issued_at.isdigit() or not _HEX_SHA256.match(signature):
            raise ValidationError("Invalid token format", ErrorCode.INVALID_TOKEN_FORMAT)

        return cls(event_id=event_id, issued_at_ms=int(issued_at), signature=signature)

    def has_valid_signature(self, secret: str) -> bool:
        return hmac.compare_digest(sign_payload(self.payload, secret), self.signature)
