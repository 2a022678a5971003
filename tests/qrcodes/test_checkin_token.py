from __future__ import annotations

import pytest

from src.community_events.community_events.core.enums import ErrorCode
from src.community_events.community_events.core.exceptions import ValidationError
from src.community_events.community_events.qrcodes.token import CheckinToken, sign_payload


def test_wire_format():
    token = CheckinToken.issue(event_id=42, issued_at_ms=1767225600000, secret="s3cret")
    raw = token.encode()

    prefix, event_id, issued_at, signature = raw.split(":")
    assert (prefix, event_id, issued_at) == ("event-checkin", "42", "1767225600000")
    assert signature == sign_payload("event-checkin:42:1767225600000", "s3cret")
    assert CheckinToken.decode(raw) == token
    assert token.has_valid_signature("s3cret")
    assert not token.has_valid_signature("other")


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "garbage",
        "event-checkin:42:1767225600000",
        "other-prefix:42:1767225600000:" + "a" * 64,
        "event-checkin:42:not-a-number:" + "a" * 64,
        "event-checkin:42:1767225600000:" + "a" * 63,
        "event-checkin:42:1767225600000:" + "Z" * 64,
        "event-checkin::1767225600000:" + "a" * 64,
        "event-checkin:42:1767225600000:" + "a" * 64 + ":extra",
    ],
)
def test_decode_rejects_malformed_tokens(raw):
    with pytest.raises(ValidationError) as e:
        CheckinToken.decode(raw)
    assert e.value.code == ErrorCode.INVALID_TOKEN_FORMAT
