from __future__ import annotations

from datetime import datetime


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string into a naive datetime.

    A trailing 'Z' is accepted; aware values are converted to local time so they
    compare with the naive DATETIME columns.
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Services take `now` as a parameter and fall back to this.
    """
    return datetime.now()


def to_epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
