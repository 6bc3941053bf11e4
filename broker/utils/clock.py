"""Time sources."""

from datetime import datetime, timezone


class SystemClock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes loaded from storage."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
