"""UTC helpers. Every timestamp the engine stores or compares is aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime read back from storage to aware UTC.

    SQLite hands back naive values even for timezone-aware columns; those are
    taken to already be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


class SystemClock:
    """Wall-clock time source used outside tests."""

    def now(self) -> datetime:
        return utc_now()
