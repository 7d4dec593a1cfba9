"""Time helpers shared by entities, services and stores."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current UTC time as a naive datetime (stored as ISO text in SQLite)."""
    return datetime.now(UTC).replace(tzinfo=None)
