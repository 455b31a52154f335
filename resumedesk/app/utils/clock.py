"""Naive-UTC timestamps, matching what SQLite/Postgres DateTime columns round-trip."""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_z(value: datetime | None) -> str | None:
    """ISO 8601 with a trailing Z, or None."""
    if value is None:
        return None
    return value.isoformat() + "Z"
