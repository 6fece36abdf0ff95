"""
Time helpers shared across repositories/services.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_z(value: datetime) -> str:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision and a Z suffix.
    Naive values are treated as UTC.
    """
    normalized = value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return normalized.isoformat(timespec="milliseconds").replace("+00:00", "Z")
