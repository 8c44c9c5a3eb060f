"""
Timezone utilities.

All timestamps are stored as naive UTC datetimes; API payloads serialize
them as ISO 8601 strings with a trailing ``Z``.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the storage format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an incoming datetime to naive UTC; naive input is assumed UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Serialize a stored naive UTC datetime for API responses."""
    if value is None:
        return None
    return value.isoformat() + "Z"
