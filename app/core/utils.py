"""General utility functions."""
from datetime import datetime, timedelta, timezone
from typing import Optional


def is_checkin_active(event_date: datetime, grace_days: int, now: Optional[datetime] = None) -> bool:
    """
    Check if an event still accepts check-ins.

    An event stays open until ``grace_days`` after its scheduled date; events
    scheduled in the future are always open.

    Args:
        event_date: Scheduled event date (timezone-aware or naive, assumed UTC if naive)
        grace_days: Days after the event date during which check-in is allowed
        now: Reference time, defaults to the current UTC time

    Returns:
        bool: True if the event accepts check-ins
    """
    now = to_utc(now) if now else datetime.now(timezone.utc)
    return to_utc(event_date) > now - timedelta(days=grace_days)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat_utc(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as an ISO 8601 UTC string."""
    if dt is None:
        return None
    return to_utc(dt).isoformat()


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")
