"""Read-through cache for event rosters.

Roster snapshots are stored under
``event:{id}:students[:div:{division}][:dept:{department}]`` with a short TTL.
A new check-in for an event invalidates every filtered variant of that event
at once, since the new attendee may belong to any of them.

Caching is an optimization: every function here logs and swallows cache
errors. A failed read is reported as a miss and a failed write or delete is
a no-op.
"""
from typing import Any, List, Optional
from urllib.parse import quote

from app.core import config
from app.core.cache import get_cache
from app.core.constants import ATTENDANCE_MARKER_KEY, ROSTER_CACHE_PREFIX
from app.core.logging_config import get_logger

logger = get_logger(__name__)


def _roster_prefix(event_id: int) -> str:
    return ROSTER_CACHE_PREFIX.format(event_id=event_id)


def roster_cache_key(event_id: int, division: Optional[str] = None, department: Optional[str] = None) -> str:
    """Build the cache key for one filter combination of an event roster."""
    key = _roster_prefix(event_id)
    # Quote filter values so a ':' inside a value can't forge another combination
    if division:
        key += f":div:{quote(division, safe='')}"
    if department:
        key += f":dept:{quote(department, safe='')}"
    return key


def get_cached_roster(
    event_id: int,
    division: Optional[str] = None,
    department: Optional[str] = None,
    cache=None,
) -> Optional[List[Any]]:
    """Return the cached roster snapshot, or None on a miss or cache error."""
    cache = cache or get_cache()
    key = roster_cache_key(event_id, division, department)
    try:
        return cache.get(key)
    except Exception as e:
        logger.warning("roster_cache_read_failed", key=key, error=str(e))
        return None


def cache_roster(
    event_id: int,
    students: List[Any],
    division: Optional[str] = None,
    department: Optional[str] = None,
    cache=None,
) -> None:
    """Store a roster snapshot for ROSTER_CACHE_TTL seconds."""
    cache = cache or get_cache()
    key = roster_cache_key(event_id, division, department)
    try:
        cache.set(key, students, config.settings.ROSTER_CACHE_TTL)
    except Exception as e:
        logger.warning("roster_cache_write_failed", key=key, error=str(e))


def invalidate_event_roster(event_id: int, cache=None) -> int:
    """Drop every cached roster variant for ``event_id``. Returns keys removed."""
    cache = cache or get_cache()
    prefix = _roster_prefix(event_id)
    try:
        keys = cache.scan_prefix(prefix)
        removed = cache.delete(keys) if keys else 0
    except Exception as e:
        logger.warning("roster_cache_invalidate_failed", event_id=event_id, error=str(e))
        return 0

    logger.info("roster_cache_invalidated", event_id=event_id, keys_removed=removed)
    return removed


def mark_attendance(event_id: int, user_id: int, cache=None) -> None:
    """Remember that ``user_id`` has checked in to ``event_id``."""
    cache = cache or get_cache()
    key = ATTENDANCE_MARKER_KEY.format(event_id=event_id, user_id=user_id)
    try:
        cache.set(key, True, config.settings.ATTENDANCE_MARKER_TTL)
    except Exception as e:
        logger.warning("attendance_marker_write_failed", key=key, error=str(e))


def is_user_attending(event_id: int, user_id: int, cache=None) -> Optional[bool]:
    """True if a marker says the user checked in, None if unknown."""
    cache = cache or get_cache()
    key = ATTENDANCE_MARKER_KEY.format(event_id=event_id, user_id=user_id)
    try:
        marker = cache.get(key)
    except Exception as e:
        logger.warning("attendance_marker_read_failed", key=key, error=str(e))
        return None
    return True if marker is True else None


def clear_event_cache(event_id: int, cache=None) -> None:
    """Remove rosters and attendance markers for a deleted event."""
    cache = cache or get_cache()
    invalidate_event_roster(event_id, cache=cache)
    marker_prefix = ATTENDANCE_MARKER_KEY.format(event_id=event_id, user_id="")
    try:
        keys = cache.scan_prefix(marker_prefix)
        if keys:
            cache.delete(keys)
    except Exception as e:
        logger.warning("attendance_marker_invalidate_failed", event_id=event_id, error=str(e))
