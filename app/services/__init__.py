from .checkin import CheckinResult, checkin
from .event import (
    create_event,
    delete_event,
    event_exists,
    get_event_detail,
    get_event_qr_code,
    list_events,
)
from .qr import render_qr_data_url
from .roster import RosterFilter, get_event_students
from .users import get_user, get_user_stats, list_users
from .roster_cache import (
    cache_roster,
    get_cached_roster,
    invalidate_event_roster,
    roster_cache_key,
)

__all__ = [
    # checkin
    "CheckinResult",
    "checkin",
    # events
    "create_event",
    "delete_event",
    "event_exists",
    "get_event_detail",
    "get_event_qr_code",
    "list_events",
    # qr
    "render_qr_data_url",
    # roster
    "RosterFilter",
    "get_event_students",
    "cache_roster",
    "get_cached_roster",
    "invalidate_event_roster",
    "roster_cache_key",
    # users
    "get_user",
    "get_user_stats",
    "list_users",
]
