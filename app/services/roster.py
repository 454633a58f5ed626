"""Event roster queries."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.constants import UserRole
from app.core.utils import isoformat_utc
from app.db.models import EventAttendance, User
from app.services.roster_cache import cache_roster, get_cached_roster


@dataclass(frozen=True)
class RosterFilter:
    """Optional roster filters; also determines the cache key."""
    division: Optional[str] = None
    department: Optional[str] = None


def query_roster(db: Session, event_id: int, filters: RosterFilter) -> List[Dict]:
    """Students checked in to ``event_id``, newest check-in first."""
    query = (
        db.query(
            User.id,
            User.name,
            User.email,
            User.roll_no,
            User.division,
            User.department,
            EventAttendance.timestamp,
        )
        .join(EventAttendance, EventAttendance.user_id == User.id)
        .filter(
            EventAttendance.event_id == event_id,
            User.role == UserRole.STUDENT,
        )
    )

    if filters.division:
        query = query.filter(User.division == filters.division)
    if filters.department:
        query = query.filter(User.department == filters.department)

    rows = query.order_by(EventAttendance.timestamp.desc()).all()

    # Timestamps are serialized here so cached and fresh results are identical
    return [
        {
            "id": row.id,
            "name": row.name,
            "email": row.email,
            "roll_no": row.roll_no,
            "division": row.division,
            "department": row.department,
            "timestamp": isoformat_utc(row.timestamp),
        }
        for row in rows
    ]


def get_event_students(
    db: Session,
    event_id: int,
    filters: Optional[RosterFilter] = None,
    cache=None,
) -> Tuple[List[Dict], bool]:
    """
    Get the roster for an event through the roster cache.

    Returns:
        (students, from_cache)
    """
    filters = filters or RosterFilter()

    cached = get_cached_roster(event_id, filters.division, filters.department, cache=cache)
    if cached is not None:
        return cached, True

    students = query_roster(db, event_id, filters)
    cache_roster(event_id, students, filters.division, filters.department, cache=cache)
    return students, False
