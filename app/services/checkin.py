"""Check-in business logic."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core import config
from app.core.broadcast import BroadcastHub, hub as global_hub
from app.core.constants import SSE_MESSAGE_NEW_ATTENDANCE
from app.core.exceptions import (
    AlreadyCheckedIn,
    EventNotActive,
    InvalidToken,
    TokenEventMismatch,
)
from app.core.logging_config import get_logger
from app.core.qr_token import verify_checkin_token
from app.core.utils import is_checkin_active, isoformat_utc
from app.db.models import Event, EventAttendance, User
from app.services.roster_cache import invalidate_event_roster, is_user_attending, mark_attendance

logger = get_logger(__name__)


@dataclass
class CheckinResult:
    attendance: Dict
    user: Optional[Dict]


def get_active_event(db: Session, event_id: int) -> Optional[Event]:
    """Return the event if it exists and still accepts check-ins."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if event is None:
        return None
    if not is_checkin_active(event.date, config.settings.CHECKIN_GRACE_DAYS):
        return None
    return event


def has_checked_in(db: Session, event_id: int, user_id: int, cache=None) -> bool:
    """Check the attendance marker first, then storage."""
    if is_user_attending(event_id, user_id, cache=cache):
        return True
    return db.query(EventAttendance.id).filter(
        EventAttendance.event_id == event_id,
        EventAttendance.user_id == user_id,
    ).first() is not None


def _attendance_summary(record: EventAttendance) -> Dict:
    return {
        "id": record.id,
        "event_id": record.event_id,
        "user_id": record.user_id,
        "timestamp": isoformat_utc(record.timestamp),
    }


def _user_summary(user: Optional[User]) -> Optional[Dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "roll_no": user.roll_no,
        "division": user.division,
        "department": user.department,
    }


def checkin(
    db: Session,
    event_id: int,
    user_id: int,
    qr_data: str,
    cache=None,
    hub: Optional[BroadcastHub] = None,
) -> CheckinResult:
    """
    Check a user in to an event with a scanned QR token.

    Validation runs in order and fails fast without side effects: token,
    token/event match, event still active, not already checked in. The insert
    relies on the (event_id, user_id) unique constraint, so of two racing
    requests exactly one succeeds and the other gets AlreadyCheckedIn.

    After the insert the roster cache is invalidated and a new_attendance
    message is broadcast to the event's live viewers. Neither step can fail
    the check-in.

    Raises:
        InvalidToken, TokenEventMismatch, EventNotActive, AlreadyCheckedIn
    """
    hub = hub or global_hub

    payload = verify_checkin_token(qr_data)
    if payload is None:
        raise InvalidToken()

    if payload.event_id != event_id:
        raise TokenEventMismatch()

    if get_active_event(db, event_id) is None:
        raise EventNotActive()

    if has_checked_in(db, event_id, user_id, cache=cache):
        raise AlreadyCheckedIn()

    record = EventAttendance(
        event_id=event_id,
        user_id=user_id,
        timestamp=datetime.now(timezone.utc),
    )
    try:
        db.add(record)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("checkin_conflict", event_id=event_id, user_id=user_id)
        raise AlreadyCheckedIn()
    db.refresh(record)

    attendance = _attendance_summary(record)
    user = _user_summary(db.query(User).filter(User.id == user_id).first())

    invalidate_event_roster(event_id, cache=cache)
    mark_attendance(event_id, user_id, cache=cache)

    try:
        hub.broadcast(event_id, {
            "type": SSE_MESSAGE_NEW_ATTENDANCE,
            "data": {"attendance": attendance, "user": user},
        })
    except Exception:
        # A broken broadcast must not report a persisted check-in as failed
        logger.exception("checkin_broadcast_failed", event_id=event_id, user_id=user_id)

    logger.info("checkin_succeeded", event_id=event_id, user_id=user_id, attendance_id=record.id)
    return CheckinResult(attendance=attendance, user=user)
