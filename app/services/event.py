"""Event business logic."""
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, aliased

from app.core.constants import UserRole
from app.core.exceptions import EventNotFound, PermissionDenied
from app.core.logging_config import get_logger
from app.core.qr_token import issue_checkin_token
from app.core.security import CurrentUser
from app.core.utils import isoformat_utc, to_utc
from app.db.models import Event, EventAttendance, User
from app.services.qr import render_qr_data_url
from app.services.roster_cache import clear_event_cache

logger = get_logger(__name__)


def _event_dict(event: Event, organizer: User, **extra) -> Dict:
    data = {
        "id": event.id,
        "name": event.name,
        "description": event.description,
        "department": event.department,
        "date": isoformat_utc(event.date),
        "created_at": isoformat_utc(event.created_at),
        "organizer_name": organizer.name,
    }
    data.update(extra)
    return data


def create_event(
    db: Session,
    organizer_id: int,
    name: str,
    department: str,
    date: datetime,
    description: Optional[str] = None,
) -> Dict:
    """Create an event and store the QR code for its signed check-in token."""
    event = Event(
        name=name,
        description=description,
        department=department,
        date=to_utc(date),
        organizer_id=organizer_id,
    )
    db.add(event)
    # Flush to get the id the token must be bound to
    db.flush()

    try:
        event.qr_code = render_qr_data_url(issue_checkin_token(event.id))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)

    logger.info("event_created", event_id=event.id, organizer_id=organizer_id)
    return {
        "id": event.id,
        "name": event.name,
        "description": event.description,
        "department": event.department,
        "date": isoformat_utc(event.date),
        "organizer_id": event.organizer_id,
        "qr_code": event.qr_code,
        "created_at": isoformat_utc(event.created_at),
    }


def _attendee_count():
    return func.count(EventAttendance.user_id).label("attendee_count")


def list_events(db: Session, user: CurrentUser, student_id: Optional[int] = None) -> List[Dict]:
    """
    List events for the caller's role.

    - Students (or faculty/admin passing ``student_id``): every event with
      that student's ``is_attending`` flag, newest first
    - Organizers: their own events with ``attendee_count`` and ``qr_code``
    - Faculty/admin: every event with ``attendee_count``
    """
    target_student = None
    if user.role in (UserRole.ADMIN, UserRole.FACULTY) and student_id:
        target_student = student_id

    if user.role == UserRole.STUDENT or target_student:
        subject_id = target_student or user.id
        own = aliased(EventAttendance)
        rows = (
            db.query(Event, User, own.user_id)
            .join(User, Event.organizer_id == User.id)
            .outerjoin(own, and_(own.event_id == Event.id, own.user_id == subject_id))
            .order_by(Event.date.desc())
            .all()
        )
        return [
            _event_dict(event, organizer, is_attending=attending is not None)
            for event, organizer, attending in rows
        ]

    query = (
        db.query(Event, User, _attendee_count())
        .join(User, Event.organizer_id == User.id)
        .outerjoin(EventAttendance, EventAttendance.event_id == Event.id)
    )
    if user.role == UserRole.ORGANIZER:
        query = query.filter(Event.organizer_id == user.id)
    rows = query.group_by(Event.id, User.id).order_by(Event.date.asc()).all()

    events = []
    for event, organizer, count in rows:
        extra = {"organizer_email": organizer.email, "attendee_count": count}
        if user.role == UserRole.ORGANIZER:
            extra["qr_code"] = event.qr_code
        events.append(_event_dict(event, organizer, **extra))
    return events


def get_event_detail(db: Session, event_id: int, user: CurrentUser) -> Dict:
    """Event detail with attendee count, plus ``is_attending`` for students."""
    row = (
        db.query(Event, User, _attendee_count())
        .join(User, Event.organizer_id == User.id)
        .outerjoin(EventAttendance, EventAttendance.event_id == Event.id)
        .filter(Event.id == event_id)
        .group_by(Event.id, User.id)
        .first()
    )
    if row is None:
        raise EventNotFound()

    event, organizer, count = row
    detail = _event_dict(event, organizer, organizer_email=organizer.email, attendee_count=count)

    if user.role == UserRole.STUDENT:
        detail["is_attending"] = db.query(EventAttendance.id).filter(
            EventAttendance.event_id == event_id,
            EventAttendance.user_id == user.id,
        ).first() is not None

    return detail


def get_event_qr_code(db: Session, event_id: int, user: CurrentUser) -> Optional[str]:
    """Stored QR data URL; organizers may only read their own events."""
    query = db.query(Event).filter(Event.id == event_id)
    if user.role == UserRole.ORGANIZER:
        query = query.filter(Event.organizer_id == user.id)
    event = query.first()
    if event is None:
        raise EventNotFound("Event not found or insufficient permissions")
    return event.qr_code


def event_exists(db: Session, event_id: int) -> bool:
    return db.query(Event.id).filter(Event.id == event_id).first() is not None


def delete_event(db: Session, event_id: int, user: CurrentUser, cache=None) -> None:
    """Delete an event and its attendance. Admins: any event; organizers: their own."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if event is None:
        raise EventNotFound()

    is_owner = user.role == UserRole.ORGANIZER and event.organizer_id == user.id
    if user.role != UserRole.ADMIN and not is_owner:
        raise PermissionDenied("You do not have permission to delete this event")

    try:
        # Attendance goes first in case the database doesn't cascade (SQLite without FK pragma)
        db.query(EventAttendance).filter(EventAttendance.event_id == event_id).delete(
            synchronize_session=False
        )
        db.delete(event)
        db.commit()
    except Exception:
        db.rollback()
        raise

    clear_event_cache(event_id, cache=cache)
    logger.info("event_deleted", event_id=event_id, deleted_by=user.id)
