from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.core.constants import UserRole
from app.core.security import create_user_token
from app.db.models import Event, EventAttendance, User


def create_user(
    session: Session,
    email: str,
    role: UserRole = UserRole.STUDENT,
    name: Optional[str] = None,
    department: str = "Computer Science",
    division: Optional[str] = "A",
    roll_no: Optional[str] = None,
) -> User:
    """Insert a user; the password hash is a placeholder since login lives elsewhere."""
    user = User(
        name=name or email.split("@")[0].title(),
        email=email,
        role=role,
        department=department,
        division=division,
        roll_no=roll_no,
        password_hash="not-a-real-hash",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_event(
    session: Session,
    organizer: User,
    name: str = "Tech Talk",
    date: Optional[datetime] = None,
    department: str = "Computer Science",
) -> Event:
    """Insert an event scheduled one day ahead unless ``date`` is given."""
    event = Event(
        name=name,
        department=department,
        date=date or datetime.now(timezone.utc) + timedelta(days=1),
        organizer_id=organizer.id,
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def add_attendance(session: Session, event: Event, user: User, minutes_ago: int = 0) -> EventAttendance:
    record = EventAttendance(
        event_id=event.id,
        user_id=user.id,
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for ``user`` as the auth layer would issue it."""
    token = create_user_token(user.id, user.role, user.department)
    return {"Authorization": f"Bearer {token}"}
