"""Database models."""
from app.db.models.user import User
from app.db.models.event import Event
from app.db.models.attendance import EventAttendance

__all__ = ["User", "Event", "EventAttendance"]
