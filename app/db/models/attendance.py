"""Event attendance model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class EventAttendance(Base):
    __tablename__ = "event_attendance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))

    # Relationships
    event = relationship("Event", back_populates="attendance")
    user = relationship("User", back_populates="attendance")

    __table_args__ = (
        Index("idx_attendance_event_id", "event_id"),
        Index("idx_attendance_user_id", "user_id"),
        # One attendance record per (event, user); concurrent check-ins race on this
        UniqueConstraint("event_id", "user_id", name="uq_event_attendance_event_user"),
    )
