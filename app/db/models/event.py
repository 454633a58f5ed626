"""Event model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.db.base import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    department = Column(String(100), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    qr_code = Column(Text, nullable=True)  # Rendered PNG data URL of the signed check-in token
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    organizer = relationship("User", back_populates="organized_events")
    attendance = relationship("EventAttendance", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_events_department", "department"),
        Index("idx_events_date", "date"),
    )
