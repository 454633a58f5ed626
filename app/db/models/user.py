"""User model."""
from datetime import datetime, timezone as tz
from sqlalchemy import Column, Integer, String, DateTime, Enum, Index
from sqlalchemy.orm import relationship

from app.core.constants import UserRole
from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    roll_no = Column(String(50), nullable=True)
    division = Column(String(10), nullable=True)
    department = Column(String(100), nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.STUDENT)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(tz.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(tz.utc),
        onupdate=lambda: datetime.now(tz.utc),
    )

    # Relationships
    organized_events = relationship("Event", back_populates="organizer", cascade="all, delete-orphan")
    attendance = relationship("EventAttendance", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_users_department", "department"),
        Index("idx_users_division", "division"),
    )
