"""Event schemas."""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.core.sanitization import (
    MAX_DEPARTMENT_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_EVENT_NAME_LENGTH,
    sanitize_text,
)
from app.core.utils import to_utc


class EventCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=MAX_EVENT_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    department: str = Field(..., min_length=2, max_length=MAX_DEPARTMENT_LENGTH)
    date: datetime

    @field_validator('name')
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        sanitized = sanitize_text(v, max_length=MAX_EVENT_NAME_LENGTH)
        if len(sanitized) < 2:
            raise ValueError("Event name must be at least 2 characters")
        return sanitized

    @field_validator('description')
    @classmethod
    def sanitize_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return sanitize_text(v, max_length=MAX_DESCRIPTION_LENGTH) or None

    @field_validator('department')
    @classmethod
    def sanitize_department(cls, v: str) -> str:
        sanitized = sanitize_text(v, max_length=MAX_DEPARTMENT_LENGTH)
        if len(sanitized) < 2:
            raise ValueError("Department is required")
        return sanitized

    @field_validator('date')
    @classmethod
    def date_in_future(cls, v: datetime) -> datetime:
        if to_utc(v) <= datetime.now(timezone.utc):
            raise ValueError("Event date must be in the future")
        return v


class EventCreated(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    department: str
    date: str
    organizer_id: int
    qr_code: Optional[str] = None
    created_at: Optional[str] = None


class EventCreateResponse(BaseModel):
    message: str = "Event created successfully"
    event: EventCreated


class EventSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    department: str
    date: str
    created_at: Optional[str] = None
    organizer_name: str
    organizer_email: Optional[str] = None
    attendee_count: Optional[int] = None
    is_attending: Optional[bool] = None
    qr_code: Optional[str] = None


class EventListResponse(BaseModel):
    events: List[EventSummary]


class EventDetailResponse(BaseModel):
    event: EventSummary


class QRCodeResponse(BaseModel):
    qr_code: Optional[str]
