"""Check-in schemas."""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.core.sanitization import MAX_QR_DATA_LENGTH, validate_qr_data


class CheckinRequest(BaseModel):
    qr_data: str = Field(..., min_length=1, max_length=MAX_QR_DATA_LENGTH)

    @field_validator('qr_data')
    @classmethod
    def validate_qr_data_field(cls, v: str) -> str:
        """Validate the scanned token's shape."""
        return validate_qr_data(v)


class AttendanceSummary(BaseModel):
    id: int
    event_id: int
    user_id: int
    timestamp: Optional[str]


class CheckinResponse(BaseModel):
    message: str = "Successfully checked in to the event"
    attendance: AttendanceSummary
