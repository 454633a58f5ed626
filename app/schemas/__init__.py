"""Pydantic schemas for request/response validation."""
from app.schemas.event import (
    EventCreate,
    EventCreated,
    EventCreateResponse,
    EventSummary,
    EventListResponse,
    EventDetailResponse,
    QRCodeResponse,
)
from app.schemas.checkin import CheckinRequest, CheckinResponse, AttendanceSummary
from app.schemas.roster import RosterStudent, RosterResponse
from app.schemas.common import SuccessResponse, ErrorResponse
from app.schemas.user import (
    UserSummary,
    UserListResponse,
    UserDetailResponse,
    DepartmentCount,
    UserStats,
    UserStatsResponse,
)

__all__ = [
    "EventCreate",
    "EventCreated",
    "EventCreateResponse",
    "EventSummary",
    "EventListResponse",
    "EventDetailResponse",
    "QRCodeResponse",
    "CheckinRequest",
    "CheckinResponse",
    "AttendanceSummary",
    "RosterStudent",
    "RosterResponse",
    "SuccessResponse",
    "ErrorResponse",
    "UserSummary",
    "UserListResponse",
    "UserDetailResponse",
    "DepartmentCount",
    "UserStats",
    "UserStatsResponse",
]
