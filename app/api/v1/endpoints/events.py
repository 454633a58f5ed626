"""Event endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import (
    CurrentUser,
    get_current_user,
    get_db,
    require_event_manager,
    require_roster_viewer,
)
from app.schemas import (
    CheckinRequest,
    CheckinResponse,
    ErrorResponse,
    EventCreate,
    EventCreateResponse,
    EventDetailResponse,
    EventListResponse,
    QRCodeResponse,
    RosterResponse,
    SuccessResponse,
)
from app.services.checkin import checkin
from app.services.event import (
    create_event,
    delete_event,
    get_event_detail,
    get_event_qr_code,
    list_events,
)
from app.services.roster import RosterFilter, get_event_students
from app.core.exceptions import AttendanceError, QREncodingError
from app.core.logging_config import get_logger
from app.core.rate_limit import limiter, RATE_LIMITS
from app.core.sanitization import MAX_DEPARTMENT_LENGTH, MAX_DIVISION_LENGTH, sanitize_filter_value

logger = get_logger(__name__)
router = APIRouter()


@router.post("", response_model=EventCreateResponse, status_code=201)
@limiter.limit(RATE_LIMITS["event_write"])
async def create_event_endpoint(
    request: Request,
    event: EventCreate,
    user: CurrentUser = Depends(require_event_manager),
    db: Session = Depends(get_db)
):
    """
    Create an event and generate its check-in QR code (organizer/admin only).

    A signed check-in token bound to the new event id is issued and rendered
    as a PNG data URL, which is stored with the event and returned.

    Example:
        Request:
            POST /api/v1/events
            Authorization: Bearer eyJhbGc...
            {
                "name": "Tech Talk",
                "department": "Computer Science",
                "date": "2026-11-03T15:00:00Z"
            }

        Response (201):
            {
                "message": "Event created successfully",
                "event": {"id": 42, "name": "Tech Talk", ..., "qr_code": "data:image/png;base64,..."}
            }
    """
    try:
        created = create_event(
            db,
            organizer_id=user.id,
            name=event.name,
            department=event.department,
            date=event.date,
            description=event.description,
        )
    except QREncodingError as e:
        logger.error("event_qr_generation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate QR code")
    return EventCreateResponse(event=created)


@router.get("", response_model=EventListResponse, response_model_exclude_none=True)
@limiter.limit(RATE_LIMITS["event_read"])
async def list_events_endpoint(
    request: Request,
    student_id: Optional[int] = Query(None, gt=0),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List events for the caller's role.

    Students see every event with their own ``is_attending`` flag; faculty and
    admins may pass ``student_id`` to get that view for a given student.
    Organizers see their own events with attendee counts and QR codes;
    faculty and admins see every event with attendee counts.
    """
    return EventListResponse(events=list_events(db, user, student_id=student_id))


@router.get(
    "/{event_id}",
    response_model=EventDetailResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["event_read"])
async def get_event_endpoint(
    request: Request,
    event_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one event with its attendee count (and ``is_attending`` for students)."""
    try:
        return EventDetailResponse(event=get_event_detail(db, event_id, user))
    except AttendanceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{event_id}",
    response_model=SuccessResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["event_write"])
async def delete_event_endpoint(
    request: Request,
    event_id: int,
    user: CurrentUser = Depends(require_event_manager),
    db: Session = Depends(get_db)
):
    """
    Delete an event with all its attendance records.

    Admins may delete any event, organizers only their own. Cached rosters and
    attendance markers for the event are dropped.
    """
    try:
        delete_event(db, event_id, user)
    except AttendanceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return SuccessResponse(message="Event deleted successfully")


@router.get("/{event_id}/qrcode", response_model=QRCodeResponse, responses={404: {"model": ErrorResponse}})
@limiter.limit(RATE_LIMITS["event_read"])
async def get_event_qrcode_endpoint(
    request: Request,
    event_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the stored QR code for an event (organizers: own events only)."""
    try:
        return QRCodeResponse(qr_code=get_event_qr_code(db, event_id, user))
    except AttendanceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{event_id}/checkin",
    response_model=CheckinResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["check_in"])
async def checkin_endpoint(
    request: Request,
    event_id: int,
    checkin_request: CheckinRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Check the caller in to an event with the token scanned from its QR code.

    On success the attendance record is returned, cached rosters for the event
    are invalidated and live viewers receive a ``new_attendance`` message.

    Example:
        Request:
            POST /api/v1/events/42/checkin
            Authorization: Bearer eyJhbGc...
            {"qr_data": "eyJhbGciOiJIUzI1NiIs..."}

        Response (200):
            {
                "message": "Successfully checked in to the event",
                "attendance": {"id": 7, "event_id": 42, "user_id": 3, "timestamp": "..."}
            }

        Response (400):
            {"detail": "Invalid or expired QR code"}
            {"detail": "QR code does not match the event"}
            {"detail": "You are already checked in to this event"}

        Response (404):
            {"detail": "Event not found or no longer active"}

    Rate Limit:
        10 requests per minute per IP
    """
    try:
        result = checkin(db, event_id, user.id, checkin_request.qr_data)
    except AttendanceError as e:
        logger.info("checkin_rejected", event_id=event_id, user_id=user.id, reason=type(e).__name__)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return CheckinResponse(attendance=result.attendance)


@router.get("/{event_id}/students", response_model=RosterResponse)
@limiter.limit(RATE_LIMITS["event_read"])
async def get_event_students_endpoint(
    request: Request,
    event_id: int,
    division: Optional[str] = Query(None, max_length=MAX_DIVISION_LENGTH),
    department: Optional[str] = Query(None, max_length=MAX_DEPARTMENT_LENGTH),
    user: CurrentUser = Depends(require_roster_viewer),
    db: Session = Depends(get_db)
):
    """
    List students checked in to an event, optionally filtered.

    Results are served from the roster cache when possible; ``from_cache``
    tells the dashboard whether this response came from the cache.
    """
    try:
        filters = RosterFilter(
            division=sanitize_filter_value(division, MAX_DIVISION_LENGTH),
            department=sanitize_filter_value(department, MAX_DEPARTMENT_LENGTH),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    students, from_cache = get_event_students(db, event_id, filters)
    return RosterResponse(students=students, from_cache=from_cache)
