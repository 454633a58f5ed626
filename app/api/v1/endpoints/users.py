"""User directory endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, get_db, require_admin, require_directory_viewer
from app.core.constants import UserRole
from app.core.exceptions import AttendanceError
from app.core.rate_limit import limiter, RATE_LIMITS
from app.core.sanitization import MAX_DEPARTMENT_LENGTH, sanitize_filter_value
from app.schemas import ErrorResponse, UserDetailResponse, UserListResponse, UserStatsResponse
from app.services.users import get_user, get_user_stats, list_users

router = APIRouter()


@router.get("", response_model=UserListResponse)
@limiter.limit(RATE_LIMITS["event_read"])
async def list_users_endpoint(
    request: Request,
    role: Optional[UserRole] = Query(None),
    department: Optional[str] = Query(None, max_length=MAX_DEPARTMENT_LENGTH),
    user: CurrentUser = Depends(require_directory_viewer),
    db: Session = Depends(get_db)
):
    """
    List users ordered by name (faculty/admin only).

    Dashboards use this to pick a student for ``GET /events?student_id=``.
    """
    try:
        department = sanitize_filter_value(department, MAX_DEPARTMENT_LENGTH)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UserListResponse(users=list_users(db, role=role, department=department))


# Registered before /{user_id} so "stats" isn't taken for an id
@router.get("/stats", response_model=UserStatsResponse)
@limiter.limit(RATE_LIMITS["event_read"])
async def user_stats_endpoint(
    request: Request,
    user: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    User statistics for the admin dashboard.

    Example:
        Response (200):
            {
                "stats": {
                    "total_users": 120,
                    "students": 100,
                    "faculty": 12,
                    "organizers": 6,
                    "departments": [{"department": "Computer Science", "count": 70}, ...],
                    "recent_signups": 9
                }
            }
    """
    return UserStatsResponse(stats=get_user_stats(db))


@router.get(
    "/{user_id}",
    response_model=UserDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
@limiter.limit(RATE_LIMITS["event_read"])
async def get_user_endpoint(
    request: Request,
    user_id: str,
    user: CurrentUser = Depends(require_directory_viewer),
    db: Session = Depends(get_db)
):
    """Get one user (faculty/admin only). Non-numeric ids are a 400."""
    if not user_id.isdigit():
        raise HTTPException(status_code=400, detail="Invalid user ID")
    try:
        return UserDetailResponse(user=get_user(db, int(user_id)))
    except AttendanceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
