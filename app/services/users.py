"""User directory queries for staff dashboards."""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.constants import RECENT_SIGNUP_DAYS, UserRole
from app.core.exceptions import UserNotFound
from app.core.utils import isoformat_utc
from app.db.models import User


def _user_dict(user: User) -> Dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "roll_no": user.roll_no,
        "division": user.division,
        "department": user.department,
        "role": user.role.value,
        "created_at": isoformat_utc(user.created_at),
    }


def list_users(
    db: Session,
    role: Optional[UserRole] = None,
    department: Optional[str] = None,
) -> List[Dict]:
    """Users ordered by name, optionally filtered by role and department."""
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if department:
        query = query.filter(User.department == department)
    return [_user_dict(user) for user in query.order_by(User.name).all()]


def get_user(db: Session, user_id: int) -> Dict:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserNotFound()
    return _user_dict(user)


def get_user_stats(db: Session, now: Optional[datetime] = None) -> Dict:
    """
    Headcounts for the admin dashboard.

    Returns:
        total_users, per-role counts (students, faculty, organizers),
        departments as ``[{department, count}]`` largest first, and
        recent_signups within the last RECENT_SIGNUP_DAYS days.
    """
    now = now or datetime.now(timezone.utc)

    role_counts = dict(
        db.query(User.role, func.count(User.id)).group_by(User.role).all()
    )

    count = func.count(User.id).label("count")
    departments = (
        db.query(User.department, count)
        .group_by(User.department)
        .order_by(count.desc(), User.department)
        .all()
    )

    recent_signups = db.query(func.count(User.id)).filter(
        User.created_at >= now - timedelta(days=RECENT_SIGNUP_DAYS)
    ).scalar()

    return {
        "total_users": sum(role_counts.values()),
        "students": role_counts.get(UserRole.STUDENT, 0),
        "faculty": role_counts.get(UserRole.FACULTY, 0),
        "organizers": role_counts.get(UserRole.ORGANIZER, 0),
        "departments": [
            {"department": department, "count": n} for department, n in departments
        ],
        "recent_signups": recent_signups,
    }
