"""User directory schemas."""
from typing import List, Optional
from pydantic import BaseModel


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    roll_no: Optional[str] = None
    division: Optional[str] = None
    department: str
    role: str
    created_at: Optional[str] = None


class UserListResponse(BaseModel):
    users: List[UserSummary]


class UserDetailResponse(BaseModel):
    user: UserSummary


class DepartmentCount(BaseModel):
    department: str
    count: int


class UserStats(BaseModel):
    total_users: int
    students: int
    faculty: int
    organizers: int
    departments: List[DepartmentCount]
    recent_signups: int


class UserStatsResponse(BaseModel):
    stats: UserStats
