"""Roster schemas."""
from typing import List, Optional
from pydantic import BaseModel


class RosterStudent(BaseModel):
    id: int
    name: str
    email: str
    roll_no: Optional[str] = None
    division: Optional[str] = None
    department: str
    timestamp: Optional[str] = None


class RosterResponse(BaseModel):
    students: List[RosterStudent]
    from_cache: bool
