"""Common response schemas."""
from pydantic import BaseModel
from typing import Optional


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body produced by HTTPException, for documentation."""
    detail: str
