"""Main API router for v1."""
from fastapi import APIRouter

from app.api.v1.endpoints import events, sse, users

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(sse.router, prefix="/events", tags=["SSE"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
