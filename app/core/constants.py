"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""
import enum


class UserRole(str, enum.Enum):
    """Roles supplied by the authentication layer."""

    STUDENT = "STUDENT"
    FACULTY = "FACULTY"
    ORGANIZER = "ORGANIZER"
    ADMIN = "ADMIN"


# Roles allowed to view rosters and open the live attendance stream
ROSTER_VIEWER_ROLES = (UserRole.FACULTY, UserRole.ORGANIZER, UserRole.ADMIN)

# Roles allowed to create and delete events
EVENT_MANAGER_ROLES = (UserRole.ORGANIZER, UserRole.ADMIN)

# Roles allowed to browse the user directory
USER_DIRECTORY_ROLES = (UserRole.FACULTY, UserRole.ADMIN)

# Window for the "recent signups" figure in user statistics
RECENT_SIGNUP_DAYS = 30

# QR check-in token
# NOTE: Token lifetime is configurable via app.core.config.Settings (QR_TOKEN_TTL_HOURS)
QR_TOKEN_ALGORITHM = "HS256"

# Roster cache key layout: event:{id}:students[:div:{division}][:dept:{department}]
ROSTER_CACHE_PREFIX = "event:{event_id}:students"
ATTENDANCE_MARKER_KEY = "attendance:{event_id}:{user_id}"

# Server-Sent Events message types
SSE_MESSAGE_CONNECTED = "connected"
SSE_MESSAGE_NEW_ATTENDANCE = "new_attendance"
SSE_HEARTBEAT_FRAME = ": heartbeat\n\n"

# JWT Token Configuration
# Token expiration time in minutes (8 hours)
ACCESS_TOKEN_EXPIRE_MINUTES = 480
