"""Shared API dependencies."""
from app.db import get_db
from app.core.constants import EVENT_MANAGER_ROLES, ROSTER_VIEWER_ROLES, USER_DIRECTORY_ROLES, UserRole
from app.core.security import CurrentUser, get_current_user, require_roles

# Role gates used across endpoint modules
require_event_manager = require_roles(*EVENT_MANAGER_ROLES)
require_roster_viewer = require_roles(*ROSTER_VIEWER_ROLES)
require_directory_viewer = require_roles(*USER_DIRECTORY_ROLES)
require_admin = require_roles(UserRole.ADMIN)

__all__ = [
    "get_db",
    "CurrentUser",
    "get_current_user",
    "require_event_manager",
    "require_roster_viewer",
    "require_directory_viewer",
    "require_admin",
]
