"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from app.db.models.user import User  # noqa: F401, E402
from app.db.models.event import Event  # noqa: F401, E402
from app.db.models.attendance import EventAttendance  # noqa: F401, E402
