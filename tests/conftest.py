"""Shared test fixtures and configuration."""
import os

# Point the app at SQLite and the in-process cache before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.main import app  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.api.deps import get_db  # noqa: E402
from app.core.broadcast import BroadcastHub  # noqa: E402
from app.core.cache import TTLCache, global_cache  # noqa: E402
from app.core.constants import UserRole  # noqa: E402
from tests.utils import create_event, create_user  # noqa: E402


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests.

    Every test also starts with an empty roster cache.
    """
    from app.core.rate_limit import limiter

    global_cache.clear()
    # Check if this is a rate limiting test (marked with @pytest.mark.rate_limit)
    if "rate_limit" in request.keywords:
        limiter.enabled = True
        limiter.reset()
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True
    global_cache.clear()


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with a test database."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def cache():
    """A private in-memory cache for service-level tests."""
    return TTLCache(max_size=100)


@pytest.fixture
def hub():
    """A private broadcast hub (no heartbeat task) for service-level tests."""
    return BroadcastHub(heartbeat_interval=3600, queue_size=10)


@pytest.fixture
def organizer(db_session):
    return create_user(db_session, "organizer@example.edu", role=UserRole.ORGANIZER, division=None)


@pytest.fixture
def faculty(db_session):
    return create_user(db_session, "faculty@example.edu", role=UserRole.FACULTY, division=None)


@pytest.fixture
def admin(db_session):
    return create_user(db_session, "admin@example.edu", role=UserRole.ADMIN, division=None)


@pytest.fixture
def student(db_session):
    return create_user(db_session, "student@example.edu", name="Asha Rao", roll_no="CS-101")


@pytest.fixture
def event(db_session, organizer):
    return create_event(db_session, organizer)
