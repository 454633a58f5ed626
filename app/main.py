"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.pool import QueuePool
import os

from app.api.v1.router import api_router
from app.api.deps import get_db
from app.core.broadcast import hub
from app.core.config import settings
from app.core.rate_limit import limiter
from app.core.logging_config import setup_logging, get_logger
from app.core.cache import get_cache
from app.middleware import LoggingMiddleware

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL)
logger = get_logger(__name__)

# Validate production configuration after logging is configured
if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the SSE heartbeat while the app is up; close all streams on shutdown."""
    hub.start()
    yield
    await hub.shutdown()


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add rate limit exceeded exception handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add logging middleware (must be added before other middleware for proper request tracking)
app.add_middleware(LoggingMiddleware)

# Add API versioning middleware
@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response

# CORS middleware - the dashboard sends bearer tokens, not cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Configured via environment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

# Include API router
app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint with operational metrics.

    Returns:
        - status: "healthy" or "unhealthy"
        - cache: Cache backend statistics
        - sse: Connected live-view clients
        - database: Database connection status and pool metrics
        - memory: Memory usage statistics
        - environment: Current environment setting

    Returns 503 if database is unreachable.
    """
    from app.db.session import engine

    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "cache": get_cache().get_stats(),
        "sse": {"total_clients": hub.total_client_count()},
        "database": {"status": "connected"},
    }

    pool = engine.pool
    # SQLite pools don't track checkouts
    if isinstance(pool, QueuePool):
        health_status["database"]["pool"] = {
            "size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    # Try to get memory usage if psutil is available (cross-platform)
    try:
        import psutil
        process = psutil.Process(os.getpid())
        memory_info = process.memory_info()
        health_status["memory"] = {
            "rss_mb": round(memory_info.rss / 1024 / 1024, 2),
            "vms_mb": round(memory_info.vms / 1024 / 1024, 2),
            "percent": round(process.memory_percent(), 2),
        }
    except ImportError:
        # psutil not available, skip memory metrics
        health_status["memory"] = {"status": "psutil not installed"}
    except Exception as e:
        logger.warning("health_check_memory_error", error=str(e))
        health_status["memory"] = {"error": "unable to read"}

    try:
        # Test database connection with a simple query
        db.execute(text("SELECT 1"))
    except Exception as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
