"""Rate limiting configuration."""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings


def get_client_ip(request):
    """Get client IP for rate limiting, considering proxies."""
    # Check X-Forwarded-For header (from reverse proxies)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    # Fall back to direct connection IP
    return get_remote_address(request)


def get_storage_uri() -> str:
    """Redis when REDIS_URL is configured (Docker/production), memory for local dev."""
    return settings.REDIS_URL or "memory://"


# Create rate limiter instance
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],  # Global default
    storage_uri=get_storage_uri(),
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)

# Rate limit definitions for different endpoint categories
RATE_LIMITS = {
    # Scans come from individual phones, so per-IP limits stay tight
    "check_in": "10/minute",

    # Dashboards refresh rosters and event lists frequently
    "event_read": "200/minute",
    "event_write": "30/minute",
}
