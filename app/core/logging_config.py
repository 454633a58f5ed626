"""Structured logging setup.

All application loggers go through structlog so that request-scoped context
(request_id, method, path) bound by LoggingMiddleware ends up on every line.
Production emits JSON; everything else gets the human-readable console renderer.
"""
import logging
import sys

import structlog

from app.core.config import settings


def setup_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog once at startup."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.ENVIRONMENT == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Return a structlog logger bound to the given module name."""
    return structlog.get_logger(name)
