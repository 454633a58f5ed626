"""Logging middleware for request tracking."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests with request IDs.

    An incoming X-Request-ID (set by a proxy) is reused so log lines can be
    correlated across hops; otherwise a new one is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        # Store request ID in request.state for access in endpoint handlers
        request.state.request_id = request_id

        # Add request ID to context vars (available to all logs in this request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        start_time = time.perf_counter()

        logger.info(
            "request_started",
            query_params=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id

        # For SSE this measures time to open the stream, not its lifetime
        is_stream = response.headers.get("content-type", "").startswith("text/event-stream")
        logger.info(
            "stream_opened" if is_stream else "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

        return response
