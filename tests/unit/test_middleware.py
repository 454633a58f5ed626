"""Unit tests for middleware."""
import pytest
from unittest.mock import Mock, patch
from app.middleware.logging import LoggingMiddleware


def _mock_request(path="/test", method="GET", headers=None, query_params=None):
    mock_request = Mock()
    mock_request.state = Mock()
    mock_request.method = method
    mock_request.headers = headers or {}
    mock_request.url = Mock()
    mock_request.url.path = path
    mock_request.client = Mock()
    mock_request.client.host = "127.0.0.1"
    mock_request.query_params = query_params or {}
    return mock_request


def _mock_response(status_code=200, headers=None):
    mock_response = Mock()
    mock_response.headers = headers or {}
    mock_response.status_code = status_code
    return mock_response


@pytest.mark.unit
class TestLoggingMiddleware:
    """Test logging middleware."""

    @pytest.mark.asyncio
    async def test_request_id_added_to_state(self):
        """Test that request ID is added to request.state before the handler runs."""
        mock_request = _mock_request()
        mock_response = _mock_response()

        async def mock_call_next(request):
            # Verify request_id is set in request.state before processing
            assert isinstance(request.state.request_id, str)
            assert len(request.state.request_id) > 0
            return mock_response

        middleware = LoggingMiddleware(Mock())
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert isinstance(mock_request.state.request_id, str)
        assert response.headers["X-Request-ID"] == mock_request.state.request_id

    @pytest.mark.asyncio
    async def test_request_id_added_to_response_headers(self):
        """Test that X-Request-ID header is added to response."""
        mock_request = _mock_request(path="/api/v1/events/1/checkin", method="POST", query_params={"key": "value"})
        mock_response = _mock_response(status_code=201)

        async def mock_call_next(request):
            return mock_response

        middleware = LoggingMiddleware(Mock())
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert "X-Request-ID" in response.headers
        assert len(response.headers["X-Request-ID"]) > 0

    @pytest.mark.asyncio
    async def test_incoming_request_id_is_reused(self):
        """A request ID set by a proxy is carried through instead of replaced."""
        mock_request = _mock_request(headers={"X-Request-ID": "upstream-123"})
        mock_response = _mock_response()

        async def mock_call_next(request):
            return mock_response

        middleware = LoggingMiddleware(Mock())
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert mock_request.state.request_id == "upstream-123"
        assert response.headers["X-Request-ID"] == "upstream-123"

    @pytest.mark.asyncio
    async def test_request_id_unique_across_requests(self):
        """Test that each request gets a unique request ID."""
        mock_request1 = _mock_request(path="/test1")
        mock_request2 = _mock_request(path="/test2")

        async def mock_call_next1(request):
            return _mock_response()

        async def mock_call_next2(request):
            return _mock_response()

        middleware = LoggingMiddleware(Mock())
        response1 = await middleware.dispatch(mock_request1, mock_call_next1)
        response2 = await middleware.dispatch(mock_request2, mock_call_next2)

        assert response1.headers["X-Request-ID"] != response2.headers["X-Request-ID"]
        assert mock_request1.state.request_id != mock_request2.state.request_id

    @pytest.mark.asyncio
    async def test_event_stream_logged_as_opened(self):
        """Streaming responses log when the stream opens, not as a completed request."""
        mock_request = _mock_request(path="/api/v1/events/1/attendance-stream")
        mock_response = _mock_response(headers={"content-type": "text/event-stream; charset=utf-8"})

        async def mock_call_next(request):
            return mock_response

        middleware = LoggingMiddleware(Mock())
        with patch("app.middleware.logging.logger") as mock_logger:
            await middleware.dispatch(mock_request, mock_call_next)

        events = [call.args[0] for call in mock_logger.info.call_args_list]
        assert events == ["request_started", "stream_opened"]

    @pytest.mark.asyncio
    async def test_handler_exception_is_logged_and_reraised(self):
        mock_request = _mock_request()

        async def mock_call_next(request):
            raise RuntimeError("boom")

        middleware = LoggingMiddleware(Mock())
        with patch("app.middleware.logging.logger") as mock_logger:
            with pytest.raises(RuntimeError, match="boom"):
                await middleware.dispatch(mock_request, mock_call_next)

        assert mock_logger.error.call_args.args[0] == "request_failed"
        assert mock_logger.error.call_args.kwargs["exception_type"] == "RuntimeError"
