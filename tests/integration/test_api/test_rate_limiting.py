"""Test rate limiting functionality."""
import pytest

from app.core.qr_token import issue_checkin_token
from tests.utils import auth_headers


@pytest.mark.integration
@pytest.mark.rate_limit
class TestRateLimiting:
    """Test rate limiting on check-in."""

    def test_checkin_rate_limit(self, client, event, student):
        """Test that check-in endpoint rate limiting works (10 per minute)."""
        headers = auth_headers(student)
        payload = {"qr_data": issue_checkin_token(event.id)}

        # Make 10 check-ins (the first succeeds, the rest are duplicates but still count)
        for i in range(10):
            response = client.post(f"/api/v1/events/{event.id}/checkin", json=payload, headers=headers)
            assert response.status_code in (200, 400), f"Request {i+1} should not be rate limited"

        # The 11th request should be rate limited
        response = client.post(f"/api/v1/events/{event.id}/checkin", json=payload, headers=headers)
        assert response.status_code == 429, "Request 11 should be rate limited with 429 status"

    def test_limit_is_per_client_ip(self, client, event, student):
        headers = auth_headers(student)
        payload = {"qr_data": issue_checkin_token(event.id)}

        for _ in range(10):
            client.post(
                f"/api/v1/events/{event.id}/checkin",
                json=payload,
                headers={**headers, "X-Forwarded-For": "10.0.0.1"},
            )

        response = client.post(
            f"/api/v1/events/{event.id}/checkin",
            json=payload,
            headers={**headers, "X-Forwarded-For": "10.0.0.2"},
        )
        assert response.status_code != 429
