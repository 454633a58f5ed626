"""Integration tests for the check-in and roster endpoints."""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.qr_token import issue_checkin_token
from app.db.models import EventAttendance
from tests.utils import add_attendance, auth_headers, create_event, create_user


def _checkin(client, event_id, user, qr_data):
    return client.post(
        f"/api/v1/events/{event_id}/checkin",
        json={"qr_data": qr_data},
        headers=auth_headers(user),
    )


@pytest.mark.integration
class TestCheckinEndpoint:
    """Tests for POST /api/v1/events/{id}/checkin."""

    def test_checkin_success(self, client, event, student):
        response = _checkin(client, event.id, student, issue_checkin_token(event.id))

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Successfully checked in to the event"
        assert data["attendance"]["event_id"] == event.id
        assert data["attendance"]["user_id"] == student.id
        assert data["attendance"]["timestamp"]

    def test_checkin_twice(self, client, db_session, event, student):
        token = issue_checkin_token(event.id)
        _checkin(client, event.id, student, token)

        response = _checkin(client, event.id, student, token)

        assert response.status_code == 400
        assert response.json()["detail"] == "You are already checked in to this event"
        assert db_session.query(EventAttendance).filter(EventAttendance.event_id == event.id).count() == 1

    def test_checkin_invalid_token(self, client, event, student):
        response = _checkin(client, event.id, student, "not.a.token")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired QR code"

    def test_checkin_expired_token(self, client, event, student):
        token = issue_checkin_token(event.id, now=datetime.now(timezone.utc) - timedelta(hours=25))

        response = _checkin(client, event.id, student, token)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired QR code"

    def test_checkin_token_for_other_event(self, client, db_session, organizer, event, student):
        other = create_event(db_session, organizer, name="Other Talk")

        response = _checkin(client, event.id, student, issue_checkin_token(other.id))

        assert response.status_code == 400
        assert response.json()["detail"] == "QR code does not match the event"

    def test_checkin_event_over(self, client, db_session, organizer, student):
        past = create_event(db_session, organizer, date=datetime.now(timezone.utc) - timedelta(days=3))

        response = _checkin(client, past.id, student, issue_checkin_token(past.id))

        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found or no longer active"

    def test_checkin_unknown_event(self, client, student):
        response = _checkin(client, 99999, student, issue_checkin_token(99999))

        assert response.status_code == 404

    @pytest.mark.parametrize("qr_data", ["", "   ", "has space.in.it"])
    def test_checkin_malformed_payload(self, client, event, student, qr_data):
        response = _checkin(client, event.id, student, qr_data)

        assert response.status_code == 422

    def test_checkin_requires_auth(self, client, event):
        response = client.post(
            f"/api/v1/events/{event.id}/checkin",
            json={"qr_data": issue_checkin_token(event.id)},
        )

        assert response.status_code == 401

    def test_checkin_rejects_bad_auth_token(self, client, event):
        response = client.post(
            f"/api/v1/events/{event.id}/checkin",
            json={"qr_data": issue_checkin_token(event.id)},
            headers={"Authorization": "Bearer garbage"},
        )

        assert response.status_code == 403


@pytest.mark.integration
class TestStudentsEndpoint:
    """Tests for GET /api/v1/events/{id}/students."""

    def test_roster_from_database_then_cache(self, client, event, student, faculty, db_session):
        add_attendance(db_session, event, student)

        first = client.get(f"/api/v1/events/{event.id}/students", headers=auth_headers(faculty))
        second = client.get(f"/api/v1/events/{event.id}/students", headers=auth_headers(faculty))

        assert first.status_code == 200
        assert first.json()["from_cache"] is False
        assert second.json()["from_cache"] is True
        assert first.json()["students"] == second.json()["students"]
        roster_entry = first.json()["students"][0]
        assert roster_entry["name"] == "Asha Rao"
        assert roster_entry["roll_no"] == "CS-101"
        assert roster_entry["timestamp"]

    def test_checkin_invalidates_cached_roster(self, client, event, student, faculty):
        url = f"/api/v1/events/{event.id}/students"
        assert client.get(url, headers=auth_headers(faculty)).json()["students"] == []

        _checkin(client, event.id, student, issue_checkin_token(event.id))
        response = client.get(url, headers=auth_headers(faculty))

        assert response.json()["from_cache"] is False
        assert [s["id"] for s in response.json()["students"]] == [student.id]

    def test_filtered_rosters_also_invalidated(self, client, event, student, faculty):
        url = f"/api/v1/events/{event.id}/students?division=A&department=Computer%20Science"
        client.get(url, headers=auth_headers(faculty))

        _checkin(client, event.id, student, issue_checkin_token(event.id))
        response = client.get(url, headers=auth_headers(faculty))

        assert response.json()["from_cache"] is False
        assert len(response.json()["students"]) == 1

    def test_division_filter(self, client, db_session, event, faculty):
        a = create_user(db_session, "a@example.edu", division="A")
        b = create_user(db_session, "b@example.edu", division="B")
        add_attendance(db_session, event, a)
        add_attendance(db_session, event, b)

        response = client.get(f"/api/v1/events/{event.id}/students?division=B", headers=auth_headers(faculty))

        assert [s["id"] for s in response.json()["students"]] == [b.id]

    def test_blank_filter_shares_unfiltered_entry(self, client, event, faculty):
        client.get(f"/api/v1/events/{event.id}/students", headers=auth_headers(faculty))

        response = client.get(f"/api/v1/events/{event.id}/students?division=", headers=auth_headers(faculty))

        assert response.json()["from_cache"] is True

    def test_filter_with_markup_rejected(self, client, event, faculty):
        response = client.get(f"/api/v1/events/{event.id}/students?division=a<b", headers=auth_headers(faculty))

        assert response.status_code == 400

    def test_students_cannot_view_roster(self, client, event, student):
        response = client.get(f"/api/v1/events/{event.id}/students", headers=auth_headers(student))

        assert response.status_code == 403

    @pytest.mark.parametrize("fixture_name", ["faculty", "organizer", "admin"])
    def test_staff_can_view_roster(self, client, event, request, fixture_name):
        user = request.getfixturevalue(fixture_name)

        response = client.get(f"/api/v1/events/{event.id}/students", headers=auth_headers(user))

        assert response.status_code == 200
