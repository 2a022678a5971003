from __future__ import annotations

from datetime import timedelta

import pytest

from src.community_events.community_events.common.datetime_utils import now_local
from src.community_events.community_events.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, email: str, password: str = "secret123"):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_protected_routes_need_login(client, make_event):
    event = make_event(registration_required=True)
    resp = client.post(f"/events/{event.event_id}/register")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Authentication required", "code": "UNAUTHENTICATED"}


def test_bad_credentials(client):
    resp = client.post("/auth/login", json={"email": "member@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "UNAUTHENTICATED"


def test_register_flow_maps_domain_errors(client, make_event):
    start = now_local() + timedelta(days=1)
    event = make_event(registration_required=True, start_date=start, end_date=start + timedelta(hours=2))
    me = _login(client, "member@example.com")
    assert me["role"] == "USER"

    resp = client.post(f"/events/{event.event_id}/register")
    assert resp.status_code == 201
    assert resp.get_json()["data"]["status"] == "CONFIRMED"

    resp = client.post(f"/events/{event.event_id}/register")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "ALREADY_REGISTERED"
    assert resp.get_json()["success"] is False

    resp = client.get("/events/my-registrations")
    assert [r["event_id"] for r in resp.get_json()["data"]] == [event.event_id]

    resp = client.delete(f"/events/{event.event_id}/register")
    assert resp.status_code == 200


def test_unknown_event_is_404(client):
    _login(client, "member@example.com")
    resp = client.post("/events/9999/register")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "EVENT_NOT_FOUND"


def test_member_cannot_manage_events(client, make_event):
    event = make_event()
    _login(client, "member@example.com")
    assert client.post("/events", json={"title": "x"}).status_code == 403
    assert client.post(f"/events/{event.event_id}/generate-qr").status_code == 403


def test_admin_creates_event_and_runs_qr_check_in(client):
    _login(client, "admin@example.com")
    now = now_local()
    resp = client.post(
        "/events",
        json={
            "title": "Open day",
            "start_date": (now - timedelta(hours=1)).isoformat(),
            "end_date": (now + timedelta(hours=2)).isoformat(),
            "location": "Hall",
            "category": "community",
        },
    )
    assert resp.status_code == 201, resp.get_json()
    event_id = resp.get_json()["data"]["event_id"]

    resp = client.post(f"/events/{event_id}/generate-qr", json={"ttl_hours": 2})
    assert resp.status_code == 201
    token = resp.get_json()["data"]["token"]

    resp = client.get(f"/events/{event_id}/validate-checkin-token", query_string={"token": token})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["event_title"] == "Open day"

    resp = client.get(f"/events/{event_id}/validate-checkin-token", query_string={"token": "bogus"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_TOKEN_FORMAT"

    resp = client.post(f"/events/{event_id}/checkin-with-token", json={"token": token})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "CHECKED_IN"

    status = client.get(f"/events/{event_id}/qr-status").get_json()["data"]
    assert status["has_active_qr"] is True

    assert client.delete(f"/events/{event_id}/revoke-qr").status_code == 200
    resp = client.delete(f"/events/{event_id}/revoke-qr")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NO_ACTIVE_TOKEN"


def test_invitation_list_hides_tokens(client, notifier):
    _login(client, "admin@example.com")
    resp = client.post("/invitations", json={"email": "friend@example.com", "role": "user"})
    assert resp.status_code == 201
    assert "token" not in resp.get_json()["data"]
    assert resp.get_json()["data"]["email"] == "friend@example.com"

    items = client.get("/invitations").get_json()["data"]
    assert len(items) == 1
    assert "token" not in items[0]


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_attendance_query_and_stats_routes(client, make_event):
    now = now_local()
    event = make_event(start_date=now - timedelta(hours=1), end_date=now + timedelta(hours=2))

    _login(client, "member@example.com")
    assert client.post(f"/events/{event.event_id}/attendance").status_code == 200
    assert client.get("/attendance").status_code == 403
    assert client.get("/dashboard/stats").status_code == 403

    _login(client, "subadmin@example.com")
    resp = client.get("/attendance", query_string={"event_id": event.event_id, "status": "checked_in"})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert [r["user_id"] for r in data["items"]] == [3]
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 1, "total_pages": 1}

    resp = client.get("/attendance", query_string={"status": "late"})
    assert resp.status_code == 400

    stats = client.get(f"/events/{event.event_id}/stats").get_json()["data"]
    assert stats["checked_in"] == 1 and stats["registrations"] == 0

    totals = client.get("/dashboard/stats").get_json()["data"]
    assert totals["total_users"] == 3
    assert totals["total_attendance"] == 1


def test_bulk_invite_route(client, notifier):
    _login(client, "admin@example.com")
    resp = client.post(
        "/users/bulk-invite",
        json={"invitations": [{"email": "a@example.com", "role": "user"}, {"email": "member@example.com"}]},
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert [i["email"] for i in data["succeeded"]] == ["a@example.com"]
    assert data["failed"][0]["code"] == "USER_EXISTS"

    assert client.post("/users/bulk-invite", json={"invitations": "nope"}).status_code == 400
