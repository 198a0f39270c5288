"""API tests for /api/events (session required)."""

from unittest.mock import patch

import pytest

from portal.core.exceptions import NotFoundError
from portal.models import db
from portal.models.event import Event
from portal.services import event_service
from portal.utils.helpers import parse_datetime

from conftest import TEST_USER_ID


def _event(client, headers, **fields):
    payload = {
        "title": "Board meeting",
        "start_datetime": "2026-03-10T09:00:00Z",
        "end_datetime": "2026-03-10T11:00:00Z",
    }
    payload.update(fields)
    res = client.post("/api/events", json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["event"]


class TestAuth:
    def test_requires_session(self, client):
        assert client.get("/api/events").status_code == 401
        assert client.post("/api/events", json={"title": "x"}).status_code == 401


class TestCreate:
    def test_create_wraps_event(self, client, auth_headers):
        event = _event(client, auth_headers, location="Lyon")
        assert event["status"] == "scheduled"
        assert event["priority"] == 0
        assert event["is_all_day"] is False
        assert event["created_by"] == TEST_USER_ID

    def test_missing_fields_message(self, client, auth_headers):
        res = client.post("/api/events", json={"title": "x"}, headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "Missing required fields: title, start_datetime, end_datetime"

    def test_end_before_start_rejected(self, client, auth_headers):
        res = client.post("/api/events", headers=auth_headers, json={
            "title": "x", "start_datetime": "2026-03-10T11:00:00Z", "end_datetime": "2026-03-10T09:00:00Z"})
        assert res.status_code == 400

    def test_bad_priority_rejected(self, client, auth_headers):
        res = client.post("/api/events", headers=auth_headers, json={
            "title": "x", "start_datetime": "2026-03-10T09:00:00Z",
            "end_datetime": "2026-03-10T10:00:00Z", "priority": 5})
        assert res.status_code == 400


class TestList:
    def test_chronological_with_filters(self, client, auth_headers):
        _event(client, auth_headers, title="Late", start_datetime="2026-04-01T09:00:00Z",
               end_datetime="2026-04-01T10:00:00Z", event_type="meeting")
        _event(client, auth_headers, title="Early", start_datetime="2026-02-01T09:00:00Z",
               end_datetime="2026-02-01T10:00:00Z", event_type="meeting")
        _event(client, auth_headers, title="Cancelled", status="cancelled", event_type="webinar",
               start_datetime="2026-03-01T09:00:00Z", end_datetime="2026-03-01T10:00:00Z")

        body = client.get("/api/events", headers=auth_headers).get_json()
        assert [e["title"] for e in body["events"]] == ["Early", "Cancelled", "Late"]

        body = client.get("/api/events?event_type=meeting&start_date=2026-03-01T00:00:00Z",
                          headers=auth_headers).get_json()
        assert [e["title"] for e in body["events"]] == ["Late"]

        body = client.get("/api/events?status=scheduled&status=cancelled&end_date=2026-03-31T00:00:00Z",
                          headers=auth_headers).get_json()
        assert [e["title"] for e in body["events"]] == ["Early", "Cancelled"]


class TestSingleEvent:
    def test_get_update_delete(self, client, auth_headers):
        event = _event(client, auth_headers)

        res = client.get(f"/api/events/{event['id']}", headers=auth_headers)
        assert res.get_json()["event"]["title"] == "Board meeting"

        res = client.put(f"/api/events/{event['id']}", json={"status": "completed"}, headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json()["event"]["status"] == "completed"

        res = client.delete(f"/api/events/{event['id']}", headers=auth_headers)
        assert res.get_json() == {"success": True}
        assert db.session.get(Event, event["id"]) is None

    def test_unknown_event(self, client, auth_headers):
        res = client.get("/api/events/missing", headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Event not found"
        assert res.get_json()["code"] == "ERR_NOT_FOUND"
        assert client.delete("/api/events/missing", headers=auth_headers).status_code == 404
        assert client.put("/api/events/missing", json={"title": "x"}, headers=auth_headers).status_code == 404

    def test_update_cannot_end_before_stored_start(self, client, auth_headers):
        event = _event(client, auth_headers)
        res = client.put(f"/api/events/{event['id']}", json={"end_datetime": "2026-03-09T00:00:00Z"},
                         headers=auth_headers)
        assert res.status_code == 400
        stored = db.session.get(Event, event["id"])
        assert parse_datetime(stored.end_datetime) == parse_datetime("2026-03-10T11:00:00Z")


class TestEventService:
    def test_get_and_delete_through_service(self, client, auth_headers):
        event = _event(client, auth_headers, title="Service")
        assert event_service.get_event(event["id"])["title"] == "Service"

        event_service.delete_event(event["id"])
        with pytest.raises(NotFoundError) as exc_info:
            event_service.get_event(event["id"])
        assert exc_info.value.public_message == "Event not found"

    def test_routes_delegate_to_service(self, client, auth_headers):
        with patch.object(event_service, "get_event", return_value={"id": "e-1", "title": "Stub"}) as get:
            res = client.get("/api/events/e-1", headers=auth_headers)
        get.assert_called_once_with("e-1")
        assert res.get_json() == {"event": {"id": "e-1", "title": "Stub"}}

        with patch.object(event_service, "delete_event") as delete:
            res = client.delete("/api/events/e-1", headers=auth_headers)
        delete.assert_called_once_with("e-1")
        assert res.get_json() == {"success": True}
