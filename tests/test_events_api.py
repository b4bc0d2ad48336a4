from datetime import datetime, timezone

import pytest

from events_service_api.app.core.config import settings

EVENTS = "/api/v1/events"
MISSING_ID = "f" * 24


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def event_body(user_id):
    return {
        "ownerID": user_id,
        "visibility": " public ",
        "googlePoint": "https://maps.google.com/?q=51.5,-0.12",
        "description": "Morning run",
        "datetime_start": "2025-09-01T07:00:00Z",
        "datetime_end": "2025-09-01T08:00:00Z",
        "period": "2025-09-08T07:00:00Z",
        "repeatUntil": "2025-12-01T08:00:00Z",
    }


@pytest.fixture
def event_id(client, event_body, auth_headers):
    response = client.post(EVENTS + "/", json=event_body, headers=auth_headers)
    assert response.status_code == 201
    return response.json()["id"]


def test_create_event(client, event_body, auth_headers, user_id):
    response = client.post(EVENTS + "/", json=event_body, headers=auth_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["ownerID"] == user_id
    assert data["visibility"] == "public"
    assert _parse(data["datetime_start"]) == datetime(2025, 9, 1, 7, tzinfo=timezone.utc)


def test_create_event_requires_login(client, event_body):
    assert client.post(EVENTS + "/", json=event_body).status_code == 401


def test_create_event_anonymous_when_auth_disabled(client, event_body, monkeypatch):
    monkeypatch.setattr(settings, "auth_required", False)
    assert client.post(EVENTS + "/", json=event_body).status_code == 201


def test_create_event_reports_fields_in_schema_order(client, auth_headers):
    response = client.post(
        EVENTS + "/",
        json={"repeatUntil": "someday", "visibility": "friends", "ownerID": "123"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid event payload."
    assert [detail["field"] for detail in body["details"]] == [
        "ownerID",
        "visibility",
        "googlePoint",
        "description",
        "datetime_start",
        "datetime_end",
        "period",
        "repeatUntil",
    ]
    assert body["details"][1]["message"] == "visibility must be one of: public, subscribers, private."
    assert body["details"][7]["message"] == "repeatUntil must be a valid date."


@pytest.mark.parametrize(
    "changes, field, message",
    [
        (
            {"datetime_end": "2025-09-01T06:00:00Z"},
            "datetime_end",
            "datetime_end must be greater than datetime_start.",
        ),
        (
            {"repeatUntil": "2025-08-01T00:00:00Z"},
            "repeatUntil",
            "repeatUntil must be greater than datetime_start.",
        ),
        (
            {"repeatUntil": "2025-09-01T07:30:00Z"},
            "repeatUntil",
            "repeatUntil must be on or after datetime_end.",
        ),
    ],
)
def test_create_event_schedule_rules(client, event_body, auth_headers, changes, field, message):
    event_body.update(changes)
    response = client.post(EVENTS + "/", json=event_body, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["details"] == [{"field": field, "message": message}]


def test_list_and_filter_events(client, event_id, event_body, auth_headers, other_user_id):
    event_body.update(ownerID=other_user_id, visibility="private")
    other = client.post(EVENTS + "/", json=event_body, headers=auth_headers).json()["id"]

    def ids(**params):
        return [e["id"] for e in client.get(EVENTS + "/", params=params, headers=auth_headers).json()]

    assert ids() == [event_id, other]
    assert ids(ownerID=other_user_id) == [other]
    assert ids(visibility="public") == [event_id]


def test_get_event(client, event_id, auth_headers):
    assert client.get(f"{EVENTS}/{event_id}", headers=auth_headers).json()["description"] == "Morning run"
    assert client.get(f"{EVENTS}/{MISSING_ID}", headers=auth_headers).status_code == 404
    bad = client.get(f"{EVENTS}/not-an-id", headers=auth_headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid event id format."


def test_reading_events_requires_login(client, event_id):
    assert client.get(EVENTS + "/").status_code == 401
    assert client.get(f"{EVENTS}/{event_id}").status_code == 401


def test_update_event_partially(client, event_id, auth_headers):
    response = client.put(
        f"{EVENTS}/{event_id}",
        json={"description": " Evening run ", "visibility": "subscribers"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["description"] == "Evening run"
    assert data["visibility"] == "subscribers"
    assert _parse(data["datetime_end"]) == datetime(2025, 9, 1, 8, tzinfo=timezone.utc)


def test_update_event_checks_schedule_against_stored_dates(client, event_id, auth_headers):
    response = client.put(
        f"{EVENTS}/{event_id}",
        json={"datetime_end": "2025-09-01T06:00:00Z"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "datetime_end"


def test_update_event_errors(client, event_id, auth_headers):
    empty = client.put(f"{EVENTS}/{event_id}", json={}, headers=auth_headers)
    assert empty.status_code == 400
    assert empty.json()["detail"] == "No update fields provided."

    missing = client.put(f"{EVENTS}/{MISSING_ID}", json={"description": "x"}, headers=auth_headers)
    assert missing.status_code == 404

    assert client.put(f"{EVENTS}/{event_id}", json={"description": "x"}).status_code == 401


def test_delete_event(client, event_id, auth_headers):
    assert client.delete(f"{EVENTS}/{event_id}", headers=auth_headers).status_code == 204
    assert client.delete(f"{EVENTS}/{event_id}", headers=auth_headers).status_code == 404
    assert client.get(f"{EVENTS}/{event_id}", headers=auth_headers).status_code == 404
