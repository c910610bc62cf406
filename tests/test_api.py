"""
HTTP tests for the calendar event endpoints.

Events are committed through a regular session so that the application's
own per-request sessions can see them.
"""

import pytest

from lms_calendar.database import create_event, set_module_visibility


@pytest.fixture
def seeded(session):
    events = {
        "lecture": create_event(session, courseid=5, eventtype="course", name="Lecture", timestart=1000),
        "seminar": create_event(session, courseid=5, eventtype="course", name="Seminar", timestart=3000),
        "hidden": create_event(session, courseid=5, eventtype="course", name="Hidden", timestart=2000, visible=0),
        "quiz": create_event(
            session, courseid=6, modulename="quiz", instance=7, eventtype="open", name="Quiz opens", timestart=1500
        ),
        "override": create_event(
            session, userid=3, modulename="quiz", instance=7, eventtype="open", name="Quiz opens (you)",
            timestart=2500, priority=0,
        ),
        "chat": create_event(
            session, courseid=5, modulename="chat", instance=1, eventtype="chattime", name="Chat", timestart=500
        ),
    }
    set_module_visibility(session, "chat", False)
    session.commit()
    return {name: event.id for name, event in events.items()}


def _names(response):
    return [item["name"] for item in response.json()["items"]]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_course_events(client, seeded):
    response = client.get("/events", params={"courses": "5"})

    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "calendar#events"
    assert body["offset"] == 0
    assert _names(response) == ["Lecture", "Seminar"]
    assert body["items"][0]["scope"] == "course"
    assert body["items"][0]["kind"] == "calendar#event"


def test_no_filters_returns_no_events(client, seeded):
    response = client.get("/events")

    assert response.status_code == 200
    assert response.json()["items"] == []


def test_show_hidden(client, seeded):
    response = client.get("/events", params={"courses": "5", "showHidden": "true"})

    assert _names(response) == ["Lecture", "Hidden", "Seminar"]


def test_override_replaces_event_for_user(client, seeded):
    response = client.get("/events", params={"users": "3", "courses": "6"})

    assert _names(response) == ["Quiz opens (you)"]


def test_all_dimensions(client, seeded):
    response = client.get("/events", params={"users": "all", "courses": "all"})

    assert _names(response) == ["Lecture", "Quiz opens (you)", "Seminar"]


def test_order_and_pagination(client, seeded):
    response = client.get(
        "/events",
        params={"courses": "5,6", "orderBy": "-timestart", "offset": "1", "limit": "1"},
    )

    body = response.json()
    assert _names(response) == ["Quiz opens"]
    assert body["offset"] == 1
    assert body["limit"] == 1


def test_time_window_accepts_rfc3339(client, seeded):
    response = client.get(
        "/events",
        params={
            "courses": "5",
            "timeStart": "1970-01-01T00:30:00Z",
            "timeEnd": "3500",
        },
    )

    assert _names(response) == ["Seminar"]


@pytest.mark.parametrize(
    "params,location",
    [
        ({"courses": "5,x"}, "courses"),
        ({"courses": "5", "orderBy": "e.id; DROP TABLE event"}, "orderBy"),
        ({"courses": "5", "limit": "-1"}, "limit"),
        ({"courses": "5", "limit": "0"}, "limit"),
        ({"courses": "5", "offset": "abc"}, "offset"),
        ({"courses": "5", "timeStart": "yesterday-ish"}, "timeStart"),
    ],
)
def test_invalid_parameters(client, seeded, params, location):
    response = client.get("/events", params=params)

    assert response.status_code == 400
    error = response.json()["error"]["errors"][0]
    assert error["reason"] == "invalidParameter"
    assert error["location"] == location


def test_limit_is_clamped(client, seeded, monkeypatch):
    monkeypatch.setattr("lms_calendar.api.methods.MAX_LIMIT", 1)

    response = client.get("/events", params={"courses": "5", "limit": "10"})

    assert response.status_code == 200
    assert response.json()["limit"] == 1
    assert _names(response) == ["Lecture"]
