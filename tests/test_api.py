"""End-to-end tests for the HTTP routes."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from motorboat_planner import main
from motorboat_planner.domain.models import TimelineEntryType
from motorboat_planner.domain.registry import MOTORBOATS, FleetRegistry
from motorboat_planner.main import app, event_repo, season, settings, timeline_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    event_repo.clear()
    timeline_repo.clear()
    yield
    event_repo.clear()
    timeline_repo.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _payload(**overrides) -> dict:
    payload = {
        "type": "regatta",
        "name": "29er Euro Cup",
        "boat_class_id": "29er",
        "start_date": "2025-07-15",
        "end_date": "2025-07-18",
        "motorboat_loading_time": "2025-07-14T08:00",
        "requested_motorboat": "tornado-rot",
        "organizer": "TSC Berlin",
    }
    payload.update(overrides)
    return payload


def _book_29er_and_j70(client) -> tuple[dict, dict]:
    skiff = client.post("/events", json=_payload()).json()
    keelboat = client.post(
        "/events",
        json=_payload(
            name="J70 Deutsche Meisterschaft",
            boat_class_id="j70",
            start_date="2025-07-16",
            end_date="2025-07-20",
            motorboat_loading_time="2025-07-15T10:00",
        ),
    ).json()
    return skiff, keelboat


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


def test_list_catalogs(client):
    classes = client.get("/boat-classes").json()
    boats = client.get("/motorboats").json()

    assert [c["id"] for c in classes][:3] == ["opti-c", "opti-b", "opti-a"]
    assert boats[0]["id"] == "tornado-rot"
    assert boats[0]["priority_classes"] == ["29er", "j70"]
    assert boats[0]["family"] == "tornado"


def test_motorboats_by_priority(client):
    resp = client.get("/motorboats/by-priority/j70")
    assert resp.status_code == 200
    assert [b["id"] for b in resp.json()][:2] == ["tornado-rot", "tornado-grau"]

    assert client.get("/motorboats/by-priority/laser").status_code == 404


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_create_event(client):
    resp = client.post("/events", json=_payload())

    assert resp.status_code == 201
    body = resp.json()
    assert body["assigned_motorboat"] == "tornado-rot"
    assert body["start_date"] == "2025-07-15"
    assert client.get(f"/events/{body['id']}").json()["name"] == "29er Euro Cup"


def test_create_event_with_german_dates(client):
    resp = client.post(
        "/events",
        json=_payload(start_date="15.07.2025", end_date="18.07.2025"),
    )
    assert resp.status_code == 201
    assert resp.json()["end_date"] == "2025-07-18"


def test_create_event_validation(client):
    assert client.post("/events", json=_payload(boat_class_id="laser")).status_code == 400
    assert (
        client.post("/events", json=_payload(requested_motorboat="ghost")).status_code
        == 400
    )
    assert (
        client.post(
            "/events", json=_payload(start_date="2025-07-18", end_date="2025-07-15")
        ).status_code
        == 422
    )


def test_list_events_filters(client):
    client.post("/events", json=_payload())
    client.post(
        "/events",
        json=_payload(
            boat_class_id="opti-a",
            name="Herbstpreis",
            start_date="2025-09-14",
            end_date="2025-09-15",
            requested_motorboat="zodiac",
        ),
    )

    assert len(client.get("/events").json()) == 2
    assert len(client.get("/events", params={"boat_class_id": "opti-a"}).json()) == 1
    in_july = client.get("/events", params={"start": "2025-07-01", "end": "2025-07-31"})
    assert [e["name"] for e in in_july.json()] == ["29er Euro Cup"]


def test_update_event(client):
    event = client.post("/events", json=_payload()).json()

    resp = client.patch(f"/events/{event['id']}", json={"assigned_motorboat": "narwhal"})

    assert resp.status_code == 200
    assert resp.json()["assigned_motorboat"] == "narwhal"
    assert resp.json()["requested_motorboat"] == "tornado-rot"
    types = [e["type"] for e in client.get(f"/events/{event['id']}/timeline").json()]
    assert TimelineEntryType.UPDATED in types


def test_update_event_errors(client):
    event = client.post("/events", json=_payload()).json()

    assert client.patch("/events/missing", json={"name": "x"}).status_code == 404
    assert (
        client.patch(
            f"/events/{event['id']}", json={"assigned_motorboat": "ghost"}
        ).status_code
        == 400
    )
    assert (
        client.patch(f"/events/{event['id']}", json={"end_date": "2025-07-01"}).status_code
        == 422
    )


def test_update_event_with_german_dates(client):
    event = client.post(
        "/events",
        json=_payload(
            start_date="10.05.2025",
            end_date="12.05.2025",
            motorboat_loading_time="2025-05-09T08:00",
        ),
    ).json()

    resp = client.patch(f"/events/{event['id']}", json={"end_date": "14.05.2025"})

    assert resp.status_code == 200
    assert resp.json()["end_date"] == "2025-05-14"
    assert resp.json()["start_date"] == "2025-05-10"


def test_loading_after_start_is_unprocessable(client):
    resp = client.post(
        "/events",
        json=_payload(motorboat_loading_time="2025-07-20T08:00"),
    )
    assert resp.status_code == 422
    assert client.get("/events").json() == []

    event = client.post("/events", json=_payload()).json()
    resp = client.patch(
        f"/events/{event['id']}", json={"motorboat_loading_time": "20.07.2025"}
    )
    assert resp.status_code == 422
    assert client.get(f"/events/{event['id']}").json()["motorboat_loading_time"].startswith(
        "2025-07-14"
    )


def test_delete_event(client):
    event = client.post("/events", json=_payload()).json()

    assert client.delete(f"/events/{event['id']}").status_code == 200
    assert client.get(f"/events/{event['id']}").status_code == 404
    assert client.delete(f"/events/{event['id']}").status_code == 404


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


def test_list_conflicts_with_suggestion(client):
    skiff, keelboat = _book_29er_and_j70(client)

    conflicts = client.get("/conflicts").json()

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict["motorboat_id"] == "tornado-rot"
    assert conflict["type"] == "overlap"
    assert conflict["suggestion"]["keep_event_id"] == skiff["id"]
    assert conflict["suggestion"]["move_event_id"] == keelboat["id"]
    assert conflict["suggestion"]["new_motorboat_id"] == "tornado-grau"

    event_conflicts = client.get(f"/events/{keelboat['id']}/conflicts").json()
    assert [c["id"] for c in event_conflicts] == [conflict["id"]]


def test_booking_a_clash_records_conflict_on_timeline(client):
    _, keelboat = _book_29er_and_j70(client)

    types = [e["type"] for e in client.get(f"/events/{keelboat['id']}/timeline").json()]

    assert types == [TimelineEntryType.CREATED, TimelineEntryType.CONFLICT_DETECTED]


def test_resolve_conflict(client):
    _, keelboat = _book_29er_and_j70(client)
    conflict_id = client.get("/conflicts").json()[0]["id"]

    resp = client.post(f"/conflicts/{conflict_id}/resolve")

    assert resp.status_code == 200
    assert resp.json()["id"] == keelboat["id"]
    assert resp.json()["assigned_motorboat"] == "tornado-grau"
    assert client.get("/conflicts").json() == []
    timeline = client.get(f"/events/{keelboat['id']}/timeline").json()
    assert timeline[-1]["type"] == TimelineEntryType.MOTORBOAT_REASSIGNED
    assert timeline[-1]["payload"] == {"from": "tornado-rot", "to": "tornado-grau"}


def test_resolve_unknown_conflict(client):
    assert client.post("/conflicts/nope/resolve").status_code == 404


@pytest.fixture()
def zodiac_only(monkeypatch):
    """Shrink the fleet to a single boat so no alternative exists."""
    fleet = FleetRegistry(motorboats=[mb for mb in MOTORBOATS if mb.id == "zodiac"])
    monkeypatch.setattr(main, "fleet", fleet)
    monkeypatch.setattr(main.handler_registry, "fleet", fleet)
    return fleet


def _book_two_on_zodiac(client) -> None:
    for boat_class_id, start, end in (
        ("opti-a", "2025-05-10", "2025-05-12"),
        ("pirat", "2025-05-11", "2025-05-13"),
    ):
        resp = client.post(
            "/events",
            json=_payload(
                boat_class_id=boat_class_id,
                start_date=start,
                end_date=end,
                motorboat_loading_time=None,
                requested_motorboat="zodiac",
            ),
        )
        assert resp.status_code == 201


def test_auto_resolve_reports_unresolvable_conflict(client, zodiac_only):
    _book_two_on_zodiac(client)

    resp = client.post("/conflicts/auto-resolve")

    assert resp.status_code == 200
    body = resp.json()
    assert body["resolved"] == 0
    assert len(body["remaining_conflicts"]) == 1
    assert body["remaining_conflicts"][0]["suggestion"]["new_motorboat_id"] is None
    assert [e["assigned_motorboat"] for e in client.get("/events").json()] == [
        "zodiac",
        "zodiac",
    ]


def test_resolve_without_alternative_is_conflict(client, zodiac_only):
    _book_two_on_zodiac(client)
    conflict_id = client.get("/conflicts").json()[0]["id"]

    assert client.post(f"/conflicts/{conflict_id}/resolve").status_code == 409


def test_auto_resolve_stops_at_cap_with_conflicts_left(client):
    # Five overlapping camps cannot fit on four boats.
    for n in range(5):
        client.post(
            "/events",
            json=_payload(
                name=f"Camp {n}",
                boat_class_id="opti-a",
                motorboat_loading_time=None,
                requested_motorboat="zodiac",
            ),
        )

    body = client.post("/conflicts/auto-resolve").json()

    assert body["resolved"] == settings.max_auto_resolutions
    assert body["remaining_conflicts"] != []


def test_auto_resolve_demo_season(client):
    loaded = client.post("/demo-data").json()["loaded"]
    assert loaded == 9
    assert len(client.get("/conflicts").json()) == 2

    resp = client.post("/conflicts/auto-resolve")

    assert resp.status_code == 200
    assert resp.json() == {"resolved": 2, "remaining_conflicts": []}


def test_motorboat_usage(client):
    _book_29er_and_j70(client)

    usage = client.get("/motorboats/usage").json()

    assert [u["motorboat"]["id"] for u in usage] == [
        "tornado-rot",
        "tornado-grau",
        "narwhal",
        "zodiac",
    ]
    assert [u["count"] for u in usage] == [2, 0, 0, 0]


def test_season(client):
    body = client.get("/season").json()

    assert body["season"]["start"] == season.start.isoformat()
    assert body["days"] == 214
    assert isinstance(body["deadline_passed"], bool)
