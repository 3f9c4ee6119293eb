"""End-to-end tests for the venue and booking HTTP surface."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.domain.models import TimelineEntryType
from app.main import app, booking_repo, timeline_repo, venue_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    venue_repo._store.clear()
    booking_repo._store.clear()
    timeline_repo._entries.clear()
    yield
    venue_repo._store.clear()
    booking_repo._store.clear()
    timeline_repo._entries.clear()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def venue_id(client: TestClient) -> str:
    resp = client.post("/venues", json={"venue_name": "Main Hall", "capacity": 200})
    assert resp.status_code == 200
    return resp.json()["id"]


# ---------------------------------------------------------------------------
# Stub data helpers
# ---------------------------------------------------------------------------


def _iso(hour: int, minute: int = 0) -> str:
    return f"2026-05-12T{hour:02d}:{minute:02d}:00Z"


def _book(client: TestClient, venue_id: str, start: str, end: str, **extra):
    payload = {
        "venue_id": venue_id,
        "group_name": "Debate Society",
        "title": "Weekly debate",
        "start_time": start,
        "end_time": end,
    }
    payload.update(extra)
    return client.post("/bookings", json=payload)


# ---------------------------------------------------------------------------
# Venues
# ---------------------------------------------------------------------------


def test_list_venues_ordered_by_name(client: TestClient):
    client.post("/venues", json={"venue_name": "Studio B"})
    client.post("/venues", json={"venue_name": "Amphitheatre"})

    resp = client.get("/venues")
    assert resp.status_code == 200
    assert [v["venue_name"] for v in resp.json()] == ["Amphitheatre", "Studio B"]


def test_duplicate_venue_name_409(client: TestClient):
    assert client.post("/venues", json={"venue_name": "Main Hall"}).status_code == 200
    resp = client.post("/venues", json={"venue_name": "Main Hall"})
    assert resp.status_code == 409
    assert len(client.get("/venues").json()) == 1


def test_create_venue_rejects_bad_capacity(client: TestClient):
    resp = client.post("/venues", json={"venue_name": "Closet", "capacity": 0})
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Conflict check endpoint
# ---------------------------------------------------------------------------


def test_check_without_bookings_reports_no_conflict(client: TestClient, venue_id: str):
    resp = client.post(
        f"/venues/{venue_id}/conflicts",
        json={"start_time": _iso(10), "end_time": _iso(12)},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "has_conflict": False,
        "conflicting_bookings": [],
        "suggested_slots": [],
    }


def test_check_reports_conflicts_and_suggestions(client: TestClient, venue_id: str):
    existing = _book(client, venue_id, _iso(10), _iso(12)).json()

    resp = client.post(
        f"/venues/{venue_id}/conflicts",
        json={"start_time": _iso(11), "end_time": _iso(13)},
    )
    body = resp.json()
    assert body["has_conflict"] is True
    assert [b["id"] for b in body["conflicting_bookings"]] == [existing["id"]]
    assert body["conflicting_bookings"][0]["group_name"] == "Debate Society"
    assert len(body["suggested_slots"]) == 1
    slot = body["suggested_slots"][0]
    assert slot["start_time"].startswith("2026-05-12T12:00:00")
    assert slot["end_time"].startswith("2026-05-12T14:00:00")
    assert slot["available"] is True


def test_check_unknown_venue_404(client: TestClient):
    resp = client.post(
        "/venues/nope/conflicts", json={"start_time": _iso(10), "end_time": _iso(12)}
    )
    assert resp.status_code == 404


def test_check_inverted_interval_422(client: TestClient, venue_id: str):
    resp = client.post(
        f"/venues/{venue_id}/conflicts",
        json={"start_time": _iso(12), "end_time": _iso(10)},
    )
    assert resp.status_code == 422


def test_check_fetch_failure_503(client: TestClient, venue_id: str, monkeypatch):
    def broken(*args):
        raise OSError("store unreachable")

    monkeypatch.setattr(booking_repo, "list_for_venue_day", broken)
    resp = client.post(
        f"/venues/{venue_id}/conflicts",
        json={"start_time": _iso(10), "end_time": _iso(12)},
    )
    assert resp.status_code == 503


# ---------------------------------------------------------------------------
# Creating bookings
# ---------------------------------------------------------------------------


def test_create_booking_and_timeline(client: TestClient, venue_id: str):
    resp = _book(client, venue_id, _iso(10), _iso(12))
    assert resp.status_code == 200
    booking = resp.json()

    timeline = client.get(f"/bookings/{booking['id']}/timeline").json()
    assert [e["type"] for e in timeline] == [TimelineEntryType.CREATED]


def test_conflicting_booking_is_rejected_with_result(client: TestClient, venue_id: str):
    _book(client, venue_id, _iso(9), _iso(11))
    _book(client, venue_id, _iso(11, 30), _iso(13))

    resp = _book(client, venue_id, _iso(10), _iso(12))
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["has_conflict"] is True
    assert len(detail["conflicting_bookings"]) == 2
    assert [s["start_time"][:19] for s in detail["suggested_slots"]] == ["2026-05-12T13:00:00"]
    assert len(client.get("/bookings").json()) == 2


def test_apply_suggested_slot(client: TestClient, venue_id: str):
    _book(client, venue_id, _iso(10), _iso(12))
    rejected = _book(client, venue_id, _iso(11), _iso(13))
    slot = rejected.json()["detail"]["suggested_slots"][0]

    resp = _book(client, venue_id, slot["start_time"], slot["end_time"])
    assert resp.status_code == 200
    assert len(client.get(f"/bookings?venue_id={venue_id}").json()) == 2


def test_override_books_anyway(client: TestClient, venue_id: str):
    first = _book(client, venue_id, _iso(9), _iso(21)).json()

    resp = _book(client, venue_id, _iso(14), _iso(15), override=True)
    assert resp.status_code == 200
    booking = resp.json()

    timeline = client.get(f"/bookings/{booking['id']}/timeline").json()
    types = [e["type"] for e in timeline]
    assert types == [TimelineEntryType.CREATED, TimelineEntryType.CONFLICT_OVERRIDDEN]
    assert timeline[1]["payload"]["conflicting_booking_ids"] == [first["id"]]


def test_write_time_overlap_from_other_day_is_caught(client: TestClient, venue_id: str):
    """A late booking running past midnight is invisible to the day check but not to the store."""
    _book(client, venue_id, "2026-05-11T22:00:00Z", "2026-05-12T02:00:00Z")

    resp = _book(client, venue_id, _iso(1), _iso(3))
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert detail["has_conflict"] is True
    assert detail["suggested_slots"] == []


def test_booking_unknown_venue_404(client: TestClient):
    resp = _book(client, "missing", _iso(10), _iso(11))
    assert resp.status_code == 404


def test_booking_unavailable_venue_400(client: TestClient):
    venue = client.post("/venues", json={"venue_name": "Closed Lab", "available": False}).json()
    resp = _book(client, venue["id"], _iso(10), _iso(11))
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Editing and deleting
# ---------------------------------------------------------------------------


def test_edit_booking_ignores_its_own_slot(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()

    resp = client.put(
        f"/bookings/{booking['id']}",
        json={"start_time": _iso(10, 30), "end_time": _iso(12, 30)},
    )
    assert resp.status_code == 200
    assert resp.json()["start_time"].startswith("2026-05-12T10:30:00")

    timeline = client.get(f"/bookings/{booking['id']}/timeline").json()
    assert timeline[-1]["type"] == TimelineEntryType.UPDATED
    assert timeline[-1]["payload"]["changed_fields"] == ["end_time", "start_time"]


def test_edit_into_conflict_is_rejected(client: TestClient, venue_id: str):
    _book(client, venue_id, _iso(14), _iso(16))
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()

    resp = client.put(
        f"/bookings/{booking['id']}",
        json={"start_time": _iso(15), "end_time": _iso(17)},
    )
    assert resp.status_code == 409
    suggestions = resp.json()["detail"]["suggested_slots"]
    # the booking's own 10:00-12:00 slot is free again for the suggester
    assert [s["start_time"][:19] for s in suggestions] == [
        "2026-05-12T09:00:00",
        "2026-05-12T16:00:00",
    ]

    stored = client.get(f"/bookings/{booking['id']}").json()
    assert stored["start_time"].startswith("2026-05-12T10:00:00")
    timeline = client.get(f"/bookings/{booking['id']}/timeline").json()
    assert timeline[-1]["type"] == TimelineEntryType.CONFLICT_DETECTED


def test_edit_inverted_interval_422(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()
    resp = client.put(f"/bookings/{booking['id']}", json={"end_time": _iso(9)})
    assert resp.status_code == 422


def test_delete_booking_frees_slot(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()

    resp = client.delete(f"/bookings/{booking['id']}")
    assert resp.status_code == 200
    assert client.get(f"/bookings/{booking['id']}").status_code == 404
    assert _book(client, venue_id, _iso(10), _iso(12)).status_code == 200


def test_edit_cannot_move_to_unavailable_venue(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()
    closed = client.post("/venues", json={"venue_name": "Closed Lab", "available": False}).json()

    resp = client.put(f"/bookings/{booking['id']}", json={"venue_id": closed["id"]})
    assert resp.status_code == 400
    assert client.get(f"/bookings/{booking['id']}").json()["venue_id"] == venue_id


@pytest.mark.parametrize("field", ["group_name", "title", "venue_id"])
def test_edit_rejects_empty_text(client: TestClient, venue_id: str, field: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()
    resp = client.put(f"/bookings/{booking['id']}", json={field: ""})
    assert resp.status_code == 422
    assert client.get(f"/bookings/{booking['id']}").json()["group_name"] == "Debate Society"


def test_edit_can_clear_description(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12), description="Finals").json()
    assert booking["description"] == "Finals"

    resp = client.put(f"/bookings/{booking['id']}", json={"description": None, "title": None})
    assert resp.status_code == 200
    body = resp.json()
    assert body["description"] is None
    assert body["title"] == "Weekly debate"


def test_delete_drops_timeline(client: TestClient, venue_id: str):
    booking = _book(client, venue_id, _iso(10), _iso(12)).json()
    assert timeline_repo.list_for_booking(booking["id"])

    client.delete(f"/bookings/{booking['id']}")
    assert timeline_repo.list_for_booking(booking["id"]) == []


def test_get_unknown_booking_404(client: TestClient):
    assert client.get("/bookings/nope").status_code == 404
    assert client.put("/bookings/nope", json={"title": "x"}).status_code == 404
    assert client.delete("/bookings/nope").status_code == 404
