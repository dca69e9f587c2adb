"""FastAPI surface tests."""

from __future__ import annotations

from fastapi.testclient import TestClient

from itinerizer.api.main import app

client = TestClient(app)


def _flight(start: str, end: str, number: str = "BA304", **extra) -> dict:
    return {
        "kind": "FLIGHT",
        "start": start,
        "end": end,
        "origin": {"name": "Heathrow", "code": "LHR"},
        "destination": {"name": "Charles de Gaulle", "code": "CDG"},
        "flight_number": number,
        **extra,
    }


def _create_trip(**extra) -> dict:
    r = client.post(
        "/itineraries",
        json={"title": "Paris", "start_date": "2024-01-15", "end_date": "2024-01-20", **extra},
    )
    assert r.status_code == 201
    return r.json()


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["storage"] == "json"


def test_itinerary_crud():
    trip = _create_trip()
    assert trip["version"] == 1

    listed = client.get("/itineraries").json()["items"]
    assert [item["id"] for item in listed] == [trip["id"]]

    patched = client.patch(f"/itineraries/{trip['id']}", json={"title": "Paris & Lyon"})
    assert patched.status_code == 200
    assert patched.json()["title"] == "Paris & Lyon"
    assert patched.json()["version"] == 2

    assert client.delete(f"/itineraries/{trip['id']}").status_code == 204
    missing = client.get(f"/itineraries/{trip['id']}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"


def test_patch_with_inverted_dates_is_422():
    trip = _create_trip()
    r = client.patch(f"/itineraries/{trip['id']}", json={"start_date": "2024-01-25"})
    assert r.status_code == 422
    assert r.json()["error"] is True


def test_add_segment_and_block_overlap():
    trip = _create_trip()
    first = client.post(
        f"/itineraries/{trip['id']}/segments",
        json=_flight("2024-01-15T10:00:00Z", "2024-01-15T14:00:00Z"),
    )
    assert first.status_code == 201
    assert first.json()["accepted"] is True
    first_id = first.json()["segment"]["id"]

    blocked = client.post(
        f"/itineraries/{trip['id']}/segments",
        json=_flight("2024-01-15T12:00:00Z", "2024-01-15T16:00:00Z", number="AF1681"),
    )
    assert blocked.status_code == 422
    body = blocked.json()
    assert body["code"] == "NO_FLIGHT_OVERLAP"
    assert "overlaps" in body["message"]
    assert body["details"][0] == "Adjust flight times or remove conflicting segments"

    stored = client.get(f"/itineraries/{trip['id']}").json()
    assert [seg["id"] for seg in stored["segments"]] == [first_id]


def test_add_segment_outside_trip_dates():
    trip = _create_trip()
    r = client.post(
        f"/itineraries/{trip['id']}/segments",
        json={
            "kind": "ACTIVITY",
            "name": "Early bird",
            "start": "2024-01-14T10:00:00Z",
            "end": "2024-01-14T12:00:00Z",
        },
    )
    assert r.status_code == 422
    assert r.json()["code"] == "SEGMENT_WITHIN_TRIP_DATES"
    assert "outside the trip date range" in r.json()["message"]


def test_malformed_segment_is_422():
    trip = _create_trip()
    r = client.post(f"/itineraries/{trip['id']}/segments", json={"kind": "FLIGHT", "start": "nope"})
    assert r.status_code == 422
    assert r.json()["code"] == "INVALID_PAYLOAD"
    assert r.json()["details"]


def test_update_and_delete_segment():
    trip = _create_trip()
    added = client.post(
        f"/itineraries/{trip['id']}/segments",
        json=_flight("2024-01-15T10:00:00Z", "2024-01-15T12:00:00Z"),
    ).json()
    segment_id = added["segment"]["id"]

    updated = client.put(f"/itineraries/{trip['id']}/segments/{segment_id}", json={"airline": "British Airways"})
    assert updated.status_code == 200
    assert updated.json()["segment"]["airline"] == "British Airways"

    kind_change = client.put(f"/itineraries/{trip['id']}/segments/{segment_id}", json={"kind": "HOTEL"})
    assert kind_change.status_code == 400

    deleted = client.delete(f"/itineraries/{trip['id']}/segments/{segment_id}")
    assert deleted.status_code == 200
    assert client.get(f"/itineraries/{trip['id']}/segments").json() == []
    assert client.delete(f"/itineraries/{trip['id']}/segments/{segment_id}").status_code == 404


def test_move_segment_with_dependent_transfer():
    trip = _create_trip()
    flight = client.post(
        f"/itineraries/{trip['id']}/segments",
        json=_flight("2024-01-15T10:00:00Z", "2024-01-15T12:00:00Z"),
    ).json()["segment"]
    transfer = client.post(
        f"/itineraries/{trip['id']}/segments",
        json={
            "kind": "TRANSFER",
            "transfer_type": "TAXI",
            "start": "2024-01-15T08:30:00Z",
            "end": "2024-01-15T09:15:00Z",
            "pickup": {"name": "Home"},
            "dropoff": {"name": "Heathrow", "code": "LHR"},
            "depends_on": [flight["id"]],
        },
    ).json()["segment"]

    preview = client.post(
        f"/itineraries/{trip['id']}/segments/{flight['id']}/move",
        json={"minutes": 120, "preview": True},
    )
    assert preview.status_code == 200
    assert preview.json()["preview"] is True
    unchanged = client.get(f"/itineraries/{trip['id']}").json()
    assert unchanged["version"] == 3

    moved = client.post(f"/itineraries/{trip['id']}/segments/{flight['id']}/move", json={"minutes": 120})
    assert moved.status_code == 200
    assert set(moved.json()["shifted_ids"]) == {flight["id"], transfer["id"]}
    segments = {seg["id"]: seg for seg in client.get(f"/itineraries/{trip['id']}/segments").json()}
    assert segments[flight["id"]]["start"].startswith("2024-01-15T12:00:00")
    assert segments[transfer["id"]]["start"].startswith("2024-01-15T10:30:00")


def test_validation_report():
    trip = _create_trip()
    client.post(f"/itineraries/{trip['id']}/segments", json=_flight("2024-01-15T10:00:00Z", "2024-01-15T12:00:00Z"))
    r = client.get(f"/itineraries/{trip['id']}/validation")
    assert r.status_code == 200
    body = r.json()
    assert body["valid"] is True
    assert len(body["results"]) == 1


def test_unknown_itinerary_is_404():
    assert client.get("/itineraries/itn_missing/validation").status_code == 404
    r = client.post("/itineraries/itn_missing/segments", json=_flight("2024-01-15T10:00:00Z", "2024-01-15T12:00:00Z"))
    assert r.status_code == 404


def test_unreadable_itinerary_file_is_500(tmp_path):
    trip = _create_trip()
    (tmp_path / "itineraries" / f"{trip['id']}.json").write_text("{not json", encoding="utf-8")

    r = client.get(f"/itineraries/{trip['id']}")

    assert r.status_code == 500
    assert r.json()["code"] == "STORAGE_ERROR"
    assert r.json()["details"] == [trip["id"]]
