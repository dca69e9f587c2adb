"""SegmentService orchestration over an in-memory repository."""

from __future__ import annotations

import datetime as dt
import io
import json

import pytest

from itinerizer.domain.exceptions import InvalidOperationError, ItineraryNotFoundError, SegmentNotFoundError
from itinerizer.domain.models import FlightSegment, HotelSegment, Itinerary, Location, TransferSegment
from itinerizer.domain.rules import RuleEngineConfig, create_rule_engine
from itinerizer.infrastructure.logging import StructuredLogger
from itinerizer.persistence.repository import InMemoryItineraryRepository
from itinerizer.services.segment_service import CONFLICT_RULE_ID, WARNINGS_KEY, SegmentService

UTC = dt.timezone.utc
HOME = Location(name="Home")
LHR = Location(name="Heathrow", code="LHR")
CDG = Location(name="Charles de Gaulle", code="CDG")


def _at(day: int, hour: int, minute: int = 0) -> dt.datetime:
    return dt.datetime(2024, 1, day, hour, minute, tzinfo=UTC)


def _flight(start, end, number="BA304", **kwargs) -> FlightSegment:
    return FlightSegment(start=start, end=end, origin=LHR, destination=CDG, flight_number=number, **kwargs)


@pytest.fixture
def log_output():
    return io.StringIO()


@pytest.fixture
def repo():
    return InMemoryItineraryRepository()


@pytest.fixture
def service(repo, log_output):
    return SegmentService(repo, create_rule_engine(), StructuredLogger(trace_id="t-test", output=log_output))


@pytest.fixture
def itinerary(repo):
    trip = Itinerary(title="Paris", start_date=dt.date(2024, 1, 15), end_date=dt.date(2024, 1, 20))
    repo.save(trip)
    return trip


def _events(log_output) -> list[dict]:
    return [json.loads(line) for line in log_output.getvalue().splitlines() if line.strip()]


def test_add_persists_segment_and_bumps_version(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))

    result = service.add(itinerary.id, flight)

    assert result.accepted
    stored = repo.load(itinerary.id)
    assert stored.version == itinerary.version + 1
    assert [seg.id for seg in stored.segments] == [flight.id]
    assert WARNINGS_KEY not in stored.segments[0].metadata


def test_add_blocked_by_error_is_not_persisted(service, repo, itinerary):
    service.add(itinerary.id, _flight(_at(15, 10), _at(15, 14), number="BA304"))
    before = repo.load(itinerary.id)

    result = service.add(itinerary.id, _flight(_at(15, 12), _at(15, 16), number="AF1681"))

    assert not result.accepted
    assert result.message == result.errors[0].message
    assert result.suggestion == "Adjust flight times or remove conflicting segments"
    after = repo.load(itinerary.id)
    assert after.version == before.version
    assert len(after.segments) == 1


def test_add_accepts_mapping_payload(service, repo, itinerary):
    payload = {
        "kind": "ACTIVITY",
        "name": "Louvre",
        "start": "2024-01-16T10:00:00Z",
        "end": "2024-01-16T12:00:00Z",
    }
    result = service.add(itinerary.id, payload)
    assert result.accepted
    assert repo.load(itinerary.id).segments[0].kind.value == "ACTIVITY"


def test_warnings_stored_on_segment_metadata(service, repo, itinerary):
    result = service.add(itinerary.id, _flight(_at(15, 10), _at(15, 10, 10)))

    assert result.accepted
    assert [w.rule_id for w in result.warnings] == ["REASONABLE_DURATION"]
    stored = repo.load(itinerary.id).segments[0]
    assert stored.metadata[WARNINGS_KEY] == [result.warnings[0].message]


def test_add_with_existing_id_is_structural_error(service, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    service.add(itinerary.id, flight)
    with pytest.raises(InvalidOperationError):
        service.add(itinerary.id, flight)


def test_add_to_missing_itinerary_raises(service):
    with pytest.raises(ItineraryNotFoundError):
        service.add("itn_missing", _flight(_at(15, 10), _at(15, 12)))


def test_update_validates_against_other_segments(service, repo, itinerary):
    first = _flight(_at(15, 10), _at(15, 14), number="BA304")
    second = _flight(_at(15, 15), _at(15, 17), number="AF1681")
    service.add(itinerary.id, first)
    service.add(itinerary.id, second)

    blocked = service.update(itinerary.id, second.id, {"start": _at(15, 12), "end": _at(15, 16)})
    allowed = service.update(itinerary.id, second.id, {"airline": "Air France"})

    assert not blocked.accepted
    assert blocked.errors[0].rule_id == "NO_FLIGHT_OVERLAP"
    assert allowed.accepted
    stored = repo.load(itinerary.id).find_segment(second.id)
    assert stored.airline == "Air France"
    assert stored.start == _at(15, 15)


def test_update_clears_resolved_warnings(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 10, 10))
    service.add(itinerary.id, flight)

    service.update(itinerary.id, flight.id, {"end": _at(15, 11, 30)})

    assert WARNINGS_KEY not in repo.load(itinerary.id).find_segment(flight.id).metadata


def test_update_rederives_hotel_stay_dates(service, repo, itinerary):
    hotel = HotelSegment(property_name="Inn", start=_at(15, 15), end=_at(17, 11))
    service.add(itinerary.id, hotel)

    service.update(itinerary.id, hotel.id, {"end": _at(18, 11)})

    assert repo.load(itinerary.id).find_segment(hotel.id).check_out == dt.date(2024, 1, 18)


def test_update_cannot_change_kind_or_id(service, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    service.add(itinerary.id, flight)
    with pytest.raises(InvalidOperationError):
        service.update(itinerary.id, flight.id, {"kind": "HOTEL"})
    with pytest.raises(InvalidOperationError):
        service.update(itinerary.id, flight.id, {"id": "seg_other"})


def test_update_unknown_segment_raises(service, itinerary):
    with pytest.raises(SegmentNotFoundError):
        service.update(itinerary.id, "seg_missing", {"airline": "X"})


def test_delete_strips_dependency_references(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    transfer = TransferSegment(start=_at(15, 8), end=_at(15, 9), pickup=HOME, dropoff=LHR, depends_on=[flight.id])
    service.add(itinerary.id, flight)
    service.add(itinerary.id, transfer)

    result = service.delete(itinerary.id, flight.id)

    assert result.accepted
    assert [w.rule_id for w in result.warnings] == ["NO_MISSING_DEPENDENCIES"]
    stored = repo.load(itinerary.id)
    assert [seg.id for seg in stored.segments] == [transfer.id]
    assert stored.segments[0].depends_on == []


def test_move_shifts_dependents_and_persists(service, repo, itinerary, log_output):
    flight = _flight(_at(15, 10), _at(15, 12))
    transfer = TransferSegment(start=_at(15, 8, 30), end=_at(15, 9, 15), pickup=HOME, dropoff=LHR, depends_on=[flight.id])
    hotel = HotelSegment(property_name="Hotel du Louvre", start=_at(16, 15), end=_at(18, 11))
    for segment in (flight, transfer, hotel):
        assert service.add(itinerary.id, segment).accepted

    result = service.move(itinerary.id, flight.id, dt.timedelta(minutes=120))

    assert result.accepted
    assert result.warnings == []
    assert set(result.shifted_ids) == {flight.id, transfer.id}
    stored = repo.load(itinerary.id)
    assert stored.find_segment(flight.id).start == _at(15, 12)
    assert stored.find_segment(transfer.id).start == _at(15, 10, 30)
    assert stored.find_segment(hotel.id).start == _at(16, 15)
    move_events = [e for e in _events(log_output) if e["event"] == "move"]
    assert move_events[-1]["delta_minutes"] == 120
    assert move_events[-1]["trace_id"] == "t-test"


def test_move_preview_does_not_persist(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    service.add(itinerary.id, flight)
    before = repo.load(itinerary.id)

    result = service.move(itinerary.id, flight.id, dt.timedelta(hours=1), preview=True)

    assert result.preview
    assert result.itinerary.find_segment(flight.id).start == _at(15, 11)
    after = repo.load(itinerary.id)
    assert after.version == before.version
    assert after.find_segment(flight.id).start == _at(15, 10)


def test_move_into_conflict_warns_but_persists(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    hotel = HotelSegment(property_name="Airport Inn", start=_at(15, 15), end=_at(16, 9))
    service.add(itinerary.id, flight)
    service.add(itinerary.id, hotel)

    result = service.move(itinerary.id, flight.id, dt.timedelta(hours=4))

    assert result.accepted
    assert [w.rule_id for w in result.warnings] == [CONFLICT_RULE_ID]
    assert set(result.warnings[0].related_segment_ids) == {flight.id, hotel.id}
    assert repo.load(itinerary.id).find_segment(flight.id).start == _at(15, 14)


def test_move_to_absolute_start(service, repo, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    service.add(itinerary.id, flight)

    service.move_to(itinerary.id, flight.id, _at(15, 9))

    moved = repo.load(itinerary.id).find_segment(flight.id)
    assert (moved.start, moved.end) == (_at(15, 9), _at(15, 11))


def test_move_unknown_segment_raises(service, itinerary):
    with pytest.raises(SegmentNotFoundError):
        service.move(itinerary.id, "seg_missing", dt.timedelta(hours=1))


def test_zero_move_shifts_nothing(service, itinerary):
    flight = _flight(_at(15, 10), _at(15, 12))
    transfer = TransferSegment(start=_at(15, 8, 30), end=_at(15, 9, 15), pickup=HOME, dropoff=LHR, depends_on=[flight.id])
    service.add(itinerary.id, flight)
    service.add(itinerary.id, transfer)

    result = service.move(itinerary.id, flight.id, dt.timedelta(0), preview=True)

    assert result.shifted_ids == []


def test_move_is_timed(service, itinerary, log_output):
    flight = _flight(_at(15, 10), _at(15, 12))
    service.add(itinerary.id, flight)

    service.move(itinerary.id, flight.id, dt.timedelta(minutes=30))

    timed = [e for e in _events(log_output) if e["event"] == "operation_end"]
    assert timed[-1]["operation"] == "move"
    assert timed[-1]["segment_id"] == flight.id
    assert timed[-1]["duration_ms"] >= 0


def test_delete_unknown_segment_raises(service, itinerary):
    with pytest.raises(SegmentNotFoundError):
        service.delete(itinerary.id, "seg_missing")


def test_reorder_requires_permutation(service, repo, itinerary):
    first = _flight(_at(15, 10), _at(15, 12), number="AF1")
    second = _flight(_at(16, 10), _at(16, 12), number="AF2")
    service.add(itinerary.id, first)
    service.add(itinerary.id, second)

    updated = service.reorder(itinerary.id, [second.id, first.id])

    assert [seg.id for seg in updated.segments] == [second.id, first.id]
    with pytest.raises(InvalidOperationError):
        service.reorder(itinerary.id, [first.id])
    with pytest.raises(InvalidOperationError):
        service.reorder(itinerary.id, [first.id, first.id])


def test_list_sorts_by_start(service, itinerary):
    later = _flight(_at(16, 10), _at(16, 12), number="AF2")
    earlier = _flight(_at(15, 10), _at(15, 12), number="AF1")
    service.add(itinerary.id, later)
    service.add(itinerary.id, earlier)
    assert [seg.id for seg in service.list(itinerary.id)] == [earlier.id, later.id]


def test_validate_runs_every_segment(repo, itinerary, log_output):
    logger = StructuredLogger(trace_id="t-test", output=log_output)
    service = SegmentService(repo, create_rule_engine(RuleEngineConfig(enable_info=True)), logger)
    stored = itinerary.bumped(segments=[_flight(_at(15, 10), _at(15, 14)), _flight(_at(15, 12), _at(15, 16), number="X1")])
    repo.save(stored)

    results = service.validate(itinerary.id)

    assert len(results) == 2
    assert all(not result.valid for result in results.values())
    timed = [e for e in _events(log_output) if e["event"] == "operation_end"]
    assert timed[-1]["operation"] == "validate"
    assert timed[-1]["segments"] == 2


def test_validation_is_logged(service, itinerary, log_output):
    service.add(itinerary.id, _flight(_at(15, 10), _at(15, 12)))
    events = [e for e in _events(log_output) if e["event"] == "validation"]
    assert events[0]["operation"] == "add"
    assert events[0]["valid"] is True
