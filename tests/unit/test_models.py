"""Domain model parsing and invariants."""

from __future__ import annotations

import datetime as dt

import pytest
from pydantic import ValidationError

from itinerizer.domain.enums import SegmentKind
from itinerizer.domain.models import (
    FlightSegment,
    HotelSegment,
    Itinerary,
    Location,
    TransferSegment,
    parse_segment,
)

UTC = dt.timezone.utc


def test_parse_segment_dispatches_on_kind():
    segment = parse_segment(
        {
            "kind": "HOTEL",
            "property_name": "Hotel du Louvre",
            "start": "2024-01-15T15:00:00+01:00",
            "end": "2024-01-17T11:00:00+01:00",
        }
    )
    assert isinstance(segment, HotelSegment)
    assert segment.kind == SegmentKind.HOTEL
    assert segment.start == dt.datetime(2024, 1, 15, 14, tzinfo=UTC)
    assert segment.check_in == dt.date(2024, 1, 15)
    assert segment.id.startswith("seg_")


def test_unknown_kind_is_rejected():
    with pytest.raises(ValidationError):
        parse_segment({"kind": "CRUISE", "start": "2024-01-15T10:00:00Z", "end": "2024-01-15T12:00:00Z"})


def test_naive_datetimes_are_rejected():
    with pytest.raises(ValidationError):
        FlightSegment(
            start=dt.datetime(2024, 1, 15, 10),
            end=dt.datetime(2024, 1, 15, 12),
            origin=Location(name="A"),
            destination=Location(name="B"),
        )


def test_transfer_locations():
    transfer = TransferSegment(
        start=dt.datetime(2024, 1, 15, 10, tzinfo=UTC),
        end=dt.datetime(2024, 1, 15, 11, tzinfo=UTC),
        pickup=Location(name="Home"),
        dropoff=Location(name="Heathrow", code="LHR"),
    )
    assert transfer.departure_location.name == "Home"
    assert transfer.primary_location.code == "LHR"
    assert transfer.label == "Transfer to Heathrow"


def test_itinerary_dates_must_be_ordered():
    with pytest.raises(ValidationError):
        Itinerary(title="Paris", start_date=dt.date(2024, 1, 20), end_date=dt.date(2024, 1, 15))


def test_bumped_increments_version_without_mutating():
    itinerary = Itinerary(title="Paris")
    bumped = itinerary.bumped(title="Rome")
    assert (itinerary.version, itinerary.title) == (1, "Paris")
    assert (bumped.version, bumped.title) == (2, "Rome")
    assert bumped.updated_at >= itinerary.updated_at
