"""Pure time/location predicates used by rules and the dependency adjuster."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from itinerizer.domain.constants import OVERNIGHT_GAP_MINUTES
from itinerizer.domain.models import HotelSegment, Location, Segment


def overlaps(a_start: dt.datetime, a_end: dt.datetime, b_start: dt.datetime, b_end: dt.datetime) -> bool:
    """Half-open interval overlap: touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def _as_date(value: dt.date | dt.datetime) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def dates_overlap(
    a_in: dt.date | dt.datetime,
    a_out: dt.date | dt.datetime,
    b_in: dt.date | dt.datetime,
    b_out: dt.date | dt.datetime,
) -> bool:
    """Day-granular overlap; checking out on the day another stay checks in is fine."""
    return _as_date(a_in) < _as_date(b_out) and _as_date(b_in) < _as_date(a_out)


def duration_minutes(start: dt.datetime, end: dt.datetime) -> int:
    delta = end - start
    if delta < dt.timedelta(0):
        raise ValueError(f"end {end.isoformat()} is before start {start.isoformat()}")
    return int(delta.total_seconds() // 60)


def gap_minutes(end: dt.datetime, next_start: dt.datetime) -> float:
    return (next_start - end).total_seconds() / 60


def has_overnight_gap(end: dt.datetime, next_start: dt.datetime) -> bool:
    return gap_minutes(end, next_start) > OVERNIGHT_GAP_MINUTES


def _norm(value: Optional[str]) -> str:
    return (value or "").strip().casefold()


def same_place(a: Optional[Location], b: Optional[Location]) -> bool:
    if a is None or b is None:
        return False
    if a.code and b.code:
        return _norm(a.code) == _norm(b.code)
    return bool(_norm(a.name)) and _norm(a.name) == _norm(b.name)


def is_same_location(a: Segment, b: Segment) -> bool:
    return same_place(a.primary_location, b.primary_location)


def stay_dates(segment: Segment) -> tuple[dt.date, dt.date]:
    if isinstance(segment, HotelSegment) and segment.check_in and segment.check_out:
        return segment.check_in, segment.check_out
    return segment.start.date(), segment.end.date()


def shift(segment: Segment, delta: dt.timedelta) -> Segment:
    """Copy of ``segment`` moved by ``delta``; hotel stay dates follow the calendar move."""
    update: dict = {"start": segment.start + delta, "end": segment.end + delta}
    if isinstance(segment, HotelSegment):
        in_days = (segment.start + delta).date() - segment.start.date()
        out_days = (segment.end + delta).date() - segment.end.date()
        if segment.check_in is not None:
            update["check_in"] = segment.check_in + in_days
        if segment.check_out is not None:
            update["check_out"] = segment.check_out + out_days
    return segment.model_copy(update=update)


def sort_by_start(segments: list[Segment]) -> list[Segment]:
    return sorted(segments, key=lambda seg: seg.start)


__all__ = [
    "dates_overlap",
    "duration_minutes",
    "gap_minutes",
    "has_overnight_gap",
    "is_same_location",
    "overlaps",
    "same_place",
    "shift",
    "sort_by_start",
    "stay_dates",
]
