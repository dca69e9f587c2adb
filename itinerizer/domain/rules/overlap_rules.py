"""Overlap rules: flights and hotels cannot double-book the traveler."""

from __future__ import annotations

from itinerizer.domain.enums import SegmentKind, Severity
from itinerizer.domain.models import FlightSegment, HotelSegment
from itinerizer.domain.rules.base import PASS, Rule, RuleContext, RuleId, RuleResult
from itinerizer.domain.temporal import dates_overlap, overlaps, stay_dates


def check_no_flight_overlap(ctx: RuleContext) -> RuleResult:
    flight = ctx.segment
    if not isinstance(flight, FlightSegment):
        return PASS
    conflicts = [
        seg
        for seg in ctx.others(SegmentKind.FLIGHT, SegmentKind.HOTEL)
        if overlaps(flight.start, flight.end, seg.start, seg.end)
    ]
    if not conflicts:
        return PASS
    first = conflicts[0]
    return RuleResult(
        passed=False,
        message=f"{flight.label} overlaps with {first.label}",
        suggestion="Adjust flight times or remove conflicting segments",
        related_segment_ids=[flight.id, *(seg.id for seg in conflicts)],
    )


def check_no_hotel_overlap(ctx: RuleContext) -> RuleResult:
    hotel = ctx.segment
    if not isinstance(hotel, HotelSegment):
        return PASS
    check_in, check_out = stay_dates(hotel)
    conflicts = []
    for seg in ctx.others(SegmentKind.HOTEL):
        other_in, other_out = stay_dates(seg)
        if dates_overlap(check_in, check_out, other_in, other_out):
            conflicts.append(seg)
    if not conflicts:
        return PASS
    return RuleResult(
        passed=False,
        message=f'Hotel stay "{hotel.label}" overlaps with "{conflicts[0].label}"',
        suggestion="Adjust check-in/check-out dates or remove one hotel",
        related_segment_ids=[hotel.id, *(seg.id for seg in conflicts)],
    )


def check_hotel_activity_overlap(ctx: RuleContext) -> RuleResult:
    # Staying at a hotel while doing an activity is the normal case.
    return PASS


NO_FLIGHT_OVERLAP = Rule(
    id=RuleId.NO_FLIGHT_OVERLAP,
    name="No Flight Overlap",
    description="Flights cannot overlap with each other or with hotel stays",
    severity=Severity.ERROR,
    kinds=frozenset({SegmentKind.FLIGHT}),
    evaluate=check_no_flight_overlap,
)

NO_HOTEL_OVERLAP = Rule(
    id=RuleId.NO_HOTEL_OVERLAP,
    name="No Hotel Overlap",
    description="Cannot stay at multiple hotels simultaneously",
    severity=Severity.ERROR,
    kinds=frozenset({SegmentKind.HOTEL}),
    evaluate=check_no_hotel_overlap,
)

HOTEL_ACTIVITY_OVERLAP_ALLOWED = Rule(
    id=RuleId.HOTEL_ACTIVITY_OVERLAP_ALLOWED,
    name="Hotel-Activity Overlap Allowed",
    description="Hotels can overlap with activities",
    severity=Severity.INFO,
    kinds=frozenset({SegmentKind.HOTEL, SegmentKind.ACTIVITY}),
    enabled=False,
    evaluate=check_hotel_activity_overlap,
)


__all__ = [
    "HOTEL_ACTIVITY_OVERLAP_ALLOWED",
    "NO_FLIGHT_OVERLAP",
    "NO_HOTEL_OVERLAP",
    "check_hotel_activity_overlap",
    "check_no_flight_overlap",
    "check_no_hotel_overlap",
]
