"""Data integrity rules: duplicates and dangling dependency references."""

from __future__ import annotations

import re

from itinerizer.domain.constants import SAME_DATETIME_TOLERANCE
from itinerizer.domain.enums import Operation, Severity
from itinerizer.domain.models import (
    ActivitySegment,
    CustomSegment,
    FlightSegment,
    HotelSegment,
    MeetingSegment,
    Segment,
    TransferSegment,
)
from itinerizer.domain.rules.base import ALL_OPERATIONS, PASS, Rule, RuleContext, RuleId, RuleResult
from itinerizer.domain.temporal import dates_overlap, stay_dates

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _normalize(text: str | None) -> str:
    return _NON_ALNUM.sub("", (text or "").strip().lower())


def _same_day(a: Segment, b: Segment) -> bool:
    return a.start.date() == b.start.date()


def _place_name(location) -> str:
    return _normalize(location.name if location else "")


def _same_time(a: Segment, b: Segment) -> bool:
    return abs(a.start - b.start) < SAME_DATETIME_TOLERANCE


def is_duplicate(existing: Segment, new: Segment) -> bool:
    if existing.kind != new.kind:
        return False
    if isinstance(new, FlightSegment):
        return bool(new.flight_number) and (
            existing.flight_number == new.flight_number and _same_day(existing, new)
        )
    if isinstance(new, HotelSegment):
        return _normalize(existing.property_name) == _normalize(new.property_name) and dates_overlap(
            *stay_dates(existing), *stay_dates(new)
        )
    if isinstance(new, ActivitySegment):
        return _normalize(existing.name) == _normalize(new.name) and _same_day(existing, new)
    if isinstance(new, (MeetingSegment, CustomSegment)):
        return _normalize(existing.title) == _normalize(new.title) and _same_time(existing, new)
    if isinstance(new, TransferSegment):
        return (
            existing.transfer_type == new.transfer_type
            and _place_name(existing.pickup) == _place_name(new.pickup)
            and _place_name(existing.dropoff) == _place_name(new.dropoff)
            and _same_day(existing, new)
        )
    return False


def _duplicate_message(new: Segment) -> str:
    day = new.start.date().isoformat()
    if isinstance(new, FlightSegment):
        return f"Duplicate detected: Flight {new.flight_number} is already on your itinerary for {day}"
    if isinstance(new, HotelSegment):
        return f'Duplicate detected: "{new.property_name}" is already booked with overlapping dates'
    if isinstance(new, MeetingSegment):
        return f'Duplicate detected: Meeting "{new.title}" is already scheduled for {day}'
    if isinstance(new, TransferSegment):
        return (
            f"Duplicate detected: A {new.transfer_type.value.lower()} transfer "
            f"is already scheduled for {day}"
        )
    return f'Duplicate detected: "{new.label}" is already on your itinerary for {day}'


def check_no_duplicates(ctx: RuleContext) -> RuleResult:
    duplicates = [seg for seg in ctx.others() if is_duplicate(seg, ctx.segment)]
    if not duplicates:
        return PASS
    return RuleResult(
        passed=False,
        message=_duplicate_message(ctx.segment),
        suggestion="Update the existing segment instead of adding a new one",
        related_segment_ids=[seg.id for seg in duplicates],
    )


def check_dependencies(ctx: RuleContext) -> RuleResult:
    segment = ctx.segment
    if ctx.operation == Operation.DELETE:
        orphans = [seg.id for seg in ctx.candidates if segment.id in seg.depends_on]
        if not orphans:
            return PASS
        return RuleResult(
            passed=False,
            message=f"{len(orphans)} segment(s) depend on {segment.label}; their dependency will be removed",
            suggestion="Review the dependent segments after deleting",
            related_segment_ids=orphans,
        )

    if segment.id in segment.depends_on:
        return RuleResult(
            passed=False,
            message=f"{segment.label} cannot depend on itself",
            suggestion="Remove the self reference from depends_on",
            related_segment_ids=[segment.id],
        )
    known = {seg.id for seg in ctx.candidates}
    missing = [dep for dep in segment.depends_on if dep not in known]
    if not missing:
        return PASS
    return RuleResult(
        passed=False,
        message=f"{segment.label} depends on missing segment(s): {', '.join(missing)}",
        suggestion="Remove the reference or add the missing segment first",
        related_segment_ids=missing,
    )


NO_DUPLICATE_SEGMENTS = Rule(
    id=RuleId.NO_DUPLICATE_SEGMENTS,
    name="No Duplicate Segments",
    description="The same booking cannot be added twice",
    severity=Severity.ERROR,
    operations=frozenset({Operation.ADD}),
    evaluate=check_no_duplicates,
)

NO_MISSING_DEPENDENCIES = Rule(
    id=RuleId.NO_MISSING_DEPENDENCIES,
    name="No Missing Dependencies",
    description="Dependency references must point at segments of the same itinerary",
    severity=Severity.WARNING,
    operations=ALL_OPERATIONS,
    evaluate=check_dependencies,
)


__all__ = [
    "NO_DUPLICATE_SEGMENTS",
    "NO_MISSING_DEPENDENCIES",
    "check_dependencies",
    "check_no_duplicates",
    "is_duplicate",
]
