"""Temporal rules: ordering, trip bounds, plausible durations."""

from __future__ import annotations

from itinerizer.domain.constants import DURATION_LIMITS
from itinerizer.domain.enums import Severity
from itinerizer.domain.rules.base import PASS, Rule, RuleContext, RuleId, RuleResult
from itinerizer.domain.temporal import duration_minutes


def check_within_trip_dates(ctx: RuleContext) -> RuleResult:
    itinerary = ctx.itinerary
    if not itinerary.has_trip_bounds:
        return PASS
    segment = ctx.segment
    if segment.start.date() >= itinerary.start_date and segment.end.date() <= itinerary.end_date:
        return PASS
    return RuleResult(
        passed=False,
        message="Segment dates are outside the trip date range",
        suggestion=(
            f"Adjust segment dates to fall between {itinerary.start_date.isoformat()} "
            f"and {itinerary.end_date.isoformat()}"
        ),
    )


def check_chronological_order(ctx: RuleContext) -> RuleResult:
    segment = ctx.segment
    if segment.start < segment.end:
        return PASS
    return RuleResult(
        passed=False,
        message="Segment start datetime must be before end datetime",
        suggestion="Adjust start or end datetime",
    )


def check_reasonable_duration(ctx: RuleContext) -> RuleResult:
    segment = ctx.segment
    limits = DURATION_LIMITS.get(segment.kind)
    if limits is None or segment.end <= segment.start:
        # Inverted spans belong to CHRONOLOGICAL_ORDER.
        return PASS
    minutes = duration_minutes(segment.start, segment.end)
    low, high = limits
    kind = segment.kind.value.lower()
    if minutes < low:
        return RuleResult(
            passed=False,
            message=f"{kind} duration ({minutes}min) is unusually short",
            suggestion=f"Expected at least {low} minutes for this segment type",
            confidence=0.7,
        )
    if minutes > high:
        return RuleResult(
            passed=False,
            message=f"{kind} duration ({round(minutes / 60)}hrs) is unusually long",
            suggestion=f"Expected at most {round(high / 60)} hours for this segment type",
            confidence=0.7,
        )
    return PASS


SEGMENT_WITHIN_TRIP_DATES = Rule(
    id=RuleId.SEGMENT_WITHIN_TRIP_DATES,
    name="Segment Within Trip Dates",
    description="Segment must fall within itinerary start and end dates",
    severity=Severity.ERROR,
    evaluate=check_within_trip_dates,
)

CHRONOLOGICAL_ORDER = Rule(
    id=RuleId.CHRONOLOGICAL_ORDER,
    name="Chronological Order",
    description="Segment end time must be after start time",
    severity=Severity.ERROR,
    evaluate=check_chronological_order,
)

REASONABLE_DURATION = Rule(
    id=RuleId.REASONABLE_DURATION,
    name="Reasonable Duration",
    description="Segments should have realistic durations for their type",
    severity=Severity.WARNING,
    evaluate=check_reasonable_duration,
)


__all__ = [
    "CHRONOLOGICAL_ORDER",
    "REASONABLE_DURATION",
    "SEGMENT_WITHIN_TRIP_DATES",
    "check_chronological_order",
    "check_reasonable_duration",
    "check_within_trip_dates",
]
