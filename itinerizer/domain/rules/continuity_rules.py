"""Continuity rules: location changes should be bridged by transfers."""

from __future__ import annotations

from typing import Optional

from itinerizer.domain.constants import BACKGROUND_KINDS
from itinerizer.domain.enums import SegmentKind, Severity
from itinerizer.domain.models import Segment
from itinerizer.domain.rules.base import PASS, Rule, RuleContext, RuleId, RuleResult
from itinerizer.domain.temporal import has_overnight_gap, is_same_location


def _previous_segment(ctx: RuleContext) -> Optional[Segment]:
    current = ctx.segment
    before = [
        seg
        for seg in ctx.others()
        if seg.kind not in BACKGROUND_KINDS and seg.end <= current.start
    ]
    if not before:
        return None
    return max(before, key=lambda seg: seg.end)


def _next_segment(ctx: RuleContext) -> Optional[Segment]:
    current = ctx.segment
    after = [seg for seg in ctx.others() if seg.start >= current.end]
    if not after:
        return None
    return min(after, key=lambda seg: seg.start)


def _has_transfer_between(ctx: RuleContext, earlier: Segment, later: Segment) -> bool:
    return any(
        seg.kind == SegmentKind.TRANSFER and seg.start >= earlier.end and seg.end <= later.start
        for seg in ctx.candidates
    )


def _locations_known(a: Segment, b: Segment) -> bool:
    return a.primary_location is not None and b.primary_location is not None


def check_activity_requires_transfer(ctx: RuleContext) -> RuleResult:
    activity = ctx.segment
    if activity.kind != SegmentKind.ACTIVITY:
        return PASS
    previous = _previous_segment(ctx)
    if previous is None or is_same_location(previous, activity):
        return PASS
    if has_overnight_gap(previous.end, activity.start):
        return PASS
    if _has_transfer_between(ctx, previous, activity):
        return PASS
    return RuleResult(
        passed=False,
        message=f'Activity "{activity.label}" is at a different location from previous segment',
        suggestion="Add a transfer segment between the two locations",
        related_segment_ids=[previous.id],
        confidence=0.8,
    )


def check_geographic_continuity(ctx: RuleContext) -> RuleResult:
    segment = ctx.segment
    following = _next_segment(ctx)
    if following is None or following.start.date() != segment.end.date():
        return PASS
    if not _locations_known(segment, following) or is_same_location(segment, following):
        return PASS
    if segment.kind == SegmentKind.TRANSFER or following.kind == SegmentKind.TRANSFER:
        return PASS
    if _has_transfer_between(ctx, segment, following):
        return PASS
    return RuleResult(
        passed=False,
        message="Location change detected without transfer segment",
        suggestion="Consider adding a transfer segment for better tracking",
        related_segment_ids=[following.id],
        confidence=0.6,
    )


ACTIVITY_REQUIRES_TRANSFER = Rule(
    id=RuleId.ACTIVITY_REQUIRES_TRANSFER,
    name="Activity Requires Transfer",
    description="Activities at different locations should have transfer segments",
    severity=Severity.WARNING,
    kinds=frozenset({SegmentKind.ACTIVITY}),
    evaluate=check_activity_requires_transfer,
)

GEOGRAPHIC_CONTINUITY = Rule(
    id=RuleId.GEOGRAPHIC_CONTINUITY,
    name="Geographic Continuity",
    description="Segments should flow geographically with appropriate transfers",
    severity=Severity.INFO,
    evaluate=check_geographic_continuity,
)


__all__ = [
    "ACTIVITY_REQUIRES_TRANSFER",
    "GEOGRAPHIC_CONTINUITY",
    "check_activity_requires_transfer",
    "check_geographic_continuity",
]
