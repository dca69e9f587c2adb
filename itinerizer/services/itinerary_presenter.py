"""Plain-text rendering of itineraries and validation output for the CLI."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from itinerizer.domain.models import Itinerary, Segment
from itinerizer.domain.rules import RuleViolation, ValidationResult
from itinerizer.persistence.models import ItinerarySummary

_TIME_FORMAT = "%Y-%m-%d %H:%M"


def _span(segment: Segment) -> str:
    return f"{segment.start.strftime(_TIME_FORMAT)} -> {segment.end.strftime(_TIME_FORMAT)}"


def render_segment(segment: Segment) -> str:
    line = f"{segment.id}  {segment.kind.value:<8} {_span(segment)}  {segment.label}"
    if segment.depends_on:
        line += f"  (depends on: {', '.join(segment.depends_on)})"
    return line


def render_segments(segments: Iterable[Segment]) -> str:
    lines = [render_segment(seg) for seg in segments]
    return "\n".join(lines) if lines else "(no segments)"


def render_itinerary(itinerary: Itinerary) -> str:
    header = [f"{itinerary.title} [{itinerary.id}] v{itinerary.version} ({itinerary.status.value})"]
    if itinerary.has_trip_bounds:
        header.append(f"Dates: {itinerary.start_date.isoformat()} to {itinerary.end_date.isoformat()}")
    if itinerary.description:
        header.append(itinerary.description)
    if itinerary.travelers:
        names = ", ".join(f"{t.first_name} {t.last_name}".strip() for t in itinerary.travelers)
        header.append(f"Travelers: {names}")
    ordered = sorted(itinerary.segments, key=lambda seg: (seg.start, seg.end))
    return "\n".join([*header, "", render_segments(ordered)])


def render_summaries(summaries: Iterable[ItinerarySummary]) -> str:
    lines = []
    for item in summaries:
        dates = ""
        if item.start_date and item.end_date:
            dates = f"  {item.start_date.isoformat()}..{item.end_date.isoformat()}"
        lines.append(f"{item.id}  {item.title}{dates}  segments={item.segment_count} v{item.version}")
    return "\n".join(lines) if lines else "(no itineraries)"


def render_violation(violation: RuleViolation) -> str:
    line = f"[{violation.severity.value}] {violation.rule_id}: {violation.message}"
    if violation.suggestion:
        line += f"\n    suggestion: {violation.suggestion}"
    return line


def render_violations(violations: Iterable[RuleViolation]) -> list[str]:
    return [render_violation(v) for v in violations]


def render_validation(results: Mapping[str, ValidationResult]) -> str:
    lines: list[str] = []
    for segment_id, result in results.items():
        findings = render_violations([*result.errors, *result.warnings, *result.info])
        if not findings:
            continue
        lines.append(f"{segment_id}: {result.summary()}")
        lines.extend(f"  {finding}" for finding in findings)
    return "\n".join(lines) if lines else "All segments passed validation"


__all__ = [
    "render_itinerary",
    "render_segment",
    "render_segments",
    "render_summaries",
    "render_validation",
    "render_violation",
    "render_violations",
]
