"""Segment dependency graph and cascade adjustment.

Two edge sources feed the closure used when a segment is moved:

* explicit edges from ``Segment.depends_on`` (dependent -> dependency), and
* inferred adjacency: a segment starting within ``window`` after another
  one ends, at the same location, is treated as logistically chained.

Both are returned as ``dependency id -> [dependent ids]`` maps so the
closure is a plain BFS over their union.
"""

from __future__ import annotations

import datetime as dt
from collections import deque
from typing import Iterable, Mapping, Sequence, Union

from itinerizer.domain.constants import ADJACENCY_WINDOW, BACKGROUND_KINDS
from itinerizer.domain.enums import SegmentKind
from itinerizer.domain.models import Segment
from itinerizer.domain.result import DependencyError, DependencyErrorCode, Err, Ok, Result
from itinerizer.domain.temporal import dates_overlap, overlaps, same_place, shift, stay_dates

Edges = dict[str, list[str]]


def _add_edge(edges: Edges, source: str, target: str) -> None:
    targets = edges.setdefault(source, [])
    if target not in targets:
        targets.append(target)


def explicit_dependents(segments: Sequence[Segment]) -> Edges:
    known = {seg.id for seg in segments}
    edges: Edges = {}
    for segment in segments:
        for dependency_id in segment.depends_on:
            if dependency_id in known and dependency_id != segment.id:
                _add_edge(edges, dependency_id, segment.id)
    return edges


def infer_adjacency(segments: Sequence[Segment], window: dt.timedelta = ADJACENCY_WINDOW) -> Edges:
    edges: Edges = {}
    chained = [seg for seg in segments if seg.kind not in BACKGROUND_KINDS]
    for earlier in chained:
        for later in chained:
            if later.id == earlier.id:
                continue
            gap = later.start - earlier.end
            if gap < dt.timedelta(0) or gap > window:
                continue
            if same_place(earlier.primary_location, later.departure_location):
                _add_edge(edges, earlier.id, later.id)
    return edges


def merge_edges(*sources: Mapping[str, Iterable[str]]) -> Edges:
    merged: Edges = {}
    for source in sources:
        for origin, targets in source.items():
            for target in targets:
                _add_edge(merged, origin, target)
    return merged


def _reachable(edges: Mapping[str, Iterable[str]], start_id: str) -> list[str]:
    visited = {start_id}
    order = [start_id]
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        for nxt in edges.get(current, ()):
            if nxt in visited:
                continue
            visited.add(nxt)
            order.append(nxt)
            queue.append(nxt)
    return order


def dependency_closure(
    segments: Sequence[Segment],
    segment_id: str,
    window: dt.timedelta = ADJACENCY_WINDOW,
) -> list[str]:
    """Ids that must move together with ``segment_id`` (itself first)."""
    edges = merge_edges(explicit_dependents(segments), infer_adjacency(segments, window))
    return _reachable(edges, segment_id)


def find_dependents(segments: Sequence[Segment], segment_id: str) -> list[str]:
    """Transitive explicit dependents only, excluding ``segment_id`` itself."""
    return _reachable(explicit_dependents(segments), segment_id)[1:]


def _as_delta(delta: Union[dt.timedelta, int, float]) -> dt.timedelta:
    if isinstance(delta, dt.timedelta):
        return delta
    return dt.timedelta(milliseconds=delta)


def adjust_dependent_segments(
    segments: Sequence[Segment],
    moved_segment_id: str,
    delta: Union[dt.timedelta, int, float],
    window: dt.timedelta = ADJACENCY_WINDOW,
) -> Result[list[Segment], DependencyError]:
    """Shift ``moved_segment_id`` and its dependency closure by ``delta``.

    Integer deltas are milliseconds. Segments outside the closure are
    returned as the same objects, in the original order. The result is not
    re-validated here; callers run ``validate_no_conflicts`` afterwards.
    """
    if not any(seg.id == moved_segment_id for seg in segments):
        return Err(
            DependencyError(
                code=DependencyErrorCode.NOT_FOUND,
                message=f"Segment {moved_segment_id} not found",
                segment_ids=(moved_segment_id,),
            )
        )
    offset = _as_delta(delta)
    closure = set(dependency_closure(segments, moved_segment_id, window))
    return Ok([shift(seg, offset) if seg.id in closure else seg for seg in segments])


def conflicts_between(a: Segment, b: Segment) -> bool:
    kinds = {a.kind, b.kind}
    if a.kind == SegmentKind.HOTEL and b.kind == SegmentKind.HOTEL:
        return dates_overlap(*stay_dates(a), *stay_dates(b))
    if SegmentKind.FLIGHT in kinds and kinds <= {SegmentKind.FLIGHT, SegmentKind.HOTEL}:
        return overlaps(a.start, a.end, b.start, b.end)
    return False


def validate_no_conflicts(segments: Sequence[Segment]) -> Result[None, DependencyError]:
    pairs: list[tuple[Segment, Segment]] = []
    for idx, first in enumerate(segments):
        for second in segments[idx + 1:]:
            if conflicts_between(first, second):
                pairs.append((first, second))
    if not pairs:
        return Ok(None)
    first, second = pairs[0]
    return Err(
        DependencyError(
            code=DependencyErrorCode.CONFLICT,
            message=(
                f"Segment conflict detected: {first.kind.value.lower()} {first.id} "
                f"overlaps with {second.kind.value.lower()} {second.id}"
            ),
            segment_ids=(first.id, second.id),
            details=tuple(f"{a.id} overlaps with {b.id}" for a, b in pairs),
        )
    )


def validate_no_cycles(segments: Sequence[Segment]) -> Result[None, DependencyError]:
    edges = explicit_dependents(segments)
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    def visit(node: str) -> bool:
        visited.add(node)
        on_stack.add(node)
        path.append(node)
        for nxt in edges.get(node, ()):
            if nxt in on_stack:
                path.append(nxt)
                return True
            if nxt not in visited and visit(nxt):
                return True
        on_stack.discard(node)
        path.pop()
        return False

    for segment in segments:
        if segment.id not in visited and visit(segment.id):
            return Err(
                DependencyError(
                    code=DependencyErrorCode.CIRCULAR_DEPENDENCY,
                    message=f"Circular dependency detected: {' -> '.join(path)}",
                    segment_ids=tuple(path),
                )
            )
    return Ok(None)


def topological_order(segments: Sequence[Segment]) -> Result[list[Segment], DependencyError]:
    """Segments with their explicit dependencies first (Kahn's algorithm)."""
    cycle_check = validate_no_cycles(segments)
    if isinstance(cycle_check, Err):
        return cycle_check
    edges = explicit_dependents(segments)
    in_degree = {seg.id: 0 for seg in segments}
    for targets in edges.values():
        for target in targets:
            in_degree[target] += 1
    by_id = {seg.id: seg for seg in segments}
    queue = deque(seg.id for seg in segments if in_degree[seg.id] == 0)
    ordered: list[Segment] = []
    while queue:
        current = queue.popleft()
        ordered.append(by_id[current])
        for target in edges.get(current, ()):
            in_degree[target] -= 1
            if in_degree[target] == 0:
                queue.append(target)
    return Ok(ordered)


__all__ = [
    "adjust_dependent_segments",
    "conflicts_between",
    "dependency_closure",
    "explicit_dependents",
    "find_dependents",
    "infer_adjacency",
    "merge_edges",
    "topological_order",
    "validate_no_conflicts",
    "validate_no_cycles",
]
