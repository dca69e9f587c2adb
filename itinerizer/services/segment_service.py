"""Segment orchestration: validate, adjust dependents, persist."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from itinerizer.domain.constants import ADJACENCY_WINDOW
from itinerizer.domain.dependency import adjust_dependent_segments, validate_no_conflicts
from itinerizer.domain.enums import Severity
from itinerizer.domain.exceptions import InvalidOperationError, SegmentNotFoundError
from itinerizer.domain.models import Itinerary, Segment, parse_segment
from itinerizer.domain.result import Err
from itinerizer.domain.rules import RuleEngine, RuleViolation, ValidationResult, create_rule_engine
from itinerizer.infrastructure.logging import StructuredLogger, get_logger
from itinerizer.persistence.repository import ItineraryRepository

WARNINGS_KEY = "validation_warnings"
CONFLICT_RULE_ID = "SEGMENT_CONFLICT"


class SegmentOperationResult(BaseModel):
    accepted: bool
    itinerary: Optional[Itinerary] = None
    segment: Optional[Segment] = None
    errors: list[RuleViolation] = Field(default_factory=list)
    warnings: list[RuleViolation] = Field(default_factory=list)
    info: list[RuleViolation] = Field(default_factory=list)
    message: Optional[str] = None
    suggestion: Optional[str] = None
    shifted_ids: list[str] = Field(default_factory=list)
    preview: bool = False

    @classmethod
    def rejected(cls, validation: ValidationResult, itinerary: Itinerary) -> "SegmentOperationResult":
        first = validation.errors[0]
        return cls(
            accepted=False,
            itinerary=itinerary,
            errors=list(validation.errors),
            warnings=list(validation.warnings),
            info=list(validation.info),
            message=first.message,
            suggestion=first.suggestion,
        )


def _with_warnings(segment: Segment, warnings: list[RuleViolation]) -> Segment:
    metadata = {k: v for k, v in segment.metadata.items() if k != WARNINGS_KEY}
    if warnings:
        metadata[WARNINGS_KEY] = [w.message for w in warnings]
    return segment.model_copy(update={"metadata": metadata})


def _conflict_warning(error) -> RuleViolation:
    return RuleViolation(
        rule_id=CONFLICT_RULE_ID,
        rule_name="Segment conflict after move",
        severity=Severity.WARNING,
        message=error.message,
        suggestion="Review the overlapping segments and adjust one of them",
        related_segment_ids=list(error.segment_ids),
    )


class SegmentService:
    def __init__(
        self,
        repository: ItineraryRepository,
        engine: Optional[RuleEngine] = None,
        logger: Optional[StructuredLogger] = None,
        *,
        adjacency_window: dt.timedelta = ADJACENCY_WINDOW,
    ) -> None:
        self._repo = repository
        self._engine = engine or create_rule_engine()
        self._logger = logger or get_logger()
        self._window = adjacency_window

    @property
    def engine(self) -> RuleEngine:
        return self._engine

    def _save(self, current: Itinerary, updated: Itinerary) -> Itinerary:
        self._repo.save(updated, expected_version=current.version)
        self._logger.storage("save", updated.id, version=updated.version)
        return updated

    def _log_validation(self, operation: str, segment_id: str, result: ValidationResult) -> None:
        self._logger.validation(
            operation,
            segment_id,
            valid=result.valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
            info=len(result.info),
        )

    def _require_segment(self, itinerary: Itinerary, segment_id: str) -> Segment:
        segment = itinerary.find_segment(segment_id)
        if segment is None:
            raise SegmentNotFoundError(segment_id)
        return segment

    # -- reads --

    def get(self, itinerary_id: str, segment_id: str) -> Segment:
        return self._require_segment(self._repo.load(itinerary_id), segment_id)

    def list(self, itinerary_id: str) -> list[Segment]:
        itinerary = self._repo.load(itinerary_id)
        return sorted(itinerary.segments, key=lambda seg: (seg.start, seg.end))

    def validate(self, itinerary_id: str) -> dict[str, ValidationResult]:
        itinerary = self._repo.load(itinerary_id)
        self._logger.operation_start("validate", itinerary_id=itinerary_id)
        results = self._engine.validate_all(itinerary)
        for segment_id, result in results.items():
            self._log_validation("validate", segment_id, result)
        self._logger.operation_end("validate", itinerary_id=itinerary_id, segments=len(results))
        return results

    # -- writes --

    def add(self, itinerary_id: str, segment: Union[Segment, dict[str, Any]]) -> SegmentOperationResult:
        if isinstance(segment, dict):
            segment = parse_segment(segment)
        itinerary = self._repo.load(itinerary_id)
        if itinerary.find_segment(segment.id) is not None:
            raise InvalidOperationError(f"Segment {segment.id} already exists in itinerary {itinerary_id}")

        validation = self._engine.validate_add(itinerary, segment)
        self._log_validation("add", segment.id, validation)
        if not validation.valid:
            return SegmentOperationResult.rejected(validation, itinerary)

        stored = _with_warnings(segment, validation.warnings)
        updated = self._save(itinerary, itinerary.bumped(segments=[*itinerary.segments, stored]))
        self._logger.segment_change("add", itinerary_id, stored.id, kind=stored.kind.value)
        return SegmentOperationResult(
            accepted=True,
            itinerary=updated,
            segment=stored,
            warnings=list(validation.warnings),
            info=list(validation.info),
        )

    def update(self, itinerary_id: str, segment_id: str, changes: dict[str, Any]) -> SegmentOperationResult:
        itinerary = self._repo.load(itinerary_id)
        current = self._require_segment(itinerary, segment_id)
        if "id" in changes and changes["id"] != current.id:
            raise InvalidOperationError("Segment id cannot be changed")
        if "kind" in changes and str(getattr(changes["kind"], "value", changes["kind"])).upper() != current.kind.value:
            raise InvalidOperationError("Segment kind cannot be changed")

        payload = {**current.model_dump(), **changes, "id": current.id, "kind": current.kind}
        # stay dates are re-derived from the new span unless given explicitly
        if "start" in changes and "check_in" not in changes:
            payload.pop("check_in", None)
        if "end" in changes and "check_out" not in changes:
            payload.pop("check_out", None)
        candidate = parse_segment(payload)
        validation = self._engine.validate_update(itinerary, candidate)
        self._log_validation("update", segment_id, validation)
        if not validation.valid:
            return SegmentOperationResult.rejected(validation, itinerary)

        stored = _with_warnings(candidate, validation.warnings)
        segments = [stored if seg.id == segment_id else seg for seg in itinerary.segments]
        updated = self._save(itinerary, itinerary.bumped(segments=segments))
        self._logger.segment_change("update", itinerary_id, segment_id, fields=sorted(changes))
        return SegmentOperationResult(
            accepted=True,
            itinerary=updated,
            segment=stored,
            warnings=list(validation.warnings),
            info=list(validation.info),
        )

    def delete(self, itinerary_id: str, segment_id: str) -> SegmentOperationResult:
        itinerary = self._repo.load(itinerary_id)
        validation = self._engine.validate_delete(itinerary, segment_id)
        if isinstance(validation, Err):
            raise SegmentNotFoundError(segment_id)
        removed = itinerary.find_segment(segment_id)
        self._log_validation("delete", segment_id, validation)
        if not validation.valid:
            return SegmentOperationResult.rejected(validation, itinerary)

        remaining: list[Segment] = []
        for seg in itinerary.segments:
            if seg.id == segment_id:
                continue
            if segment_id in seg.depends_on:
                seg = seg.model_copy(update={"depends_on": [d for d in seg.depends_on if d != segment_id]})
            remaining.append(seg)
        updated = self._save(itinerary, itinerary.bumped(segments=remaining))
        self._logger.segment_change("delete", itinerary_id, segment_id)
        return SegmentOperationResult(
            accepted=True,
            itinerary=updated,
            segment=removed,
            warnings=list(validation.warnings),
            info=list(validation.info),
        )

    def move(
        self,
        itinerary_id: str,
        segment_id: str,
        delta: dt.timedelta,
        *,
        preview: bool = False,
    ) -> SegmentOperationResult:
        """Shift a segment and everything chained to it by ``delta``.

        A conflict left behind by the shift is reported as a warning; the
        move itself still goes through.
        """
        itinerary = self._repo.load(itinerary_id)
        self._require_segment(itinerary, segment_id)
        self._logger.operation_start("move", itinerary_id=itinerary_id, segment_id=segment_id)

        adjusted = adjust_dependent_segments(itinerary.segments, segment_id, delta, self._window)
        if isinstance(adjusted, Err):
            raise SegmentNotFoundError(segment_id)
        segments = adjusted.value
        before = {seg.id: seg for seg in itinerary.segments}
        shifted_ids = [
            seg.id for seg in segments if (seg.start, seg.end) != (before[seg.id].start, before[seg.id].end)
        ]

        warnings: list[RuleViolation] = []
        conflicts = validate_no_conflicts(segments)
        if isinstance(conflicts, Err):
            warnings.append(_conflict_warning(conflicts.error))
            self._logger.warning("move", conflicts.error.message, itinerary_id=itinerary_id)

        moved = next(seg for seg in segments if seg.id == segment_id)
        result_itinerary = itinerary.bumped(segments=segments)
        if preview:
            result_itinerary = itinerary.model_copy(update={"segments": segments})
        else:
            self._save(itinerary, result_itinerary)
        self._logger.move(
            itinerary_id,
            segment_id,
            delta_minutes=delta.total_seconds() / 60,
            shifted=shifted_ids,
            preview=preview,
        )
        self._logger.operation_end("move", itinerary_id=itinerary_id, segment_id=segment_id)
        return SegmentOperationResult(
            accepted=True,
            itinerary=result_itinerary,
            segment=moved,
            warnings=warnings,
            shifted_ids=shifted_ids,
            preview=preview,
        )

    def move_to(
        self,
        itinerary_id: str,
        segment_id: str,
        new_start: dt.datetime,
        *,
        preview: bool = False,
    ) -> SegmentOperationResult:
        if new_start.tzinfo is None:
            raise InvalidOperationError("new start time must be timezone-aware")
        segment = self.get(itinerary_id, segment_id)
        return self.move(itinerary_id, segment_id, new_start - segment.start, preview=preview)

    def reorder(self, itinerary_id: str, segment_ids: list[str]) -> Itinerary:
        """Store segments in the given order; ``segment_ids`` must be a permutation."""
        itinerary = self._repo.load(itinerary_id)
        by_id = {seg.id: seg for seg in itinerary.segments}
        if len(segment_ids) != len(by_id) or set(segment_ids) != set(by_id):
            raise InvalidOperationError("Reorder must list every segment id exactly once")
        updated = self._save(itinerary, itinerary.bumped(segments=[by_id[sid] for sid in segment_ids]))
        self._logger.segment_change("reorder", itinerary_id, segment_ids[0] if segment_ids else "")
        return updated


__all__ = ["CONFLICT_RULE_ID", "SegmentOperationResult", "SegmentService", "WARNINGS_KEY"]
