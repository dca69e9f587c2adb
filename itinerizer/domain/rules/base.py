"""Base types for itinerary rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from itinerizer.domain.enums import Operation, SegmentKind, Severity
from itinerizer.domain.models import Itinerary, Segment


class RuleId(str, Enum):
    NO_FLIGHT_OVERLAP = "NO_FLIGHT_OVERLAP"
    NO_HOTEL_OVERLAP = "NO_HOTEL_OVERLAP"
    HOTEL_ACTIVITY_OVERLAP_ALLOWED = "HOTEL_ACTIVITY_OVERLAP_ALLOWED"
    ACTIVITY_REQUIRES_TRANSFER = "ACTIVITY_REQUIRES_TRANSFER"
    GEOGRAPHIC_CONTINUITY = "GEOGRAPHIC_CONTINUITY"
    SEGMENT_WITHIN_TRIP_DATES = "SEGMENT_WITHIN_TRIP_DATES"
    CHRONOLOGICAL_ORDER = "CHRONOLOGICAL_ORDER"
    REASONABLE_DURATION = "REASONABLE_DURATION"
    NO_DUPLICATE_SEGMENTS = "NO_DUPLICATE_SEGMENTS"
    NO_MISSING_DEPENDENCIES = "NO_MISSING_DEPENDENCIES"


@dataclass(frozen=True)
class RuleContext:
    """Inputs for one rule evaluation; built per validation call."""

    segment: Segment
    itinerary: Itinerary
    candidates: tuple[Segment, ...]
    operation: Operation

    def others(self, *kinds: SegmentKind) -> list[Segment]:
        """Candidates other than ``segment`` (by id), optionally narrowed to ``kinds``."""
        return [
            seg
            for seg in self.candidates
            if seg.id != self.segment.id and (not kinds or seg.kind in kinds)
        ]


class RuleResult(BaseModel):
    passed: bool
    message: Optional[str] = None
    suggestion: Optional[str] = None
    related_segment_ids: list[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


PASS = RuleResult(passed=True)


def rule_key(rule_id: "RuleId | str") -> str:
    return rule_id.value if isinstance(rule_id, RuleId) else str(rule_id)


RuleFn = Callable[[RuleContext], RuleResult]

EDIT_OPERATIONS = frozenset({Operation.ADD, Operation.UPDATE})
ALL_OPERATIONS = frozenset(Operation)


@dataclass(frozen=True)
class Rule:
    """Named, independently evaluable consistency check."""

    id: str
    name: str
    description: str
    severity: Severity
    evaluate: RuleFn
    kinds: Optional[frozenset[SegmentKind]] = None
    operations: frozenset[Operation] = EDIT_OPERATIONS
    enabled: bool = True

    def applies_to(self, segment: Segment, operation: Operation) -> bool:
        if operation not in self.operations:
            return False
        return self.kinds is None or segment.kind in self.kinds


class RuleViolation(BaseModel):
    rule_id: str
    rule_name: str
    severity: Severity
    message: str = ""
    suggestion: Optional[str] = None
    related_segment_ids: list[str] = Field(default_factory=list)
    confidence: Optional[float] = None

    @classmethod
    def from_result(cls, rule: Rule, result: RuleResult) -> "RuleViolation":
        return cls(
            rule_id=rule_key(rule.id),
            rule_name=rule.name,
            severity=rule.severity,
            message=result.message or rule.description,
            suggestion=result.suggestion,
            related_segment_ids=list(result.related_segment_ids),
            confidence=result.confidence,
        )


class ValidationResult(BaseModel):
    valid: bool = True
    errors: list[RuleViolation] = Field(default_factory=list)
    warnings: list[RuleViolation] = Field(default_factory=list)
    info: list[RuleViolation] = Field(default_factory=list)

    def rule_ids(self) -> set[str]:
        return {v.rule_id for v in (*self.errors, *self.warnings, *self.info)}

    def summary(self) -> str:
        parts: list[str] = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")
        if self.info:
            parts.append(f"{len(self.info)} info message(s)")
        if not parts:
            return "Validation passed"
        outcome = "passed with warnings" if self.valid else "failed"
        return f"Validation {outcome}: {', '.join(parts)}"


__all__ = [
    "ALL_OPERATIONS",
    "EDIT_OPERATIONS",
    "PASS",
    "Rule",
    "RuleContext",
    "RuleFn",
    "RuleId",
    "RuleResult",
    "RuleViolation",
    "ValidationResult",
    "rule_key",
]
