"""Rule engine: evaluate the rule catalog against one segment operation."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from itinerizer.domain.enums import Operation, SegmentKind, Severity
from itinerizer.domain.models import Itinerary, Segment
from itinerizer.domain.result import DependencyError, DependencyErrorCode, Err
from itinerizer.domain.rules.base import Rule, RuleContext, RuleId, RuleViolation, ValidationResult, rule_key
from itinerizer.domain.rules.catalog import CORE_RULES


class RuleEngineConfig(BaseModel):
    """Which rules run.

    ``disabled_rules`` always wins; ``enabled_rules`` opts in rules that are
    disabled by default. Warning/info rules are skipped entirely when their
    severity is switched off.
    """

    model_config = ConfigDict(frozen=True)

    disabled_rules: frozenset[str] = Field(default_factory=frozenset)
    enabled_rules: frozenset[str] = Field(default_factory=frozenset)
    enable_warnings: bool = True
    enable_info: bool = False

    @field_validator("disabled_rules", "enabled_rules", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Iterable[RuleId | str] | None) -> frozenset[str]:
        if not value:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(rule_key(item) for item in value)


class RuleEngine:
    def __init__(
        self,
        config: Optional[RuleEngineConfig] = None,
        rules: Optional[Iterable[Rule]] = None,
    ) -> None:
        self._config = config or RuleEngineConfig()
        self._rules: dict[str, Rule] = {}
        for rule in CORE_RULES if rules is None else rules:
            self.register_rule(rule)

    @property
    def config(self) -> RuleEngineConfig:
        return self._config

    def with_config(self, **changes) -> "RuleEngine":
        config = RuleEngineConfig(**{**self._config.model_dump(), **changes})
        return RuleEngine(config=config, rules=self._rules.values())

    # -- registry --

    def register_rule(self, rule: Rule) -> None:
        self._rules[rule_key(rule.id)] = rule

    def unregister_rule(self, rule_id: RuleId | str) -> None:
        self._rules.pop(rule_key(rule_id), None)

    def get_rule(self, rule_id: RuleId | str) -> Optional[Rule]:
        return self._rules.get(rule_key(rule_id))

    def rules(self) -> list[Rule]:
        return list(self._rules.values())

    def rules_for_kind(self, kind: SegmentKind) -> list[Rule]:
        return [rule for rule in self._rules.values() if rule.kinds is None or kind in rule.kinds]

    def is_active(self, rule: Rule) -> bool:
        key = rule_key(rule.id)
        if key in self._config.disabled_rules:
            return False
        if not rule.enabled and key not in self._config.enabled_rules:
            return False
        if rule.severity == Severity.WARNING and not self._config.enable_warnings:
            return False
        if rule.severity == Severity.INFO and not self._config.enable_info:
            return False
        return True

    # -- evaluation --

    def validate(self, context: RuleContext) -> ValidationResult:
        result = ValidationResult()
        buckets = {
            Severity.ERROR: result.errors,
            Severity.WARNING: result.warnings,
            Severity.INFO: result.info,
        }
        for rule in self._rules.values():
            if not self.is_active(rule) or not rule.applies_to(context.segment, context.operation):
                continue
            outcome = rule.evaluate(context)
            if outcome.passed:
                continue
            buckets[rule.severity].append(RuleViolation.from_result(rule, outcome))
        result.valid = not result.errors
        return result

    def validate_add(self, itinerary: Itinerary, segment: Segment) -> ValidationResult:
        return self.validate(
            RuleContext(
                segment=segment,
                itinerary=itinerary,
                candidates=(*itinerary.segments, segment),
                operation=Operation.ADD,
            )
        )

    def validate_update(self, itinerary: Itinerary, segment: Segment) -> ValidationResult:
        candidates = tuple(segment if seg.id == segment.id else seg for seg in itinerary.segments)
        return self.validate(
            RuleContext(
                segment=segment,
                itinerary=itinerary,
                candidates=candidates,
                operation=Operation.UPDATE,
            )
        )

    def validate_delete(
        self, itinerary: Itinerary, segment_id: str
    ) -> Union[ValidationResult, Err[DependencyError]]:
        """Rule results for removing ``segment_id``; an unknown id comes back as ``Err(NOT_FOUND)``."""
        segment = itinerary.find_segment(segment_id)
        if segment is None:
            return Err(
                DependencyError(
                    code=DependencyErrorCode.NOT_FOUND,
                    message=f"Segment {segment_id} not found",
                    segment_ids=(segment_id,),
                )
            )
        return self.validate(
            RuleContext(
                segment=segment,
                itinerary=itinerary,
                candidates=tuple(seg for seg in itinerary.segments if seg.id != segment_id),
                operation=Operation.DELETE,
            )
        )

    def validate_all(self, itinerary: Itinerary) -> dict[str, ValidationResult]:
        """Re-check every stored segment against the rest of the itinerary."""
        candidates = tuple(itinerary.segments)
        return {
            segment.id: self.validate(
                RuleContext(
                    segment=segment,
                    itinerary=itinerary,
                    candidates=candidates,
                    operation=Operation.UPDATE,
                )
            )
            for segment in itinerary.segments
        }

    @staticmethod
    def summarize(result: ValidationResult) -> str:
        return result.summary()


def create_rule_engine(config: Optional[RuleEngineConfig] = None) -> RuleEngine:
    return RuleEngine(config=config)


__all__ = ["RuleEngine", "RuleEngineConfig", "create_rule_engine"]
