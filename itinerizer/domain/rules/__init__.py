"""Itinerary consistency rules and the engine that runs them."""

from itinerizer.domain.rules.base import (
    Rule,
    RuleContext,
    RuleId,
    RuleResult,
    RuleViolation,
    ValidationResult,
)
from itinerizer.domain.rules.catalog import CORE_RULES
from itinerizer.domain.rules.engine import RuleEngine, RuleEngineConfig, create_rule_engine

__all__ = [
    "CORE_RULES",
    "Rule",
    "RuleContext",
    "RuleEngine",
    "RuleEngineConfig",
    "RuleId",
    "RuleResult",
    "RuleViolation",
    "ValidationResult",
    "create_rule_engine",
]
