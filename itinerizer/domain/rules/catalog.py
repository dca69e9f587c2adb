"""Core rule catalog."""

from __future__ import annotations

from itinerizer.domain.rules.base import Rule
from itinerizer.domain.rules.continuity_rules import ACTIVITY_REQUIRES_TRANSFER, GEOGRAPHIC_CONTINUITY
from itinerizer.domain.rules.integrity_rules import NO_DUPLICATE_SEGMENTS, NO_MISSING_DEPENDENCIES
from itinerizer.domain.rules.overlap_rules import (
    HOTEL_ACTIVITY_OVERLAP_ALLOWED,
    NO_FLIGHT_OVERLAP,
    NO_HOTEL_OVERLAP,
)
from itinerizer.domain.rules.temporal_rules import (
    CHRONOLOGICAL_ORDER,
    REASONABLE_DURATION,
    SEGMENT_WITHIN_TRIP_DATES,
)

CORE_RULES: tuple[Rule, ...] = (
    NO_FLIGHT_OVERLAP,
    NO_HOTEL_OVERLAP,
    HOTEL_ACTIVITY_OVERLAP_ALLOWED,
    ACTIVITY_REQUIRES_TRANSFER,
    SEGMENT_WITHIN_TRIP_DATES,
    CHRONOLOGICAL_ORDER,
    REASONABLE_DURATION,
    GEOGRAPHIC_CONTINUITY,
    NO_DUPLICATE_SEGMENTS,
    NO_MISSING_DEPENDENCIES,
)


__all__ = ["CORE_RULES"]
