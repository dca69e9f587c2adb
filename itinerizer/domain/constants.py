"""Domain constants shared by deterministic logic."""

from datetime import timedelta

from itinerizer.domain.enums import SegmentKind

OVERNIGHT_GAP_MINUTES = 240
ADJACENCY_WINDOW = timedelta(minutes=30)
SAME_DATETIME_TOLERANCE = timedelta(minutes=1)

# (min_minutes, max_minutes)
DURATION_LIMITS = {
    SegmentKind.FLIGHT: (30, 20 * 60),
    SegmentKind.ACTIVITY: (30, 12 * 60),
    SegmentKind.MEETING: (15, 8 * 60),
    SegmentKind.TRANSFER: (5, 6 * 60),
    SegmentKind.HOTEL: (12 * 60, 30 * 24 * 60),
    SegmentKind.CUSTOM: (1, 365 * 24 * 60),
}

# Segments that run in the background of a day and never chain logistically.
BACKGROUND_KINDS = frozenset({SegmentKind.HOTEL})
