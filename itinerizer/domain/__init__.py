"""Domain package exports."""

from itinerizer.domain.constants import ADJACENCY_WINDOW, DURATION_LIMITS, OVERNIGHT_GAP_MINUTES
from itinerizer.domain.enums import (
    ItineraryStatus,
    Operation,
    SegmentKind,
    SegmentSource,
    SegmentStatus,
    Severity,
    TransferType,
    TravelerType,
)
from itinerizer.domain.exceptions import (
    DomainError,
    InvalidOperationError,
    ItineraryNotFoundError,
    NotFoundError,
    SegmentNotFoundError,
    StorageError,
    VersionConflictError,
)
from itinerizer.domain.models import (
    ActivitySegment,
    CustomSegment,
    FlightSegment,
    HotelSegment,
    Itinerary,
    ItineraryPermissions,
    Location,
    MeetingSegment,
    Segment,
    Traveler,
    TransferSegment,
    parse_segment,
)
from itinerizer.domain.result import DependencyError, DependencyErrorCode, Err, Ok, Result

__all__ = [
    "ADJACENCY_WINDOW",
    "DURATION_LIMITS",
    "OVERNIGHT_GAP_MINUTES",
    "ActivitySegment",
    "CustomSegment",
    "DependencyError",
    "DependencyErrorCode",
    "DomainError",
    "Err",
    "FlightSegment",
    "HotelSegment",
    "InvalidOperationError",
    "Itinerary",
    "ItineraryNotFoundError",
    "ItineraryPermissions",
    "ItineraryStatus",
    "Location",
    "MeetingSegment",
    "NotFoundError",
    "Ok",
    "Operation",
    "Result",
    "Segment",
    "SegmentKind",
    "SegmentNotFoundError",
    "StorageError",
    "SegmentSource",
    "SegmentStatus",
    "Severity",
    "TransferSegment",
    "TransferType",
    "Traveler",
    "TravelerType",
    "VersionConflictError",
    "parse_segment",
]
