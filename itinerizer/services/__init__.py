"""Application services."""

from itinerizer.services.itinerary_service import ItineraryService
from itinerizer.services.segment_service import SegmentOperationResult, SegmentService

__all__ = ["ItineraryService", "SegmentOperationResult", "SegmentService"]
