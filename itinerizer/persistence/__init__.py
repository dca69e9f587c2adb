"""Persistence package exports."""

from itinerizer.persistence.json_repository import JsonItineraryRepository
from itinerizer.persistence.models import ItinerarySummary
from itinerizer.persistence.repository import (
    InMemoryItineraryRepository,
    ItineraryRepository,
    get_itinerary_repository,
)

__all__ = [
    "InMemoryItineraryRepository",
    "ItineraryRepository",
    "ItinerarySummary",
    "JsonItineraryRepository",
    "get_itinerary_repository",
]
