"""Itinerary lifecycle: create, read, update header fields, delete."""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from itinerizer.domain.exceptions import InvalidOperationError
from itinerizer.domain.models import Itinerary, Traveler
from itinerizer.infrastructure.logging import StructuredLogger, get_logger
from itinerizer.persistence.models import ItinerarySummary
from itinerizer.persistence.repository import ItineraryRepository

UPDATABLE_FIELDS = frozenset({"title", "description", "start_date", "end_date", "status", "tags"})


class ItineraryService:
    def __init__(self, repository: ItineraryRepository, logger: Optional[StructuredLogger] = None) -> None:
        self._repo = repository
        self._logger = logger or get_logger()

    def create(
        self,
        title: str,
        *,
        description: Optional[str] = None,
        start_date: Optional[dt.date] = None,
        end_date: Optional[dt.date] = None,
        travelers: Optional[list[Traveler]] = None,
        tags: Optional[list[str]] = None,
    ) -> Itinerary:
        itinerary = Itinerary(
            title=title,
            description=description,
            start_date=start_date,
            end_date=end_date,
            travelers=travelers or [],
            tags=tags or [],
        )
        self._repo.save(itinerary, expected_version=0)
        self._logger.storage("create", itinerary.id, version=itinerary.version)
        return itinerary

    def get(self, itinerary_id: str) -> Itinerary:
        return self._repo.load(itinerary_id)

    def list(self) -> list[ItinerarySummary]:
        return self._repo.list()

    def update(self, itinerary_id: str, changes: dict[str, Any]) -> Itinerary:
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise InvalidOperationError(f"Fields cannot be updated: {', '.join(unknown)}")
        current = self._repo.load(itinerary_id)
        merged = Itinerary.model_validate({**current.model_dump(), **changes})
        updated = merged.bumped()
        self._repo.save(updated, expected_version=current.version)
        self._logger.storage("update", itinerary_id, version=updated.version, fields=sorted(changes))
        return updated

    def add_traveler(self, itinerary_id: str, traveler: Traveler) -> Itinerary:
        current = self._repo.load(itinerary_id)
        if any(existing.id == traveler.id for existing in current.travelers):
            raise InvalidOperationError(f"Traveler {traveler.id} is already on itinerary {itinerary_id}")
        updated = current.bumped(travelers=[*current.travelers, traveler])
        self._repo.save(updated, expected_version=current.version)
        self._logger.storage("add_traveler", itinerary_id, version=updated.version, traveler_id=traveler.id)
        return updated

    def delete(self, itinerary_id: str) -> None:
        self._repo.delete(itinerary_id)
        self._logger.storage("delete", itinerary_id)


__all__ = ["ItineraryService", "UPDATABLE_FIELDS"]
