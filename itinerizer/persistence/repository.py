"""Persistence repository interface and factory."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from itinerizer.config.settings import Settings, resolve_settings
from itinerizer.domain.exceptions import ItineraryNotFoundError, VersionConflictError
from itinerizer.domain.models import Itinerary
from itinerizer.persistence.json_repository import JsonItineraryRepository
from itinerizer.persistence.models import ItinerarySummary


class ItineraryRepository(Protocol):
    backend: str

    def load(self, itinerary_id: str) -> Itinerary: ...

    def exists(self, itinerary_id: str) -> bool: ...

    def save(self, itinerary: Itinerary, *, expected_version: Optional[int] = None) -> Itinerary: ...

    def delete(self, itinerary_id: str) -> None: ...

    def list(self) -> list[ItinerarySummary]: ...


class InMemoryItineraryRepository:
    backend = "memory"

    def __init__(self) -> None:
        self._items: dict[str, Itinerary] = {}
        self._lock = threading.Lock()

    def load(self, itinerary_id: str) -> Itinerary:
        with self._lock:
            itinerary = self._items.get(itinerary_id)
        if itinerary is None:
            raise ItineraryNotFoundError(itinerary_id)
        return itinerary.model_copy(deep=True)

    def exists(self, itinerary_id: str) -> bool:
        with self._lock:
            return itinerary_id in self._items

    def save(self, itinerary: Itinerary, *, expected_version: Optional[int] = None) -> Itinerary:
        with self._lock:
            if expected_version is not None:
                current = self._items.get(itinerary.id)
                actual = current.version if current is not None else 0
                if actual != expected_version:
                    raise VersionConflictError(itinerary.id, expected_version, actual)
            self._items[itinerary.id] = itinerary.model_copy(deep=True)
        return itinerary

    def delete(self, itinerary_id: str) -> None:
        with self._lock:
            if self._items.pop(itinerary_id, None) is None:
                raise ItineraryNotFoundError(itinerary_id)

    def list(self) -> list[ItinerarySummary]:
        with self._lock:
            rows = [ItinerarySummary.from_itinerary(item) for item in self._items.values()]
        rows.sort(key=lambda item: item.updated_at, reverse=True)
        return rows


def get_itinerary_repository(settings: Optional[Settings] = None) -> ItineraryRepository:
    resolved = settings or resolve_settings()
    if resolved.storage_backend == "memory":
        return InMemoryItineraryRepository()
    return JsonItineraryRepository(resolved.data_dir)


__all__ = [
    "InMemoryItineraryRepository",
    "ItineraryRepository",
    "get_itinerary_repository",
]
