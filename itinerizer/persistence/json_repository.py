"""Flat-file JSON implementation: one ``<id>.json`` document per itinerary."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from itinerizer.domain.exceptions import ItineraryNotFoundError, StorageError, VersionConflictError
from itinerizer.domain.models import Itinerary
from itinerizer.persistence.models import ItinerarySummary

_logger = logging.getLogger("itinerizer.persistence")

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonItineraryRepository:
    backend = "json"

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, itinerary_id: str) -> Path:
        if not _SAFE_ID.match(itinerary_id):
            raise ItineraryNotFoundError(itinerary_id)
        return self._data_dir / f"{itinerary_id}.json"

    def _read(self, path: Path) -> Optional[Itinerary]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return Itinerary.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageError(path.stem, f"{exc.error_count()} validation error(s)") from exc

    def _write(self, itinerary: Itinerary) -> None:
        path = self._path(itinerary.id)
        payload = itinerary.model_dump(mode="json")
        fd, tmp_name = tempfile.mkstemp(dir=self._data_dir, prefix=f".{itinerary.id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self, itinerary_id: str) -> Itinerary:
        with self._lock:
            itinerary = self._read(self._path(itinerary_id))
        if itinerary is None:
            raise ItineraryNotFoundError(itinerary_id)
        return itinerary

    def exists(self, itinerary_id: str) -> bool:
        if not _SAFE_ID.match(itinerary_id):
            return False
        return self._path(itinerary_id).exists()

    def save(self, itinerary: Itinerary, *, expected_version: Optional[int] = None) -> Itinerary:
        with self._lock:
            if expected_version is not None:
                current = self._read(self._path(itinerary.id))
                actual = current.version if current is not None else 0
                if actual != expected_version:
                    raise VersionConflictError(itinerary.id, expected_version, actual)
            self._write(itinerary)
        return itinerary

    def delete(self, itinerary_id: str) -> None:
        path = self._path(itinerary_id)
        with self._lock:
            if not path.exists():
                raise ItineraryNotFoundError(itinerary_id)
            path.unlink()

    def list(self) -> list[ItinerarySummary]:
        summaries: list[ItinerarySummary] = []
        with self._lock:
            for path in sorted(self._data_dir.glob("*.json")):
                try:
                    itinerary = self._read(path)
                except StorageError as exc:
                    _logger.warning("Skipping unreadable itinerary file %s: %s", path.name, exc)
                    continue
                if itinerary is not None:
                    summaries.append(ItinerarySummary.from_itinerary(itinerary))
        summaries.sort(key=lambda item: item.updated_at, reverse=True)
        return summaries


__all__ = ["JsonItineraryRepository"]
