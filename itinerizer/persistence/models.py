"""Persistence-layer record schemas."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel

from itinerizer.domain.enums import ItineraryStatus
from itinerizer.domain.models import Itinerary


class ItinerarySummary(BaseModel):
    id: str
    title: str
    status: ItineraryStatus
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    segment_count: int = 0
    version: int = 1
    updated_at: dt.datetime

    @classmethod
    def from_itinerary(cls, itinerary: Itinerary) -> "ItinerarySummary":
        return cls(
            id=itinerary.id,
            title=itinerary.title,
            status=itinerary.status,
            start_date=itinerary.start_date,
            end_date=itinerary.end_date,
            segment_count=len(itinerary.segments),
            version=itinerary.version,
            updated_at=itinerary.updated_at,
        )


__all__ = ["ItinerarySummary"]
