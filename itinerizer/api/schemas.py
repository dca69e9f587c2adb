"""API request/response models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from itinerizer.domain.enums import ItineraryStatus
from itinerizer.domain.models import Traveler
from itinerizer.domain.rules import ValidationResult
from itinerizer.persistence.models import ItinerarySummary


class ErrorResponse(BaseModel):
    error: bool = True
    code: str = "UNKNOWN"
    message: str = ""
    details: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "ok"
    storage: str = ""


class ItineraryCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    travelers: list[Traveler] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class ItineraryUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    status: Optional[ItineraryStatus] = None
    tags: Optional[list[str]] = None


class ItineraryListResponse(BaseModel):
    items: list[ItinerarySummary] = Field(default_factory=list)


class MoveRequest(BaseModel):
    minutes: float = Field(description="Shift in minutes; negative moves earlier")
    preview: bool = False


class ValidationReportResponse(BaseModel):
    itinerary_id: str
    valid: bool
    results: dict[str, ValidationResult] = Field(default_factory=dict)
