"""Pydantic domain models."""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

from itinerizer.domain.enums import (
    ItineraryStatus,
    SegmentKind,
    SegmentSource,
    SegmentStatus,
    TransferType,
    TravelerType,
)


def new_itinerary_id() -> str:
    return f"itn_{uuid.uuid4().hex[:12]}"


def new_segment_id() -> str:
    return f"seg_{uuid.uuid4().hex[:12]}"


def new_traveler_id() -> str:
    return f"trv_{uuid.uuid4().hex[:12]}"


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Location(BaseModel):
    name: str
    code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class Traveler(BaseModel):
    id: str = Field(default_factory=new_traveler_id)
    first_name: str
    last_name: str = ""
    email: Optional[str] = None
    traveler_type: TravelerType = TravelerType.ADULT
    metadata: dict[str, Any] = Field(default_factory=dict)


class ItineraryPermissions(BaseModel):
    owners: list[str] = Field(default_factory=list)
    editors: list[str] = Field(default_factory=list)
    viewers: list[str] = Field(default_factory=list)


class SegmentBase(BaseModel):
    id: str = Field(default_factory=new_segment_id)
    status: SegmentStatus = SegmentStatus.TENTATIVE
    start: dt.datetime
    end: dt.datetime
    traveler_ids: list[str] = Field(default_factory=list)
    source: SegmentSource = SegmentSource.USER
    metadata: dict[str, Any] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)
    location: Optional[Location] = None

    @field_validator("start", "end")
    @classmethod
    def _require_aware(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("segment datetimes must be timezone-aware")
        return value.astimezone(dt.timezone.utc)

    @property
    def primary_location(self) -> Optional[Location]:
        """Where the traveler is once this segment is over."""
        return self.location

    @property
    def departure_location(self) -> Optional[Location]:
        """Where the traveler has to be when this segment starts."""
        return self.primary_location

    @property
    def label(self) -> str:
        return self.id


class FlightSegment(SegmentBase):
    kind: Literal[SegmentKind.FLIGHT] = SegmentKind.FLIGHT
    origin: Location
    destination: Location
    airline: str = ""
    flight_number: str = ""

    @property
    def primary_location(self) -> Optional[Location]:
        return self.destination

    @property
    def departure_location(self) -> Optional[Location]:
        return self.origin

    @property
    def label(self) -> str:
        return f"Flight {self.flight_number}".strip() if self.flight_number else "Flight"


class HotelSegment(SegmentBase):
    kind: Literal[SegmentKind.HOTEL] = SegmentKind.HOTEL
    property_name: str
    check_in: Optional[dt.date] = None
    check_out: Optional[dt.date] = None
    room_count: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _default_stay_dates(self) -> "HotelSegment":
        if self.check_in is None:
            self.check_in = self.start.date()
        if self.check_out is None:
            self.check_out = self.end.date()
        return self

    @property
    def label(self) -> str:
        return self.property_name


class MeetingSegment(SegmentBase):
    kind: Literal[SegmentKind.MEETING] = SegmentKind.MEETING
    title: str
    attendees: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return self.title


class ActivitySegment(SegmentBase):
    kind: Literal[SegmentKind.ACTIVITY] = SegmentKind.ACTIVITY
    name: str
    category: str = ""

    @property
    def label(self) -> str:
        return self.name


class TransferSegment(SegmentBase):
    kind: Literal[SegmentKind.TRANSFER] = SegmentKind.TRANSFER
    transfer_type: TransferType = TransferType.OTHER
    pickup: Optional[Location] = None
    dropoff: Optional[Location] = None

    @property
    def primary_location(self) -> Optional[Location]:
        return self.dropoff

    @property
    def departure_location(self) -> Optional[Location]:
        return self.pickup

    @property
    def label(self) -> str:
        target = self.dropoff.name if self.dropoff else ""
        return f"Transfer to {target}" if target else "Transfer"


class CustomSegment(SegmentBase):
    kind: Literal[SegmentKind.CUSTOM] = SegmentKind.CUSTOM
    title: str
    description: str = ""

    @property
    def label(self) -> str:
        return self.title


Segment = Annotated[
    Union[
        FlightSegment,
        HotelSegment,
        MeetingSegment,
        ActivitySegment,
        TransferSegment,
        CustomSegment,
    ],
    Field(discriminator="kind"),
]

_segment_adapter: TypeAdapter[Segment] = TypeAdapter(Segment)


def parse_segment(data: dict[str, Any]) -> Segment:
    """Build the matching segment variant from a plain mapping keyed by ``kind``."""
    return _segment_adapter.validate_python(data)


class Itinerary(BaseModel):
    id: str = Field(default_factory=new_itinerary_id)
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    status: ItineraryStatus = ItineraryStatus.DRAFT
    travelers: list[Traveler] = Field(default_factory=list)
    segments: list[Segment] = Field(default_factory=list)
    version: int = Field(default=1, ge=1)
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)
    permissions: Optional[ItineraryPermissions] = None
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_trip_bounds(self) -> "Itinerary":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("itinerary end_date must not be before start_date")
        return self

    @property
    def has_trip_bounds(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    def find_segment(self, segment_id: str) -> Optional[Segment]:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None

    def bumped(self, **changes: Any) -> "Itinerary":
        """Copy with ``changes`` applied, version incremented and timestamp refreshed."""
        return self.model_copy(
            update={**changes, "version": self.version + 1, "updated_at": utc_now()},
        )


__all__ = [
    "ActivitySegment",
    "CustomSegment",
    "FlightSegment",
    "HotelSegment",
    "Itinerary",
    "ItineraryPermissions",
    "Location",
    "MeetingSegment",
    "Segment",
    "SegmentBase",
    "Traveler",
    "TransferSegment",
    "new_itinerary_id",
    "new_segment_id",
    "new_traveler_id",
    "parse_segment",
    "utc_now",
]
