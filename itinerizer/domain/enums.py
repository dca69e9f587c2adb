"""Domain enums."""

from enum import Enum


class SegmentKind(str, Enum):
    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    MEETING = "MEETING"
    ACTIVITY = "ACTIVITY"
    TRANSFER = "TRANSFER"
    CUSTOM = "CUSTOM"


class SegmentStatus(str, Enum):
    TENTATIVE = "TENTATIVE"
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class SegmentSource(str, Enum):
    IMPORT = "import"
    USER = "user"
    AGENT = "agent"


class ItineraryStatus(str, Enum):
    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TransferType(str, Enum):
    TAXI = "TAXI"
    SHUTTLE = "SHUTTLE"
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
    RENTAL_CAR = "RENTAL_CAR"
    RAIL = "RAIL"
    OTHER = "OTHER"


class TravelerType(str, Enum):
    ADULT = "ADULT"
    CHILD = "CHILD"
    INFANT = "INFANT"
    SENIOR = "SENIOR"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Operation(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
