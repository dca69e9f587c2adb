"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""


class NotFoundError(DomainError):
    """Raised when an itinerary or segment does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ItineraryNotFoundError(NotFoundError):
    def __init__(self, itinerary_id: str):
        super().__init__("Itinerary", itinerary_id)


class SegmentNotFoundError(NotFoundError):
    def __init__(self, segment_id: str):
        super().__init__("Segment", segment_id)


class InvalidOperationError(DomainError):
    """Raised when a request is structurally invalid (id collision, bad reorder, kind change)."""


class VersionConflictError(DomainError):
    """Raised when a save is attempted against a stale itinerary version."""

    def __init__(self, itinerary_id: str, expected: int, actual: int):
        self.itinerary_id = itinerary_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Itinerary {itinerary_id} version conflict: expected {expected}, found {actual}"
        )


class StorageError(DomainError):
    """Raised when a stored itinerary exists but cannot be read back."""

    def __init__(self, itinerary_id: str, reason: str):
        self.itinerary_id = itinerary_id
        self.reason = reason
        super().__init__(f"Stored itinerary {itinerary_id} is unreadable: {reason}")
