"""Infrastructure services and cross-cutting utilities."""

from itinerizer.infrastructure.logging import StructuredLogger, get_logger, reset_logger

__all__ = ["StructuredLogger", "get_logger", "reset_logger"]
