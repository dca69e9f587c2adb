"""Runtime configuration helpers."""

from itinerizer.config.settings import Settings, resolve_settings

__all__ = ["Settings", "resolve_settings"]
