"""Runtime settings resolved from the environment."""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path

from pydantic import BaseModel, Field

from itinerizer.domain.rules.engine import RuleEngineConfig

_TRUTHY = {"1", "true", "yes", "on"}
_DEFAULT_DATA_DIR = Path("data") / "itineraries"


def _is_enabled(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _split_ids(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip().upper() for part in raw.split(",") if part.strip()]


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    data_dir: Path = Field(default=_DEFAULT_DATA_DIR)
    storage_backend: str = Field(default="json")
    disabled_rules: list[str] = Field(default_factory=list)
    enabled_rules: list[str] = Field(default_factory=list)
    enable_warnings: bool = Field(default=True)
    enable_info: bool = Field(default=False)
    adjacency_window_minutes: int = Field(default=30, ge=0)

    def engine_config(self) -> RuleEngineConfig:
        return RuleEngineConfig(
            disabled_rules=self.disabled_rules,
            enabled_rules=self.enabled_rules,
            enable_warnings=self.enable_warnings,
            enable_info=self.enable_info,
        )

    @property
    def adjacency_window(self) -> dt.timedelta:
        return dt.timedelta(minutes=self.adjacency_window_minutes)


def resolve_settings() -> Settings:
    raw_dir = str(os.getenv("ITINERIZER_DATA_DIR") or "").strip()
    backend = str(os.getenv("ITINERIZER_STORAGE") or "").strip().lower() or "json"
    return Settings(
        data_dir=Path(raw_dir) if raw_dir else _DEFAULT_DATA_DIR,
        storage_backend=backend,
        disabled_rules=_split_ids(os.getenv("RULES_DISABLED")),
        enabled_rules=_split_ids(os.getenv("RULES_ENABLED")),
        enable_warnings=_is_enabled("RULES_ENABLE_WARNINGS", default=True),
        enable_info=_is_enabled("RULES_ENABLE_INFO", default=False),
        adjacency_window_minutes=max(0, _int_env("ADJACENCY_WINDOW_MINUTES", 30)),
    )


__all__ = ["Settings", "resolve_settings"]
