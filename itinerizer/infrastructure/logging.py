"""Structured logging: JSON lines on stderr."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional


class StructuredLogger:
    """Emits one JSON object per event, tagged with a trace id."""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        try:
            line = json.dumps(data, ensure_ascii=False, default=str)
            self._output.write(line + "\n")
            self._output.flush()
        except Exception as exc:
            # Last-resort fallback to avoid silent logger failures.
            try:
                fallback = {
                    "event": "logger_internal_error",
                    "trace_id": self.trace_id,
                    "timestamp": time.time(),
                    "error": str(exc),
                }
                sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")
                sys.stderr.flush()
            except Exception:
                return

    def operation_start(self, operation: str, **extra: Any) -> None:
        self._timers[operation] = time.time()
        self._emit({"event": "operation_start", "operation": operation, **extra})

    def operation_end(self, operation: str, **extra: Any) -> None:
        start = self._timers.pop(operation, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({"event": "operation_end", "operation": operation, "duration_ms": duration_ms, **extra})

    def validation(
        self,
        operation: str,
        segment_id: str,
        *,
        valid: bool,
        errors: int = 0,
        warnings: int = 0,
        info: int = 0,
        **extra: Any,
    ) -> None:
        self._emit({
            "event": "validation",
            "operation": operation,
            "segment_id": segment_id,
            "valid": valid,
            "errors": errors,
            "warnings": warnings,
            "info": info,
            **extra,
        })

    def segment_change(self, action: str, itinerary_id: str, segment_id: str, **extra: Any) -> None:
        self._emit({
            "event": "segment_change",
            "action": action,
            "itinerary_id": itinerary_id,
            "segment_id": segment_id,
            **extra,
        })

    def move(
        self,
        itinerary_id: str,
        segment_id: str,
        *,
        delta_minutes: float,
        shifted: list[str],
        preview: bool = False,
        **extra: Any,
    ) -> None:
        self._emit({
            "event": "move",
            "itinerary_id": itinerary_id,
            "segment_id": segment_id,
            "delta_minutes": delta_minutes,
            "shifted": shifted,
            "preview": preview,
            **extra,
        })

    def storage(self, action: str, itinerary_id: str, **extra: Any) -> None:
        self._emit({"event": "storage", "action": action, "itinerary_id": itinerary_id, **extra})

    def warning(self, source: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "source": source, "message": message, **extra})

    def error(self, source: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "source": source, "error": error, **extra})


_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    global _logger
    if _logger is None or (trace_id and _logger.trace_id != trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger


def reset_logger() -> None:
    global _logger
    _logger = None


__all__ = ["StructuredLogger", "get_logger", "reset_logger"]
