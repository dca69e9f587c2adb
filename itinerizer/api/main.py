"""FastAPI application exposing itineraries and segment operations."""

from __future__ import annotations

import datetime as dt
import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from itinerizer.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ItineraryCreateRequest,
    ItineraryListResponse,
    ItineraryUpdateRequest,
    MoveRequest,
    ValidationReportResponse,
)
from itinerizer.config import Settings, resolve_settings
from itinerizer.domain.exceptions import (
    DomainError,
    InvalidOperationError,
    NotFoundError,
    StorageError,
    VersionConflictError,
)
from itinerizer.domain.models import Itinerary, Segment, Traveler
from itinerizer.domain.rules import create_rule_engine
from itinerizer.infrastructure.logging import get_logger
from itinerizer.persistence.repository import get_itinerary_repository
from itinerizer.services import ItineraryService, SegmentOperationResult, SegmentService

_api_logger = logging.getLogger("itinerizer.api")

load_dotenv()

app = FastAPI(
    title="itinerizer",
    version="1.0.0",
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


class _Services:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        repository = get_itinerary_repository(settings)
        self.backend = repository.backend
        self.itineraries = ItineraryService(repository, get_logger())
        self.segments = SegmentService(
            repository,
            create_rule_engine(settings.engine_config()),
            get_logger(),
            adjacency_window=settings.adjacency_window,
        )


_services: Optional[_Services] = None


def _get_services() -> _Services:
    global _services
    if _services is None:
        _services = _Services(resolve_settings())
    return _services


def reset_services() -> None:
    global _services
    _services = None


def _error(status_code: int, code: str, message: str, details: Optional[list[str]] = None) -> JSONResponse:
    payload = ErrorResponse(code=code, message=message, details=details or [])
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, "NOT_FOUND", str(exc), [exc.entity_id])


@app.exception_handler(VersionConflictError)
async def _version_conflict(request: Request, exc: VersionConflictError) -> JSONResponse:
    _api_logger.warning("version conflict on %s", exc.itinerary_id)
    return _error(409, "VERSION_CONFLICT", str(exc), [f"expected={exc.expected}", f"actual={exc.actual}"])


@app.exception_handler(StorageError)
async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
    get_logger().error("storage", exc.reason, itinerary_id=exc.itinerary_id)
    return _error(500, "STORAGE_ERROR", str(exc), [exc.itinerary_id])


@app.exception_handler(InvalidOperationError)
async def _invalid_operation(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return _error(400, "INVALID_OPERATION", str(exc))


@app.exception_handler(DomainError)
async def _domain_error(request: Request, exc: DomainError) -> JSONResponse:
    return _error(400, "DOMAIN_ERROR", str(exc))


@app.exception_handler(ValidationError)
async def _payload_invalid(request: Request, exc: ValidationError) -> JSONResponse:
    details = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return _error(422, "INVALID_PAYLOAD", "Request payload failed validation", details)


def _operation_response(result: SegmentOperationResult, success_status: int = 200) -> JSONResponse:
    if not result.accepted:
        first = result.errors[0]
        details = [first.suggestion] if first.suggestion else []
        details.extend(v.message for v in result.errors[1:])
        return _error(422, first.rule_id, result.message or first.message, details)
    return JSONResponse(status_code=success_status, content=result.model_dump(mode="json"))


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok", storage=_get_services().backend)


@app.get("/itineraries", response_model=ItineraryListResponse)
def list_itineraries():
    return ItineraryListResponse(items=_get_services().itineraries.list())


@app.post("/itineraries", response_model=Itinerary, status_code=201)
def create_itinerary(req: ItineraryCreateRequest):
    return _get_services().itineraries.create(
        req.title,
        description=req.description,
        start_date=req.start_date,
        end_date=req.end_date,
        travelers=req.travelers,
        tags=req.tags,
    )


@app.get("/itineraries/{itinerary_id}", response_model=Itinerary)
def get_itinerary(itinerary_id: str):
    return _get_services().itineraries.get(itinerary_id)


@app.patch("/itineraries/{itinerary_id}", response_model=Itinerary)
def update_itinerary(itinerary_id: str, req: ItineraryUpdateRequest):
    return _get_services().itineraries.update(itinerary_id, req.model_dump(exclude_unset=True))


@app.delete("/itineraries/{itinerary_id}", status_code=204)
def delete_itinerary(itinerary_id: str):
    _get_services().itineraries.delete(itinerary_id)
    return Response(status_code=204)


@app.post("/itineraries/{itinerary_id}/travelers", response_model=Itinerary, status_code=201)
def add_traveler(itinerary_id: str, traveler: Traveler):
    return _get_services().itineraries.add_traveler(itinerary_id, traveler)


@app.get("/itineraries/{itinerary_id}/segments", response_model=list[Segment])
def list_segments(itinerary_id: str):
    return _get_services().segments.list(itinerary_id)


@app.post("/itineraries/{itinerary_id}/segments")
def add_segment(itinerary_id: str, payload: dict[str, Any]):
    result = _get_services().segments.add(itinerary_id, payload)
    return _operation_response(result, success_status=201)


@app.put("/itineraries/{itinerary_id}/segments/{segment_id}")
def update_segment(itinerary_id: str, segment_id: str, changes: dict[str, Any]):
    return _operation_response(_get_services().segments.update(itinerary_id, segment_id, changes))


@app.delete("/itineraries/{itinerary_id}/segments/{segment_id}")
def delete_segment(itinerary_id: str, segment_id: str):
    return _operation_response(_get_services().segments.delete(itinerary_id, segment_id))


@app.post("/itineraries/{itinerary_id}/segments/{segment_id}/move")
def move_segment(itinerary_id: str, segment_id: str, req: MoveRequest):
    result = _get_services().segments.move(
        itinerary_id,
        segment_id,
        dt.timedelta(minutes=req.minutes),
        preview=req.preview,
    )
    return _operation_response(result)


@app.get("/itineraries/{itinerary_id}/validation", response_model=ValidationReportResponse)
def validate_itinerary(itinerary_id: str):
    results = _get_services().segments.validate(itinerary_id)
    return ValidationReportResponse(
        itinerary_id=itinerary_id,
        valid=all(result.valid for result in results.values()),
        results=results,
    )
