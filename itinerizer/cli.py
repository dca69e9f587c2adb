"""itinerizer CLI entry point."""

from __future__ import annotations

import argparse
import datetime as dt
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from itinerizer.config import resolve_settings
from itinerizer.domain.exceptions import DomainError
from itinerizer.domain.rules import create_rule_engine
from itinerizer.infrastructure.logging import get_logger
from itinerizer.persistence.repository import get_itinerary_repository
from itinerizer.services import ItineraryService, SegmentOperationResult, SegmentService
from itinerizer.services.itinerary_presenter import (
    render_itinerary,
    render_segments,
    render_summaries,
    render_validation,
    render_violations,
)


def _build_services() -> tuple[ItineraryService, SegmentService]:
    settings = resolve_settings()
    repository = get_itinerary_repository(settings)
    logger = get_logger()
    segments = SegmentService(
        repository,
        create_rule_engine(settings.engine_config()),
        logger,
        adjacency_window=settings.adjacency_window,
    )
    return ItineraryService(repository, logger), segments


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date: {value}") from exc


def _parse_datetime(value: str) -> dt.datetime:
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid datetime: {value}") from exc
    if parsed.tzinfo is None:
        raise argparse.ArgumentTypeError(f"datetime needs a UTC offset: {value}")
    return parsed


def _load_payload(args: argparse.Namespace) -> dict[str, Any]:
    raw = args.json if args.json else Path(args.file).read_text(encoding="utf-8")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("segment payload must be a JSON object")
    return payload


def _print_operation(result: SegmentOperationResult, verb: str) -> int:
    if not result.accepted:
        print(f"Rejected: {result.message}")
        if result.suggestion:
            print(f"Suggestion: {result.suggestion}")
        return 1
    if result.preview:
        print(f"Preview: {len(result.shifted_ids)} segment(s) would shift")
    else:
        print(f"{verb.capitalize()}: {result.segment.id if result.segment else ''}".rstrip())
    if result.shifted_ids:
        print(f"Shifted: {', '.join(result.shifted_ids)}")
    if result.preview and result.itinerary is not None:
        shifted = [seg for seg in result.itinerary.segments if seg.id in result.shifted_ids]
        print(render_segments(shifted))
    for line in render_violations([*result.warnings, *result.info]):
        print(line)
    return 0


def _cmd_itinerary(args: argparse.Namespace) -> int:
    itineraries, _ = _build_services()
    if args.action == "create":
        itinerary = itineraries.create(
            args.title,
            description=args.description,
            start_date=args.start,
            end_date=args.end,
        )
        print(itinerary.id)
        return 0
    if args.action == "list":
        print(render_summaries(itineraries.list()))
        return 0
    if args.action == "show":
        itinerary = itineraries.get(args.itinerary_id)
        print(itinerary.model_dump_json(indent=2) if args.json else render_itinerary(itinerary))
        return 0
    itineraries.delete(args.itinerary_id)
    print(f"Deleted {args.itinerary_id}")
    return 0


def _cmd_segment(args: argparse.Namespace) -> int:
    _, segments = _build_services()
    if args.action == "add":
        return _print_operation(segments.add(args.itinerary_id, _load_payload(args)), "added")
    if args.action == "list":
        print(render_segments(segments.list(args.itinerary_id)))
        return 0
    if args.action == "delete":
        return _print_operation(segments.delete(args.itinerary_id, args.segment_id), "deleted")
    if args.action == "move":
        if args.to is not None:
            result = segments.move_to(args.itinerary_id, args.segment_id, args.to, preview=args.preview)
        else:
            result = segments.move(
                args.itinerary_id,
                args.segment_id,
                dt.timedelta(minutes=args.by),
                preview=args.preview,
            )
        return _print_operation(result, "moved")
    results = segments.validate(args.itinerary_id)
    print(render_validation(results))
    return 0 if all(result.valid for result in results.values()) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="itinerizer", description="Itinerary consistency engine")
    groups = parser.add_subparsers(dest="group", required=True)

    itinerary = groups.add_parser("itinerary", help="Manage itineraries")
    itinerary.set_defaults(handler=_cmd_itinerary)
    actions = itinerary.add_subparsers(dest="action", required=True)
    create = actions.add_parser("create")
    create.add_argument("title")
    create.add_argument("--description", default=None)
    create.add_argument("--start", type=_parse_date, default=None)
    create.add_argument("--end", type=_parse_date, default=None)
    actions.add_parser("list")
    show = actions.add_parser("show")
    show.add_argument("itinerary_id")
    show.add_argument("--json", action="store_true")
    delete = actions.add_parser("delete")
    delete.add_argument("itinerary_id")

    segment = groups.add_parser("segment", help="Manage segments of an itinerary")
    segment.set_defaults(handler=_cmd_segment)
    actions = segment.add_subparsers(dest="action", required=True)
    add = actions.add_parser("add")
    add.add_argument("itinerary_id")
    source = add.add_mutually_exclusive_group(required=True)
    source.add_argument("--json", help="Segment JSON object")
    source.add_argument("--file", help="Path to a segment JSON file")
    listing = actions.add_parser("list")
    listing.add_argument("itinerary_id")
    remove = actions.add_parser("delete")
    remove.add_argument("itinerary_id")
    remove.add_argument("segment_id")
    move = actions.add_parser("move")
    move.add_argument("itinerary_id")
    move.add_argument("segment_id")
    target = move.add_mutually_exclusive_group(required=True)
    target.add_argument("--by", type=float, help="Shift in minutes; negative moves earlier")
    target.add_argument("--to", type=_parse_datetime, help="New ISO start time with offset")
    move.add_argument("--preview", action="store_true")
    validate = actions.add_parser("validate")
    validate.add_argument("itinerary_id")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except DomainError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
