"""Command-line interface for generating and registering calendar events.

Usage:
    omoide anniversary --start 2020-05-01T19:00 --interval monthly --count 24
    omoide memorial --base-date 2024-03-10 --calendar-id primary
    omoide biweekly --start 2025-01-01 --end 2025-06-30 --weekday 水 \\
        --time 10:00-11:00 --skip-holidays --calendar-id primary
    omoide delete --calendar-id abc@group.calendar.google.com --keyword 記念日
    omoide create-calendar --name 思い出カレンダー

Generator commands print a JSON preview unless ``--calendar-id`` is given, in
which case the events are registered and the run result is printed instead.
``--dry-run`` swaps the Google store for an in-memory one.
"""

import argparse
import json
import logging
import signal
import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from omoide.anniversary import generate_anniversaries, generate_anniversaries_between
from omoide.biweekly import DEFAULT_TITLE, generate_biweekly
from omoide.config import Settings, get_settings
from omoide.descriptor import EventDescriptor
from omoide.errors import AuthExpired, NotFound, OmoideError, ValidationError
from omoide.holidays import HolidaySource, StaticHolidaySource
from omoide.identity import Credential
from omoide.log import configure_logging
from omoide.memorial import DEFAULT_UNTIL_YEARS, generate_memorials
from omoide.orchestrator import (
    Deletion,
    Registration,
    RunResult,
    RunStatus,
    title_contains,
)
from omoide.store import CalendarStore
from omoide.store.gcsa import GoogleCalendarStore, GoogleHolidaySource
from omoide.store.memory import MemoryCalendarStore

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_AUTH_EXPIRED = 3
EXIT_NOT_FOUND = 4

_STATUS_EXIT_CODES = {
    RunStatus.AUTH_EXPIRED: EXIT_AUTH_EXPIRED,
    RunStatus.CALENDAR_NOT_FOUND: EXIT_NOT_FOUND,
    RunStatus.CANCELLED: EXIT_FAILED,
}

Outcome = tuple[dict[str, Any], int]


def _credential(args: argparse.Namespace, settings: Settings) -> Credential:
    token = args.token or settings.access_token
    if not token:
        raise AuthExpired("No access token; pass --token or set OMOIDE_ACCESS_TOKEN")
    return Credential(token=token).require_valid()


def _store(
    args: argparse.Namespace, settings: Settings, calendar_id: str | None = None
) -> CalendarStore:
    if args.dry_run:
        seeded = (calendar_id,) if calendar_id else ()
        return MemoryCalendarStore(calendar_ids=seeded)
    return GoogleCalendarStore.from_credential(
        _credential(args, settings), timezone_name=settings.timezone
    )


def _holiday_source(args: argparse.Namespace, settings: Settings) -> HolidaySource | None:
    if not args.skip_holidays:
        return None
    if args.holiday:
        return StaticHolidaySource(args.holiday)
    return GoogleHolidaySource.from_credential(
        _credential(args, settings), calendar_id=settings.holiday_calendar_id
    )


@contextmanager
def _cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl-C into a cancel signal so a running batch stops between items."""
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def _exit_code(result: RunResult) -> int:
    if result.status in _STATUS_EXIT_CODES:
        return _STATUS_EXIT_CODES[result.status]
    return EXIT_FAILED if result.failed_count else EXIT_OK


def _drain(run: Registration | Deletion) -> None:
    for progress in run:
        logger.info(
            "[%d/%d] %s %s",
            progress.completed_count,
            progress.total_count,
            "ok" if progress.outcome.succeeded else "failed",
            progress.descriptor.title,
        )


def _preview_or_register(
    events: list[EventDescriptor], args: argparse.Namespace, settings: Settings
) -> Outcome:
    if not args.calendar_id:
        return {"count": len(events), "events": [e.to_dict() for e in events]}, EXIT_OK

    store = _store(args, settings, args.calendar_id)
    with _cancel_on_interrupt() as cancel:
        registration = Registration(
            store,
            args.calendar_id,
            events,
            delay=settings.rate_limit_delay,
            cancel=cancel,
        )
        _drain(registration)

    result = registration.result
    payload = result.to_dict()
    payload["created_count"] = result.created_count
    return payload, _exit_code(result)


def cmd_anniversary(args: argparse.Namespace, settings: Settings) -> Outcome:
    events = generate_anniversaries(
        args.start,
        args.interval,
        args.count,
        title_template=args.title,
        description=args.description,
    )
    return _preview_or_register(events, args, settings)


def cmd_anniversary_range(args: argparse.Namespace, settings: Settings) -> Outcome:
    events = generate_anniversaries_between(
        args.start,
        args.end,
        title_template=args.title,
        description=args.description,
        count_type=args.count_type,
    )
    return _preview_or_register(events, args, settings)


def cmd_memorial(args: argparse.Namespace, settings: Settings) -> Outcome:
    events = generate_memorials(
        args.base_date,
        until_years=args.until_years,
        include_base_day=not args.no_base_day,
        title_template=args.title,
        description=args.description,
    )
    return _preview_or_register(events, args, settings)


def cmd_biweekly(args: argparse.Namespace, settings: Settings) -> Outcome:
    events = generate_biweekly(
        args.start,
        args.end,
        weekday=args.weekday,
        time_range=args.time,
        title=args.title,
        description=args.description,
        skip_holidays=args.skip_holidays,
        holiday_source=_holiday_source(args, settings),
    )
    return _preview_or_register(events, args, settings)


def cmd_delete(args: argparse.Namespace, settings: Settings) -> Outcome:
    store = _store(args, settings, args.calendar_id)
    match = title_contains(*args.keyword) if args.keyword else None

    with _cancel_on_interrupt() as cancel:
        deletion = Deletion(
            store,
            args.calendar_id,
            match=match,
            delay=settings.rate_limit_delay,
            cancel=cancel,
        )
        targets = deletion.collect()
        if args.list_only:
            return {"count": len(targets), "events": [e.to_dict() for e in targets]}, EXIT_OK
        _drain(deletion)

    result = deletion.result
    payload = result.to_dict()
    payload["deleted_count"] = result.deleted_count
    return payload, _exit_code(result)


def cmd_create_calendar(args: argparse.Namespace, settings: Settings) -> Outcome:
    name = args.name or settings.calendar_name
    store = _store(args, settings)
    calendar_id = store.create_calendar(name, args.description)
    return {"calendar_id": calendar_id, "name": name}, EXIT_OK


COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], Outcome]] = {
    "anniversary": cmd_anniversary,
    "anniversary-range": cmd_anniversary_range,
    "memorial": cmd_memorial,
    "biweekly": cmd_biweekly,
    "delete": cmd_delete,
    "create-calendar": cmd_create_calendar,
}


def _add_generator_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", default=None, help="Title or title template")
    parser.add_argument("--description", default="", help="Note attached to every event")
    parser.add_argument(
        "--calendar-id", default=None, help="Register into this calendar instead of previewing"
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Register into an in-memory calendar"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omoide",
        description="Generate anniversary, memorial and biweekly events for Google Calendar.",
    )
    parser.add_argument("--token", default=None, help="OAuth access token")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")

    sub = parser.add_subparsers(dest="command", required=True)

    p_anniv = sub.add_parser("anniversary", help="N yearly or monthly anniversaries")
    p_anniv.add_argument("--start", required=True, help="YYYY-MM-DD or YYYY-MM-DDTHH:MM")
    p_anniv.add_argument("--interval", required=True, choices=["yearly", "monthly"])
    p_anniv.add_argument("--count", required=True, type=int)
    _add_generator_arguments(p_anniv)

    p_range = sub.add_parser("anniversary-range", help="All-day anniversaries up to an end date")
    p_range.add_argument("--start", required=True, help="YYYY-MM-DD")
    p_range.add_argument("--end", required=True, help="YYYY-MM-DD")
    p_range.add_argument("--count-type", default="months", choices=["months", "years"])
    _add_generator_arguments(p_range)

    p_memorial = sub.add_parser("memorial", help="Buddhist memorial observances")
    p_memorial.add_argument("--base-date", required=True, help="Date of death (YYYY-MM-DD)")
    p_memorial.add_argument("--until-years", type=int, default=DEFAULT_UNTIL_YEARS)
    p_memorial.add_argument(
        "--no-base-day", action="store_true", help="Omit the 命日 entry on the base date"
    )
    _add_generator_arguments(p_memorial)

    p_biweekly = sub.add_parser("biweekly", help="Meetings every other week")
    p_biweekly.add_argument("--start", required=True, help="YYYY-MM-DD")
    p_biweekly.add_argument("--end", required=True, help="YYYY-MM-DD (inclusive)")
    p_biweekly.add_argument("--weekday", default=None, help="0-6 (0=Sunday), name or 月..日")
    p_biweekly.add_argument("--time", required=True, help="HH:MM-HH:MM")
    p_biweekly.add_argument("--skip-holidays", action="store_true")
    p_biweekly.add_argument(
        "--holiday",
        action="append",
        default=[],
        help="Holiday date (repeatable); used instead of the Google holiday calendar",
    )
    _add_generator_arguments(p_biweekly)
    p_biweekly.set_defaults(title=DEFAULT_TITLE)

    p_delete = sub.add_parser("delete", help="Delete every event of a calendar")
    p_delete.add_argument("--calendar-id", required=True)
    p_delete.add_argument(
        "--keyword", action="append", default=[], help="Only titles containing this"
    )
    p_delete.add_argument(
        "--list-only", action="store_true", help="Print the matching events, delete nothing"
    )
    p_delete.add_argument("--dry-run", action="store_true")

    p_calendar = sub.add_parser("create-calendar", help="Create a dedicated calendar")
    p_calendar.add_argument("--name", default=None)
    p_calendar.add_argument("--description", default="")
    p_calendar.add_argument("--dry-run", action="store_true")

    return parser


def main(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings or get_settings()
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID

    configure_logging(args.log_level or settings.log_level, log_file=settings.log_file)

    try:
        payload, code = COMMANDS[args.command](args, settings)
    except ValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID
    except AuthExpired as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_AUTH_EXPIRED
    except NotFound as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except OmoideError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return code


if __name__ == "__main__":
    sys.exit(main())
