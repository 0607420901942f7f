"""Biweekly meeting generator with optional holiday skipping.

Occurrences start on the first matching weekday on or after the start date
and repeat every 14 days through the end date (inclusive). Holidays are
skipped, never shifted.
"""

import logging
from datetime import date, datetime, time

from dateutil.rrule import DAILY, rrule

from omoide.dates import (
    next_occurrence_of_weekday,
    parse_date,
    parse_offset,
    parse_time_range,
    parse_weekday,
    zoned_datetime,
)
from omoide.descriptor import EventDescriptor
from omoide.errors import ValidationError
from omoide.holidays import HolidaySource, filter_holidays, holiday_dates
from omoide.util import BIWEEKLY_STEP_DAYS, JST_OFFSET

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "隔週予定"


def biweekly_dates(start: date, end: date, weekday: int) -> list[date]:
    """Every 14th day from the first ``weekday`` on or after ``start``."""
    first = next_occurrence_of_weekday(start, weekday)
    if first > end:
        return []
    rule = rrule(
        DAILY,
        interval=BIWEEKLY_STEP_DAYS,
        dtstart=datetime.combine(first, time.min),
        until=datetime.combine(end, time.min),
    )
    return [occurrence.date() for occurrence in rule]


def generate_biweekly(
    start_date: date | str,
    end_date: date | str,
    weekday: int | str | None = None,
    time_range: str | None = None,
    title: str | None = DEFAULT_TITLE,
    description: str = "",
    skip_holidays: bool = False,
    holiday_source: HolidaySource | None = None,
    offset: str = JST_OFFSET,
) -> list[EventDescriptor]:
    """Generate timed biweekly events between two dates.

    Args:
        start_date: First candidate date
        end_date: Last candidate date (inclusive)
        weekday: 0=Sunday..6=Saturday or a day name; defaults to Monday
        time_range: ``HH:MM-HH:MM`` start and end time of each meeting
        title: Title of every event
        description: Note attached to every event
        skip_holidays: Omit occurrences that fall on a holiday
        holiday_source: Required when ``skip_holidays`` is set
        offset: UTC offset embedded in every start/end

    Raises:
        ValidationError: On malformed parameters
        AuthExpired: If the holiday lookup rejects the credential
        ExternalServiceError: If the holiday lookup fails otherwise
    """
    start = parse_date(start_date, field="start_date")
    end = parse_date(end_date, field="end_date")
    if end < start:
        raise ValidationError(
            f"end_date ({end}) must not precede start_date ({start})", field="end_date"
        )
    day = parse_weekday(weekday)
    start_hhmm, end_hhmm = parse_time_range(time_range)
    parse_offset(offset)
    if skip_holidays and holiday_source is None:
        raise ValidationError(
            "A holiday source is required to skip holidays", field="skip_holidays"
        )

    events = [
        EventDescriptor(
            title=title or DEFAULT_TITLE,
            start=zoned_datetime(when, start_hhmm, offset),
            end=zoned_datetime(when, end_hhmm, offset),
            description=description or "",
        )
        for when in biweekly_dates(start, end, day)
    ]

    if skip_holidays:
        assert holiday_source is not None  # For type checker
        holidays = holiday_dates(holiday_source, start, end)
        kept = filter_holidays(events, holidays)
        logger.info(
            "Skipped %d of %d biweekly occurrences on holidays",
            len(events) - len(kept),
            len(events),
        )
        events = kept

    logger.debug("Generated %d biweekly events from %s to %s", len(events), start, end)
    return events


__all__ = ["generate_biweekly", "biweekly_dates", "DEFAULT_TITLE"]
