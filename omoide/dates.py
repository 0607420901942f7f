"""Calendar-safe date arithmetic, formatting and parameter parsing.

All helpers are side-effect free: they return new values and never touch
process-local time. Month and year steps apply ``dateutil.relativedelta`` to
the first of the month and add the day back afterwards, so a day past the end
of the target month rolls over into the next one (Jan 31 + 1 month is Mar 2
or Mar 3, Feb 29 + 1 year is Mar 1).
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import TypeVar

from dateutil.relativedelta import relativedelta

from omoide.errors import ValidationError
from omoide.util import JST

_D = TypeVar("_D", date, datetime)

_TIME_RANGE_RE = re.compile(r"^(\d{2}):(\d{2})\s*-\s*(\d{2}):(\d{2})$")
_HHMM_RE = re.compile(r"^(\d{2}):(\d{2})$")
_OFFSET_RE = re.compile(r"^([+-])(\d{2}):(\d{2})$")

# Weekday numbering is 0=Sunday..6=Saturday throughout omoide
_WEEKDAY_TOKENS: dict[str, int] = {
    "sun": 0, "sunday": 0, "日": 0, "日曜": 0, "日曜日": 0,
    "mon": 1, "monday": 1, "月": 1, "月曜": 1, "月曜日": 1,
    "tue": 2, "tuesday": 2, "火": 2, "火曜": 2, "火曜日": 2,
    "wed": 3, "wednesday": 3, "水": 3, "水曜": 3, "水曜日": 3,
    "thu": 4, "thursday": 4, "木": 4, "木曜": 4, "木曜日": 4,
    "fri": 5, "friday": 5, "金": 5, "金曜": 5, "金曜日": 5,
    "sat": 6, "saturday": 6, "土": 6, "土曜": 6, "土曜日": 6,
}
DEFAULT_WEEKDAY = 1  # Monday


def add_days(value: _D, n: int) -> _D:
    return value + timedelta(days=n)


def add_months(value: _D, n: int) -> _D:
    """Step ``n`` months, rolling a missing day over into the next month."""
    return value.replace(day=1) + relativedelta(months=n) + timedelta(days=value.day - 1)


def add_years(value: _D, n: int) -> _D:
    return value.replace(day=1) + relativedelta(years=n) + timedelta(days=value.day - 1)


def sunday_based_weekday(value: date) -> int:
    """Weekday of ``value`` with 0=Sunday..6=Saturday."""
    return (value.weekday() + 1) % 7


def next_occurrence_of_weekday(value: _D, weekday: int) -> _D:
    """Return the first date on or after ``value`` falling on ``weekday``.

    Args:
        value: Date to start from (returned unchanged if it already matches)
        weekday: Target weekday, 0=Sunday..6=Saturday
    """
    if not 0 <= weekday <= 6:
        raise ValidationError(f"weekday must be 0-6, got {weekday}", field="weekday")
    delta = (weekday - sunday_based_weekday(value)) % 7
    return add_days(value, delta)


def to_date_only_string(value: date) -> str:
    """Format the calendar date of ``value`` as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def to_zoned_datetime_string(value: date, hhmm: str, offset: str) -> str:
    """Build ``YYYY-MM-DDTHH:MM:00+HH:MM`` with the offset embedded literally.

    The result never depends on the zone of the machine running the code.
    """
    match = _HHMM_RE.match(hhmm)
    if not match:
        raise ValidationError(f"Time must be HH:MM, got '{hhmm}'", field="time")
    parse_offset(offset)
    hours, minutes = int(match.group(1)), int(match.group(2))
    return f"{to_date_only_string(value)}T{hours:02d}:{minutes:02d}:00{offset}"


def zoned_datetime(value: date, hhmm: str, offset: str) -> datetime:
    """Like :func:`to_zoned_datetime_string` but returns an aware ``datetime``."""
    return datetime.fromisoformat(to_zoned_datetime_string(value, hhmm, offset))


def parse_offset(offset: str) -> timezone:
    """Parse a ``+HH:MM`` / ``-HH:MM`` UTC offset into a fixed timezone."""
    match = _OFFSET_RE.match(offset)
    if not match:
        raise ValidationError(
            f"UTC offset must look like +09:00, got '{offset}'", field="offset"
        )
    sign = -1 if match.group(1) == "-" else 1
    hours, minutes = int(match.group(2)), int(match.group(3))
    if hours > 23 or minutes > 59:
        raise ValidationError(f"UTC offset out of range: '{offset}'", field="offset")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_date(value: date | str | None, *, field: str = "date") -> date:
    """Coerce an ISO string, ``date`` or ``datetime`` into a civil date."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(
            f"{field} is not a valid date: '{value}'", field=field
        ) from None


def parse_datetime(
    value: date | str | None, *, tz: timezone = JST, field: str = "start"
) -> datetime:
    """Coerce a value into an aware ``datetime`` expressed in ``tz``.

    Dates become midnight, naive datetimes are read as local time in ``tz``,
    and aware datetimes are converted into ``tz``.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, str):
        text = value.strip()
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(
                f"{field} is not a valid date or datetime: '{text}'", field=field
            ) from None

    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=tz)
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_time_range(time_range: str | None) -> tuple[str, str]:
    """Split ``HH:MM-HH:MM`` into its start and end ``HH:MM`` parts."""
    if not time_range:
        raise ValidationError("time range is required", field="time")
    match = _TIME_RANGE_RE.match(time_range.strip())
    if not match:
        raise ValidationError(
            f"Time range must be HH:MM-HH:MM, got '{time_range}'", field="time"
        )

    start_h, start_m, end_h, end_m = (int(g) for g in match.groups())
    for hours, minutes in ((start_h, start_m), (end_h, end_m)):
        if hours > 23 or minutes > 59:
            raise ValidationError(
                f"Time out of range in '{time_range}'", field="time"
            )
    if (end_h, end_m) <= (start_h, start_m):
        raise ValidationError(
            f"End time must be after start time in '{time_range}'", field="time"
        )

    return f"{start_h:02d}:{start_m:02d}", f"{end_h:02d}:{end_m:02d}"


def parse_weekday(value: int | str | None) -> int:
    """Resolve a weekday token into 0=Sunday..6=Saturday.

    Accepts integers, single-digit strings, English names and abbreviations,
    and Japanese day characters. ``None`` or an empty string means Monday.

    Unrecognised tokens are rejected rather than silently read as Monday.

    Raises:
        ValidationError: For an unknown name or a number outside 0-6
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_WEEKDAY
    if isinstance(value, bool):
        raise ValidationError(f"Invalid weekday: {value!r}", field="weekday")

    if isinstance(value, int):
        number = value
    else:
        token = value.strip().lower()
        if token.isdigit() and len(token) == 1:
            number = int(token)
        elif token in _WEEKDAY_TOKENS:
            return _WEEKDAY_TOKENS[token]
        else:
            valid = ", ".join(k for k in _WEEKDAY_TOKENS if len(k) > 3)
            raise ValidationError(
                f"Invalid weekday '{value}'. Valid names: {valid}", field="weekday"
            )

    if not 0 <= number <= 6:
        raise ValidationError(
            f"weekday must be 0-6 (0=Sunday), got {number}", field="weekday"
        )
    return number


__all__ = [
    "add_days",
    "add_months",
    "add_years",
    "sunday_based_weekday",
    "next_occurrence_of_weekday",
    "to_date_only_string",
    "to_zoned_datetime_string",
    "zoned_datetime",
    "parse_offset",
    "parse_date",
    "parse_datetime",
    "parse_time_range",
    "parse_weekday",
    "DEFAULT_WEEKDAY",
]
