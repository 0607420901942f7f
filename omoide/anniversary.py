"""Anniversary sequence generators.

Two flavours are provided:

- :func:`generate_anniversaries` produces a fixed number of one-hour timed
  events, one per year or month after a start moment.
- :func:`generate_anniversaries_between` produces all-day events for every
  month (or year) boundary between two dates, with ``{{...}}`` title
  placeholders.

Occurrence dates are always computed from the original start, so a rolled-over
month (Jan 31 -> Mar 2) never shifts the following occurrences.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Literal

from omoide.dates import add_months, add_years, parse_date, parse_datetime
from omoide.descriptor import EventDescriptor
from omoide.errors import ValidationError
from omoide.util import HOUR, JST

logger = logging.getLogger(__name__)

IntervalType = Literal["yearly", "monthly"]
CountType = Literal["months", "years"]

# "#年##ヶ月" is substituted as one unit: "3ヶ月" or "1年3ヶ月"
COMBINED_TOKEN = "#年##ヶ月"
PLACEHOLDER = "#"

_STEPS: dict[str, Callable[[datetime, int], datetime]] = {
    "yearly": add_years,
    "monthly": add_months,
}


def elapsed_years_months(index: int) -> tuple[int, int]:
    """Years and months elapsed at monthly occurrence ``index`` (1-based)."""
    return (index - 1) // 12, (index - 1) % 12 + 1


def _years_months_label(years: int, months: int) -> str:
    if years == 0:
        return f"{months}ヶ月"
    return f"{years}年{months}ヶ月"


def _yearly_title(template: str | None, index: int, count: int) -> str:
    if not template:
        # Every occurrence carries the final count, not the running index
        return f"{count}回目の記念日"
    return template.replace(PLACEHOLDER, str(index), 1)


def _monthly_title(template: str | None, index: int) -> str:
    years, months = elapsed_years_months(index)
    if not template:
        return f"{years}年{months}ヶ月の記念日"
    label = _years_months_label(years, months)
    if COMBINED_TOKEN in template:
        return template.replace(COMBINED_TOKEN, label, 1)
    return template.replace(PLACEHOLDER, label, 1)


def generate_anniversaries(
    start: date | str,
    interval_type: IntervalType,
    count: int,
    title_template: str | None = None,
    description: str = "",
) -> list[EventDescriptor]:
    """Generate ``count`` one-hour anniversary events.

    Args:
        start: First occurrence. A date means midnight; a naive datetime is
            read as Tokyo local time; an aware datetime is converted to +09:00.
        interval_type: ``"yearly"`` or ``"monthly"``
        count: Number of occurrences (>= 1). The caller bounds it.
        title_template: Optional template; ``#`` is the placeholder and
            ``#年##ヶ月`` the combined years+months token (monthly only)
        description: Note attached to every event

    Returns:
        Events in chronological order, occurrence 1 at ``start``

    Raises:
        ValidationError: On a bad start, interval type or count
    """
    if interval_type not in _STEPS:
        valid = ", ".join(_STEPS)
        raise ValidationError(
            f"Invalid interval type '{interval_type}'. Valid types: {valid}",
            field="interval_type",
        )
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError(
            f"count must be a positive integer, got {count!r}", field="count"
        )

    first = parse_datetime(start, tz=JST, field="start")
    step = _STEPS[interval_type]
    duration = timedelta(seconds=HOUR)

    events: list[EventDescriptor] = []
    for index in range(1, count + 1):
        occurrence = step(first, index - 1)
        if interval_type == "yearly":
            title = _yearly_title(title_template, index, count)
        else:
            title = _monthly_title(title_template, index)
        events.append(
            EventDescriptor(
                title=title,
                start=occurrence,
                end=occurrence + duration,
                description=description or "",
            )
        )

    logger.debug(
        "Generated %d %s anniversaries from %s", len(events), interval_type, first
    )
    return events


def _uses_years_only(template: str | None, count_type: CountType) -> bool:
    if count_type == "years":
        return True
    if not template or "{{years}}" not in template:
        return False
    return not any(
        token in template for token in ("{{months}}", "{{ym}}", "{{count}}")
    )


def _replace_braced(template: str, n: int, years_only: bool) -> str:
    if years_only:
        values = {
            "{{count}}": str(n),
            "{{years}}": str(n),
            "{{months}}": "0",
            "{{ym}}": f"{n}年",
        }
    else:
        years, months = n // 12, n % 12
        ym = f"{n}ヶ月" if n <= 11 else f"{years}年{months}ヶ月"
        values = {
            "{{count}}": str(n),
            "{{years}}": str(years),
            "{{months}}": str(months),
            "{{ym}}": ym,
        }
    for token, value in values.items():
        template = template.replace(token, value)
    return template


def _range_title(template: str | None, n: int, years_only: bool) -> str:
    if not template:
        if years_only:
            return f"🎉 {n}年記念日 🎉"
        return f"🎉 {n}回目の記念日 🎉"

    if "{{" in template and "}}" in template:
        return _replace_braced(template, n, years_only)

    # Legacy "#" templates
    if COMBINED_TOKEN in template:
        years, months = elapsed_years_months(n)
        return template.replace(COMBINED_TOKEN, _years_months_label(years, months), 1)
    if "#回目" in template:
        return template.replace(PLACEHOLDER, str(n), 1)
    return template.replace(PLACEHOLDER, f"{n}年" if years_only else f"{n}回目", 1)


def generate_anniversaries_between(
    start: date | str,
    end: date | str,
    title_template: str | None = None,
    description: str = "",
    count_type: CountType = "months",
) -> list[EventDescriptor]:
    """Generate all-day anniversaries for every month or year up to ``end``.

    The first event falls one unit after ``start``; events continue while the
    date is on or before ``end``. Templates may use ``{{count}}``,
    ``{{years}}``, ``{{months}}`` and ``{{ym}}``; templates without braces fall
    back to the ``#`` placeholder rules.
    """
    if count_type not in ("months", "years"):
        raise ValidationError(
            f"Invalid count type '{count_type}'. Valid types: months, years",
            field="count_type",
        )
    first = parse_date(start, field="start")
    last = parse_date(end, field="end")
    if last < first:
        raise ValidationError(
            f"end ({last}) must not precede start ({first})", field="end"
        )

    years_only = _uses_years_only(title_template, count_type)
    step = add_years if years_only else add_months

    events: list[EventDescriptor] = []
    n = 1
    current = step(first, n)
    while current <= last:
        events.append(
            EventDescriptor(
                title=_range_title(title_template, n, years_only),
                start=current,
                end=current,
                description=description or "",
            )
        )
        n += 1
        current = step(first, n)

    logger.debug("Generated %d anniversaries between %s and %s", len(events), first, last)
    return events


__all__ = [
    "generate_anniversaries",
    "generate_anniversaries_between",
    "elapsed_years_months",
    "COMBINED_TOKEN",
    "PLACEHOLDER",
]
