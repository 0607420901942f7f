"""Buddhist memorial observance generator.

Observances come from two fixed tables: day offsets from the date of death
(the seven-day observances through the hundredth day) and year offsets (the
n-th anniversary observances). Seven-day observances land on the day before
each n-th day: offsets 6, 13, 20, ... rather than 7, 14, 21.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal

from omoide.dates import add_days, add_years, parse_date, to_date_only_string
from omoide.descriptor import EventDescriptor
from omoide.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_UNTIL_YEARS = 49


@dataclass(frozen=True)
class Observance:
    """A named memorial tied to an offset from the base date.

    Attributes:
        offset: Number of days or years after the base date
        name: Observance name used as the default title
        unit: Whether ``offset`` counts days or years
    """

    offset: int
    name: str
    unit: Literal["days", "years"]


DAY_OBSERVANCES: tuple[Observance, ...] = (
    Observance(0, "命日", "days"),
    Observance(6, "初七日", "days"),
    Observance(13, "二七日", "days"),
    Observance(20, "三七日", "days"),
    Observance(27, "四七日", "days"),
    Observance(34, "五七日（三十五日忌）", "days"),
    Observance(41, "六七日", "days"),
    Observance(48, "七七日（四十九日）", "days"),
    Observance(99, "百か日", "days"),
)

YEAR_OBSERVANCES: tuple[Observance, ...] = (
    Observance(1, "一周忌", "years"),
    Observance(2, "三回忌", "years"),
    Observance(6, "七回忌", "years"),
    Observance(12, "十三回忌", "years"),
    Observance(16, "十七回忌", "years"),
    Observance(22, "二十三回忌", "years"),
    Observance(26, "二十七回忌", "years"),
    Observance(32, "三十三回忌（忌い上げ）", "years"),
    Observance(36, "三十七回忌", "years"),
    Observance(49, "五十回忌", "years"),
)

OBSERVANCES: tuple[Observance, ...] = DAY_OBSERVANCES + YEAR_OBSERVANCES


def render_memorial_title(template: str, *, houyou: str, year: int, base_date: str) -> str:
    """Literal replace-all of ``{{houyou}}``, ``{{year}}`` and ``{{base_date}}``."""
    return (
        template.replace("{{houyou}}", houyou)
        .replace("{{year}}", str(year))
        .replace("{{base_date}}", base_date)
    )


def generate_memorials(
    base_date: date | str,
    until_years: int = DEFAULT_UNTIL_YEARS,
    include_base_day: bool = True,
    title_template: str | None = None,
    description: str = "",
) -> list[EventDescriptor]:
    """Generate all-day memorial events from a date of death.

    Args:
        base_date: Date of death
        until_years: Year observances beyond this offset are dropped
        include_base_day: Whether to emit the 命日 entry on the base date itself
        title_template: Optional template with ``{{houyou}}``, ``{{year}}``
            (0 for day observances) and ``{{base_date}}``
        description: Note attached to every event

    Returns:
        Events sorted ascending by date
    """
    base = parse_date(base_date, field="base_date")
    if isinstance(until_years, bool) or not isinstance(until_years, int):
        raise ValidationError(
            f"until_years must be an integer, got {until_years!r}", field="until_years"
        )
    if until_years < 0:
        raise ValidationError(
            f"until_years must not be negative, got {until_years}", field="until_years"
        )

    base_string = to_date_only_string(base)
    events: list[EventDescriptor] = []

    for observance in OBSERVANCES:
        if observance.unit == "days":
            if observance.offset == 0 and not include_base_day:
                continue
            when = add_days(base, observance.offset)
            year = 0
        else:
            if observance.offset > until_years:
                continue
            when = add_years(base, observance.offset)
            year = observance.offset

        if title_template:
            title = render_memorial_title(
                title_template, houyou=observance.name, year=year, base_date=base_string
            )
        else:
            title = observance.name

        events.append(
            EventDescriptor(
                title=title, start=when, end=when, description=description or ""
            )
        )

    events.sort(key=lambda event: event.date_string)
    logger.debug("Generated %d memorial observances for %s", len(events), base_string)
    return events


__all__ = [
    "Observance",
    "DAY_OBSERVANCES",
    "YEAR_OBSERVANCES",
    "OBSERVANCES",
    "DEFAULT_UNTIL_YEARS",
    "render_memorial_title",
    "generate_memorials",
]
