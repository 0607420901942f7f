"""Holiday lookup contract and the filter applied to biweekly sequences."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, datetime

from typing_extensions import override

from omoide.descriptor import EventDescriptor
from omoide.errors import ExternalServiceError, OmoideError

logger = logging.getLogger(__name__)


class HolidaySource(ABC):
    """Supplies the public holidays falling inside a date range."""

    @abstractmethod
    def list_holiday_dates(self, start: date, end: date) -> set[str]:
        """Return holiday dates in ``[start, end]`` as ``YYYY-MM-DD`` strings.

        Raises:
            AuthExpired: If the credential was rejected
            ExternalServiceError: On any other lookup failure
        """
        pass


class StaticHolidaySource(HolidaySource):
    """Holiday source backed by a fixed collection of dates."""

    def __init__(self, dates: Iterable[date | str] = ()) -> None:
        self._dates: frozenset[str] = frozenset(
            holiday_date_string(d) if isinstance(d, date) else d for d in dates
        )

    @override
    def list_holiday_dates(self, start: date, end: date) -> set[str]:
        low, high = start.isoformat(), end.isoformat()
        return {d for d in self._dates if low <= d <= high}


def holiday_date_string(value: date | datetime) -> str:
    """Date-only string for a holiday marker.

    All-day markers carry a plain date. A zoned datetime is truncated to its
    own calendar date.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def holiday_dates(source: HolidaySource, start: date, end: date) -> set[str]:
    """Fetch holiday dates, surfacing every failure as an ``OmoideError``.

    A failed lookup is never treated as "no holidays".
    """
    try:
        dates = source.list_holiday_dates(start, end)
    except OmoideError:
        raise
    except Exception as e:
        raise ExternalServiceError(f"Holiday lookup failed: {e}") from e

    logger.debug("Found %d holidays between %s and %s", len(dates), start, end)
    return set(dates)


def filter_holidays(
    events: Iterable[EventDescriptor], holidays: set[str]
) -> list[EventDescriptor]:
    """Drop events whose calendar date is a holiday, keeping order.

    Skipped occurrences are not moved to another day.
    """
    return [event for event in events if event.date_string not in holidays]


__all__ = [
    "HolidaySource",
    "StaticHolidaySource",
    "holiday_date_string",
    "holiday_dates",
    "filter_holidays",
]
