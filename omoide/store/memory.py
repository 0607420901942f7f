"""In-memory calendar store implementation.

This module provides MemoryCalendarStore, a simple store backed by in-memory
dictionaries. It's useful for testing, previews and dry runs.
"""

from dataclasses import replace
from datetime import date, datetime, time, timezone
from itertools import count

from typing_extensions import override

from omoide.descriptor import EventDescriptor
from omoide.errors import NotFound
from omoide.store import CalendarStore


def _instant(value: date | datetime) -> datetime:
    """Point in time an event starts at, all-day events at UTC midnight."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


class MemoryCalendarStore(CalendarStore):
    """Calendar store that keeps calendars and events in process memory.

    Attributes:
        _calendars: Calendar ID -> (event ID -> stored event)
        _names: Calendar ID -> calendar name
    """

    def __init__(self, calendar_ids: tuple[str, ...] = ("primary",)) -> None:
        """Initialize a store with some pre-existing calendars.

        Args:
            calendar_ids: IDs of calendars that exist from the start
        """
        self._calendars: dict[str, dict[str, EventDescriptor]] = {
            calendar_id: {} for calendar_id in calendar_ids
        }
        self._names: dict[str, str] = {
            calendar_id: calendar_id for calendar_id in calendar_ids
        }
        self._ids = count(1)

    def __str__(self) -> str:
        return f"MemoryCalendarStore(calendars={sorted(self._calendars)})"

    def _calendar(self, calendar_id: str) -> dict[str, EventDescriptor]:
        try:
            return self._calendars[calendar_id]
        except KeyError:
            raise NotFound(
                f"Calendar '{calendar_id}' not found", calendar_id=calendar_id
            ) from None

    def events(self, calendar_id: str) -> list[EventDescriptor]:
        """All stored events of a calendar in insertion order."""
        return list(self._calendar(calendar_id).values())

    def calendar_name(self, calendar_id: str) -> str:
        self._calendar(calendar_id)
        return self._names[calendar_id]

    @override
    def create_event(self, calendar_id: str, descriptor: EventDescriptor) -> str:
        events = self._calendar(calendar_id)
        event_id = f"evt-{next(self._ids)}"
        events[event_id] = replace(descriptor, id=event_id)
        return event_id

    @override
    def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> list[EventDescriptor]:
        events = self._calendar(calendar_id).values()
        found = [e for e in events if time_min <= _instant(e.start) < time_max]
        return sorted(found, key=lambda e: _instant(e.start))

    @override
    def delete_event(self, calendar_id: str, event_id: str) -> None:
        events = self._calendar(calendar_id)
        if events.pop(event_id, None) is None:
            raise NotFound(
                f"Event '{event_id}' not found in calendar '{calendar_id}'",
                calendar_id=calendar_id,
            )

    @override
    def create_calendar(self, name: str, description: str = "") -> str:
        calendar_id = f"cal-{next(self._ids)}"
        self._calendars[calendar_id] = {}
        self._names[calendar_id] = name
        return calendar_id


__all__ = ["MemoryCalendarStore"]
