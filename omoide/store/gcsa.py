"""Google Calendar integration for omoide.

This module provides GoogleCalendarStore, a CalendarStore implementation that
reads from and writes to Google Calendar via the gcsa library, and
GoogleHolidaySource, which reads public holidays from a shared holiday
calendar.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone
from functools import wraps
from typing import Any, TypeVar
from zoneinfo import ZoneInfo

from gcsa.calendar import Calendar as GcsaCalendar
from gcsa.event import Event as GcsaEvent
from gcsa.google_calendar import GoogleCalendar
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError
from typing_extensions import override

from omoide.config import DEFAULT_HOLIDAY_CALENDAR_ID
from omoide.descriptor import EventDescriptor
from omoide.errors import AuthExpired, ExternalServiceError, NotFound, OmoideError
from omoide.holidays import HolidaySource, holiday_date_string
from omoide.identity import Credential
from omoide.store import CalendarStore
from omoide.util import TOKYO

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])

_CALENDAR_DESCRIPTION = "思い出と記念日を記録するためのカレンダーです。"


def _http_status(error: HttpError) -> int | None:
    status = getattr(error, "status_code", None)
    if status is None:
        status = getattr(getattr(error, "resp", None), "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def translate_error(error: Exception, *, calendar_id: str | None = None) -> OmoideError:
    """Map a Google client exception onto the omoide error kinds.

    Args:
        error: Exception raised by gcsa / googleapiclient / google-auth
        calendar_id: Calendar the failing call targeted (for NotFound)

    Returns:
        AuthExpired for 401s and refresh failures, NotFound for 404/410,
        ExternalServiceError for everything else, 403s included (quota
        and permission refusals are per-call failures, not a dead token)
    """
    if isinstance(error, OmoideError):
        return error
    if isinstance(error, RefreshError):
        return AuthExpired(f"Credential could not be refreshed: {error}")
    if isinstance(error, HttpError):
        status = _http_status(error)
        if status == 401:
            return AuthExpired(f"Credential rejected by Google Calendar: {error}")
        if status in (404, 410):
            return NotFound(
                f"Calendar '{calendar_id}' or event not found: {error}",
                calendar_id=calendar_id,
            )
        return ExternalServiceError(f"Google Calendar error: {error}", status=status)
    return ExternalServiceError(f"Google Calendar request failed: {error}")


def _translate_errors(func: _F) -> _F:
    """Decorator converting client exceptions into omoide errors.

    The wrapped method's first positional argument after ``self`` is taken
    as the target calendar ID when it is a string.
    """

    @wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(self, *args, **kwargs)
        except Exception as e:
            calendar_id = args[0] if args and isinstance(args[0], str) else None
            translated = translate_error(e, calendar_id=calendar_id)
            if translated is e:
                raise
            raise translated from e

    return wrapper  # type: ignore[return-value]


def client_for(credential: Credential) -> GoogleCalendar:
    """Build a GoogleCalendar client from a bearer credential.

    The client never refreshes the token; an expired token surfaces as
    ``AuthExpired`` on the first call.
    """
    credential.require_valid()
    return GoogleCalendar(credentials=Credentials(token=credential.token))


def _to_descriptor(gcsa_event: Any, zone: ZoneInfo) -> EventDescriptor | None:
    """Convert a gcsa event into a descriptor, or None if it lacks an ID."""
    if gcsa_event.id is None or gcsa_event.start is None:
        return None

    start = gcsa_event.start
    end = gcsa_event.end if gcsa_event.end is not None else start

    # Check datetime first since datetime is a subclass of date
    if isinstance(start, datetime):
        if start.tzinfo is None:
            start = start.replace(tzinfo=zone)
        if not isinstance(end, datetime):
            end = start + timedelta(hours=1)
        elif end.tzinfo is None:
            end = end.replace(tzinfo=zone)
        if end <= start:
            end = start + timedelta(minutes=1)
    else:
        # Google all-day ends are exclusive; descriptors end on their last day
        end = end - timedelta(days=1) if isinstance(end, date) else start
        end = max(end, start)

    return EventDescriptor(
        id=gcsa_event.id,
        title=gcsa_event.summary or "",
        start=start,
        end=end,
        description=gcsa_event.description or "",
    )


class GoogleCalendarStore(CalendarStore):
    """Calendar store backed by the Google Calendar API.

    All-day descriptors are sent with Google's exclusive end date (the day
    after their last day). Timed descriptors keep their explicit UTC offset
    and are tagged with the configured zone name.
    """

    def __init__(
        self,
        client: GoogleCalendar | None = None,
        *,
        timezone_name: str = TOKYO,
    ) -> None:
        """Initialize a Google Calendar store.

        Args:
            client: GoogleCalendar client instance (local credentials if None)
            timezone_name: IANA zone name sent with timed events and new calendars
        """
        self.calendar: GoogleCalendar = client if client is not None else GoogleCalendar()
        self.timezone_name: str = timezone_name
        self.zone: ZoneInfo = ZoneInfo(timezone_name)

    @classmethod
    def from_credential(
        cls, credential: Credential, *, timezone_name: str = TOKYO
    ) -> "GoogleCalendarStore":
        return cls(client_for(credential), timezone_name=timezone_name)

    @override
    def __str__(self) -> str:
        return f"GoogleCalendarStore(timezone='{self.timezone_name}')"

    def _to_gcsa(self, descriptor: EventDescriptor) -> GcsaEvent:
        if descriptor.is_all_day:
            return GcsaEvent(
                summary=descriptor.title,
                start=descriptor.start,
                end=descriptor.end + timedelta(days=1),
                description=descriptor.description,
            )
        return GcsaEvent(
            summary=descriptor.title,
            start=descriptor.start,
            end=descriptor.end,
            timezone=self.timezone_name,
            description=descriptor.description,
        )

    @override
    @_translate_errors
    def create_event(self, calendar_id: str, descriptor: EventDescriptor) -> str:
        created = self.calendar.add_event(
            self._to_gcsa(descriptor), calendar_id=calendar_id
        )
        if not created.id:
            raise ExternalServiceError("Google Calendar did not return an event ID")
        return created.id

    @override
    @_translate_errors
    def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> list[EventDescriptor]:
        events_iterable = self.calendar.get_events(
            time_min=time_min,
            time_max=time_max,
            single_events=True,
            order_by="startTime",
            calendar_id=calendar_id,
        )
        descriptors = []
        for e in events_iterable:
            descriptor = _to_descriptor(e, self.zone)
            if descriptor is not None:
                descriptors.append(descriptor)
        return descriptors

    @override
    @_translate_errors
    def delete_event(self, calendar_id: str, event_id: str) -> None:
        self.calendar.delete_event(event_id, calendar_id=calendar_id)

    @override
    @_translate_errors
    def create_calendar(self, name: str, description: str = "") -> str:
        created = self.calendar.add_calendar(
            GcsaCalendar(
                name,
                description=description or _CALENDAR_DESCRIPTION,
                timezone=self.timezone_name,
            )
        )
        if not created.id:
            raise ExternalServiceError("Google Calendar did not return a calendar ID")
        logger.info("Created calendar '%s' (%s)", name, created.id)
        return created.id


class GoogleHolidaySource(HolidaySource):
    """Reads public holidays from a shared Google holiday calendar."""

    def __init__(
        self,
        client: GoogleCalendar,
        *,
        calendar_id: str = DEFAULT_HOLIDAY_CALENDAR_ID,
    ) -> None:
        self.calendar: GoogleCalendar = client
        self.calendar_id: str = calendar_id

    @classmethod
    def from_credential(
        cls, credential: Credential, *, calendar_id: str = DEFAULT_HOLIDAY_CALENDAR_ID
    ) -> "GoogleHolidaySource":
        return cls(client_for(credential), calendar_id=calendar_id)

    @override
    @_translate_errors
    def list_holiday_dates(self, start: date, end: date) -> set[str]:
        events_iterable = self.calendar.get_events(
            time_min=datetime.combine(start, time.min, tzinfo=timezone.utc),
            time_max=datetime.combine(end, time(23, 59, 59), tzinfo=timezone.utc),
            single_events=True,
            order_by="startTime",
            calendar_id=self.calendar_id,
        )
        return {holiday_date_string(e.start) for e in events_iterable if e.start is not None}


__all__ = [
    "GoogleCalendarStore",
    "GoogleHolidaySource",
    "DEFAULT_HOLIDAY_CALENDAR_ID",
    "client_for",
    "translate_error",
]
