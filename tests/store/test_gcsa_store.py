from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from omoide.descriptor import EventDescriptor
from omoide.errors import AuthExpired, ExternalServiceError, NotFound
from omoide.identity import Credential
from omoide.orchestrator import RunStatus, register_events
from omoide.store.gcsa import (
    GoogleCalendarStore,
    GoogleHolidaySource,
    client_for,
    translate_error,
)
from omoide.util import JST


class _StubResponse:
    """Stub for the httplib2 response carried by HttpError."""

    def __init__(self, status: int, reason: str = "") -> None:
        self.status = status
        self.reason = reason


def _http_error(status: int) -> HttpError:
    return HttpError(_StubResponse(status, "stub"), b"")


class _StubEvent:
    """Stub for gcsa Event objects returned by get_events."""

    def __init__(
        self,
        *,
        id: str | None,
        summary: str | None,
        start: datetime | date | None,
        end: datetime | date | None,
        description: str | None = None,
    ) -> None:
        self.id = id
        self.summary = summary
        self.start = start
        self.end = end
        self.description = description


class _StubCreated:
    def __init__(self, id: str | None) -> None:
        self.id = id


class _StubGoogleCalendar:
    def __init__(self, events: list[_StubEvent] | None = None):
        self._events = events or []
        self.added: list[tuple[object, str | None]] = []
        self.deleted: list[tuple[str, str | None]] = []
        self.calendars: list[object] = []
        self.calls: list[dict[str, object]] = []
        self.error: Exception | None = None

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    def add_event(self, event, calendar_id: str | None = None):
        self._maybe_fail()
        self.added.append((event, calendar_id))
        return _StubCreated(f"gcal-{len(self.added)}")

    def get_events(
        self,
        *,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
        single_events: bool = True,
        order_by: str = "startTime",
        calendar_id: str | None = None,
    ):
        self._maybe_fail()
        self.calls.append(
            {
                "time_min": time_min,
                "time_max": time_max,
                "single_events": single_events,
                "order_by": order_by,
                "calendar_id": calendar_id,
            }
        )
        return iter(self._events)

    def delete_event(self, event_id: str, calendar_id: str | None = None) -> None:
        self._maybe_fail()
        self.deleted.append((event_id, calendar_id))

    def add_calendar(self, calendar):
        self._maybe_fail()
        self.calendars.append(calendar)
        return _StubCreated("new-calendar@group.calendar.google.com")


def _build_store(
    events: list[_StubEvent] | None = None,
) -> tuple[GoogleCalendarStore, _StubGoogleCalendar]:
    stub = _StubGoogleCalendar(events)
    store = GoogleCalendarStore(client=stub)  # type: ignore[arg-type]
    return store, stub


def test_create_all_day_event_sends_exclusive_end() -> None:
    """Google all-day ends are exclusive, so the day after is sent."""
    store, stub = _build_store()
    descriptor = EventDescriptor(
        title="一周忌", start=date(2025, 3, 10), end=date(2025, 3, 10), description="note"
    )

    event_id = store.create_event("primary", descriptor)

    assert event_id == "gcal-1"
    sent, calendar_id = stub.added[0]
    assert calendar_id == "primary"
    assert sent.summary == "一周忌"
    assert sent.start == date(2025, 3, 10)
    assert sent.end == date(2025, 3, 11)
    assert sent.description == "note"


def test_create_timed_event_keeps_offset_and_zone_name() -> None:
    store, stub = _build_store()
    start = datetime(2025, 1, 6, 10, 0, tzinfo=JST)
    descriptor = EventDescriptor(title="定例", start=start, end=start + timedelta(hours=1))

    store.create_event("team@group.calendar.google.com", descriptor)

    sent, calendar_id = stub.added[0]
    assert calendar_id == "team@group.calendar.google.com"
    assert sent.start == start
    assert sent.end == start + timedelta(hours=1)
    assert sent.start.utcoffset() == timedelta(hours=9)
    assert sent.timezone == "Asia/Tokyo"


def test_list_events_converts_back_to_descriptors() -> None:
    zone = ZoneInfo("Asia/Tokyo")
    events = [
        _StubEvent(
            id="a",
            summary="命日",
            start=date(2024, 3, 10),
            end=date(2024, 3, 11),
        ),
        _StubEvent(
            id="b",
            summary="定例",
            start=datetime(2025, 1, 6, 10, 0, tzinfo=zone),
            end=datetime(2025, 1, 6, 11, 0, tzinfo=zone),
            description="room A",
        ),
    ]
    store, stub = _build_store(events)

    listed = store.list_events(
        "primary",
        datetime(1900, 1, 1, tzinfo=timezone.utc),
        datetime(2200, 1, 1, tzinfo=timezone.utc),
    )

    assert [e.id for e in listed] == ["a", "b"]
    assert listed[0].is_all_day
    assert listed[0].end == date(2024, 3, 10)
    assert listed[1].description == "room A"
    assert stub.calls[0]["single_events"] is True
    assert stub.calls[0]["order_by"] == "startTime"
    assert stub.calls[0]["calendar_id"] == "primary"


def test_list_events_skips_events_without_id_and_fills_naive_zone() -> None:
    events = [
        _StubEvent(id=None, summary="ghost", start=date(2024, 1, 1), end=date(2024, 1, 2)),
        _StubEvent(
            id="c",
            summary=None,
            start=datetime(2025, 1, 6, 10, 0),
            end=datetime(2025, 1, 6, 11, 0),
        ),
    ]
    store, _ = _build_store(events)

    listed = store.list_events(
        "primary",
        datetime(1900, 1, 1, tzinfo=timezone.utc),
        datetime(2200, 1, 1, tzinfo=timezone.utc),
    )

    assert len(listed) == 1
    assert listed[0].title == ""
    assert listed[0].start.tzinfo is not None


def test_delete_event_passes_calendar() -> None:
    store, stub = _build_store()
    store.delete_event("primary", "evt-9")
    assert stub.deleted == [("evt-9", "primary")]


def test_create_calendar_uses_zone_and_default_description() -> None:
    store, stub = _build_store()

    calendar_id = store.create_calendar("思い出カレンダー")

    assert calendar_id == "new-calendar@group.calendar.google.com"
    created = stub.calendars[0]
    assert created.summary == "思い出カレンダー"
    assert created.timezone == "Asia/Tokyo"
    assert created.description


def test_unauthorized_becomes_auth_expired() -> None:
    store, stub = _build_store()
    stub.error = _http_error(401)
    with pytest.raises(AuthExpired):
        store.create_event(
            "primary", EventDescriptor(title="x", start=date(2025, 1, 1), end=date(2025, 1, 1))
        )


def test_refresh_error_becomes_auth_expired() -> None:
    store, stub = _build_store()
    stub.error = RefreshError("invalid_grant")
    with pytest.raises(AuthExpired):
        store.delete_event("primary", "evt-1")


def test_not_found_carries_calendar_id() -> None:
    store, stub = _build_store()
    stub.error = _http_error(404)
    with pytest.raises(NotFound) as excinfo:
        store.list_events(
            "missing@group.calendar.google.com",
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
    assert excinfo.value.calendar_id == "missing@group.calendar.google.com"


def test_other_http_errors_become_external_service_errors() -> None:
    store, stub = _build_store()
    stub.error = _http_error(503)
    with pytest.raises(ExternalServiceError) as excinfo:
        store.delete_event("primary", "evt-1")
    assert excinfo.value.status == 503


def test_forbidden_is_not_treated_as_expired_credential() -> None:
    store, stub = _build_store()
    stub.error = _http_error(403)
    with pytest.raises(ExternalServiceError) as excinfo:
        store.create_event(
            "primary", EventDescriptor(title="x", start=date(2025, 1, 1), end=date(2025, 1, 1))
        )
    assert excinfo.value.status == 403
    assert not isinstance(excinfo.value, AuthExpired)


def test_translate_error_passthrough_and_fallback() -> None:
    original = NotFound("gone")
    assert translate_error(original) is original
    assert isinstance(translate_error(OSError("reset")), ExternalServiceError)
    assert isinstance(translate_error(_http_error(410)), NotFound)


def test_registration_against_google_store_aborts_on_missing_calendar() -> None:
    store, stub = _build_store()
    stub.error = _http_error(404)
    events = [
        EventDescriptor(title=f"e{i}", start=date(2025, 1, i + 1), end=date(2025, 1, i + 1))
        for i in range(3)
    ]

    result = register_events(store, "missing", events, sleep=lambda seconds: None)

    assert result.status is RunStatus.CALENDAR_NOT_FOUND
    assert result.outcomes == []


def test_holiday_source_reads_whole_days_and_truncates() -> None:
    events = [
        _StubEvent(id="h1", summary="元日", start=date(2025, 1, 1), end=date(2025, 1, 2)),
        _StubEvent(
            id="h2",
            summary="成人の日",
            start=datetime(2025, 1, 13, 0, 0, tzinfo=JST),
            end=datetime(2025, 1, 14, 0, 0, tzinfo=JST),
        ),
    ]
    stub = _StubGoogleCalendar(events)
    source = GoogleHolidaySource(stub, calendar_id="holidays")  # type: ignore[arg-type]

    dates = source.list_holiday_dates(date(2025, 1, 1), date(2025, 1, 31))

    assert dates == {"2025-01-01", "2025-01-13"}
    call = stub.calls[0]
    assert call["calendar_id"] == "holidays"
    assert call["time_min"] == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert call["time_max"] == datetime(2025, 1, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_holiday_source_failure_is_translated() -> None:
    stub = _StubGoogleCalendar()
    stub.error = _http_error(500)
    source = GoogleHolidaySource(stub)  # type: ignore[arg-type]
    with pytest.raises(ExternalServiceError):
        source.list_holiday_dates(date(2025, 1, 1), date(2025, 1, 31))


def test_client_for_rejects_expired_credential() -> None:
    with pytest.raises(AuthExpired):
        client_for(Credential(token="abc", expired=True))
    with pytest.raises(AuthExpired):
        client_for(Credential(token=""))


def test_credential_repr_hides_token() -> None:
    assert "secret" not in repr(Credential(token="secret"))
