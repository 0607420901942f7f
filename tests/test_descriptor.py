from dataclasses import FrozenInstanceError, replace
from datetime import date, datetime, timedelta

import pytest

from omoide.descriptor import EventDescriptor
from omoide.errors import ValidationError
from omoide.util import JST


def test_all_day_descriptor():
    event = EventDescriptor(title="命日", start=date(2024, 3, 10), end=date(2024, 3, 10))
    assert event.is_all_day
    assert event.date_string == "2024-03-10"
    assert event.start_string == "2024-03-10"
    assert event.id is None


def test_timed_descriptor_strings_carry_offset():
    start = datetime(2025, 1, 6, 10, 0, tzinfo=JST)
    event = EventDescriptor(title="定例", start=start, end=start + timedelta(hours=1))
    assert not event.is_all_day
    assert event.start_string == "2025-01-06T10:00:00+09:00"
    assert event.end_string == "2025-01-06T11:00:00+09:00"
    assert event.date_string == "2025-01-06"


def test_timed_descriptor_requires_zone():
    with pytest.raises(ValidationError, match="explicit UTC offset"):
        EventDescriptor(
            title="naive",
            start=datetime(2025, 1, 6, 10, 0),
            end=datetime(2025, 1, 6, 11, 0),
        )


def test_timed_descriptor_requires_end_after_start():
    start = datetime(2025, 1, 6, 10, 0, tzinfo=JST)
    with pytest.raises(ValidationError, match="must be after"):
        EventDescriptor(title="empty", start=start, end=start)


def test_all_day_descriptor_rejects_end_before_start():
    with pytest.raises(ValidationError, match="must not precede"):
        EventDescriptor(title="x", start=date(2025, 1, 2), end=date(2025, 1, 1))


def test_mixed_kinds_are_rejected():
    with pytest.raises(ValidationError, match="both be dates"):
        EventDescriptor(
            title="x",
            start=date(2025, 1, 1),
            end=datetime(2025, 1, 1, 10, 0, tzinfo=JST),
        )


def test_descriptor_is_frozen():
    event = EventDescriptor(title="x", start=date(2025, 1, 1), end=date(2025, 1, 1))
    with pytest.raises(FrozenInstanceError):
        event.title = "y"  # type: ignore[misc]


def test_to_dict_includes_id_only_when_set():
    event = EventDescriptor(
        title="一周忌", start=date(2025, 3, 10), end=date(2025, 3, 10), description="note"
    )
    assert event.to_dict() == {
        "title": "一周忌",
        "start": "2025-03-10",
        "end": "2025-03-10",
        "all_day": True,
        "description": "note",
    }
    assert replace(event, id="evt-1").to_dict()["id"] == "evt-1"


def test_str_mentions_title():
    event = EventDescriptor(title="命日", start=date(2024, 3, 10), end=date(2024, 3, 10))
    assert "命日" in str(event)
    assert "2024-03-10" in str(event)
