"""Tests for the anniversary generators."""

from datetime import date, datetime, timedelta, timezone

import pytest

from omoide.anniversary import (
    elapsed_years_months,
    generate_anniversaries,
    generate_anniversaries_between,
)
from omoide.errors import ValidationError
from omoide.util import JST


def test_yearly_count_and_dates():
    events = generate_anniversaries("2020-05-01T19:00", "yearly", 3)

    assert len(events) == 3
    assert [e.start_string for e in events] == [
        "2020-05-01T19:00:00+09:00",
        "2021-05-01T19:00:00+09:00",
        "2022-05-01T19:00:00+09:00",
    ]
    for event in events:
        assert event.end - event.start == timedelta(hours=1)


def test_yearly_default_title_uses_final_count():
    """Without a template every occurrence is titled with the total count."""
    events = generate_anniversaries(date(2020, 5, 1), "yearly", 3)
    assert [e.title for e in events] == ["3回目の記念日"] * 3


def test_yearly_template_replaces_first_placeholder_with_index():
    events = generate_anniversaries(date(2020, 5, 1), "yearly", 3, title_template="結婚#周年 #")
    assert [e.title for e in events] == ["結婚1周年 #", "結婚2周年 #", "結婚3周年 #"]


def test_monthly_default_titles():
    events = generate_anniversaries(date(2024, 1, 15), "monthly", 14)
    titles = [e.title for e in events]
    assert titles[0] == "0年1ヶ月の記念日"
    assert titles[11] == "0年12ヶ月の記念日"
    assert titles[12] == "1年1ヶ月の記念日"
    assert titles[13] == "1年2ヶ月の記念日"


def test_monthly_combined_token():
    events = generate_anniversaries(
        date(2024, 1, 15), "monthly", 13, title_template="付き合って#年##ヶ月"
    )
    assert events[0].title == "付き合って1ヶ月"
    assert events[12].title == "付き合って1年1ヶ月"


def test_monthly_bare_placeholder_gets_label():
    events = generate_anniversaries(
        date(2024, 1, 15), "monthly", 13, title_template="記念日(#)"
    )
    assert events[2].title == "記念日(3ヶ月)"
    assert events[12].title == "記念日(1年1ヶ月)"


def test_template_without_placeholder_is_verbatim():
    events = generate_anniversaries(date(2024, 1, 15), "monthly", 2, title_template="記念日")
    assert [e.title for e in events] == ["記念日", "記念日"]


def test_elapsed_years_months():
    assert elapsed_years_months(1) == (0, 1)
    assert elapsed_years_months(12) == (0, 12)
    assert elapsed_years_months(13) == (1, 1)
    assert elapsed_years_months(25) == (2, 1)


def test_monthly_rollover_does_not_drift():
    """Jan 31 -> Mar 2 -> Mar 31, always stepping from the original start."""
    events = generate_anniversaries(date(2024, 1, 31), "monthly", 4)
    assert [e.date_string for e in events] == [
        "2024-01-31",
        "2024-03-02",
        "2024-03-31",
        "2024-05-01",
    ]

    events = generate_anniversaries(date(2023, 1, 31), "monthly", 2)
    assert events[1].date_string == "2023-03-03"


def test_leap_day_yearly():
    events = generate_anniversaries(date(2020, 2, 29), "yearly", 2)
    assert events[1].date_string == "2021-03-01"


def test_timed_events_are_pinned_to_jst():
    aware = datetime(2020, 5, 1, 10, 0, tzinfo=timezone.utc)
    events = generate_anniversaries(aware, "yearly", 1)
    assert events[0].start == datetime(2020, 5, 1, 19, 0, tzinfo=JST)
    assert events[0].start_string.endswith("+09:00")


def test_description_carried_through():
    events = generate_anniversaries(date(2020, 5, 1), "yearly", 2, description="おめでとう")
    assert all(e.description == "おめでとう" for e in events)


def test_invalid_parameters():
    with pytest.raises(ValidationError, match="Invalid interval type"):
        generate_anniversaries(date(2020, 5, 1), "weekly", 3)  # type: ignore[arg-type]
    with pytest.raises(ValidationError, match="positive integer"):
        generate_anniversaries(date(2020, 5, 1), "yearly", 0)
    with pytest.raises(ValidationError, match="positive integer"):
        generate_anniversaries(date(2020, 5, 1), "yearly", True)
    with pytest.raises(ValidationError):
        generate_anniversaries("not a date", "yearly", 1)


def test_generation_is_idempotent():
    first = generate_anniversaries(date(2024, 1, 31), "monthly", 24, title_template="#年##ヶ月")
    second = generate_anniversaries(date(2024, 1, 31), "monthly", 24, title_template="#年##ヶ月")
    assert first == second


# Date-range generator


def test_between_months_default_titles_and_bounds():
    events = generate_anniversaries_between(date(2024, 1, 10), date(2024, 4, 10))
    assert [e.date_string for e in events] == ["2024-02-10", "2024-03-10", "2024-04-10"]
    assert [e.title for e in events] == [
        "🎉 1回目の記念日 🎉",
        "🎉 2回目の記念日 🎉",
        "🎉 3回目の記念日 🎉",
    ]
    assert all(e.is_all_day and e.start == e.end for e in events)


def test_between_years_default_titles():
    events = generate_anniversaries_between(
        date(2020, 6, 1), date(2023, 5, 31), count_type="years"
    )
    assert [e.title for e in events] == ["🎉 1年記念日 🎉", "🎉 2年記念日 🎉"]


def test_between_braced_placeholders():
    events = generate_anniversaries_between(
        date(2024, 1, 1), date(2025, 3, 1), title_template="{{ym}} ({{count}})"
    )
    assert events[0].title == "1ヶ月 (1)"
    assert events[10].title == "11ヶ月 (11)"
    assert events[11].title == "1年0ヶ月 (12)"
    assert events[13].title == "1年2ヶ月 (14)"


def test_between_years_only_template_steps_by_year():
    events = generate_anniversaries_between(
        date(2020, 1, 1), date(2022, 12, 31), title_template="結婚{{years}}周年"
    )
    assert [e.title for e in events] == ["結婚1周年", "結婚2周年"]
    assert [e.date_string for e in events] == ["2021-01-01", "2022-01-01"]


def test_between_legacy_hash_rules():
    combined = generate_anniversaries_between(
        date(2024, 1, 1), date(2025, 2, 1), title_template="#年##ヶ月"
    )
    assert combined[0].title == "1ヶ月"
    assert combined[12].title == "1年1ヶ月"

    kaime = generate_anniversaries_between(
        date(2024, 1, 1), date(2024, 3, 1), title_template="#回目のデート"
    )
    assert [e.title for e in kaime] == ["1回目のデート", "2回目のデート"]

    bare = generate_anniversaries_between(
        date(2020, 1, 1), date(2021, 1, 1), title_template="祝#", count_type="years"
    )
    assert [e.title for e in bare] == ["祝1年"]


def test_between_rejects_bad_input():
    with pytest.raises(ValidationError, match="must not precede"):
        generate_anniversaries_between(date(2024, 2, 1), date(2024, 1, 1))
    with pytest.raises(ValidationError, match="Invalid count type"):
        generate_anniversaries_between(
            date(2024, 1, 1), date(2024, 2, 1), count_type="days"  # type: ignore[arg-type]
        )


def test_between_empty_when_no_boundary_reached():
    assert generate_anniversaries_between(date(2024, 1, 10), date(2024, 2, 9)) == []
