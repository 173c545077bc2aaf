"""Tests for recurrence expansion."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from dateutil.rrule import rruleset

from core.errors import AmbiguousRecurrence, InvalidWindow
from models.events import (
    CustomPattern,
    DailyPattern,
    EventTemplate,
    MonthlyPattern,
    WeeklyPattern,
)
from services.recurrence import build_rule, expand, expand_all, occurrence_interval

UTC = timezone.utc
NEW_YORK = ZoneInfo("America/New_York")


def utc(*args):
    return datetime(*args, tzinfo=UTC)


def starts(occurrences):
    return [o.start for o in occurrences]


# =============================================================================
# Weekly
# =============================================================================


def test_weekly_on_monday_yields_three_occurrences(weekly_template):
    occurrences = expand(weekly_template, utc(2024, 1, 1), utc(2024, 1, 20))

    assert starts(occurrences) == [utc(2024, 1, 1, 10), utc(2024, 1, 8, 10), utc(2024, 1, 15, 10)]
    assert all(o.interval.duration == timedelta(hours=1) for o in occurrences)
    assert all(o.template_id == "evt-1" for o in occurrences)


def test_end_date_cutoff(sample_event):
    sample_event["recurrence"]["endDate"] = "2024-01-10T00:00:00Z"
    template = EventTemplate.model_validate(sample_event)

    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 20))

    assert starts(occurrences) == [utc(2024, 1, 1, 10), utc(2024, 1, 8, 10)]


def test_end_date_is_inclusive(make_template):
    template = make_template(recurrence=DailyPattern(end_date=utc(2024, 1, 3, 10)))
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 10))
    assert starts(occurrences)[-1] == utc(2024, 1, 3, 10)


def test_end_date_before_start_yields_nothing(make_template):
    template = make_template(recurrence=DailyPattern(end_date=utc(2023, 12, 1)))
    assert expand(template, utc(2023, 11, 1), utc(2024, 2, 1)) == []


def test_weekly_days_start_mid_week_neither_skips_nor_duplicates(make_template):
    # Wednesday start; Monday of the first week is before the start
    template = make_template(
        start=utc(2024, 1, 3, 18),
        end=utc(2024, 1, 3, 19),
        recurrence=WeeklyPattern(days_of_week={1, 3, 5}),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 13))

    assert starts(occurrences) == [
        utc(2024, 1, 3, 18),
        utc(2024, 1, 5, 18),
        utc(2024, 1, 8, 18),
        utc(2024, 1, 10, 18),
        utc(2024, 1, 12, 18),
    ]


def test_weekly_day_set_is_authoritative(make_template):
    # Starts on a Wednesday but only Mondays are listed
    template = make_template(
        start=utc(2024, 1, 3, 10),
        end=utc(2024, 1, 3, 11),
        recurrence=WeeklyPattern(days_of_week={1}),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 20))
    assert starts(occurrences) == [utc(2024, 1, 8, 10), utc(2024, 1, 15, 10)]


def test_weekly_friday_series_across_month_view(make_template):
    template = make_template(
        start=utc(2026, 2, 13, 10, 30),
        end=utc(2026, 2, 13, 11, 30),
        recurrence=WeeklyPattern(days_of_week={5}),
    )
    occurrences = expand(template, utc(2026, 2, 1), utc(2026, 2, 28, 23, 59, 59))
    assert starts(occurrences) == [utc(2026, 2, 13, 10, 30), utc(2026, 2, 20, 10, 30), utc(2026, 2, 27, 10, 30)]


def test_weekly_sunday_sorts_after_saturday_within_a_week(make_template):
    # Weeks begin on Monday, so Sunday is the last day of each bucket
    template = make_template(
        start=utc(2024, 1, 6, 9),  # Saturday
        end=utc(2024, 1, 6, 10),
        recurrence=WeeklyPattern(days_of_week={0, 6}),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 15))
    assert starts(occurrences) == [
        utc(2024, 1, 6, 9),
        utc(2024, 1, 7, 9),
        utc(2024, 1, 13, 9),
        utc(2024, 1, 14, 9),
    ]


def test_biweekly_with_days(make_template):
    template = make_template(recurrence=WeeklyPattern(interval=2, days_of_week={1, 5}))
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 31))
    assert starts(occurrences) == [
        utc(2024, 1, 1, 10),
        utc(2024, 1, 5, 10),
        utc(2024, 1, 15, 10),
        utc(2024, 1, 19, 10),
        utc(2024, 1, 29, 10),
    ]


def test_weekly_without_days_keeps_start_weekday(make_template):
    template = make_template(recurrence=WeeklyPattern(interval=2))
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 2, 1))
    assert starts(occurrences) == [utc(2024, 1, 1, 10), utc(2024, 1, 15, 10), utc(2024, 1, 29, 10)]


# =============================================================================
# Daily, monthly, custom
# =============================================================================


def test_daily_every_three_days(make_template):
    template = make_template(recurrence=DailyPattern(interval=3))
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 11))
    assert starts(occurrences) == [
        utc(2024, 1, 1, 10),
        utc(2024, 1, 4, 10),
        utc(2024, 1, 7, 10),
        utc(2024, 1, 10, 10),
    ]


def test_monthly_clamps_to_last_day(make_template):
    template = make_template(
        start=utc(2024, 1, 31, 10),
        end=utc(2024, 1, 31, 11),
        recurrence=MonthlyPattern(),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 5, 1))
    assert starts(occurrences) == [
        utc(2024, 1, 31, 10),
        utc(2024, 2, 29, 10),
        utc(2024, 3, 31, 10),
        utc(2024, 4, 30, 10),
    ]


def test_monthly_every_other_month(make_template):
    template = make_template(
        start=utc(2024, 1, 15, 10),
        end=utc(2024, 1, 15, 11),
        recurrence=MonthlyPattern(interval=2),
    )
    occurrences = expand(template, utc(2024, 4, 1), utc(2024, 10, 1))
    assert starts(occurrences) == [utc(2024, 5, 15, 10), utc(2024, 7, 15, 10), utc(2024, 9, 15, 10)]


def test_custom_is_daily_by_interval_and_warns(make_template):
    custom = make_template(recurrence=CustomPattern(interval=2))
    daily = make_template(recurrence=DailyPattern(interval=2))

    with pytest.warns(AmbiguousRecurrence):
        custom_occurrences = expand(custom, utc(2024, 1, 1), utc(2024, 1, 10))

    assert starts(custom_occurrences) == starts(expand(daily, utc(2024, 1, 1), utc(2024, 1, 10)))


# =============================================================================
# Single events, windows, exceptions, cap
# =============================================================================


def test_non_recurring_passthrough(make_template):
    template = make_template()
    occurrences = expand(template, utc(2023, 12, 1), utc(2024, 2, 1))
    assert len(occurrences) == 1
    assert occurrences[0].interval.start == template.start
    assert occurrences[0].interval.end == template.end


def test_non_recurring_outside_window(make_template):
    assert expand(make_template(), utc(2024, 1, 2), utc(2024, 1, 3)) == []


def test_window_boundaries_are_half_open(make_template):
    template = make_template()
    # Window ends exactly at the event start, or starts exactly at its end
    assert expand(template, utc(2024, 1, 1, 9), utc(2024, 1, 1, 10)) == []
    assert expand(template, utc(2024, 1, 1, 11), utc(2024, 1, 1, 12)) == []


def test_partially_overlapping_occurrence_is_included(make_template):
    template = make_template(
        start=utc(2023, 12, 31, 23),
        end=utc(2024, 1, 1, 1),
        recurrence=DailyPattern(),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 2))
    assert starts(occurrences) == [utc(2023, 12, 31, 23), utc(2024, 1, 1, 23)]


def test_exception_suppresses_single_instance(make_template):
    template = make_template(
        recurrence=WeeklyPattern(days_of_week={1}),
        exceptions={utc(2024, 1, 8, 10)},
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 20))
    assert starts(occurrences) == [utc(2024, 1, 1, 10), utc(2024, 1, 15, 10)]


def test_exception_on_single_event(make_template):
    template = make_template(exceptions={utc(2024, 1, 1, 10)})
    assert expand(template, utc(2024, 1, 1), utc(2024, 1, 2)) == []


def test_cap_truncates_and_keeps_order(make_template):
    template = make_template(recurrence=DailyPattern())
    occurrences = expand(template, utc(2024, 1, 1), utc(2025, 1, 1), max_occurrences=10)

    assert len(occurrences) == 10
    assert occurrences[0].start == utc(2024, 1, 1, 10)
    assert starts(occurrences) == sorted(starts(occurrences))


def test_default_cap_bounds_unending_series(make_template):
    template = make_template(start=utc(2024, 1, 1, 0), end=utc(2024, 1, 1, 0, 30), recurrence=DailyPattern())
    occurrences = expand(template, utc(2024, 1, 1), utc(2030, 1, 1))
    assert len(occurrences) == 500


def test_old_series_fast_forwards_to_window(make_template):
    template = make_template(
        start=utc(1990, 3, 5, 7),
        end=utc(1990, 3, 5, 8),
        recurrence=DailyPattern(),
    )
    occurrences = expand(template, utc(2024, 6, 1), utc(2024, 6, 8))
    assert starts(occurrences) == [utc(2024, 6, d, 7) for d in range(1, 8)]


def test_old_biweekly_series_keeps_its_weeks(make_template):
    # 2001-01-01 is a Monday, exactly 1200 weeks before 2024-01-01
    template = make_template(
        start=utc(2001, 1, 3, 18),
        end=utc(2001, 1, 3, 19),
        recurrence=WeeklyPattern(interval=2, days_of_week={1, 3, 5}),
    )
    occurrences = expand(template, utc(2024, 1, 1), utc(2024, 1, 15))
    assert starts(occurrences) == [utc(2024, 1, 1, 18), utc(2024, 1, 3, 18), utc(2024, 1, 5, 18)]


def test_old_monthly_series_still_clamps(make_template):
    template = make_template(
        start=utc(2000, 1, 31, 10),
        end=utc(2000, 1, 31, 11),
        recurrence=MonthlyPattern(),
    )
    occurrences = expand(template, utc(2024, 2, 1), utc(2024, 5, 1))
    assert starts(occurrences) == [utc(2024, 2, 29, 10), utc(2024, 3, 31, 10), utc(2024, 4, 30, 10)]


def test_rule_excludes_exception_dates(make_template):
    template = make_template(
        recurrence=DailyPattern(end_date=utc(2024, 1, 4, 10)),
        exceptions={utc(2024, 1, 2, 10)},
    )
    rule = build_rule(template, utc(2024, 1, 1))
    assert isinstance(rule, rruleset)
    assert list(rule) == [utc(2024, 1, 1, 10), utc(2024, 1, 3, 10), utc(2024, 1, 4, 10)]


@pytest.mark.parametrize(
    "start,end",
    [
        (utc(2024, 1, 2), utc(2024, 1, 1)),
        (utc(2024, 1, 1), utc(2024, 1, 1)),
        (datetime(2024, 1, 1), datetime(2024, 1, 2)),
    ],
)
def test_invalid_window_rejected(make_template, start, end):
    with pytest.raises(InvalidWindow):
        expand(make_template(), start, end)


# =============================================================================
# Time zones and all-day events
# =============================================================================


def test_weekly_series_keeps_wall_clock_across_dst(make_template):
    # 10:00 in New York is 15:00Z in winter and 14:00Z after the March change
    template = make_template(
        start=datetime(2024, 3, 4, 10, tzinfo=NEW_YORK),
        end=datetime(2024, 3, 4, 11, tzinfo=NEW_YORK),
        timezone="America/New_York",
        recurrence=WeeklyPattern(days_of_week={1}),
    )
    occurrences = expand(template, utc(2024, 3, 1), utc(2024, 3, 20))

    assert starts(occurrences) == [utc(2024, 3, 4, 15), utc(2024, 3, 11, 14), utc(2024, 3, 18, 14)]
    assert all(o.start.astimezone(NEW_YORK).hour == 10 for o in occurrences)


def test_all_day_occurrences_align_to_local_midnight_across_dst(make_template):
    template = make_template(
        start=datetime(2024, 3, 9, tzinfo=NEW_YORK),
        end=datetime(2024, 3, 9, tzinfo=NEW_YORK),
        is_all_day=True,
        timezone="America/New_York",
        recurrence=DailyPattern(),
    )
    occurrences = expand(template, utc(2024, 3, 9, 5), utc(2024, 3, 12, 4))

    assert [(o.start, o.end) for o in occurrences] == [
        (utc(2024, 3, 9, 5), utc(2024, 3, 10, 5)),
        (utc(2024, 3, 10, 5), utc(2024, 3, 11, 4)),  # 23-hour day
        (utc(2024, 3, 11, 4), utc(2024, 3, 12, 4)),
    ]


def test_all_day_multi_day_span(make_template):
    template = make_template(
        start=utc(2024, 1, 5),
        end=utc(2024, 1, 7),
        is_all_day=True,
    )
    [occurrence] = expand(template, utc(2024, 1, 1), utc(2024, 2, 1))
    assert (occurrence.start, occurrence.end) == (utc(2024, 1, 5), utc(2024, 1, 7))


def test_all_day_with_timed_start_counts_whole_day(make_template):
    # Nominal start after the window end, but the day itself overlaps
    template = make_template(start=utc(2024, 1, 5, 15), end=utc(2024, 1, 5, 16), is_all_day=True)
    [occurrence] = expand(template, utc(2024, 1, 5, 8), utc(2024, 1, 5, 9))
    assert (occurrence.start, occurrence.end) == (utc(2024, 1, 5), utc(2024, 1, 6))


def test_occurrence_interval_for_timed_event(make_template):
    template = make_template()
    interval = occurrence_interval(template, utc(2024, 2, 1, 10))
    assert (interval.start, interval.end) == (utc(2024, 2, 1, 10), utc(2024, 2, 1, 11))


# =============================================================================
# Many templates
# =============================================================================


def test_expand_all_orders_across_templates(make_template, weekly_template):
    daily = make_template(
        id="standup",
        start=utc(2024, 1, 1, 9),
        end=utc(2024, 1, 1, 9, 15),
        recurrence=DailyPattern(),
    )
    occurrences = expand_all([weekly_template, daily], utc(2024, 1, 1), utc(2024, 1, 3))

    assert [(o.template_id, o.start) for o in occurrences] == [
        ("standup", utc(2024, 1, 1, 9)),
        ("evt-1", utc(2024, 1, 1, 10)),
        ("standup", utc(2024, 1, 2, 9)),
    ]


def test_expansion_does_not_mutate_template(weekly_template):
    before = weekly_template.model_dump()
    expand(weekly_template, utc(2024, 1, 1), utc(2024, 3, 1))
    assert weekly_template.model_dump() == before
