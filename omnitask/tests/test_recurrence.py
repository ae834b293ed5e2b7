from datetime import date, datetime, timedelta, timezone

import pytest

from omnitask.patterns import (
    AfterOccurrences,
    Frequency,
    Never,
    OnDate,
    Pattern,
    Weekday,
    WeekOfMonth,
    load_pattern,
)
from omnitask.recurrence import next_occurrence, remaining_occurrences, should_continue, upcoming

# 2026-03-02 is a Monday
MONDAY = date(2026, 3, 2)
MON, WED, FRI = Weekday.MONDAY, Weekday.WEDNESDAY, Weekday.FRIDAY


@pytest.mark.parametrize("start", [date(2026, 1, 1), date(2024, 2, 28), date(2026, 12, 31)])
def test_daily_adds_one_day(start):
    assert next_occurrence(Pattern.daily(), start) == start + timedelta(days=1)


def test_weekly_days_same_week():
    pattern = Pattern.weekly({MON, WED, FRI})
    assert next_occurrence(pattern, MONDAY) == date(2026, 3, 4)


def test_weekly_single_day_with_interval_skips_a_week():
    pattern = Pattern.weekly({MON}, interval=2)
    assert next_occurrence(pattern, MONDAY) == date(2026, 3, 16)


def test_weekly_wraps_to_first_day_of_next_week():
    pattern = Pattern.weekly({MON, WED})
    assert next_occurrence(pattern, date(2026, 3, 6)) == date(2026, 3, 9)


def test_weekly_saturday_to_sunday():
    pattern = Pattern.weekly({Weekday.SUNDAY})
    assert next_occurrence(pattern, date(2026, 3, 7)) == date(2026, 3, 8)


def test_weekly_without_days_steps_whole_weeks():
    assert next_occurrence(Pattern.weekly(interval=3), MONDAY) == MONDAY + timedelta(weeks=3)


def test_weekly_ignores_invalid_days():
    pattern = Pattern(Frequency.WEEKLY, days_of_week=frozenset({0, 9}))
    assert next_occurrence(pattern, MONDAY) == MONDAY + timedelta(weeks=1)


@pytest.mark.parametrize("year, expected", [(2026, date(2026, 2, 28)), (2024, date(2024, 2, 29))])
def test_day_of_month_clamps_to_short_month(year, expected):
    assert next_occurrence(Pattern.monthly_on_day(31), date(year, 1, 31)) == expected


def test_day_of_month_is_applied_after_moving():
    assert next_occurrence(Pattern.monthly_on_day(15), date(2026, 1, 31)) == date(2026, 2, 15)


def test_monthly_without_day_keeps_day_clamped():
    assert next_occurrence(Pattern.monthly(), date(2026, 1, 31)) == date(2026, 2, 28)
    assert next_occurrence(Pattern.monthly(interval=2), date(2026, 1, 15)) == date(2026, 3, 15)


@pytest.mark.parametrize("day", [1, 15, 31])
def test_second_sunday_of_next_month(day):
    pattern = Pattern.monthly_on(WeekOfMonth.SECOND, Weekday.SUNDAY)
    assert next_occurrence(pattern, date(2026, 3, day)) == date(2026, 4, 12)


@pytest.mark.parametrize("day", [1, 15, 31])
def test_last_friday_of_next_month(day):
    pattern = Pattern.monthly_on(WeekOfMonth.LAST, Weekday.FRIDAY)
    assert next_occurrence(pattern, date(2026, 3, day)) == date(2026, 4, 24)


def test_ordinal_weekday_with_interval():
    pattern = Pattern.monthly_on(WeekOfMonth.THIRD, Weekday.MONDAY, interval=2)
    assert next_occurrence(pattern, date(2026, 3, 10)) == date(2026, 5, 18)


def test_yearly_clamps_leap_day():
    assert next_occurrence(Pattern.yearly(), date(2024, 2, 29)) == date(2025, 2, 28)
    assert next_occurrence(Pattern.yearly(interval=4), date(2024, 2, 29)) == date(2028, 2, 29)


def test_custom_steps_days():
    pattern = Pattern(Frequency.CUSTOM, interval=3)
    assert next_occurrence(pattern, MONDAY) == date(2026, 3, 5)


def test_time_of_day_is_kept():
    start = datetime(2026, 3, 2, 9, 30)
    assert next_occurrence(Pattern.daily(), start) == datetime(2026, 3, 3, 9, 30)
    ordinal = Pattern.monthly_on(WeekOfMonth.FIRST, Weekday.MONDAY)
    assert next_occurrence(ordinal, start) == datetime(2026, 4, 6, 9, 30)


def test_upcoming_chains_occurrences():
    pattern = Pattern.weekly({MON, WED})
    assert list(upcoming(pattern, MONDAY, 3)) == [date(2026, 3, 4), date(2026, 3, 9), date(2026, 3, 11)]


def test_never_continues():
    assert should_continue(Pattern.daily())
    assert should_continue(Pattern(Frequency.DAILY, end_condition=Never(), occurrence_count=500))


def test_on_date_compares_against_now():
    pattern = Pattern.daily().with_end_condition(OnDate(datetime(2026, 6, 1, 12, 0)))
    assert should_continue(pattern, now=datetime(2026, 5, 31))
    assert should_continue(pattern, now=datetime(2026, 6, 1, 12, 0))
    assert not should_continue(pattern, now=datetime(2026, 6, 1, 12, 1))


def test_on_plain_date_lasts_the_whole_day():
    pattern = Pattern.daily().with_end_condition(OnDate(date(2026, 6, 1)))
    assert should_continue(pattern, now=datetime(2026, 6, 1, 23, 0))
    assert not should_continue(pattern, now=datetime(2026, 6, 2, 0, 0))


def test_on_date_reads_local_clock(monkeypatch):
    monkeypatch.setattr("omnitask.recurrence.local_now", lambda: datetime(2030, 1, 1))
    pattern = Pattern.daily().with_end_condition(OnDate(datetime(2026, 6, 1)))
    assert not should_continue(pattern)


def test_on_date_with_utc_offset():
    pattern = load_pattern(
        '{"frequency": "daily", "interval": 1, "endCondition": {"type": "onDate", "date": "2030-06-01T00:00:00+00:00"}}'
    )
    assert should_continue(pattern, now=datetime(2026, 3, 2))
    assert not should_continue(pattern, now=datetime(2031, 1, 1))
    assert should_continue(pattern, now=datetime(2026, 3, 2, tzinfo=timezone.utc))


def test_after_occurrences():
    pattern = Pattern(Frequency.DAILY, end_condition=AfterOccurrences(3), occurrence_count=2)
    assert should_continue(pattern)
    assert remaining_occurrences(pattern) == 1
    finished = pattern.with_incremented_occurrence()
    assert not should_continue(finished)
    assert remaining_occurrences(finished) == 0
    assert remaining_occurrences(Pattern.daily()) is None
