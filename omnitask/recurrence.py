from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, TypeVar

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from .clock import local_now
from .patterns import (
    AfterOccurrences,
    DayOfMonth,
    Frequency,
    OnDate,
    OrdinalWeekday,
    Pattern,
    Weekday,
    WeekOfMonth,
)

D = TypeVar("D", date, datetime)

# indexed by Weekday value (1=Sunday ... 7=Saturday)
DATEUTIL_WEEKDAYS = {1: SU, 2: MO, 3: TU, 4: WE, 5: TH, 6: FR, 7: SA}


def next_occurrence(pattern: Pattern, start: D) -> D:
    """Next due date after ``start``.

    Never raises: anything malformed falls back to stepping by the interval.
    The time of day of a ``datetime`` start is kept.
    """
    interval = max(1, pattern.interval)
    if pattern.frequency == Frequency.WEEKLY:
        days = sorted(day for day in (pattern.days_of_week or ()) if 1 <= day <= 7)
        if days:
            return _next_weekday(start, days, interval)
        return start + timedelta(weeks=interval)
    if pattern.frequency == Frequency.MONTHLY:
        return _next_monthly(pattern, start, interval)
    if pattern.frequency == Frequency.YEARLY:
        return start + relativedelta(years=interval)
    # daily, and custom as a plain day step
    return start + timedelta(days=interval)


def _next_weekday(start: D, days: list[int], interval: int) -> D:
    current = Weekday.of(start)
    for day in days:
        if day > current:
            return start + timedelta(days=day - current)
    offset = (7 - current + days[0]) + 7 * (interval - 1)
    return start + timedelta(days=offset)


def _next_monthly(pattern: Pattern, start: D, interval: int) -> D:
    # relativedelta clamps the day to the target month's length
    target = start + relativedelta(months=interval)
    spec = pattern.monthly_spec
    if isinstance(spec, OrdinalWeekday) and 1 <= spec.weekday <= 7:
        return ordinal_weekday_in_month(target, spec.week, spec.weekday)
    if isinstance(spec, DayOfMonth):
        last_day = calendar.monthrange(target.year, target.month)[1]
        return target.replace(day=min(max(1, spec.day), last_day))
    return target


def ordinal_weekday_in_month(month: D, week: WeekOfMonth, weekday: int) -> D:
    """The Nth (or last) ``weekday`` of ``month``'s month.

    The Nth occurrence is the first one plus N-1 weeks and is not checked
    against the month boundary.
    """
    wd = DATEUTIL_WEEKDAYS[weekday]
    if week == WeekOfMonth.LAST:
        return month + relativedelta(day=31, weekday=wd(-1))
    first = month + relativedelta(day=1, weekday=wd(+1))
    return first + timedelta(weeks=int(week.value) - 1)


def upcoming(pattern: Pattern, start: D, count: int) -> Iterator[D]:
    current = start
    for _ in range(max(0, count)):
        current = next_occurrence(pattern, current)
        yield current


def _local(value: datetime) -> datetime:
    # aware values are compared in system-local wall time
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _end_of(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return _local(value)
    return datetime.combine(value, time.max)


def should_continue(pattern: Pattern, now: Optional[datetime] = None) -> bool:
    condition = pattern.end_condition
    if isinstance(condition, OnDate):
        reference = now if now is not None else local_now()
        return _local(reference) <= _end_of(condition.date)
    if isinstance(condition, AfterOccurrences):
        return pattern.occurrence_count < condition.count
    return True


def remaining_occurrences(pattern: Pattern) -> Optional[int]:
    condition = pattern.end_condition
    if isinstance(condition, AfterOccurrences):
        return max(0, condition.count - pattern.occurrence_count)
    return None
