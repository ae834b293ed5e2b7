from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Set

from dateutil.relativedelta import relativedelta

from .clock import local_now
from .models import Priority
from .patterns import (
    AfterOccurrences,
    DayOfMonth,
    EndCondition,
    Frequency,
    MonthlySpec,
    Never,
    OnDate,
    OrdinalWeekday,
    Pattern,
    Weekday,
    WeekOfMonth,
)


@dataclass
class TaskCreate:
    title: str
    notes: Optional[str]
    project_id: Optional[str]
    priority: Priority
    due_date: Optional[datetime]
    recurring_pattern: Optional[Pattern]
    original_input: Optional[str]
    parent_task_id: Optional[str] = None
    is_current_task: bool = False


class MonthlyMode(str, enum.Enum):
    DAY_OF_MONTH = "day_of_month"
    ORDINAL_WEEKDAY = "ordinal_weekday"
    UNSPECIFIED = "unspecified"


class EndType(str, enum.Enum):
    NEVER = "never"
    ON_DATE = "on_date"
    AFTER_COUNT = "after_count"


def _default_end_date() -> datetime:
    return local_now() + relativedelta(months=3)


@dataclass
class RecurrenceOptions:
    """Editable state of the recurrence form; :meth:`build` turns it into a pattern."""

    frequency: Frequency = Frequency.WEEKLY
    interval: int = 1
    selected_days: Set[int] = field(default_factory=set)
    monthly_mode: MonthlyMode = MonthlyMode.DAY_OF_MONTH
    day_of_month: int = 1
    week_of_month: WeekOfMonth = WeekOfMonth.FIRST
    weekday_for_ordinal: int = Weekday.SUNDAY
    end_type: EndType = EndType.NEVER
    end_date: datetime = field(default_factory=_default_end_date)
    occurrence_limit: int = 10
    occurrence_count: int = 0

    def toggle_day(self, day: int) -> None:
        if day in self.selected_days:
            self.selected_days.discard(day)
        else:
            self.selected_days.add(day)

    def end_condition(self) -> EndCondition:
        if self.end_type == EndType.ON_DATE:
            return OnDate(self.end_date)
        if self.end_type == EndType.AFTER_COUNT:
            return AfterOccurrences(self.occurrence_limit)
        return Never()

    def build(self) -> Pattern:
        end = self.end_condition()
        if self.frequency == Frequency.WEEKLY:
            return Pattern(
                Frequency.WEEKLY,
                interval=self.interval,
                days_of_week=frozenset(self.selected_days) if self.selected_days else None,
                end_condition=end,
                occurrence_count=self.occurrence_count,
            )
        if self.frequency == Frequency.MONTHLY:
            monthly: Optional[MonthlySpec] = None
            if self.monthly_mode == MonthlyMode.ORDINAL_WEEKDAY:
                monthly = OrdinalWeekday(self.week_of_month, int(self.weekday_for_ordinal))
            elif self.monthly_mode == MonthlyMode.DAY_OF_MONTH:
                monthly = DayOfMonth(self.day_of_month)
            return Pattern(
                Frequency.MONTHLY,
                interval=self.interval,
                monthly_spec=monthly,
                end_condition=end,
                occurrence_count=self.occurrence_count,
            )
        return Pattern(
            self.frequency, interval=self.interval, end_condition=end, occurrence_count=self.occurrence_count
        )

    @classmethod
    def from_pattern(cls, pattern: Pattern) -> "RecurrenceOptions":
        options = cls(
            frequency=pattern.frequency, interval=pattern.interval, occurrence_count=pattern.occurrence_count
        )
        options.selected_days = set(pattern.days_of_week or ())
        if isinstance(pattern.monthly_spec, OrdinalWeekday):
            options.monthly_mode = MonthlyMode.ORDINAL_WEEKDAY
            options.week_of_month = pattern.monthly_spec.week
            options.weekday_for_ordinal = pattern.monthly_spec.weekday
        elif isinstance(pattern.monthly_spec, DayOfMonth):
            options.day_of_month = pattern.monthly_spec.day
        elif pattern.frequency == Frequency.MONTHLY:
            # plain monthly follows the due date's day
            options.monthly_mode = MonthlyMode.UNSPECIFIED
        end = pattern.end_condition
        if isinstance(end, OnDate):
            options.end_type = EndType.ON_DATE
            options.end_date = end.date
        elif isinstance(end, AfterOccurrences):
            options.end_type = EndType.AFTER_COUNT
            options.occurrence_limit = end.count
        return options
