from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Union


class RecurrenceError(ValueError):
    pass


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class Weekday(enum.IntEnum):
    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7

    @property
    def short_name(self) -> str:
        return self.name[:3].capitalize()

    @property
    def full_name(self) -> str:
        return self.name.capitalize()

    @classmethod
    def of(cls, value: date) -> "Weekday":
        # isoweekday: Monday=1 ... Sunday=7
        return cls(value.isoweekday() % 7 + 1)


class WeekOfMonth(int, enum.Enum):
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    LAST = -1

    @property
    def display_name(self) -> str:
        return WEEK_OF_MONTH_LABELS[self]


WEEK_OF_MONTH_LABELS = {
    WeekOfMonth.FIRST: "1st",
    WeekOfMonth.SECOND: "2nd",
    WeekOfMonth.THIRD: "3rd",
    WeekOfMonth.FOURTH: "4th",
    WeekOfMonth.LAST: "Last",
}


@dataclass(frozen=True)
class DayOfMonth:
    day: int


@dataclass(frozen=True)
class OrdinalWeekday:
    week: WeekOfMonth
    weekday: int


MonthlySpec = Union[DayOfMonth, OrdinalWeekday]


@dataclass(frozen=True)
class Never:
    pass


@dataclass(frozen=True)
class OnDate:
    date: Union[date, datetime]


@dataclass(frozen=True)
class AfterOccurrences:
    count: int


EndCondition = Union[Never, OnDate, AfterOccurrences]


@dataclass(frozen=True)
class Pattern:
    """A recurrence rule attached to a single task.

    Values are immutable. ``occurrence_count`` only moves forward through
    :meth:`with_incremented_occurrence`, which returns a new pattern.
    """

    frequency: Frequency
    interval: int = 1
    days_of_week: Optional[frozenset[int]] = None
    monthly_spec: Optional[MonthlySpec] = None
    end_condition: EndCondition = field(default_factory=Never)
    occurrence_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(self, "interval", max(1, int(self.interval)))
        object.__setattr__(self, "occurrence_count", max(0, int(self.occurrence_count)))
        if self.days_of_week is not None:
            object.__setattr__(self, "days_of_week", frozenset(int(day) for day in self.days_of_week))

    # convenience constructors

    @classmethod
    def daily(cls, interval: int = 1) -> "Pattern":
        return cls(Frequency.DAILY, interval=interval)

    @classmethod
    def weekly(cls, days: Iterable[int] | None = None, interval: int = 1) -> "Pattern":
        return cls(Frequency.WEEKLY, interval=interval, days_of_week=frozenset(days) if days else None)

    @classmethod
    def monthly(cls, interval: int = 1) -> "Pattern":
        return cls(Frequency.MONTHLY, interval=interval)

    @classmethod
    def monthly_on_day(cls, day: int, interval: int = 1) -> "Pattern":
        return cls(Frequency.MONTHLY, interval=interval, monthly_spec=DayOfMonth(day))

    @classmethod
    def monthly_on(cls, week: WeekOfMonth, weekday: int, interval: int = 1) -> "Pattern":
        return cls(Frequency.MONTHLY, interval=interval, monthly_spec=OrdinalWeekday(WeekOfMonth(week), int(weekday)))

    @classmethod
    def yearly(cls, interval: int = 1) -> "Pattern":
        return cls(Frequency.YEARLY, interval=interval)

    # flat accessors matching the stored field names

    @property
    def day_of_month(self) -> Optional[int]:
        return self.monthly_spec.day if isinstance(self.monthly_spec, DayOfMonth) else None

    @property
    def week_of_month(self) -> Optional[WeekOfMonth]:
        return self.monthly_spec.week if isinstance(self.monthly_spec, OrdinalWeekday) else None

    @property
    def weekday_for_ordinal(self) -> Optional[int]:
        return self.monthly_spec.weekday if isinstance(self.monthly_spec, OrdinalWeekday) else None

    def with_incremented_occurrence(self) -> "Pattern":
        return replace(self, occurrence_count=self.occurrence_count + 1)

    def with_end_condition(self, end_condition: EndCondition) -> "Pattern":
        return replace(self, end_condition=end_condition)


def _end_condition_to_dict(condition: EndCondition) -> dict[str, Any]:
    if isinstance(condition, OnDate):
        return {"type": "onDate", "date": condition.date.isoformat()}
    if isinstance(condition, AfterOccurrences):
        return {"type": "afterOccurrences", "count": condition.count}
    return {"type": "never"}


def _end_condition_from_dict(data: Any) -> EndCondition:
    if not data:
        return Never()
    kind = data.get("type")
    if kind == "never":
        return Never()
    if kind == "onDate":
        raw = str(data["date"])
        if len(raw) == 10:
            return OnDate(date.fromisoformat(raw))
        return OnDate(datetime.fromisoformat(raw))
    if kind == "afterOccurrences":
        return AfterOccurrences(int(data["count"]))
    raise RecurrenceError(f"unknown end condition {kind!r}")


def pattern_to_dict(pattern: Pattern) -> dict[str, Any]:
    week = pattern.week_of_month
    return {
        "frequency": pattern.frequency.value,
        "interval": pattern.interval,
        "daysOfWeek": sorted(pattern.days_of_week) if pattern.days_of_week is not None else None,
        "dayOfMonth": pattern.day_of_month,
        "weekOfMonth": week.value if week is not None else None,
        "weekdayForOrdinal": pattern.weekday_for_ordinal,
        "endCondition": _end_condition_to_dict(pattern.end_condition),
        "occurrenceCount": pattern.occurrence_count,
    }


def pattern_from_dict(data: dict[str, Any]) -> Pattern:
    try:
        monthly: Optional[MonthlySpec] = None
        week, weekday = data.get("weekOfMonth"), data.get("weekdayForOrdinal")
        # both monthly forms may be present in legacy rows; the ordinal form wins
        if week is not None and weekday is not None:
            monthly = OrdinalWeekday(WeekOfMonth(int(week)), int(weekday))
        elif data.get("dayOfMonth") is not None:
            monthly = DayOfMonth(int(data["dayOfMonth"]))
        days = data.get("daysOfWeek")
        return Pattern(
            frequency=Frequency(data["frequency"]),
            interval=int(data.get("interval", 1)),
            days_of_week=frozenset(days) if days is not None else None,
            monthly_spec=monthly,
            end_condition=_end_condition_from_dict(data.get("endCondition")),
            occurrence_count=int(data.get("occurrenceCount", 0)),
        )
    except RecurrenceError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise RecurrenceError(f"invalid recurrence pattern: {exc}") from exc


def dump_pattern(pattern: Pattern) -> str:
    return json.dumps(pattern_to_dict(pattern), sort_keys=True)


def load_pattern(value: str | bytes) -> Pattern:
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise RecurrenceError(str(exc)) from exc
    if not isinstance(data, dict):
        raise RecurrenceError("recurrence pattern must be a JSON object")
    return pattern_from_dict(data)
