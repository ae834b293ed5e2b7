from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from humanize import naturaldelta, ordinal

from ..clock import local_now
from ..models import Priority, Task
from ..patterns import AfterOccurrences, DayOfMonth, Frequency, OnDate, OrdinalWeekday, Pattern, Weekday
from ..recurrence import remaining_occurrences

PRIORITY_LABELS = {
    Priority.NONE: "",
    Priority.LOW: "Low",
    Priority.MEDIUM: "Medium",
    Priority.HIGH: "High",
    Priority.URGENT: "Urgent",
}


def weekday_name(day: int) -> Optional[str]:
    try:
        return Weekday(day).short_name
    except ValueError:
        return None


def medium_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _every(interval: int, unit: str, single: str) -> str:
    return single if interval == 1 else f"Every {interval} {unit}"


def describe_pattern(pattern: Pattern) -> str:
    interval = pattern.interval
    if pattern.frequency == Frequency.WEEKLY and pattern.days_of_week:
        names = ", ".join(name for name in map(weekday_name, sorted(pattern.days_of_week)) if name)
        text = f"{_every(interval, 'weeks', 'Weekly')} on {names}"
    elif pattern.frequency == Frequency.WEEKLY:
        text = _every(interval, "weeks", "Weekly")
    elif pattern.frequency == Frequency.MONTHLY:
        text = _every(interval, "months", "Monthly")
        spec = pattern.monthly_spec
        if isinstance(spec, OrdinalWeekday) and weekday_name(spec.weekday):
            text += f" on the {spec.week.display_name} {Weekday(spec.weekday).full_name}"
        elif isinstance(spec, DayOfMonth):
            text += f" on the {ordinal(spec.day)}"
    elif pattern.frequency == Frequency.YEARLY:
        text = _every(interval, "years", "Yearly")
    elif pattern.frequency == Frequency.CUSTOM:
        text = f"Every {interval} days"
    else:
        text = _every(interval, "days", "Daily")

    end = pattern.end_condition
    if isinstance(end, OnDate):
        text += f" until {medium_date(end.date)}"
    elif isinstance(end, AfterOccurrences):
        remaining = remaining_occurrences(pattern)
        if remaining:
            text += f" ({remaining} remaining)"
    return text


def format_task_card(task: Task, reference: Optional[datetime] = None) -> str:
    label = PRIORITY_LABELS.get(task.priority, "")
    lines = [f"[{label}] {task.title}" if label else task.title]
    if task.due_date:
        reference = reference or local_now()
        delta = naturaldelta(task.due_date - reference)
        when = f"{delta} ago" if task.due_date < reference else f"in {delta}"
        lines.append(f"Due: {task.due_date:%Y-%m-%d %H:%M} ({when})")
    if task.recurring_pattern is not None:
        lines.append(f"Repeats: {describe_pattern(task.recurring_pattern)}")
    return "\n".join(lines)


def bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items)
