from datetime import date, datetime

import pytest

from omnitask.models import Priority
from omnitask.patterns import AfterOccurrences, Frequency, OnDate, Pattern, Weekday, WeekOfMonth
from omnitask.views.formatting import describe_pattern, format_task_card


@pytest.mark.parametrize(
    "pattern, expected",
    [
        (Pattern.daily(), "Daily"),
        (Pattern.daily(interval=3), "Every 3 days"),
        (Pattern(Frequency.CUSTOM, interval=1), "Every 1 days"),
        (Pattern.weekly(), "Weekly"),
        (Pattern.weekly(interval=2), "Every 2 weeks"),
        (Pattern.weekly({Weekday.WEDNESDAY, Weekday.MONDAY}), "Weekly on Mon, Wed"),
        (Pattern.weekly({Weekday.MONDAY, Weekday.WEDNESDAY}, interval=2), "Every 2 weeks on Mon, Wed"),
        (Pattern.monthly(), "Monthly"),
        (Pattern.monthly_on_day(15), "Monthly on the 15th"),
        (Pattern.monthly_on_day(2, interval=3), "Every 3 months on the 2nd"),
        (Pattern.monthly_on(WeekOfMonth.SECOND, Weekday.SUNDAY), "Monthly on the 2nd Sunday"),
        (Pattern.monthly_on(WeekOfMonth.LAST, Weekday.FRIDAY, interval=2), "Every 2 months on the Last Friday"),
        (Pattern.yearly(), "Yearly"),
        (Pattern.yearly(interval=5), "Every 5 years"),
    ],
)
def test_describe_pattern(pattern, expected):
    assert describe_pattern(pattern) == expected


def test_until_suffix():
    pattern = Pattern.daily().with_end_condition(OnDate(date(2026, 12, 31)))
    assert describe_pattern(pattern) == "Daily until Dec 31, 2026"


def test_remaining_suffix():
    pattern = Pattern(Frequency.WEEKLY, end_condition=AfterOccurrences(5), occurrence_count=2)
    assert describe_pattern(pattern) == "Weekly (3 remaining)"
    exhausted = Pattern(Frequency.WEEKLY, end_condition=AfterOccurrences(2), occurrence_count=2)
    assert describe_pattern(exhausted) == "Weekly"


class DummyTask:
    def __init__(self, **kwargs):
        self.title = "Stretch"
        self.priority = Priority.NONE
        self.due_date = None
        self.is_completed = False
        self.recurring_pattern = None
        for key, value in kwargs.items():
            setattr(self, key, value)


def test_task_card():
    task = DummyTask(
        priority=Priority.URGENT,
        due_date=datetime(2026, 3, 4, 7, 0),
        recurring_pattern=Pattern.weekly({Weekday.MONDAY, Weekday.WEDNESDAY}),
    )
    card = format_task_card(task, reference=datetime(2026, 3, 2, 7, 0))
    assert card.splitlines() == [
        "[Urgent] Stretch",
        "Due: 2026-03-04 07:00 (in 2 days)",
        "Repeats: Weekly on Mon, Wed",
    ]


def test_task_card_without_extras():
    assert format_task_card(DummyTask()) == "Stretch"
