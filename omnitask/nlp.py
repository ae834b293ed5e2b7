"""Best-effort recurrence detection in free-form task text.

Each rule takes the lowercased text and the detected interval and returns a
:class:`Pattern` or ``None``. Rules run in order and the first hit wins, so
"2nd Sunday of the month" is read as monthly before the bare weekday rule
can claim "sunday".
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence

from .patterns import Frequency, Pattern, Weekday, WeekOfMonth

log = logging.getLogger(__name__)

Rule = Callable[[str, int], Optional[Pattern]]

WEEKDAY_PATTERNS = [
    (Weekday.SUNDAY, re.compile(r"\bsun(?:day)?s?\b")),
    (Weekday.MONDAY, re.compile(r"\bmon(?:day)?s?\b")),
    (Weekday.TUESDAY, re.compile(r"\btues?(?:day)?s?\b")),
    (Weekday.WEDNESDAY, re.compile(r"\bwed(?:nesday)?s?\b")),
    (Weekday.THURSDAY, re.compile(r"\bthu(?:rs?)?(?:day)?s?\b")),
    (Weekday.FRIDAY, re.compile(r"\bfri(?:day)?s?\b")),
    (Weekday.SATURDAY, re.compile(r"\bsat(?:urday)?s?\b")),
]
WEEKDAY_GROUPS = [
    (re.compile(r"\bweekdays?\b"), {Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY}),
    (re.compile(r"\bweekends?\b"), {Weekday.SATURDAY, Weekday.SUNDAY}),
]
ORDINAL_PATTERNS = [
    (WeekOfMonth.FIRST, re.compile(r"\b(?:1st|first)\b")),
    (WeekOfMonth.SECOND, re.compile(r"\b(?:2nd|second)\b")),
    (WeekOfMonth.THIRD, re.compile(r"\b(?:3rd|third)\b")),
    (WeekOfMonth.FOURTH, re.compile(r"\b(?:4th|fourth)\b")),
    (WeekOfMonth.LAST, re.compile(r"\blast\b")),
]

_EVERY = r"\bevery\s+(?:other\s+|\d+\s+)?"
FREQUENCY_PATTERNS = [
    (Frequency.DAILY, re.compile(r"\bdaily\b|" + _EVERY + r"days?\b")),
    (Frequency.YEARLY, re.compile(r"\b(?:yearly|annually)\b|" + _EVERY + r"years?\b")),
    (Frequency.MONTHLY, re.compile(r"\bmonthly\b|" + _EVERY + r"months?\b")),
    (Frequency.WEEKLY, re.compile(r"\b(?:bi-?)?weekly\b|" + _EVERY + r"weeks?\b")),
]

WEEKLY_KEYWORD = re.compile(r"\b(?:bi-?)?weekly\b|\bevery\s+week\b")
EVERY_N = re.compile(r"\bevery\s+(\d+)")
BIWEEKLY = re.compile(r"\bbi-?weekly\b")


def detect_interval(text: str) -> int:
    if "every other" in text:
        return 2
    match = EVERY_N.search(text)
    if match:
        return max(1, int(match.group(1)))
    if BIWEEKLY.search(text):
        return 2
    return 1


def _first_weekday(text: str) -> Optional[Weekday]:
    return next((day for day, regex in WEEKDAY_PATTERNS if regex.search(text)), None)


def ordinal_monthly_rule(text: str, interval: int) -> Optional[Pattern]:
    week = next((week for week, regex in ORDINAL_PATTERNS if regex.search(text)), None)
    weekday = _first_weekday(text)
    if week is None or weekday is None:
        return None
    # "every monday" style phrases must not turn into ordinals
    if "month" not in text and ("week" in text or "daily" in text):
        return None
    return Pattern.monthly_on(week, weekday, interval=interval)


def frequency_keyword_rule(text: str, interval: int) -> Optional[Pattern]:
    for frequency, regex in FREQUENCY_PATTERNS:
        if not regex.search(text):
            continue
        if frequency == Frequency.WEEKLY and not WEEKLY_KEYWORD.search(text):
            # "every 2 weeks on mon, wed" keeps its weekdays
            return weekday_list_rule(text, interval) or Pattern(frequency, interval=interval)
        return Pattern(frequency, interval=interval)
    return None


def weekday_list_rule(text: str, interval: int) -> Optional[Pattern]:
    days: set[int] = {int(day) for day, regex in WEEKDAY_PATTERNS if regex.search(text)}
    for regex, group in WEEKDAY_GROUPS:
        if regex.search(text):
            days.update(int(day) for day in group)
    if not days:
        return None
    return Pattern.weekly(days, interval=interval)


RULES: Sequence[Rule] = (ordinal_monthly_rule, frequency_keyword_rule, weekday_list_rule)


def parse(text: str | None, rules: Sequence[Rule] = RULES) -> Optional[Pattern]:
    """Infer a recurrence pattern from ``text``; ``None`` means not recurring."""
    if not text:
        return None
    lowered = text.lower()
    interval = detect_interval(lowered)
    for rule in rules:
        pattern = rule(lowered, interval)
        if pattern is not None:
            log.debug("recurrence %r matched by %s", text, rule.__name__)
            return pattern
    return None
