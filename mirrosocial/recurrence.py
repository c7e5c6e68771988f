"""
Repeating event schedules.

Days of week are stored as a comma separated list using 0=Sunday .. 6=Saturday,
which is what the event creation form submits.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

PATTERNS = ("daily", "weekly", "monthly", "yearly")
DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_UNITS = {"daily": "day", "weekly": "week", "monthly": "month", "yearly": "year"}


def parse_days_of_week(value: Optional[str]) -> list[int]:
    if not value:
        return []
    days = set()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        day = int(part)
        if day < 0 or day > 6:
            raise ValueError(f"Invalid day of week: {part}")
        days.add(day)
    return sorted(days)


def format_days_of_week(days: list[int]) -> Optional[str]:
    return ",".join(str(d) for d in sorted(set(days))) if days else None


def _sunday_index(day: date) -> int:
    # date.weekday() is Monday=0; stored values are Sunday=0.
    return (day.weekday() + 1) % 7


def _parse_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass
class RepeatRule:
    pattern: str
    interval: int = 1
    days_of_week: list[int] = field(default_factory=list)
    end_date: Optional[date] = None

    @classmethod
    def from_event(cls, event) -> Optional["RepeatRule"]:
        if not getattr(event, "is_repeating", False) or not event.repeat_pattern:
            return None
        return cls(
            pattern=event.repeat_pattern,
            interval=event.repeat_interval or 1,
            days_of_week=parse_days_of_week(event.repeat_days_of_week),
            end_date=_parse_date(event.repeat_end_date),
        )


def validate_rule(rule: RepeatRule, start: date) -> None:
    if rule.pattern not in PATTERNS:
        raise ValueError(f"Invalid repeat pattern: {rule.pattern}")
    if rule.interval < 1:
        raise ValueError("Repeat interval must be at least 1")
    if rule.end_date and rule.end_date < start:
        raise ValueError("Repeat end date cannot be before the event date")


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _weekly_days(start: date, rule: RepeatRule):
    current = start
    # Bounded so a rule whose weekdays never match cannot spin forever.
    for _ in range(366 * 7 * rule.interval):
        current += timedelta(days=1)
        week_index = (current - start).days // 7
        if week_index % rule.interval == 0 and _sunday_index(current) in rule.days_of_week:
            yield current


def _stepped(start: date, rule: RepeatRule):
    step = 1
    while True:
        if rule.pattern == "daily":
            yield start + timedelta(days=rule.interval * step)
        elif rule.pattern == "weekly":
            yield start + timedelta(weeks=rule.interval * step)
        elif rule.pattern == "monthly":
            yield _add_months(start, rule.interval * step)
        else:
            yield _add_months(start, 12 * rule.interval * step)
        step += 1


def upcoming_occurrences(
    start: date, rule: Optional[RepeatRule], count: int = 5
) -> list[date]:
    """Return the first `count` dates of the series, starting with `start`."""
    if count <= 0:
        return []
    occurrences = [start]
    if rule is None:
        return occurrences

    if rule.pattern == "weekly" and rule.days_of_week:
        following = _weekly_days(start, rule)
    else:
        following = _stepped(start, rule)

    for day in following:
        if len(occurrences) >= count:
            break
        if rule.end_date and day > rule.end_date:
            break
        occurrences.append(day)
    return occurrences


def describe_rule(rule: Optional[RepeatRule]) -> str:
    if rule is None:
        return ""
    unit = _UNITS.get(rule.pattern, rule.pattern)
    if rule.interval > 1:
        description = f"Every {rule.interval} {unit}s"
    else:
        description = f"Every {unit}"
    if rule.pattern == "weekly" and rule.days_of_week:
        description += " on " + ", ".join(DAY_LABELS[d] for d in rule.days_of_week)
    if rule.end_date:
        description += f" until {rule.end_date.isoformat()}"
    return description
