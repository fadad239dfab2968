"""
Calendar bucketing helpers.

Capacity is accounted in Monday-anchored weeks. All ranges are inclusive on
both ends.
"""

from datetime import date, timedelta
from typing import Iterator, List

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
GRANULARITIES = (DAILY, WEEKLY, MONTHLY)


def week_start(d: date) -> date:
    """Roll back to the Monday of the week containing `d`."""
    return d - timedelta(days=d.weekday())


def week_end(d: date) -> date:
    return week_start(d) + timedelta(days=6)


def weeks_between(start: date, end: date) -> List[date]:
    """Mondays of every week whose 7-day span intersects [start, end]."""
    if end < start:
        return []
    weeks = []
    current = week_start(start)
    while current <= end:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive interval intersection test."""
    return a_start <= b_end and a_end >= b_start


def month_start(d: date) -> date:
    return d.replace(day=1)


def bucket_start(d: date, granularity: str) -> date:
    """Map a day onto the first day of its heat-map bucket."""
    if granularity == DAILY:
        return d
    if granularity == WEEKLY:
        return week_start(d)
    if granularity == MONTHLY:
        return month_start(d)
    raise ValueError(f"Unknown granularity: {granularity}")


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
