"""
Availability Math

Half-open interval arithmetic behind sitter availability.

overlaps() is the only conflict predicate in the package: booking creation,
rescheduling and slot filtering all call it.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Sequence, Tuple

from pawfect_ai.schemas.booking import TimeRange


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    True when [a_start, a_end) and [b_start, b_end) share any instant.

    Touching endpoints do not overlap:
        [10:00, 12:00) vs [12:00, 14:00) -> False
        [10:00, 12:00) vs [11:59, 12:01) -> True
    """
    return a_start < b_end and a_end > b_start


def day_bounds(day: date, open_hour: int, close_hour: int) -> Tuple[datetime, datetime]:
    """Open and close instants of one day; close_hour 24 is next midnight."""
    opening = datetime.combine(day, time(open_hour))
    if close_hour >= 24:
        closing = datetime.combine(day + timedelta(days=1), time(0))
    else:
        closing = datetime.combine(day, time(close_hour))
    return opening, closing


def free_intervals(
    opening: datetime,
    closing: datetime,
    busy: Iterable[TimeRange]
) -> List[TimeRange]:
    """
    Sub-intervals of [opening, closing) not covered by any busy range.

    Busy ranges may overlap each other and may extend past the day bounds.
    """
    free = []
    cursor = opening
    for block in sorted(busy, key=lambda r: r.start):
        if not overlaps(block.start, block.end, opening, closing):
            continue
        if block.start > cursor:
            free.append(TimeRange(start=cursor, end=block.start))
        cursor = max(cursor, block.end)
        if cursor >= closing:
            break
    if cursor < closing:
        free.append(TimeRange(start=cursor, end=closing))
    return free


def days_in_range(start_date: date, end_date: date) -> List[date]:
    """Inclusive list of days; empty when end precedes start."""
    span = (end_date - start_date).days
    return [start_date + timedelta(days=offset) for offset in range(span + 1)]


def overlapping(ranges: Sequence[TimeRange], start: datetime, end: datetime) -> List[TimeRange]:
    """Ranges overlapping [start, end), ordered by start."""
    return sorted(
        (r for r in ranges if overlaps(r.start, r.end, start, end)),
        key=lambda r: r.start,
    )
