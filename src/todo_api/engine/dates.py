"""
Temporal predicates shared by the filter, grouping and analytics stages.

Every function takes the reference instant ``now`` explicitly so results are
deterministic for a given input. Calendar-day checks are evaluated in the
timezone of ``now``.
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)
URGENT_WINDOW = timedelta(hours=24)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _local_date(value: datetime, now: datetime) -> date:
    if now.tzinfo is not None and value.tzinfo is not None:
        return value.astimezone(now.tzinfo).date()
    return value.date()


# PUBLIC_INTERFACE
def is_overdue(deadline: datetime, now: datetime) -> bool:
    return deadline < now


# PUBLIC_INTERFACE
def is_today(value: datetime, now: datetime) -> bool:
    """Calendar-day match against ``now`` (not a rolling 24h window)."""
    return _local_date(value, now) == _local_date(now, now)


# PUBLIC_INTERFACE
def is_tomorrow(value: datetime, now: datetime) -> bool:
    return _local_date(value, now) == _local_date(now, now) + ONE_DAY


# PUBLIC_INTERFACE
def is_this_week(value: datetime, now: datetime) -> bool:
    """True when ``value`` falls within ``[now, now + 7 days]``."""
    return now <= value <= now + ONE_WEEK


# PUBLIC_INTERFACE
def is_urgent(deadline: datetime, now: datetime) -> bool:
    """True when the deadline is still ahead but at most 24 hours away."""
    return now <= deadline <= now + URGENT_WINDOW


# PUBLIC_INTERFACE
def days_until(deadline: datetime, now: datetime) -> int:
    """Whole days until ``deadline``, rounded up; negative when overdue."""
    return math.ceil((deadline - now) / ONE_DAY)


# PUBLIC_INTERFACE
def weekday_index(value: datetime, now: Optional[datetime] = None) -> int:
    """Weekday with Sunday = 0 .. Saturday = 6, in the timezone of ``now`` when given."""
    day = _local_date(value, now) if now is not None else value.date()
    return (day.weekday() + 1) % 7


# PUBLIC_INTERFACE
def in_window(value: Optional[datetime], start: datetime, end: datetime, inclusive_end: bool = True) -> bool:
    """Check ``start <= value <= end`` (or ``< end``); a missing value is never inside."""
    if value is None:
        return False
    if inclusive_end:
        return start <= value <= end
    return start <= value < end
