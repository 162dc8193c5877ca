"""
Aggregate statistics and productivity insights over a task collection.

All windows are rolling and anchored on the ``now`` passed in by the caller:
"this week" is ``[now - 7 days, now]`` and "this month" is
``[now - 30 days, now]``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..models import Priority, Task
from .dates import (
    ONE_DAY,
    ONE_WEEK,
    WEEKDAY_NAMES,
    days_until,
    in_window,
    is_overdue,
    is_today,
    is_urgent,
    weekday_index,
)

ONE_MONTH = timedelta(days=30)
ONE_HOUR = timedelta(hours=1)


# PUBLIC_INTERFACE
class CompletionTrend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    overdue: int
    urgent: int
    due_today: int
    completion_rate: float
    priority_breakdown: Dict[str, int]
    average_completion_hours: float


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ProductivityInsights:
    created_this_week: int
    created_this_month: int
    completed_this_week: int
    completed_this_month: int
    weekly_completion_rate: float
    average_tasks_per_day: float
    average_completion_days: float
    most_productive_day: str
    completion_trend: CompletionTrend


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskInsight:
    task_id: str
    title: str
    completed: bool
    priority: Priority
    is_overdue: bool
    is_urgent: bool
    has_deadline: bool
    deadline: Optional[datetime]
    days_until_deadline: Optional[int]
    created_days_ago: int
    completion_time_hours: Optional[int]


def _rate(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _is_open_overdue(task: Task, now: datetime) -> bool:
    return not task.completed and task.deadline is not None and is_overdue(task.deadline, now)


# PUBLIC_INTERFACE
def completion_rate(tasks: Sequence[Task]) -> float:
    """Percentage of completed tasks; 0.0 for an empty collection."""
    return _rate(sum(1 for t in tasks if t.completed), len(tasks))


# PUBLIC_INTERFACE
def compute_statistics(tasks: Sequence[Task], now: datetime) -> TaskStatistics:
    """
    Counts, completion rate and priority breakdown for ``tasks``.

    overdue uses the same rule as the deadline grouping (incomplete, deadline
    strictly before ``now``). due_today counts incomplete tasks due on the
    calendar day of ``now``, overdue or not. An empty collection yields zeros
    throughout.
    """
    completed = sum(1 for t in tasks if t.completed)
    breakdown = {p.value: 0 for p in Priority}
    for t in tasks:
        breakdown[t.priority.value] += 1

    return TaskStatistics(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        overdue=sum(1 for t in tasks if _is_open_overdue(t, now)),
        urgent=sum(
            1 for t in tasks
            if not t.completed and t.deadline is not None and is_urgent(t.deadline, now)
        ),
        due_today=sum(
            1 for t in tasks
            if not t.completed and t.deadline is not None and is_today(t.deadline, now)
        ),
        completion_rate=_rate(completed, len(tasks)),
        priority_breakdown=breakdown,
        average_completion_hours=_average_completion_hours(tasks),
    )


def _completions(tasks: Sequence[Task]) -> List[datetime]:
    return [t.completed_at for t in tasks if t.completed and t.completed_at is not None]


def _most_productive_day(completions: Sequence[datetime], now: datetime) -> str:
    counts = [0] * 7
    for stamp in completions:
        counts[weekday_index(stamp, now)] += 1
    # max() returns the first maximal index, i.e. the lowest weekday on ties;
    # with no completions every day ties at zero and Sunday wins
    best = max(range(7), key=lambda i: counts[i])
    return WEEKDAY_NAMES[best]


def _trend(previous: int, current: int) -> CompletionTrend:
    if current > previous:
        return CompletionTrend.IMPROVING
    if current < previous:
        return CompletionTrend.DECLINING
    return CompletionTrend.STABLE


def _completion_span(task: Task) -> timedelta:
    # completed_at is trusted when present; updated_at stands in for older records
    return (task.completed_at or task.updated_at) - task.created_at


def _average_span(tasks: Sequence[Task], unit: timedelta) -> float:
    spans = [_completion_span(t) / unit for t in tasks if t.completed]
    if not spans:
        return 0.0
    return round(sum(spans) / len(spans), 2)


def _average_completion_days(tasks: Sequence[Task]) -> float:
    return _average_span(tasks, ONE_DAY)


def _average_completion_hours(tasks: Sequence[Task]) -> float:
    return _average_span(tasks, ONE_HOUR)


# PUBLIC_INTERFACE
def productivity_insights(tasks: Sequence[Task], now: datetime) -> ProductivityInsights:
    """
    Rolling-window productivity figures.

    - weekly_completion_rate: completed_this_week / created_this_week * 100 (0 when nothing was created)
    - average_tasks_per_day: created_this_week / 7
    - most_productive_day: weekday (Sunday..Saturday) with most completions this week,
      lowest weekday on ties (Sunday when nothing was completed)
    - completion_trend: completions in [now-14d, now-7d) versus [now-7d, now]
    """
    week_start = now - ONE_WEEK
    month_start = now - ONE_MONTH
    previous_start = now - 2 * ONE_WEEK

    completions = _completions(tasks)
    this_week = [c for c in completions if in_window(c, week_start, now)]
    previous_week = [c for c in completions if in_window(c, previous_start, week_start, inclusive_end=False)]
    created_this_week = sum(1 for t in tasks if in_window(t.created_at, week_start, now))

    return ProductivityInsights(
        created_this_week=created_this_week,
        created_this_month=sum(1 for t in tasks if in_window(t.created_at, month_start, now)),
        completed_this_week=len(this_week),
        completed_this_month=sum(1 for c in completions if in_window(c, month_start, now)),
        weekly_completion_rate=_rate(len(this_week), created_this_week),
        average_tasks_per_day=created_this_week / 7,
        average_completion_days=_average_completion_days(tasks),
        most_productive_day=_most_productive_day(this_week, now),
        completion_trend=_trend(len(previous_week), len(this_week)),
    )


# PUBLIC_INTERFACE
def task_insight(task: Task, now: datetime) -> TaskInsight:
    """
    Deadline and age figures for a single task. completion_time_hours is the
    whole number of hours from creation to completion, None while pending.
    """
    deadline = task.deadline
    return TaskInsight(
        task_id=task.id,
        title=task.title,
        completed=task.completed,
        priority=task.priority,
        is_overdue=deadline is not None and is_overdue(deadline, now),
        is_urgent=deadline is not None and is_urgent(deadline, now),
        has_deadline=deadline is not None,
        deadline=deadline,
        days_until_deadline=days_until(deadline, now) if deadline is not None else None,
        created_days_ago=int((now - task.created_at) // ONE_DAY),
        completion_time_hours=(
            round((task.completed_at - task.created_at) / ONE_HOUR)
            if task.completed and task.completed_at is not None
            else None
        ),
    )
