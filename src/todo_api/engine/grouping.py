from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List

from ..models import Priority, Task
from .dates import is_overdue, is_this_week, is_today, is_tomorrow, is_urgent


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class DeadlineGroups:
    """Incomplete tasks bucketed by how close their deadline is."""

    overdue: List[Task] = field(default_factory=list)
    today: List[Task] = field(default_factory=list)
    tomorrow: List[Task] = field(default_factory=list)
    this_week: List[Task] = field(default_factory=list)
    later: List[Task] = field(default_factory=list)
    no_deadline: List[Task] = field(default_factory=list)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class StatusGroups:
    completed: List[Task] = field(default_factory=list)
    pending: List[Task] = field(default_factory=list)
    overdue: List[Task] = field(default_factory=list)
    urgent: List[Task] = field(default_factory=list)


def _deadline_bucket(task: Task, now: datetime) -> str:
    deadline = task.deadline
    if deadline is None:
        return "no_deadline"
    if is_overdue(deadline, now):
        return "overdue"
    if is_today(deadline, now):
        return "today"
    if is_tomorrow(deadline, now):
        return "tomorrow"
    if is_this_week(deadline, now):
        return "this_week"
    return "later"


# PUBLIC_INTERFACE
def group_by_deadline(tasks: Iterable[Task], now: datetime) -> DeadlineGroups:
    """
    Partition incomplete tasks into exactly one deadline bucket each.

    Buckets are tested in order overdue, today, tomorrow, this_week, later, so
    a task due earlier today is overdue rather than today. Completed tasks are
    left out entirely.
    """
    groups = DeadlineGroups()
    for task in tasks:
        if task.completed:
            continue
        getattr(groups, _deadline_bucket(task, now)).append(task)
    return groups


# PUBLIC_INTERFACE
def group_by_completion(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    groups: Dict[str, List[Task]] = {"completed": [], "pending": []}
    for task in tasks:
        groups["completed" if task.completed else "pending"].append(task)
    return groups


# PUBLIC_INTERFACE
def group_by_priority(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    """Partition every task (completed included) by its priority, highest first."""
    groups: Dict[str, List[Task]] = {
        p.value: [] for p in sorted(Priority, key=lambda p: p.rank, reverse=True)
    }
    for task in tasks:
        groups[task.priority.value].append(task)
    return groups


# PUBLIC_INTERFACE
def group_by_status(tasks: Iterable[Task], now: datetime) -> StatusGroups:
    """
    completed / pending / overdue / urgent view of a collection.

    pending and overdue are disjoint; urgent (due within 24 hours) overlaps
    pending.
    """
    groups = StatusGroups()
    for task in tasks:
        if task.completed:
            groups.completed.append(task)
            continue
        if task.deadline is not None and is_overdue(task.deadline, now):
            groups.overdue.append(task)
            continue
        groups.pending.append(task)
        if task.deadline is not None and is_urgent(task.deadline, now):
            groups.urgent.append(task)
    return groups
