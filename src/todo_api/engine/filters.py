from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List

from ..models import Task
from .dates import in_window

if TYPE_CHECKING:
    from .query import TaskQuery


def _matches_search(task: Task, needle: str) -> bool:
    if needle in task.title.casefold():
        return True
    return bool(task.description) and needle in task.description.casefold()  # type: ignore[union-attr]


# PUBLIC_INTERFACE
def filter_tasks(tasks: Iterable[Task], query: TaskQuery) -> List[Task]:
    """
    Apply every criterion present on ``query`` conjunctively.

    - completed / priority: exact match
    - due_before / due_after: inclusive bounds; tasks without a deadline never match
    - search: case-insensitive substring over title and description

    Input order is preserved and the input is never mutated.
    """
    items: List[Task] = list(tasks)

    if query.completed is not None:
        items = [t for t in items if t.completed == query.completed]

    if query.priority is not None:
        items = [t for t in items if t.priority == query.priority]

    if query.due_before is not None:
        items = [t for t in items if t.deadline is not None and t.deadline <= query.due_before]

    if query.due_after is not None:
        items = [t for t in items if t.deadline is not None and t.deadline >= query.due_after]

    if query.search:
        needle = query.search.casefold()
        items = [t for t in items if _matches_search(t, needle)]

    return items


# PUBLIC_INTERFACE
def search_tasks(tasks: Iterable[Task], term: str) -> List[Task]:
    """Tasks whose title or description contains ``term`` (case-insensitive)."""
    needle = term.strip().casefold()
    if not needle:
        return list(tasks)
    return [t for t in tasks if _matches_search(t, needle)]


# PUBLIC_INTERFACE
def completed_between(tasks: Iterable[Task], start: datetime, end: datetime) -> List[Task]:
    """Completed tasks whose completion timestamp lies in ``[start, end]``."""
    return [t for t in tasks if t.completed and in_window(t.completed_at, start, end)]
