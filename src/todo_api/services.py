"""
Service layer: ownership checks and orchestration around the repository and
the query engine.

Every method takes the caller's ``owner_id`` explicitly; a list or task that
belongs to someone else is reported as not found.
"""
from __future__ import annotations

import logging
from dataclasses import fields
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from . import engine
from .engine.dates import ONE_WEEK, URGENT_WINDOW, utc_now
from .exceptions import InvalidQueryError, ListNotFoundError, TaskNotFoundError
from .models import Priority, SortField, SortOrder, Task, TaskList
from .repositories import Clock, Repository, TaskScope
from .schemas import ListCreate, ListUpdate, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

GROUPINGS = ("deadline", "status", "priority", "completion")


def _as_groups(groups) -> Dict[str, List[Task]]:
    return {f.name: getattr(groups, f.name) for f in fields(groups)}


class _Base:
    def __init__(self, repository: Repository, clock: Clock = utc_now) -> None:
        self._repo = repository
        self._clock = clock

    def _require_list(self, owner_id: str, list_id: str) -> TaskList:
        found = self._repo.get_list(owner_id, list_id)
        if found is None:
            logger.debug("List %s not found for owner %s", list_id, owner_id)
            raise ListNotFoundError(list_id)
        return found

    def _require_task(self, owner_id: str, task_id: str) -> Task:
        found = self._repo.get_task(owner_id, task_id)
        if found is None:
            logger.debug("Task %s not found for owner %s", task_id, owner_id)
            raise TaskNotFoundError(task_id)
        return found

    def _scoped_tasks(self, owner_id: str, list_id: Optional[str] = None) -> List[Task]:
        if list_id is not None:
            self._require_list(owner_id, list_id)
        return self._repo.list_tasks(TaskScope(owner_id=owner_id, list_id=list_id))


# PUBLIC_INTERFACE
class ListService(_Base):
    """CRUD for lists plus per-list statistics."""

    def create(self, owner_id: str, data: ListCreate) -> TaskList:
        return self._repo.create_list(owner_id, data)

    def get(self, owner_id: str, list_id: str) -> Tuple[TaskList, int]:
        """Return the list and its task count."""
        found = self._require_list(owner_id, list_id)
        return found, self._repo.count_tasks(TaskScope(owner_id, list_id))

    def list_all(self, owner_id: str) -> List[Tuple[TaskList, int]]:
        return [
            (li, self._repo.count_tasks(TaskScope(owner_id, li.id)))
            for li in self._repo.list_lists(owner_id)
        ]

    def get_with_tasks(self, owner_id: str, list_id: str) -> Tuple[TaskList, List[Task]]:
        found = self._require_list(owner_id, list_id)
        return found, self._repo.list_tasks(TaskScope(owner_id, list_id))

    def update(self, owner_id: str, list_id: str, data: ListUpdate) -> TaskList:
        updated = self._repo.update_list(owner_id, list_id, data)
        if updated is None:
            raise ListNotFoundError(list_id)
        return updated

    def delete(self, owner_id: str, list_id: str) -> None:
        if not self._repo.delete_list(owner_id, list_id):
            raise ListNotFoundError(list_id)

    def statistics(self, owner_id: str, list_id: str) -> Tuple[TaskList, engine.TaskStatistics]:
        found, tasks = self.get_with_tasks(owner_id, list_id)
        return found, engine.compute_statistics(tasks, self._clock())


# PUBLIC_INTERFACE
class TaskService(_Base):
    """CRUD for tasks, completion and deadline changes, and per-task insight."""

    def create(self, owner_id: str, list_id: str, data: TaskCreate) -> Task:
        created = self._repo.create_task(owner_id, list_id, data)
        if created is None:
            logger.debug("List %s not found for owner %s", list_id, owner_id)
            raise ListNotFoundError(list_id)
        return created

    def get(self, owner_id: str, task_id: str) -> Task:
        return self._require_task(owner_id, task_id)

    def update(self, owner_id: str, task_id: str, data: TaskUpdate) -> Task:
        updated = self._repo.update_task(owner_id, task_id, data)
        if updated is None:
            raise TaskNotFoundError(task_id)
        return updated

    def set_completion(self, owner_id: str, task_id: str, completed: bool) -> Task:
        updated = self._repo.set_completion(owner_id, task_id, completed)
        if updated is None:
            raise TaskNotFoundError(task_id)
        return updated

    def set_deadline(self, owner_id: str, task_id: str, deadline: datetime) -> Task:
        updated = self._repo.set_deadline(owner_id, task_id, deadline)
        if updated is None:
            raise TaskNotFoundError(task_id)
        return updated

    def delete(self, owner_id: str, task_id: str) -> None:
        if not self._repo.delete_task(owner_id, task_id):
            raise TaskNotFoundError(task_id)

    def insight(self, owner_id: str, task_id: str) -> engine.TaskInsight:
        return engine.task_insight(self._require_task(owner_id, task_id), self._clock())


# PUBLIC_INTERFACE
class QueryService(_Base):
    """
    Read-side operations: each loads the owner's (optionally one list's)
    tasks once and hands them to the engine.
    """

    def find(self, owner_id: str, query: engine.TaskQuery, list_id: Optional[str] = None) -> engine.Page[Task]:
        return engine.run_query(self._scoped_tasks(owner_id, list_id), query)

    def search(self, owner_id: str, term: str, list_id: Optional[str] = None) -> List[Task]:
        return engine.search_tasks(self._scoped_tasks(owner_id, list_id), term)

    def overdue(self, owner_id: str, list_id: Optional[str] = None) -> List[Task]:
        return engine.group_by_deadline(self._scoped_tasks(owner_id, list_id), self._clock()).overdue

    def urgent(self, owner_id: str, list_id: Optional[str] = None) -> List[Task]:
        """Incomplete tasks due within the next 24 hours, soonest first."""
        now = self._clock()
        query = engine.TaskQuery(completed=False, due_after=now, due_before=now + URGENT_WINDOW)
        matched = engine.filter_tasks(self._scoped_tasks(owner_id, list_id), query)
        return engine.sort_tasks(matched, SortField.DEADLINE, SortOrder.ASC)

    def due_this_week(self, owner_id: str, list_id: Optional[str] = None) -> List[Task]:
        """Incomplete tasks due within the next 7 days, soonest first."""
        now = self._clock()
        query = engine.TaskQuery(completed=False, due_after=now, due_before=now + ONE_WEEK)
        matched = engine.filter_tasks(self._scoped_tasks(owner_id, list_id), query)
        return engine.sort_tasks(matched, SortField.DEADLINE, SortOrder.ASC)

    def by_priority(self, owner_id: str, priority: Priority, list_id: Optional[str] = None) -> List[Task]:
        """Incomplete tasks of one priority, newest first."""
        query = engine.TaskQuery(priority=priority, completed=False)
        matched = engine.filter_tasks(self._scoped_tasks(owner_id, list_id), query)
        return engine.sort_tasks(matched, SortField.CREATED_AT, SortOrder.DESC)

    def completed_between(
        self, owner_id: str, start: datetime, end: datetime, list_id: Optional[str] = None
    ) -> List[Task]:
        """Tasks completed within ``[start, end]``, most recently updated first."""
        matched = engine.completed_between(self._scoped_tasks(owner_id, list_id), start, end)
        return engine.sort_tasks(matched, SortField.UPDATED_AT, SortOrder.DESC)

    def statistics(self, owner_id: str, list_id: Optional[str] = None) -> engine.TaskStatistics:
        return engine.compute_statistics(self._scoped_tasks(owner_id, list_id), self._clock())

    def grouped(self, owner_id: str, by: str = "deadline", list_id: Optional[str] = None) -> Dict[str, List[Task]]:
        """Group tasks by one of GROUPINGS; an unknown grouping is an InvalidQueryError."""
        if by not in GROUPINGS:
            raise InvalidQueryError(
                f"by must be one of: {', '.join(GROUPINGS)}",
                [{"field": "by", "message": "unsupported grouping", "value": by}],
            )
        tasks = self._scoped_tasks(owner_id, list_id)
        now = self._clock()
        if by == "deadline":
            return _as_groups(engine.group_by_deadline(tasks, now))
        if by == "status":
            return _as_groups(engine.group_by_status(tasks, now))
        if by == "priority":
            return engine.group_by_priority(tasks)
        return engine.group_by_completion(tasks)

    def productivity(self, owner_id: str, list_id: Optional[str] = None) -> engine.ProductivityInsights:
        return engine.productivity_insights(self._scoped_tasks(owner_id, list_id), self._clock())
