from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from threading import RLock
from typing import Callable, Dict, List, Optional

from .engine.dates import utc_now
from .models import Task, TaskList
from .schemas import ListCreate, ListUpdate, TaskCreate, TaskUpdate
from .settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class TaskScope:
    """
    Coarse filter for reading tasks: always one owner, optionally one list.
    Everything finer (filters, sorting, paging) happens in the engine.
    """
    owner_id: str
    list_id: Optional[str] = None


def new_id() -> str:
    return str(uuid.uuid4())


def apply_list_update(current: TaskList, data: ListUpdate, now: datetime) -> TaskList:
    """Return ``current`` with the fields explicitly present on ``data`` applied."""
    changes: Dict[str, object] = {"updated_at": now}
    if data.name is not None:
        changes["name"] = data.name
    if "description" in data.model_fields_set:
        changes["description"] = data.description
    return current.evolve(**changes)


def apply_task_update(current: Task, data: TaskUpdate, now: datetime) -> Task:
    """Return ``current`` with the fields explicitly present on ``data`` applied."""
    changes: Dict[str, object] = {"updated_at": now}
    if data.title is not None:
        changes["title"] = data.title
    if "description" in data.model_fields_set:
        changes["description"] = data.description
    if "deadline" in data.model_fields_set:
        # Respect explicit nulling of deadline
        changes["deadline"] = data.deadline
    if data.priority is not None:
        changes["priority"] = data.priority
    return current.evolve(**changes)


def apply_completion(current: Task, completed: bool, now: datetime) -> Task:
    return current.evolve(completed=completed, completed_at=now if completed else None, updated_at=now)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract storage contract for lists and tasks.

    Every operation is scoped by ``owner_id``; records belonging to another
    owner behave as if they did not exist. Implementations must serialize
    concurrent writes.
    """

    @abstractmethod
    def create_list(self, owner_id: str, data: ListCreate) -> TaskList:
        """Create and return a new list."""

    @abstractmethod
    def get_list(self, owner_id: str, list_id: str) -> Optional[TaskList]:
        """Return a list by id, or None if not found."""

    @abstractmethod
    def list_lists(self, owner_id: str) -> List[TaskList]:
        """Return all lists of an owner, oldest first."""

    @abstractmethod
    def update_list(self, owner_id: str, list_id: str, data: ListUpdate) -> Optional[TaskList]:
        """Update provided fields of a list. Return the updated list or None if not found."""

    @abstractmethod
    def delete_list(self, owner_id: str, list_id: str) -> bool:
        """Delete a list and all of its tasks. Return True if deleted, False if not found."""

    @abstractmethod
    def create_task(self, owner_id: str, list_id: str, data: TaskCreate) -> Optional[Task]:
        """
        Create and return a new, incomplete task in ``list_id``. Returns None when
        the list does not exist for ``owner_id``; the check and the insert are one
        atomic write.
        """

    @abstractmethod
    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def update_task(self, owner_id: str, task_id: str, data: TaskUpdate) -> Optional[Task]:
        """Update provided fields of a task. Return the updated task or None if not found."""

    @abstractmethod
    def set_completion(self, owner_id: str, task_id: str, completed: bool) -> Optional[Task]:
        """Set the completion flag; completed_at follows it. None if not found."""

    @abstractmethod
    def set_deadline(self, owner_id: str, task_id: str, deadline: Optional[datetime]) -> Optional[Task]:
        """Replace the deadline. None if not found."""

    @abstractmethod
    def delete_task(self, owner_id: str, task_id: str) -> bool:
        """Delete a task. Return True if deleted, False if not found."""

    @abstractmethod
    def list_tasks(self, scope: TaskScope) -> List[Task]:
        """
        Return every task in ``scope``, newest first (creation order breaks ties).
        This is the only read the query engine needs.
        """

    def count_tasks(self, scope: TaskScope) -> int:
        return len(self.list_tasks(scope))


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.

    One re-entrant lock guards both maps, so every read sees a consistent
    snapshot and writes never interleave. Stored records are frozen
    dataclasses and can be handed out without copying.
    """

    def __init__(self, clock: Clock = utc_now, id_factory: Callable[[], str] = new_id) -> None:
        self._lock = RLock()
        self._lists: Dict[str, TaskList] = {}
        self._tasks: Dict[str, Task] = {}
        self._clock = clock
        self._id_factory = id_factory

    def _now(self) -> datetime:
        return self._clock()

    # ---- lists ----

    def create_list(self, owner_id: str, data: ListCreate) -> TaskList:
        now = self._now()
        entity = TaskList(
            id=self._id_factory(),
            owner_id=owner_id,
            name=data.name,
            description=data.description,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._lists[entity.id] = entity
        logger.debug("Created list id=%s owner=%s", entity.id, owner_id)
        return entity

    def get_list(self, owner_id: str, list_id: str) -> Optional[TaskList]:
        with self._lock:
            item = self._lists.get(list_id)
            return item if item is not None and item.owner_id == owner_id else None

    def list_lists(self, owner_id: str) -> List[TaskList]:
        with self._lock:
            items = [li for li in self._lists.values() if li.owner_id == owner_id]
        return sorted(items, key=lambda li: li.created_at)

    def update_list(self, owner_id: str, list_id: str, data: ListUpdate) -> Optional[TaskList]:
        with self._lock:
            existing = self.get_list(owner_id, list_id)
            if existing is None:
                return None
            updated = apply_list_update(existing, data, self._now())
            self._lists[list_id] = updated
            return updated

    def delete_list(self, owner_id: str, list_id: str) -> bool:
        with self._lock:
            if self.get_list(owner_id, list_id) is None:
                return False
            del self._lists[list_id]
            doomed = [t.id for t in self._tasks.values() if t.list_id == list_id]
            for task_id in doomed:
                del self._tasks[task_id]
        logger.debug("Deleted list id=%s with %d task(s)", list_id, len(doomed))
        return True

    # ---- tasks ----

    def create_task(self, owner_id: str, list_id: str, data: TaskCreate) -> Optional[Task]:
        now = self._now()
        entity = Task(
            id=self._id_factory(),
            list_id=list_id,
            owner_id=owner_id,
            title=data.title,
            description=data.description,
            deadline=data.deadline,
            priority=data.priority,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            if self.get_list(owner_id, list_id) is None:
                return None
            self._tasks[entity.id] = entity
        logger.debug("Created task id=%s list=%s owner=%s", entity.id, list_id, owner_id)
        return entity

    def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        with self._lock:
            item = self._tasks.get(task_id)
            return item if item is not None and item.owner_id == owner_id else None

    def _replace_task(self, owner_id: str, task_id: str, change: Callable[[Task, datetime], Task]) -> Optional[Task]:
        with self._lock:
            existing = self.get_task(owner_id, task_id)
            if existing is None:
                return None
            updated = change(existing, self._now())
            self._tasks[task_id] = updated
            return updated

    def update_task(self, owner_id: str, task_id: str, data: TaskUpdate) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: apply_task_update(t, data, now))

    def set_completion(self, owner_id: str, task_id: str, completed: bool) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: apply_completion(t, completed, now))

    def set_deadline(self, owner_id: str, task_id: str, deadline: Optional[datetime]) -> Optional[Task]:
        return self._replace_task(owner_id, task_id, lambda t, now: t.evolve(deadline=deadline, updated_at=now))

    def delete_task(self, owner_id: str, task_id: str) -> bool:
        with self._lock:
            if self.get_task(owner_id, task_id) is None:
                return False
            del self._tasks[task_id]
            return True

    def list_tasks(self, scope: TaskScope) -> List[Task]:
        with self._lock:
            items = [
                t for t in self._tasks.values()
                if t.owner_id == scope.owner_id and (scope.list_id is None or t.list_id == scope.list_id)
            ]
        return sorted(items, key=lambda t: t.created_at, reverse=True)


# PUBLIC_INTERFACE
def create_repository(settings: Settings, clock: Clock = utc_now) -> Repository:
    """
    Build the repository selected by settings. Called once at startup; the
    instance is owned by the application, never shared through a global.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at settings.sqlite_db_path
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using sqlite repository at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path, clock=clock)
    logger.info("Using in-memory repository")
    return InMemoryRepository(clock=clock)
