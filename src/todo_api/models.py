from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


# PUBLIC_INTERFACE
class Priority(str, Enum):
    """Task priority, totally ordered urgent > high > medium > low."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


# PUBLIC_INTERFACE
class SortField(str, Enum):
    """Fields a task collection can be ordered by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DEADLINE = "deadline"
    PRIORITY = "priority"
    TITLE = "title"


# PUBLIC_INTERFACE
class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Task:
    """
    Immutable snapshot of a task as seen by the query engine.

    Fields:
    - id: Unique identifier (uuid4 string)
    - list_id / owner_id: Opaque grouping keys; no referential checks happen here
    - title: Non-empty title (trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Completion flag
    - deadline: Optional deadline (aware UTC datetime)
    - priority: One of Priority
    - created_at / updated_at: Timestamps, updated_at >= created_at
    - completed_at: Set iff completed; trusted as given
    """

    id: str
    list_id: str
    owner_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    completed: bool = False
    deadline: Optional[datetime] = None
    priority: Priority = Priority.MEDIUM
    completed_at: Optional[datetime] = None

    def evolve(self, **changes) -> "Task":
        """Return a copy of this task with the given fields replaced."""
        return replace(self, **changes)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskList:
    """A named collection of tasks owned by a single user."""

    id: str
    owner_id: str
    name: str
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None

    def evolve(self, **changes) -> "TaskList":
        return replace(self, **changes)
