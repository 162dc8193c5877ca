from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

from .engine import Page
from .models import Task, TaskList
from .schemas import ListOut, TaskOut


# PUBLIC_INTERFACE
def task_out(task: Task) -> TaskOut:
    return TaskOut.model_validate(task)


# PUBLIC_INTERFACE
def tasks_out(tasks: Iterable[Task]) -> List[TaskOut]:
    return [task_out(t) for t in tasks]


# PUBLIC_INTERFACE
def list_out(entity: TaskList, task_count: Optional[int] = None) -> ListOut:
    return ListOut(**asdict(entity), task_count=task_count)


# PUBLIC_INTERFACE
def pagination_envelope(page: Page[Task]) -> Dict[str, Any]:
    """
    Build the standard pagination envelope for task list endpoints.

    Args:
        page: Result of the query engine for the requested page.

    Returns:
        Dict with keys: items, total, page, limit, total_pages, has_next, has_prev.
    """
    return {
        "items": tasks_out(page.items),
        "total": int(page.total),
        "page": int(page.page),
        "limit": int(page.limit),
        "total_pages": int(page.total_pages),
        "has_next": page.has_next,
        "has_prev": page.has_prev,
    }
