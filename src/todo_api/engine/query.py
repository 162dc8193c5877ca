from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..models import Priority, SortField, SortOrder, Task
from .filters import filter_tasks
from .pagination import Page, paginate
from .sorting import sort_tasks

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskQuery:
    """
    Declarative task query: optional filters, a sort, and a page window.

    Values are assumed valid (see schemas.build_task_query for the boundary
    checks); omitted filters impose no constraint.
    """

    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None
    search: Optional[str] = None
    sort_by: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT


# PUBLIC_INTERFACE
def run_query(tasks: Iterable[Task], query: TaskQuery) -> Page[Task]:
    """Filter, then sort, then paginate ``tasks`` according to ``query``."""
    matched = filter_tasks(tasks, query)
    ordered = sort_tasks(matched, query.sort_by, query.order)
    return paginate(ordered, query.page, query.limit)
