"""
Task query and analytics engine.

Pure functions over in-memory task collections: filter -> sort -> paginate
for queries, filter -> bucket/aggregate for analytics. Nothing here performs
I/O or keeps state between calls.
"""
from .analytics import (
    CompletionTrend,
    ProductivityInsights,
    TaskInsight,
    TaskStatistics,
    completion_rate,
    compute_statistics,
    productivity_insights,
    task_insight,
)
from .filters import completed_between, filter_tasks, search_tasks
from .grouping import (
    DeadlineGroups,
    StatusGroups,
    group_by_completion,
    group_by_deadline,
    group_by_priority,
    group_by_status,
)
from .pagination import Page, paginate
from .query import MAX_LIMIT, TaskQuery, run_query
from .sorting import sort_tasks

__all__ = [
    "CompletionTrend",
    "DeadlineGroups",
    "MAX_LIMIT",
    "Page",
    "ProductivityInsights",
    "StatusGroups",
    "TaskInsight",
    "TaskQuery",
    "TaskStatistics",
    "completed_between",
    "completion_rate",
    "compute_statistics",
    "filter_tasks",
    "group_by_completion",
    "group_by_deadline",
    "group_by_priority",
    "group_by_status",
    "paginate",
    "productivity_insights",
    "run_query",
    "search_tasks",
    "sort_tasks",
    "task_insight",
]
