from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..auth import get_owner_id
from ..deps import get_query_service
from ..exceptions import InvalidQueryError
from ..models import Priority
from ..schemas import (
    PaginationEnvelope,
    ProductivityOut,
    StatisticsOut,
    TaskOut,
    build_completed_window,
    build_task_query,
)
from ..services import GROUPINGS, QueryService
from ..utils import pagination_envelope, tasks_out

# Static paths live here and this router is mounted ahead of the /{task_id} routes.
router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["queries"],
)

_BAD_QUERY = {400: {"description": "Invalid query parameters"}}


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=PaginationEnvelope,
    summary="Query Tasks",
    description=(
        "Filter, sort and paginate the caller's tasks.\n\n"
        "Query parameters:\n"
        "- completed: filter by completion status\n"
        "- priority: low, medium, high or urgent\n"
        "- due_before / due_after: inclusive deadline bounds (ISO8601)\n"
        "- q: case-insensitive search over title/description\n"
        "- sort_by: created_at, updated_at, deadline, priority or title\n"
        "- order: asc or desc\n"
        "- page (>=1), limit (1..100)\n\n"
        "Tasks without a deadline sort last in either direction."
    ),
    responses={200: {"description": "Page of tasks"}, **_BAD_QUERY},
)
def query_tasks(
    completed: Optional[str] = Query(None, description="Filter by completion status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    due_before: Optional[str] = Query(None, description="Deadline on or before"),
    due_after: Optional[str] = Query(None, description="Deadline on or after"),
    q: Optional[str] = Query(None, description="Search text for title/description"),
    sort_by: Optional[str] = Query(None, description="Sort field"),
    order: Optional[str] = Query(None, description="Sort direction: 'asc' or 'desc'"),
    page: Optional[str] = Query(None, description="Page number, 1-based"),
    limit: Optional[str] = Query(None, description="Page size"),
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> PaginationEnvelope:
    query = build_task_query(
        {
            "completed": completed,
            "priority": priority,
            "due_before": due_before,
            "due_after": due_after,
            "q": q,
            "sort_by": sort_by,
            "order": order,
            "page": page,
            "limit": limit,
        }
    )
    return PaginationEnvelope(**pagination_envelope(service.find(owner_id, query, list_id)))


# PUBLIC_INTERFACE
@router.get(
    "/search",
    response_model=List[TaskOut],
    summary="Search Tasks",
    description="Case-insensitive substring search over title and description.",
    responses=_BAD_QUERY,
)
def search_tasks(
    q: Optional[str] = Query(None, description="Search text"),
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    if q is None or not q.strip():
        raise InvalidQueryError(
            "Search term is required",
            [{"field": "q", "message": "must not be blank", "value": q}],
        )
    return tasks_out(service.search(owner_id, q.strip(), list_id))


# PUBLIC_INTERFACE
@router.get("/overdue", response_model=List[TaskOut], summary="Overdue Tasks")
def overdue_tasks(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    """Incomplete tasks whose deadline has passed."""
    return tasks_out(service.overdue(owner_id, list_id))


# PUBLIC_INTERFACE
@router.get("/urgent", response_model=List[TaskOut], summary="Urgent Tasks")
def urgent_tasks(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    """Incomplete tasks due within the next 24 hours, soonest first."""
    return tasks_out(service.urgent(owner_id, list_id))


# PUBLIC_INTERFACE
@router.get("/due-this-week", response_model=List[TaskOut], summary="Tasks Due This Week")
def due_this_week(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    return tasks_out(service.due_this_week(owner_id, list_id))


# PUBLIC_INTERFACE
@router.get("/high-priority", response_model=List[TaskOut], summary="High Priority Tasks")
def high_priority(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    return tasks_out(service.by_priority(owner_id, Priority.HIGH, list_id))


# PUBLIC_INTERFACE
@router.get(
    "/completed",
    response_model=List[TaskOut],
    summary="Completed In Range",
    description="Tasks completed between start and end (inclusive), most recently updated first.",
    responses=_BAD_QUERY,
)
def completed_in_range(
    start: Optional[str] = Query(None, description="Window start (ISO8601)"),
    end: Optional[str] = Query(None, description="Window end (ISO8601)"),
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> List[TaskOut]:
    window_start, window_end = build_completed_window({"start": start, "end": end})
    return tasks_out(service.completed_between(owner_id, window_start, window_end, list_id))


# PUBLIC_INTERFACE
@router.get("/statistics", response_model=StatisticsOut, summary="Task Statistics")
def statistics(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> StatisticsOut:
    stats = service.statistics(owner_id, list_id)
    return StatisticsOut.model_validate({**asdict(stats), "list_id": list_id})


# PUBLIC_INTERFACE
@router.get(
    "/grouped",
    response_model=Dict[str, List[TaskOut]],
    summary="Grouped Tasks",
    description=f"Group tasks by one of: {', '.join(GROUPINGS)}.",
    responses=_BAD_QUERY,
)
def grouped(
    by: str = Query("deadline", description="Grouping to apply"),
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> Dict[str, List[TaskOut]]:
    groups = service.grouped(owner_id, by.strip().lower(), list_id)
    return {name: tasks_out(items) for name, items in groups.items()}


# PUBLIC_INTERFACE
@router.get("/insights/productivity", response_model=ProductivityOut, summary="Productivity Insights")
def productivity(
    list_id: Optional[str] = Query(None, description="Restrict to one list"),
    owner_id: str = Depends(get_owner_id),
    service: QueryService = Depends(get_query_service),
) -> ProductivityOut:
    return ProductivityOut.model_validate(asdict(service.productivity(owner_id, list_id)))
