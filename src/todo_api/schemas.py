from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .engine import CompletionTrend, TaskQuery
from .engine.dates import as_utc
from .exceptions import InvalidQueryError
from .models import Priority, SortField, SortOrder

# Shared type for incoming timestamps which can be a date, datetime, or ISO8601 string
DateTimeInput = Union[date, datetime, str]

_M = TypeVar("_M", bound=BaseModel)


def _parse_datetime(value: Optional[DateTimeInput]) -> Optional[datetime]:
    """
    Normalize timestamp input into an aware UTC datetime.
    - Strings are parsed as ISO8601; a bare date becomes midnight.
    - A date (not datetime) becomes midnight.
    - Naive datetimes are taken to be UTC.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return as_utc(value)

    if isinstance(value, date):
        return as_utc(datetime(value.year, value.month, value.day))

    if isinstance(value, str):
        s = value.strip()
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
                return as_utc(datetime(d.year, d.month, d.day))
            except ValueError as e:
                raise ValueError(
                    "Invalid timestamp format. Use ISO8601 date or datetime string "
                    "(e.g., '2025-01-31' or '2025-01-31T13:45:00Z')."
                ) from e

    raise ValueError("Invalid type for timestamp; expected date, datetime, or ISO8601 string.")


def _strip_text(v: Optional[str], field: str, max_length: int, required: bool) -> Optional[str]:
    if v is None:
        if required:
            raise ValueError(f"{field} is required")
        return v
    s = v.strip()
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field} length must be between 1 and {max_length} characters")
    return s


# ---- lists ----

# PUBLIC_INTERFACE
class ListCreate(BaseModel):
    """Schema for creating a new list."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Groceries", "description": "Weekly shopping"}}
    )

    name: str = Field(..., description="Display name of the list", min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, description="Optional description", max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_text(v, "name", 100, required=True)  # type: ignore[return-value]


# PUBLIC_INTERFACE
class ListUpdate(BaseModel):
    """
    Schema for updating a list. Only provided fields are changed; at least one
    field must be present.
    """

    name: Optional[str] = Field(default=None, description="Display name of the list", min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, description="Optional description", max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return _strip_text(v, "name", 100, required=False)

    @model_validator(mode="after")
    def require_one_field(self) -> "ListUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


# PUBLIC_INTERFACE
class ListOut(BaseModel):
    """Schema returned by the API for a list."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier of the list")
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    task_count: Optional[int] = Field(default=None, description="Number of tasks in the list")


# ---- tasks ----

# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """Schema for creating a task inside a list."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "deadline": "2025-02-01T18:00:00Z",
                "priority": "high",
            }
        }
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description", max_length=1000)
    deadline: Optional[datetime] = Field(
        default=None,
        description="Deadline of the task. Accepts ISO8601 date or datetime; dates are set to 00:00 UTC",
    )
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_text(v, "title", 200, required=True)  # type: ignore[return-value]

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating a task. All fields are optional; only provided fields
    are updated. Sending "deadline": null clears the deadline.
    """

    title: Optional[str] = Field(default=None, description="Short title for the task", min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, description="Optional detailed description", max_length=1000)
    deadline: Optional[datetime] = Field(default=None, description="Deadline of the task")
    priority: Optional[Priority] = Field(default=None, description="Task priority")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _strip_text(v, "title", 200, required=False)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)

    @model_validator(mode="after")
    def require_one_field(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        return self


# PUBLIC_INTERFACE
class DeadlineUpdate(BaseModel):
    deadline: datetime = Field(..., description="New deadline (ISO8601)")

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v: DateTimeInput) -> Optional[datetime]:
        return _parse_datetime(v)


# PUBLIC_INTERFACE
class CompletionUpdate(BaseModel):
    completed: bool = Field(..., description="Whether the task is completed")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """Schema returned by the API for a task."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier of the task")
    list_id: str
    title: str
    description: Optional[str] = None
    completed: bool
    deadline: Optional[datetime] = None
    priority: Priority
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


# PUBLIC_INTERFACE
class ListWithTasksOut(ListOut):
    tasks: List[TaskOut] = Field(default_factory=list)


# PUBLIC_INTERFACE
class PaginationEnvelope(BaseModel):
    """Envelope for paginated task responses."""

    items: List[TaskOut] = Field(..., description="Tasks on this page")
    total: int = Field(..., description="Total number of tasks matching the query")
    page: int = Field(..., description="Page number (1-based)")
    limit: int = Field(..., description="Page size")
    total_pages: int = Field(..., description="Number of pages for this limit")
    has_next: bool
    has_prev: bool


# ---- analytics ----

# PUBLIC_INTERFACE
class StatisticsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    completed: int
    pending: int
    overdue: int
    urgent: int
    due_today: int
    completion_rate: float = Field(..., ge=0, le=100)
    priority_breakdown: Dict[str, int]
    average_completion_hours: float = Field(..., description="Mean hours from creation to completion")
    list_id: Optional[str] = None


# PUBLIC_INTERFACE
class ListStatisticsOut(StatisticsOut):
    list_name: str


# PUBLIC_INTERFACE
class ProductivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    created_this_week: int
    created_this_month: int
    completed_this_week: int
    completed_this_month: int
    weekly_completion_rate: float
    average_tasks_per_day: float
    average_completion_days: float
    most_productive_day: str = Field(..., description="Weekday with the most completions this week")
    completion_trend: CompletionTrend


# PUBLIC_INTERFACE
class TaskInsightOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_id: str
    title: str
    completed: bool
    priority: Priority
    is_overdue: bool
    is_urgent: bool
    has_deadline: bool
    deadline: Optional[datetime] = None
    days_until_deadline: Optional[int] = None
    created_days_ago: int
    completion_time_hours: Optional[int] = None


# ---- query boundary ----

class TaskQueryParams(BaseModel):
    """Raw query-string values, validated before they reach the engine."""

    model_config = ConfigDict(extra="ignore")

    completed: Optional[bool] = None
    priority: Optional[Priority] = None
    due_before: Optional[datetime] = None
    due_after: Optional[datetime] = None
    q: Optional[str] = None
    sort_by: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @field_validator("due_before", "due_after", mode="before")
    @classmethod
    def parse_bounds(cls, v: Optional[DateTimeInput]) -> Optional[datetime]:
        return _parse_datetime(v)


class CompletedWindowParams(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_bound(cls, v: DateTimeInput) -> Optional[datetime]:
        return _parse_datetime(v)

    @model_validator(mode="after")
    def ordered(self) -> "CompletedWindowParams":
        if self.start > self.end:
            raise ValueError("start must not be after end")
        return self


def _validate_params(model: Type[_M], raw: Mapping[str, Any], message: str) -> _M:
    data = {k: v for k, v in raw.items() if v is not None and v != ""}
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        details = [
            {
                "field": ".".join(str(p) for p in err["loc"]) or "query",
                "message": err["msg"],
                "value": err.get("input") if isinstance(err.get("input"), (str, int, float, bool)) else None,
            }
            for err in exc.errors()
        ]
        raise InvalidQueryError(message, details) from exc


# PUBLIC_INTERFACE
def build_task_query(raw: Mapping[str, Any]) -> TaskQuery:
    """
    Validate raw query parameters and build a TaskQuery.

    Empty values are treated as absent. Raises InvalidQueryError when limit is
    outside [1, 100], page < 1, sort_by/order/priority are not known values, or
    a date bound cannot be parsed.
    """
    params = _validate_params(TaskQueryParams, raw, "Invalid query parameters")
    return TaskQuery(
        completed=params.completed,
        priority=params.priority,
        due_before=params.due_before,
        due_after=params.due_after,
        search=params.q.strip() if params.q and params.q.strip() else None,
        sort_by=params.sort_by,
        order=params.order,
        page=params.page,
        limit=params.limit,
    )


# PUBLIC_INTERFACE
def build_completed_window(raw: Mapping[str, Any]) -> Tuple[datetime, datetime]:
    """Validate a start/end pair for completed-in-range queries."""
    params = _validate_params(CompletedWindowParams, raw, "Invalid date range")
    return params.start, params.end
