from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from ..auth import get_owner_id
from ..deps import get_task_service
from ..schemas import CompletionUpdate, DeadlineUpdate, TaskInsightOut, TaskOut, TaskUpdate
from ..services import TaskService
from ..utils import task_out

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

_NOT_FOUND = {404: {"description": "Task not found"}}


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={200: {"description": "Task found"}, **_NOT_FOUND},
)
def get_task(
    task_id: str,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_out(service.get(owner_id, task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Update the provided fields of a task. Fields left out of the body are unchanged; "
        "an explicit null deadline clears it."
    ),
    responses={200: {"description": "Task updated"}, **_NOT_FOUND},
)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_out(service.update(owner_id, task_id, payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/completion",
    response_model=TaskOut,
    summary="Set Task Completion",
    description="Mark a task completed or pending. completed_at is set on completion and cleared otherwise.",
    responses={200: {"description": "Task updated"}, **_NOT_FOUND},
)
def set_completion(
    task_id: str,
    payload: CompletionUpdate,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_out(service.set_completion(owner_id, task_id, payload.completed))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}/deadline",
    response_model=TaskOut,
    summary="Set Task Deadline",
    responses={200: {"description": "Task updated"}, **_NOT_FOUND},
)
def set_deadline(
    task_id: str,
    payload: DeadlineUpdate,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_out(service.set_deadline(owner_id, task_id, payload.deadline))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={204: {"description": "Task deleted"}, **_NOT_FOUND},
)
def delete_task(
    task_id: str,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> None:
    """
    Delete a task. Returns 204 on success, 404 if not found.
    """
    service.delete(owner_id, task_id)
    return None


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}/statistics",
    response_model=TaskInsightOut,
    summary="Task Insight",
    description="Overdue/urgent flags and day counts for one task.",
    responses=_NOT_FOUND,
)
def task_statistics(
    task_id: str,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskInsightOut:
    return TaskInsightOut.model_validate(asdict(service.insight(owner_id, task_id)))
