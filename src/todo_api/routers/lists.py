from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, status

from ..auth import get_owner_id
from ..deps import get_list_service, get_task_service
from ..schemas import (
    ListCreate,
    ListOut,
    ListStatisticsOut,
    ListUpdate,
    ListWithTasksOut,
    TaskCreate,
    TaskOut,
)
from ..services import ListService, TaskService
from ..utils import list_out, task_out, tasks_out

router = APIRouter(
    prefix="/api/v1/lists",
    tags=["lists"],
)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=ListOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create List",
    description="Create a new list owned by the caller.",
    responses={201: {"description": "List created successfully"}, 422: {"description": "Validation error"}},
)
def create_list(
    payload: ListCreate,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> ListOut:
    return list_out(service.create(owner_id, payload), task_count=0)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[ListOut],
    summary="List Lists",
    description="All lists of the caller, oldest first, each with its task count.",
)
def list_lists(
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> List[ListOut]:
    return [list_out(li, task_count=count) for li, count in service.list_all(owner_id)]


# PUBLIC_INTERFACE
@router.get(
    "/{list_id}",
    response_model=ListOut,
    summary="Get List",
    responses={200: {"description": "List found"}, 404: {"description": "List not found"}},
)
def get_list(
    list_id: str,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> ListOut:
    found, count = service.get(owner_id, list_id)
    return list_out(found, task_count=count)


# PUBLIC_INTERFACE
@router.put(
    "/{list_id}",
    response_model=ListOut,
    summary="Update List",
    description="Update the provided fields of a list.",
    responses={200: {"description": "List updated"}, 404: {"description": "List not found"}},
)
def update_list(
    list_id: str,
    payload: ListUpdate,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> ListOut:
    return list_out(service.update(owner_id, list_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{list_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete List",
    description="Delete a list together with all of its tasks.",
    responses={204: {"description": "List deleted"}, 404: {"description": "List not found"}},
)
def delete_list(
    list_id: str,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> None:
    service.delete(owner_id, list_id)
    return None


# PUBLIC_INTERFACE
@router.get(
    "/{list_id}/tasks",
    response_model=ListWithTasksOut,
    summary="Get List With Tasks",
    responses={404: {"description": "List not found"}},
)
def get_list_with_tasks(
    list_id: str,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> ListWithTasksOut:
    found, tasks = service.get_with_tasks(owner_id, list_id)
    return ListWithTasksOut(
        **list_out(found, task_count=len(tasks)).model_dump(),
        tasks=tasks_out(tasks),
    )


# PUBLIC_INTERFACE
@router.post(
    "/{list_id}/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task in the given list.",
    responses={201: {"description": "Task created"}, 404: {"description": "List not found"}},
)
def create_task(
    list_id: str,
    payload: TaskCreate,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> TaskOut:
    return task_out(service.create(owner_id, list_id, payload))


# PUBLIC_INTERFACE
@router.get(
    "/{list_id}/statistics",
    response_model=ListStatisticsOut,
    summary="List Statistics",
    responses={404: {"description": "List not found"}},
)
def list_statistics(
    list_id: str,
    owner_id: str = Depends(get_owner_id),
    service: ListService = Depends(get_list_service),
) -> ListStatisticsOut:
    found, stats = service.statistics(owner_id, list_id)
    return ListStatisticsOut.model_validate(
        {**asdict(stats), "list_id": found.id, "list_name": found.name}
    )
