from __future__ import annotations

from fastapi import Depends, Request

from .repositories import Repository
from .services import ListService, QueryService, TaskService


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """Return the repository instance owned by the running application."""
    return request.app.state.repository


def get_list_service(request: Request, repo: Repository = Depends(get_repository)) -> ListService:
    return ListService(repo, clock=request.app.state.clock)


def get_task_service(request: Request, repo: Repository = Depends(get_repository)) -> TaskService:
    return TaskService(repo, clock=request.app.state.clock)


def get_query_service(request: Request, repo: Repository = Depends(get_repository)) -> QueryService:
    return QueryService(repo, clock=request.app.state.clock)
