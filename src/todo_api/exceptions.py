from __future__ import annotations

from typing import Any, Dict, List, Optional


# PUBLIC_INTERFACE
class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    Attributes:
        message: Human readable message.
        status_code: HTTP status code used by the API error handler.
        code: Stable machine readable error code.
    """

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_detail(self) -> Any:
        """Extra payload for the error response's 'detail' field."""
        return None


# PUBLIC_INTERFACE
class InvalidQueryError(AppError):
    """
    Raised at the request boundary when query parameters are malformed
    (limit/page out of range, unknown sort field, order or priority, bad dates).
    """

    status_code = 400
    code = "INVALID_QUERY"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.details = details or []

    def to_detail(self) -> Any:
        return self.details


# PUBLIC_INTERFACE
class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str, resource: Optional[str] = None, resource_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id

    def to_detail(self) -> Any:
        return {"resource": self.resource, "resource_id": self.resource_id}


class ListNotFoundError(NotFoundError):
    def __init__(self, list_id: str) -> None:
        super().__init__(f"List with ID '{list_id}' not found", "list", list_id)


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with ID '{task_id}' not found", "task", task_id)


# PUBLIC_INTERFACE
class StorageError(AppError):
    """Wraps failures raised by a persistence backend."""

    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(f"Storage error: {message}")
