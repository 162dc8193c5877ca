from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Union

from ..exceptions import InvalidQueryError
from ..models import SortField, SortOrder, Task

SortKey = Callable[[Task], Any]

_SORT_KEYS: Dict[SortField, SortKey] = {
    SortField.CREATED_AT: lambda t: t.created_at,
    SortField.UPDATED_AT: lambda t: t.updated_at,
    SortField.DEADLINE: lambda t: t.deadline,
    SortField.PRIORITY: lambda t: t.priority.rank,
    SortField.TITLE: lambda t: t.title.casefold(),
}


def _coerce(sort_by: Union[SortField, str], order: Union[SortOrder, str]):
    try:
        field = SortField(sort_by)
    except ValueError:
        raise InvalidQueryError(
            f"sort_by must be one of: {', '.join(f.value for f in SortField)}",
            [{"field": "sort_by", "message": "unsupported sort field", "value": sort_by}],
        ) from None
    try:
        direction = SortOrder(order)
    except ValueError:
        raise InvalidQueryError(
            "order must be either 'asc' or 'desc'",
            [{"field": "order", "message": "unsupported sort order", "value": order}],
        ) from None
    return field, direction


# PUBLIC_INTERFACE
def sort_tasks(
    tasks: Iterable[Task],
    sort_by: Union[SortField, str] = SortField.CREATED_AT,
    order: Union[SortOrder, str] = SortOrder.DESC,
) -> List[Task]:
    """
    Return a new list ordered by ``sort_by`` in ``order``.

    The sort is stable in both directions: tasks with equal keys keep their
    input order. For ``deadline``, tasks without a deadline always come after
    the dated ones (asc and desc alike), in input order.
    """
    field, direction = _coerce(sort_by, order)
    key = _SORT_KEYS[field]
    reverse = direction is SortOrder.DESC
    items = list(tasks)

    if field is SortField.DEADLINE:
        dated = [t for t in items if t.deadline is not None]
        undated = [t for t in items if t.deadline is None]
        return sorted(dated, key=key, reverse=reverse) + undated

    # sorted() keeps equal elements in input order even with reverse=True
    return sorted(items, key=key, reverse=reverse)
