from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One slice of a sorted collection plus pagination metadata.

    - total: size of the collection before slicing
    - total_pages: ceil(total / limit), 0 for an empty collection
    """

    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


# PUBLIC_INTERFACE
def paginate(items: Sequence[T], page: int = 1, limit: int = 10) -> Page[T]:
    """Slice ``items`` to ``[(page-1)*limit, page*limit)``; out-of-range pages are empty."""
    total = len(items)
    total_pages = math.ceil(total / limit) if total else 0
    start = (page - 1) * limit
    return Page(
        items=list(items[start:start + limit]),
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
