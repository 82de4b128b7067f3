from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar


T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total_count: int
    page: int
    page_size: int
    total_pages: int


def paginate(ranked: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
    """Slice one 1-based page out of an already ranked sequence.

    Pages below 1 are treated as page 1. A page past the end is empty but
    still reports the full total.
    """

    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    if page < 1:
        page = 1
    total = len(ranked)
    total_pages = (total + page_size - 1) // page_size
    start = (page - 1) * page_size
    items = list(ranked[start : start + page_size]) if start < total else []
    return Page(
        items=items,
        total_count=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )
