"""Page state over the outage list."""

import math
from collections.abc import Sequence
from typing import Generic, TypeVar

from dashboard.schemas.dashboard import PaginationState

T = TypeVar("T")


def total_pages_for(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / page_size))


def paginate(items: Sequence[T], page_size: int, requested_page: int) -> tuple[list[T], int, int]:
    """Return ``(page_slice, clamped_page, total_pages)`` for a 1-based page request."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    total_pages = total_pages_for(len(items), page_size)
    page = max(1, min(requested_page, total_pages))
    start = (page - 1) * page_size
    return list(items[start : min(start + page_size, len(items))]), page, total_pages


class Paginator(Generic[T]):
    """Current page over a list that is replaced on every refresh cycle.

    New data only ever clamps the page down; it never resets it to 1.
    """

    def __init__(self, page_size: int = 10):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._page_size = page_size
        self._items: list[T] = []
        self._current_page = 1

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return total_pages_for(len(self._items), self._page_size)

    @property
    def has_previous(self) -> bool:
        return self._current_page > 1

    @property
    def has_next(self) -> bool:
        return self._current_page < self.total_pages

    def update(self, items: Sequence[T]) -> None:
        self._items = list(items)
        self._current_page = min(self._current_page, self.total_pages)

    def advance(self, delta: int) -> bool:
        """Move by ``delta`` pages. Out-of-range moves are rejected and return False."""
        target = self._current_page + delta
        if target < 1 or target > self.total_pages:
            return False
        self._current_page = target
        return True

    def current_slice(self) -> list[T]:
        page_slice, _, _ = paginate(self._items, self._page_size, self._current_page)
        return page_slice

    def state(self) -> PaginationState:
        return PaginationState(
            current_page=self._current_page,
            page_size=self._page_size,
            total_pages=self.total_pages,
            total_items=len(self._items),
        )
