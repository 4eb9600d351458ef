"""Pagination and filter state for the dashboard."""

import math
from typing import Any, Dict, Optional


class PaginationState:
    """
    Offset-based paging over a result set whose size is learned after
    each fetch (``total_items``).
    """

    def __init__(self, limit: int = 10, filters: Optional[Dict[str, Any]] = None):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.offset = 0
        self.total_items: Optional[int] = None
        self.filters: Dict[str, Any] = dict(filters or {})

    @property
    def current_page(self) -> int:
        return self.offset // self.limit + 1

    @property
    def total_pages(self) -> int:
        if not self.total_items:
            return 1
        return math.ceil(self.total_items / self.limit)

    def update_total(self, total_items: int) -> None:
        self.total_items = total_items

    def next_page(self) -> bool:
        """Advance one page if there is one. Returns whether it moved."""
        if self.total_items is not None and self.offset + self.limit < self.total_items:
            self.offset += self.limit
            return True
        return False

    def previous_page(self) -> bool:
        new_offset = max(0, self.offset - self.limit)
        moved = new_offset != self.offset
        self.offset = new_offset
        return moved

    def go_to_page(self, page: int) -> bool:
        """Jump to a 1-based page; ignored when it falls outside the results."""
        new_offset = (page - 1) * self.limit
        if self.total_items is not None and 0 <= new_offset < self.total_items:
            self.offset = new_offset
            return True
        return False

    def change_limit(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.offset = 0

    def change_filters(self, filters: Dict[str, Any]) -> None:
        self.filters = dict(filters)
        self.offset = 0
