"""
Keyset (cursor) pagination over articles.

Rows are ordered by (created_at DESC, id DESC). The id breaks timestamp
ties, so the order is total and "everything after the cursor row" is well
defined even while new rows are being inserted at the head.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_PAGE_LIMIT = 10


@dataclass
class Page:
    items: List = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False


class PaginationEngine:
    def __init__(self, storage, limit: int = DEFAULT_PAGE_LIMIT):
        if limit < 1:
            raise ValueError("page limit must be >= 1")
        self._storage = storage
        self.limit = limit

    def _boundary(self, cursor: Optional[str]):
        # a cursor that no longer resolves restarts from the newest item
        if not cursor:
            return None, None
        row = self._storage.find_article(cursor)
        if row is None:
            return None, None
        return row.created_at, row.id

    def page(self, cursor: Optional[str] = None) -> Page:
        after_created_at, after_id = self._boundary(cursor)
        # one extra row tells us whether another page exists
        rows = self._storage.find_article_page(after_created_at, after_id, self.limit + 1)
        if len(rows) > self.limit:
            items = rows[: self.limit]
            return Page(items=items, next_cursor=items[-1].id, has_more=True)
        return Page(items=rows)
