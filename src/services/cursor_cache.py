"""
Client-side cursor history for forward-only cursor pagination.

The endpoint only ever hands out the *next* cursor. The cache remembers, for
every cursor a view has seen, which cursor came after it and which cursor the
view navigated forward from to reach it. Backward links are only created by
observed forward navigation, never inferred.
"""
from collections import OrderedDict
from dataclasses import dataclass


@dataclass
class CursorCacheItem:
    """Known neighbours of a cursor."""

    next_cursor: str | None = None
    previous_cursor: str | None = None


class CursorCache:
    """
    Mapping of ``current cursor -> CursorCacheItem`` owned by one list view.

    Unbounded by default since it lives only as long as its view. When
    ``max_entries`` is set the least recently touched cursors are evicted,
    which makes "previous" unavailable past the evicted point.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._items: OrderedDict[str, CursorCacheItem] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, cursor: object) -> bool:
        return cursor in self._items

    def get(self, cursor: str) -> CursorCacheItem | None:
        return self._items.get(cursor)

    def next_of(self, cursor: str) -> str | None:
        item = self._items.get(cursor)
        return item.next_cursor if item else None

    def previous_of(self, cursor: str) -> str | None:
        item = self._items.get(cursor)
        return item.previous_cursor if item else None

    def record_next(self, cursor: str, next_cursor: str) -> None:
        """Record (or refresh) the forward link, keeping any backward link."""
        item = self._touch(cursor)
        self._items[cursor] = CursorCacheItem(
            next_cursor=next_cursor,
            previous_cursor=item.previous_cursor,
        )

    def record_previous(self, cursor: str, previous_cursor: str) -> None:
        """Record the cursor a forward navigation started from."""
        item = self._touch(cursor)
        self._items[cursor] = CursorCacheItem(
            next_cursor=item.next_cursor,
            previous_cursor=previous_cursor,
        )

    def clear(self) -> None:
        self._items.clear()

    def snapshot(self) -> dict[str, CursorCacheItem]:
        """Copy of the cache contents, for diagnostics and tests."""
        return {
            cursor: CursorCacheItem(item.next_cursor, item.previous_cursor)
            for cursor, item in self._items.items()
        }

    def _touch(self, cursor: str) -> CursorCacheItem:
        item = self._items.pop(cursor, None) or CursorCacheItem()
        self._items[cursor] = item
        if self.max_entries is not None:
            while len(self._items) > self.max_entries:
                self._items.popitem(last=False)
        return item
