# src/primefinder/history.py
from __future__ import annotations

import time
from collections.abc import Iterator
from typing import NamedTuple

from primefinder.runtime import CFG


class HistoryItem(NamedTuple):
    n: int
    result: str
    timestamp: float


class History:
    """In-memory session history, newest entry first."""

    def __init__(self, max_items: int | None = None):
        if max_items is None:
            max_items = int(CFG("HISTORY.MAX_ITEMS", 100))
        self.max_items = max(0, max_items)  # 0 = unlimited
        self._items: list[HistoryItem] = []

    def add(self, n: int, result: str, timestamp: float | None = None) -> HistoryItem:
        item = HistoryItem(n=n, result=result, timestamp=time.time() if timestamp is None else timestamp)
        self._items.insert(0, item)
        if self.max_items and len(self._items) > self.max_items:
            del self._items[self.max_items:]
        return item

    def items(self) -> list[HistoryItem]:
        return list(self._items)

    def latest(self) -> HistoryItem | None:
        return self._items[0] if self._items else None

    def remove(self, index: int) -> HistoryItem:
        """Remove the entry at a 0-based position (0 = newest)."""
        return self._items.pop(index)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[HistoryItem]:
        return iter(list(self._items))
