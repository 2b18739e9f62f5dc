from __future__ import annotations

from collections.abc import Iterable
from threading import Lock

from .registry import ALL, SettingsCategory


class DirtyTracker:
    """Categories touched since the last flush.

    :meth:`drain` swaps the set for an empty one under the lock, so a mark
    that races with a drain lands in either this flush or the next one.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._dirty: set[SettingsCategory] = set()

    def mark(self, category: SettingsCategory) -> None:
        with self._lock:
            self._dirty.add(category)

    def mark_many(self, categories: Iterable[SettingsCategory]) -> None:
        with self._lock:
            self._dirty.update(categories)

    def mark_all(self) -> None:
        self.mark_many(ALL)

    def drain(self) -> set[SettingsCategory]:
        with self._lock:
            drained, self._dirty = self._dirty, set()
        return drained

    def peek(self) -> frozenset[SettingsCategory]:
        with self._lock:
            return frozenset(self._dirty)

    def is_dirty(self, category: SettingsCategory) -> bool:
        with self._lock:
            return category in self._dirty

    def is_empty(self) -> bool:
        with self._lock:
            return not self._dirty

    def __len__(self) -> int:
        with self._lock:
            return len(self._dirty)


__all__ = ["DirtyTracker"]
