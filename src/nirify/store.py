from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import RLock

from .dirty import DirtyTracker
from .models import Settings
from .registry import SettingsCategory

logger = logging.getLogger(__name__)


class SnapshotTimeout(TimeoutError):
    """Raised when the settings lock could not be taken for a snapshot."""


class SettingsStore:
    """Exclusive access to the live :class:`Settings`.

    All reads and writes go through :meth:`read` or :meth:`edit`.  Callers
    must not perform blocking I/O while inside either block; savers take a
    :meth:`snapshot` and write after the lock has been released.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        tracker: DirtyTracker | None = None,
    ) -> None:
        self._settings = settings if settings is not None else Settings()
        self.tracker = tracker if tracker is not None else DirtyTracker()
        self._lock = RLock()

    @contextmanager
    def read(self) -> Iterator[Settings]:
        with self._lock:
            yield self._settings

    @contextmanager
    def edit(self, *categories: SettingsCategory) -> Iterator[Settings]:
        """Mutate the model and mark *categories* dirty once the block exits."""
        with self._lock:
            yield self._settings
        if categories:
            self.tracker.mark_many(categories)

    def replace(self, settings: Settings) -> None:
        with self._lock:
            self._settings = settings

    def snapshot(
        self, categories: Iterable[SettingsCategory], timeout: float = -1
    ) -> Settings:
        """Deep-copy only *categories* out of the live model.

        Appearance pulls Behavior along because the appearance file carries
        the behavior layout fields.

        Raises
        ------
        SnapshotTimeout
            If the lock is not acquired within *timeout* seconds.
        """
        wanted = list(categories)
        if not self._lock.acquire(timeout=timeout):
            raise SnapshotTimeout(f"settings lock not acquired within {timeout}s")
        try:
            return self._settings.copy_categories(wanted)
        finally:
            self._lock.release()


__all__ = ["SettingsStore", "SnapshotTimeout"]
