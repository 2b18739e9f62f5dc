"""Debounced, dirty-only auto-save.

Every edit restarts a single timer.  When it fires the manager drains the
dirty set, copies just those categories out of the store, releases the lock
and writes them atomically.  A successful flush asks the compositor to
reload on a background thread.
"""
from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import ConfigWriteError, ManagedDirectoryError
from .events import EventBus
from .ipc import request_reload
from .models import Settings
from .paths import ConfigPaths
from .registry import ALL, SettingsCategory
from .storage import save_dirty
from .store import SettingsStore, SnapshotTimeout

if TYPE_CHECKING:
    from .config import EditorConfig

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 300
LOCK_TIMEOUT = 1.0


# ---------------------------------------------------------------------------
# Flush outcomes
# ---------------------------------------------------------------------------

class FlushResult:
    """What a single :meth:`SaveManager.flush` did."""


@dataclass(frozen=True)
class NothingToSave(FlushResult):
    pass


@dataclass(frozen=True)
class Saved(FlushResult):
    categories: frozenset[SettingsCategory]
    files_written: int


@dataclass(frozen=True)
class SaveError(FlushResult):
    message: str


@dataclass(frozen=True)
class Deferred(FlushResult):
    """Another flush was running; the timer was re-armed instead."""


class SaveManager:
    def __init__(
        self,
        store: SettingsStore,
        paths: ConfigPaths,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        reload: Callable[[], Any] | None = None,
        events: EventBus | None = None,
        lock_timeout: float = LOCK_TIMEOUT,
    ) -> None:
        self.store = store
        self.paths = paths
        self.debounce = debounce_ms / 1000.0
        self.reload = reload
        self.events = events or EventBus()
        self.lock_timeout = lock_timeout
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()
        self._flush_lock = threading.Lock()
        self._last_good: Settings = store.snapshot(ALL)

    @classmethod
    def from_config(
        cls,
        store: SettingsStore,
        paths: ConfigPaths,
        config: EditorConfig,
        events: EventBus | None = None,
    ) -> SaveManager:
        """Build a manager using the editor's debounce and reload preferences."""
        return cls(
            store,
            paths,
            debounce_ms=config.debounce_ms,
            reload=request_reload if config.reload_after_save else None,
            events=events,
        )

    @property
    def tracker(self):
        return self.store.tracker

    def mark_dirty(self, category: SettingsCategory) -> None:
        self.tracker.mark(category)

    # --- timer -------------------------------------------------------
    def request_save(self) -> None:
        """(Re)start the debounce timer; never stacks a second timer."""
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        with self._timer_lock:
            return self._timer is not None and self._timer.is_alive()

    def cancel(self) -> None:
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _on_timer(self) -> None:
        with self._timer_lock:
            if self._timer is threading.current_thread():
                self._timer = None
        self.flush()

    # --- flushing ----------------------------------------------------
    def _take_snapshot(self, dirty: set[SettingsCategory]) -> Settings:
        try:
            return self.store.snapshot(dirty, timeout=self.lock_timeout)
        except SnapshotTimeout:
            logger.warning(
                "settings lock busy for %.1fs; saving last known good data", self.lock_timeout
            )
            return copy.deepcopy(self._last_good)

    def flush(self) -> FlushResult:
        if not self._flush_lock.acquire(blocking=False):
            logger.debug("flush already running, re-arming timer")
            self.request_save()
            return Deferred()
        try:
            dirty = self.tracker.drain()
            if not dirty:
                logger.debug("nothing to save")
                return NothingToSave()
            snapshot = self._take_snapshot(dirty)
            names = ", ".join(sorted(c.file_name for c in dirty))
            logger.debug("saving %d categories: %s", len(dirty), names)
            try:
                written = save_dirty(self.paths, snapshot, dirty)
            except (ConfigWriteError, ManagedDirectoryError) as exc:
                logger.warning("auto-save failed: %s", exc)
                self.events.emit_toast("Failed to save settings", "error")
                return SaveError(str(exc))
            self._remember(snapshot, dirty)
            saved = frozenset(dirty)
            self.events.emit_saved(saved)
            self._reload_async()
            return Saved(saved, written)
        finally:
            self._flush_lock.release()

    def _remember(self, snapshot: Settings, dirty: set[SettingsCategory]) -> None:
        for category in dirty:
            self._last_good.set(category, copy.deepcopy(snapshot.get(category)))
        if SettingsCategory.APPEARANCE in dirty:
            self._last_good.behavior = copy.deepcopy(snapshot.behavior)

    def _reload_async(self) -> None:
        if self.reload is None:
            return

        def runner() -> None:
            result = self.reload()
            logger.debug("reload result: %s", result)
            self.events.emit_reload(result)

        threading.Thread(target=runner, name="nirify-reload", daemon=True).start()


__all__ = [
    "SaveManager",
    "FlushResult",
    "NothingToSave",
    "Saved",
    "SaveError",
    "Deferred",
    "DEFAULT_DEBOUNCE_MS",
]
