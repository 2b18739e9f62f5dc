from __future__ import annotations

import threading
import time

from nirify import save_manager
from nirify.config import EditorConfig
from nirify.errors import ConfigWriteError
from nirify.events import EventBus
from nirify.ipc import request_reload
from nirify.registry import SettingsCategory
from nirify.save_manager import Deferred, NothingToSave, SaveError, SaveManager, Saved
from nirify.store import SettingsStore


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_flush_with_nothing_dirty(config_home):
    manager = SaveManager(SettingsStore(), config_home)
    assert isinstance(manager.flush(), NothingToSave)


def test_flush_writes_only_dirty_categories(config_home):
    store = SettingsStore()
    manager = SaveManager(store, config_home)
    with store.edit(SettingsCategory.CURSOR) as settings:
        settings.cursor.size = 32
    result = manager.flush()
    assert result == Saved(frozenset({SettingsCategory.CURSOR}), 1)
    assert "xcursor-size 32" in config_home.path_for(SettingsCategory.CURSOR).read_text()
    assert not config_home.path_for(SettingsCategory.MOUSE).exists()
    assert store.tracker.is_empty()


def test_debounce_coalesces_rapid_edits(config_home, monkeypatch):
    calls: list[set] = []
    real = save_manager.save_dirty

    def counting(paths, settings, dirty):
        calls.append(set(dirty))
        return real(paths, settings, dirty)

    monkeypatch.setattr(save_manager, "save_dirty", counting)
    store = SettingsStore()
    events = EventBus()
    saved: list[frozenset] = []
    events.on_saved.append(saved.append)
    manager = SaveManager(store, config_home, debounce_ms=50, events=events)

    for rate in range(30, 40):
        with store.edit(SettingsCategory.KEYBOARD) as settings:
            settings.keyboard.repeat_rate = rate
        manager.request_save()
    with store.edit(SettingsCategory.MOUSE) as settings:
        settings.mouse.accel_speed = 0.3
    manager.request_save()

    assert wait_for(lambda: saved)
    assert wait_for(lambda: not manager.pending)
    time.sleep(0.1)
    assert calls == [{SettingsCategory.KEYBOARD, SettingsCategory.MOUSE}]
    text = config_home.path_for(SettingsCategory.KEYBOARD).read_text()
    assert "repeat-rate 39" in text


def test_write_failure_notifies_and_returns_error(config_home, monkeypatch):
    def failing(paths, settings, dirty):
        raise ConfigWriteError("cursor.kdl: read-only file system")

    monkeypatch.setattr(save_manager, "save_dirty", failing)
    events = EventBus()
    toasts: list[tuple[str, str]] = []
    events.on_toast.append(lambda msg, level: toasts.append((msg, level)))
    store = SettingsStore()
    manager = SaveManager(store, config_home, events=events)
    store.tracker.mark(SettingsCategory.CURSOR)
    result = manager.flush()
    assert isinstance(result, SaveError)
    assert "read-only" in result.message
    assert toasts == [("Failed to save settings", "error")]


def test_busy_flush_is_deferred_without_losing_marks(config_home):
    store = SettingsStore()
    manager = SaveManager(store, config_home, debounce_ms=10_000)
    store.tracker.mark(SettingsCategory.CURSOR)
    manager._flush_lock.acquire()
    try:
        assert isinstance(manager.flush(), Deferred)
        assert manager.pending
        assert store.tracker.is_dirty(SettingsCategory.CURSOR)
    finally:
        manager._flush_lock.release()
        manager.cancel()
    assert not manager.pending


def test_lock_timeout_saves_last_good_snapshot(config_home):
    store = SettingsStore()
    manager = SaveManager(store, config_home, lock_timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def editor():
        with store.edit(SettingsCategory.CURSOR) as settings:
            settings.cursor.size = 48
            held.set()
            release.wait(5)

    t = threading.Thread(target=editor)
    t.start()
    held.wait(5)
    try:
        store.tracker.mark(SettingsCategory.CURSOR)
        result = manager.flush()
    finally:
        release.set()
        t.join()
    assert isinstance(result, Saved)
    assert "xcursor-size 24" in config_home.path_for(SettingsCategory.CURSOR).read_text()


def test_successful_flush_requests_reload(config_home):
    reloaded = threading.Event()

    def reload():
        reloaded.set()
        return "ok"

    events = EventBus()
    results: list[object] = []
    events.on_reload.append(results.append)
    store = SettingsStore()
    manager = SaveManager(store, config_home, reload=reload, events=events)
    store.tracker.mark(SettingsCategory.CURSOR)
    manager.flush()
    assert reloaded.wait(3)
    assert wait_for(lambda: results == ["ok"])


def test_from_config_applies_preferences(config_home):
    store = SettingsStore()
    manager = SaveManager.from_config(
        store, config_home, EditorConfig(debounce_ms=120, reload_after_save=False)
    )
    assert manager.debounce == 0.12
    assert manager.reload is None
    assert SaveManager.from_config(store, config_home, EditorConfig()).reload is request_reload
