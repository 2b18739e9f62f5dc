from __future__ import annotations

import threading

import pytest

from nirify.dirty import DirtyTracker
from nirify.models import NamedWorkspace, Settings, WorkspacesSettings
from nirify.registry import ALL, SettingsCategory
from nirify.store import SettingsStore, SnapshotTimeout


def test_drain_returns_exactly_the_marked_categories():
    tracker = DirtyTracker()
    tracker.mark(SettingsCategory.MOUSE)
    tracker.mark(SettingsCategory.MOUSE)
    tracker.mark(SettingsCategory.CURSOR)
    assert tracker.drain() == {SettingsCategory.MOUSE, SettingsCategory.CURSOR}
    assert tracker.drain() == set()
    assert tracker.is_empty()


def test_mark_all():
    tracker = DirtyTracker()
    tracker.mark_all()
    assert tracker.peek() == frozenset(ALL)
    assert len(tracker) == len(ALL)


def test_concurrent_marks_are_not_lost():
    tracker = DirtyTracker()
    categories = list(ALL)
    seen: set[SettingsCategory] = set()

    def marker(category):
        for _ in range(200):
            tracker.mark(category)

    threads = [threading.Thread(target=marker, args=(c,)) for c in categories]
    for t in threads:
        t.start()
    while any(t.is_alive() for t in threads):
        seen |= tracker.drain()
    for t in threads:
        t.join()
    seen |= tracker.drain()
    assert seen == set(categories)


def test_edit_marks_after_block():
    store = SettingsStore()
    with store.edit(SettingsCategory.KEYBOARD) as settings:
        settings.keyboard.repeat_rate = 40
        assert store.tracker.is_empty()
    assert store.tracker.peek() == {SettingsCategory.KEYBOARD}
    with store.read() as settings:
        assert settings.keyboard.repeat_rate == 40


def test_snapshot_copies_only_requested_categories():
    live = Settings()
    live.keyboard.repeat_rate = 40
    live.mouse.accel_speed = 0.5
    store = SettingsStore(live)
    snap = store.snapshot([SettingsCategory.KEYBOARD])
    assert snap.keyboard.repeat_rate == 40
    assert snap.mouse.accel_speed == 0.0
    snap.keyboard.repeat_rate = 1
    assert live.keyboard.repeat_rate == 40


def test_appearance_snapshot_pulls_behavior():
    live = Settings()
    live.behavior.strut_top = 30
    snap = SettingsStore(live).snapshot([SettingsCategory.APPEARANCE])
    assert snap.behavior.strut_top == 30


def test_snapshot_times_out_when_lock_is_held():
    store = SettingsStore()
    held = threading.Event()
    release = threading.Event()

    def holder():
        with store.read():
            held.set()
            release.wait(5)

    t = threading.Thread(target=holder)
    t.start()
    held.wait(5)
    try:
        with pytest.raises(SnapshotTimeout):
            store.snapshot([SettingsCategory.CURSOR], timeout=0.05)
    finally:
        release.set()
        t.join()


def test_identifiers_are_never_reused():
    workspaces = WorkspacesSettings()
    a = workspaces.add_named("a")
    b = workspaces.add_named("b")
    workspaces.remove(b.id)
    c = workspaces.add_named("c")
    assert (a.id, b.id, c.id) == (0, 1, 2)


def test_replace_all_keeps_counter_above_existing_ids():
    workspaces = WorkspacesSettings()
    workspaces.replace_all([NamedWorkspace(id=7, name="x")], next_id=3)
    assert workspaces.add_named("y").id == 8
