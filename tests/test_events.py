from __future__ import annotations

from nirify.events import EventBus
from nirify.registry import SettingsCategory


def test_callbacks_receive_payloads():
    bus = EventBus()
    saved: list[frozenset] = []
    toasts: list[tuple[str, str]] = []
    bus.on_saved.append(saved.append)
    bus.on_toast.append(lambda msg, level: toasts.append((msg, level)))
    bus.emit_saved(frozenset({SettingsCategory.CURSOR}))
    bus.emit_toast("hello")
    assert saved == [frozenset({SettingsCategory.CURSOR})]
    assert toasts == [("hello", "info")]


def test_callback_may_unsubscribe_while_emitting():
    bus = EventBus()
    calls: list[object] = []

    def once(result):
        calls.append(result)
        bus.on_reload.remove(once)

    bus.on_reload.append(once)
    bus.emit_reload("first")
    bus.emit_reload("second")
    assert calls == ["first"]
