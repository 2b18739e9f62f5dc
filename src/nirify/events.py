from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .registry import SettingsCategory


class EventBus:
    """Simple callback based pub/sub used to tell a front end about saves.

    Callbacks run on the thread that emits, which for saves is the debounce
    timer thread; GUI front ends must hop back onto their own loop.
    """

    def __init__(self) -> None:
        self.on_saved: list[Callable[[frozenset[SettingsCategory]], None]] = []
        self.on_toast: list[Callable[[str, str], None]] = []
        self.on_reload: list[Callable[[Any], None]] = []

    # Emit helpers -----------------------------------------------------
    def emit_saved(self, categories: frozenset[SettingsCategory]) -> None:
        for cb in list(self.on_saved):
            cb(categories)

    def emit_toast(self, msg: str, level: str = "info") -> None:
        for cb in list(self.on_toast):
            cb(msg, level)

    def emit_reload(self, result: Any) -> None:
        for cb in list(self.on_reload):
            cb(result)


__all__ = ["EventBus"]
