"""Startup commands, environment, debug flags, switch events and recent windows."""
from __future__ import annotations

import logging
import shlex

from ..document import Document, KdlWriter
from ..fields import (
    get_string,
    has_flag,
    has_flag_in_node,
    load_color,
    load_float,
    load_int,
    string_args,
)
from ..models import (
    DEBUG_FLAGS,
    SWITCH_EVENTS,
    EnvironmentVariable,
    Settings,
    StartupCommand,
)
from ..registry import SettingsCategory
from . import register_section
from .base import BaseSection

logger = logging.getLogger(__name__)


@register_section
class StartupSection(BaseSection):
    category = SettingsCategory.STARTUP

    def parse(self, doc: Document, settings: Settings) -> None:
        for node in doc.all("spawn-at-startup"):
            argv = string_args(node)
            if argv:
                settings.startup.add(StartupCommand(command=argv))

    def render(self, settings: Settings) -> str:
        w = self.writer()
        commands = [c for c in settings.startup if c.command]
        if not commands:
            w.comment("No startup commands configured yet. Examples:")
            w.comment('spawn-at-startup "waybar"')
            w.comment('spawn-at-startup "bash" "-c" "command with args"')
            return w.build()
        for command in commands:
            w.node("spawn-at-startup", *command.command)
        return w.build()


@register_section
class EnvironmentSection(BaseSection):
    category = SettingsCategory.ENVIRONMENT

    def parse(self, doc: Document, settings: Settings) -> None:
        env = doc.get("environment")
        if env is None:
            return
        for node in env.children:
            value = node.first_arg
            settings.environment.add(
                EnvironmentVariable(name=node.name, value=value if isinstance(value, str) else "")
            )

    def render(self, settings: Settings) -> str:
        w = self.writer()
        w.comment("These are set for all processes spawned by niri.")
        w.newline()
        variables = [v for v in settings.environment if v.name]
        if not variables:
            w.comment("No environment variables configured yet. Example:")
            w.comment("environment {")
            w.comment('    QT_QPA_PLATFORM "wayland"')
            w.comment("}")
            return w.build()
        with w.block("environment"):
            for var in variables:
                w.node(var.name, var.value)
        return w.build()


@register_section
class DebugSection(BaseSection):
    category = SettingsCategory.DEBUG

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("debug")
        if node is None:
            return
        block = node.children
        debug = settings.debug
        for name in DEBUG_FLAGS:
            if has_flag(block, [name]):
                debug.flags[name] = True
        device = get_string(block, ["render-drm-device"])
        if device is not None:
            debug.render_drm_device = device
        for ignored in block.all("ignore-drm-device"):
            if isinstance(ignored.first_arg, str):
                debug.ignore_drm_devices.append(ignored.first_arg)

    def render(self, settings: Settings) -> str:
        debug = settings.debug
        w = self.writer()
        w.comment("Debug options - use with care.")
        w.newline()
        enabled = debug.enabled_flags()
        if not enabled and debug.render_drm_device is None and not debug.ignore_drm_devices:
            w.comment("No debug options enabled.")
            return w.build()
        with w.block("debug"):
            for name in enabled:
                w.flag(name)
            w.optional("render-drm-device", debug.render_drm_device)
            for device in debug.ignore_drm_devices:
                w.node("ignore-drm-device", device)
        return w.build()


@register_section
class SwitchEventsSection(BaseSection):
    """Each event keeps its spawn commands as shell-quoted strings."""

    category = SettingsCategory.SWITCH_EVENTS

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("switch-events")
        if node is None:
            return
        events = settings.switch_events.events
        for name in SWITCH_EVENTS:
            event = node.children.get(name)
            if event is None:
                continue
            commands = []
            for spawn in event.children.all("spawn"):
                argv = string_args(spawn)
                if argv:
                    commands.append(shlex.join(argv))
            events[name] = commands

    def render(self, settings: Settings) -> str:
        events = settings.switch_events.events
        w = self.writer()
        w.comment("Configure actions for hardware switch events.")
        w.newline()
        if not any(events.get(name) for name in SWITCH_EVENTS):
            w.comment("No switch events configured. Example:")
            w.comment("switch-events {")
            w.comment('    lid-close { spawn "swaylock"; }')
            w.comment("}")
            return w.build()
        with w.block("switch-events"):
            for name in SWITCH_EVENTS:
                self._write_event(w, name, events.get(name) or [])
        return w.build()

    def _write_event(self, w: KdlWriter, name: str, commands: list[str]) -> None:
        argvs = []
        for command in commands:
            try:
                argv = shlex.split(command)
            except ValueError:
                logger.warning("skipping malformed %s command %r", name, command)
                continue
            if argv:
                argvs.append(argv)
        if not argvs:
            return
        with w.block(name):
            for argv in argvs:
                w.node("spawn", *argv)


@register_section
class RecentWindowsSection(BaseSection):
    category = SettingsCategory.RECENT_WINDOWS

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("recent-windows")
        if node is None:
            return
        recent = settings.recent_windows
        block = node.children
        if has_flag_in_node(node, "off") or has_flag(block, ["off"]):
            recent.off = True
            return
        recent.off = False
        load_int(block, ["debounce-ms"], recent, "debounce_ms")
        load_int(block, ["open-delay-ms"], recent, "open_delay_ms")
        highlight = block.get("highlight")
        if highlight is not None:
            target = recent.highlight
            load_color(highlight.children, ["active-color"], target, "active_color")
            load_color(highlight.children, ["urgent-color"], target, "urgent_color")
            load_int(highlight.children, ["padding"], target, "padding")
            load_int(highlight.children, ["corner-radius"], target, "corner_radius")
        previews = block.get("previews")
        if previews is not None:
            load_int(previews.children, ["max-height"], recent.previews, "max_height")
            load_float(previews.children, ["max-scale"], recent.previews, "max_scale")

    def render(self, settings: Settings) -> str:
        recent = settings.recent_windows
        w = self.writer()
        w.comment("Configures the Alt-Tab window switcher.")
        w.newline()
        if recent.off:
            with w.block("recent-windows"):
                w.flag("off")
            return w.build()
        with w.block("recent-windows"):
            w.node("debounce-ms", recent.debounce_ms)
            w.node("open-delay-ms", recent.open_delay_ms)
            with w.block("highlight"):
                w.node("active-color", recent.highlight.active_color.to_hex())
                w.node("urgent-color", recent.highlight.urgent_color.to_hex())
                w.node("padding", recent.highlight.padding)
                w.node("corner-radius", recent.highlight.corner_radius)
            with w.block("previews"):
                w.node("max-height", recent.previews.max_height)
                w.node("max-scale", round(float(recent.previews.max_scale), 2))
        return w.build()
