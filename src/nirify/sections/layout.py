"""Layout extras, gestures and miscellaneous top-level settings."""
from __future__ import annotations

import logging

from ..document import Document, KdlWriter
from ..fields import (
    get_string,
    has_flag,
    load_flag,
    load_int,
    load_string,
)
from ..models import (
    XWAYLAND_DEFAULT,
    XWAYLAND_OFF,
    DefaultColumnDisplay,
    EdgeScrollSettings,
    PresetSize,
    Settings,
    TabIndicatorPosition,
)
from ..registry import SettingsCategory
from ..types import Color, ColumnWidthType, Gradient
from . import register_section
from .base import BaseSection
from .common import (
    gradient_props,
    load_color_or_gradient,
    parse_gradient,
    parse_shadow_block,
    write_color_or_gradient,
    write_shadow_body,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Layout extras
# ---------------------------------------------------------------------------

def parse_presets(block: Document) -> list[PresetSize]:
    presets = []
    for node in block:
        value = node.first_arg
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if node.name == "proportion":
            presets.append(PresetSize(ColumnWidthType.PROPORTION, float(value)))
        elif node.name == "fixed":
            presets.append(PresetSize(ColumnWidthType.FIXED, float(value)))
    return presets


def write_presets(w: KdlWriter, name: str, presets: list[PresetSize]) -> None:
    if not presets:
        return
    with w.block(name):
        for preset in presets:
            if preset.kind is ColumnWidthType.FIXED:
                w.node("fixed", round(preset.value))
            else:
                w.node("proportion", round(preset.value, 5))


def parse_layout_extras(block: Document, settings: Settings) -> None:
    extras = settings.layout_extras

    shadow = block.get("shadow")
    if shadow is not None:
        parse_shadow_block(shadow.children, extras.shadow)

    tab = block.get("tab-indicator")
    if tab is not None:
        ti = extras.tab_indicator
        children = tab.children
        if has_flag(children, ["off"]):
            ti.enabled = False
        else:
            ti.enabled = True
            position = get_string(children, ["position"])
            if position is not None:
                try:
                    ti.position = TabIndicatorPosition(position)
                except ValueError:
                    logger.warning("unknown tab-indicator position %r", position)
            for key in ("width", "gap", "gaps-between-tabs", "corner-radius"):
                load_int(children, [key], ti, key.replace("-", "_"))
            for state in ("active", "inactive", "urgent"):
                value = load_color_or_gradient(children, state)
                if value is not None:
                    setattr(ti, state, value)
            load_flag(children, ["hide-when-single-tab"], ti, "hide_when_single_tab")
            load_flag(children, ["place-within-column"], ti, "place_within_column")

    hint = block.get("insert-hint")
    if hint is not None:
        children = hint.children
        if has_flag(children, ["off"]):
            extras.insert_hint.enabled = False
        else:
            extras.insert_hint.enabled = True
            gradient_node = children.get("gradient")
            gradient = parse_gradient(gradient_node) if gradient_node is not None else None
            color = Color.from_hex(get_string(children, ["color"]) or "")
            if gradient is not None:
                extras.insert_hint.color = gradient
            elif color is not None:
                extras.insert_hint.color = color

    for name, attr in (
        ("preset-column-widths", "preset_column_widths"),
        ("preset-window-heights", "preset_window_heights"),
    ):
        node = block.get(name)
        if node is not None:
            setattr(extras, attr, parse_presets(node.children))

    display = get_string(block, ["default-column-display"])
    if display is not None:
        try:
            extras.default_column_display = DefaultColumnDisplay(display)
        except ValueError:
            logger.warning("unknown default-column-display %r", display)


@register_section
class LayoutExtrasSection(BaseSection):
    category = SettingsCategory.LAYOUT_EXTRAS

    def parse(self, doc: Document, settings: Settings) -> None:
        layout = doc.get("layout")
        if layout is not None:
            parse_layout_extras(layout.children, settings)

    def render(self, settings: Settings) -> str:
        extras = settings.layout_extras
        w = self.writer()
        with w.block("layout"):
            with w.block("shadow"):
                if extras.shadow.enabled:
                    w.flag("on")
                    write_shadow_body(w, extras.shadow)
                else:
                    w.flag("off")

            w.newline()
            ti = extras.tab_indicator
            with w.block("tab-indicator"):
                if not ti.enabled:
                    w.flag("off")
                else:
                    w.node("position", ti.position.value)
                    w.node("width", ti.width)
                    w.node("gap", ti.gap)
                    w.node("gaps-between-tabs", ti.gaps_between_tabs)
                    w.node("corner-radius", ti.corner_radius)
                    write_color_or_gradient(w, "active", ti.active)
                    write_color_or_gradient(w, "inactive", ti.inactive)
                    write_color_or_gradient(w, "urgent", ti.urgent)
                    w.optional_flag("hide-when-single-tab", ti.hide_when_single_tab)
                    w.optional_flag("place-within-column", ti.place_within_column)

            w.newline()
            hint = extras.insert_hint
            with w.block("insert-hint"):
                if not hint.enabled:
                    w.flag("off")
                elif isinstance(hint.color, Gradient):
                    w.node("gradient", props=gradient_props(hint.color))
                else:
                    w.node("color", hint.color.to_hex())

            w.newline()
            write_presets(w, "preset-column-widths", extras.preset_column_widths)
            write_presets(w, "preset-window-heights", extras.preset_window_heights)
            if extras.default_column_display is not DefaultColumnDisplay.NORMAL:
                w.node("default-column-display", extras.default_column_display.value)
        return w.build()


# ---------------------------------------------------------------------------
# Gestures
# ---------------------------------------------------------------------------

_CORNERS = ("top-left", "top-right", "bottom-left", "bottom-right")


def parse_edge_scroll(block: Document, target: EdgeScrollSettings, size_key: str) -> None:
    if has_flag(block, ["off"]):
        target.enabled = False
        return
    target.enabled = True
    load_int(block, [size_key], target, "trigger_size")
    load_int(block, ["delay-ms"], target, "delay_ms")
    load_int(block, ["max-speed"], target, "max_speed")


def write_edge_scroll(w: KdlWriter, name: str, source: EdgeScrollSettings, size_key: str) -> None:
    with w.block(name):
        if not source.enabled:
            w.flag("off")
            return
        w.node(size_key, source.trigger_size)
        w.node("delay-ms", source.delay_ms)
        w.node("max-speed", source.max_speed)


@register_section
class GesturesSection(BaseSection):
    category = SettingsCategory.GESTURES

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("gestures")
        if node is None:
            return
        block = node.children
        gestures = settings.gestures

        corners = block.get("hot-corners")
        if corners is not None:
            if has_flag(corners.children, ["off"]):
                gestures.hot_corners.enabled = False
            else:
                gestures.hot_corners.enabled = True
                for corner in _CORNERS:
                    setattr(
                        gestures.hot_corners,
                        corner.replace("-", "_"),
                        has_flag(corners.children, [corner]),
                    )

        scroll = block.get("dnd-edge-view-scroll")
        if scroll is not None:
            parse_edge_scroll(scroll.children, gestures.dnd_edge_view_scroll, "trigger-width")
        switch = block.get("dnd-edge-workspace-switch")
        if switch is not None:
            parse_edge_scroll(switch.children, gestures.dnd_edge_workspace_switch, "trigger-height")

    def render(self, settings: Settings) -> str:
        gestures = settings.gestures
        w = self.writer()
        with w.block("gestures"):
            hc = gestures.hot_corners
            with w.block("hot-corners"):
                if not hc.enabled:
                    w.flag("off")
                else:
                    for corner in _CORNERS:
                        w.optional_flag(corner, getattr(hc, corner.replace("-", "_")))
            write_edge_scroll(w, "dnd-edge-view-scroll", gestures.dnd_edge_view_scroll, "trigger-width")
            write_edge_scroll(
                w, "dnd-edge-workspace-switch", gestures.dnd_edge_workspace_switch, "trigger-height"
            )
        return w.build()


# ---------------------------------------------------------------------------
# Miscellaneous
# ---------------------------------------------------------------------------

def _child_flag(doc: Document, block: str, flag: str, target: object, attr: str) -> None:
    node = doc.get(block)
    if node is not None:
        setattr(target, attr, has_flag(node.children, [flag]))


@register_section
class MiscellaneousSection(BaseSection):
    category = SettingsCategory.MISCELLANEOUS

    def parse(self, doc: Document, settings: Settings) -> None:
        misc = settings.miscellaneous
        load_flag(doc, ["prefer-no-csd"], misc, "prefer_no_csd")
        load_string(doc, ["screenshot-path"], misc, "screenshot_path")
        _child_flag(doc, "clipboard", "disable-primary", misc, "disable_primary_clipboard")
        hotkey = doc.get("hotkey-overlay")
        if hotkey is not None:
            load_flag(hotkey.children, ["skip-at-startup"], misc, "hotkey_overlay_skip_at_startup")
            load_flag(hotkey.children, ["hide-not-bound"], misc, "hotkey_overlay_hide_not_bound")
        _child_flag(
            doc, "config-notification", "disable-failed", misc, "config_notification_disable_failed"
        )
        load_flag(doc, ["spawn-sh-at-startup"], misc, "spawn_sh_at_startup")

        xwayland = doc.get("xwayland-satellite")
        if xwayland is not None:
            block = xwayland.children
            if has_flag(block, ["off"]):
                misc.xwayland_satellite = XWAYLAND_OFF
            elif get_string(block, ["path"]) is not None:
                misc.xwayland_satellite = get_string(block, ["path"])
            elif isinstance(xwayland.first_arg, str):
                misc.xwayland_satellite = xwayland.first_arg

    def render(self, settings: Settings) -> str:
        misc = settings.miscellaneous
        w = self.writer()
        w.optional_flag("prefer-no-csd", misc.prefer_no_csd)
        if misc.screenshot_path:
            w.node("screenshot-path", misc.screenshot_path)
        if misc.disable_primary_clipboard:
            with w.block("clipboard"):
                w.flag("disable-primary")
        with w.block("hotkey-overlay"):
            w.optional_flag("skip-at-startup", misc.hotkey_overlay_skip_at_startup)
            w.optional_flag("hide-not-bound", misc.hotkey_overlay_hide_not_bound)
        if misc.config_notification_disable_failed:
            with w.block("config-notification"):
                w.flag("disable-failed")
        # spawn-sh-at-startup takes a command in niri, so the flag is not written back
        if misc.xwayland_satellite == XWAYLAND_OFF:
            with w.block("xwayland-satellite"):
                w.flag("off")
        elif misc.xwayland_satellite and misc.xwayland_satellite != XWAYLAND_DEFAULT:
            with w.block("xwayland-satellite"):
                w.node("path", misc.xwayland_satellite)
        return w.build()
