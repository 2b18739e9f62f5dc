"""Input device sections.

Every device file holds a single ``input { <device> { ... } }`` block.  Inside
that block niri treats a missing flag as "off", so boolean flags are read
with :func:`~nirify.fields.has_flag` rather than left untouched.
"""
from __future__ import annotations

import logging
from abc import abstractmethod

from ..document import Document, KdlWriter, Node
from ..fields import (
    get_float,
    get_string,
    has_flag,
    load_enum,
    load_float,
    load_int,
    load_string,
    prop_float,
)
from ..models import (
    KeyboardSettings,
    MouseSettings,
    PointerSettings,
    Settings,
    TabletSettings,
    TouchpadSettings,
    TouchSettings,
)
from ..registry import SettingsCategory
from ..types import AccelProfile, ClickMethod, ScrollMethod, TapButtonMap
from . import register_section
from .base import BaseSection

logger = logging.getLogger(__name__)


def device_block(doc: Document, device: str) -> Document | None:
    """Children of ``input { <device> {} }`` or ``None`` if absent."""
    input_node = doc.get("input")
    if input_node is None:
        return None
    node = input_node.children.get(device)
    return node.children if node is not None else None


class InputDeviceSection(BaseSection):
    """Shared plumbing: locate the device block and wrap the rendered body."""

    device: str

    def parse(self, doc: Document, settings: Settings) -> None:
        block = device_block(doc, self.device)
        if block is None:
            return
        self.parse_device(block, settings.get(self.category))

    def render(self, settings: Settings) -> str:
        w = self.writer()
        with w.block("input"):
            with w.block(self.device):
                self.render_device(w, settings.get(self.category))
        return w.build()

    @abstractmethod
    def parse_device(self, block: Document, device) -> None:
        pass

    @abstractmethod
    def render_device(self, w: KdlWriter, device) -> None:
        pass


# ---------------------------------------------------------------------------
# Keyboard
# ---------------------------------------------------------------------------

def parse_keyboard(block: Document, keyboard: KeyboardSettings) -> None:
    keyboard.off = has_flag(block, ["off"])
    xkb = block.get("xkb")
    if xkb is not None:
        for key in ("layout", "variant", "model", "rules", "options", "file"):
            load_string(xkb.children, [key], keyboard, f"xkb_{key}")
    load_int(block, ["repeat-delay"], keyboard, "repeat_delay")
    load_int(block, ["repeat-rate"], keyboard, "repeat_rate")
    if has_flag(block, ["numlock"]):
        keyboard.numlock = True
    load_string(block, ["track-layout"], keyboard, "track_layout")


@register_section
class KeyboardSection(InputDeviceSection):
    category = SettingsCategory.KEYBOARD
    device = "keyboard"

    def parse_device(self, block: Document, device: KeyboardSettings) -> None:
        parse_keyboard(block, device)

    def render_device(self, w: KdlWriter, device: KeyboardSettings) -> None:
        w.optional_flag("off", device.off)
        with w.block("xkb"):
            w.node("layout", device.xkb_layout)
            for key in ("variant", "model", "rules", "options", "file"):
                value = getattr(device, f"xkb_{key}")
                if value:
                    w.node(key, value)
        w.node("repeat-delay", device.repeat_delay)
        w.node("repeat-rate", device.repeat_rate)
        w.optional_flag("numlock", device.numlock)
        w.node("track-layout", device.track_layout)


# ---------------------------------------------------------------------------
# Pointer devices
# ---------------------------------------------------------------------------

def parse_pointer(block: Document, device: PointerSettings) -> None:
    device.off = has_flag(block, ["off"])
    device.natural_scroll = has_flag(block, ["natural-scroll"])
    device.left_handed = has_flag(block, ["left-handed"])
    device.middle_emulation = has_flag(block, ["middle-emulation"])
    device.scroll_button_lock = has_flag(block, ["scroll-button-lock"])
    load_float(block, ["accel-speed"], device, "accel_speed")
    load_enum(block, ["accel-profile"], device, "accel_profile", AccelProfile.from_kdl)
    load_enum(block, ["scroll-method"], device, "scroll_method", ScrollMethod.from_kdl)
    load_int(block, ["scroll-button"], device, "scroll_button")


def _split_factor(text: str) -> tuple[float | None, float | None]:
    horizontal = vertical = None
    for part in text.split():
        key, _, raw = part.partition("=")
        try:
            value = float(raw)
        except ValueError:
            continue
        if key == "horizontal":
            horizontal = value
        elif key == "vertical":
            vertical = value
    return horizontal, vertical


def parse_scroll_factor(block: Document, device: MouseSettings | TouchpadSettings) -> None:
    """Accept ``scroll-factor 1.5``, props, or the ``"horizontal=.. vertical=.."`` string."""
    node: Node | None = block.get("scroll-factor")
    if node is None:
        return
    text = get_string(block, ["scroll-factor"])
    if text is not None:
        horizontal, vertical = _split_factor(text)
    elif node.props:
        horizontal, vertical = prop_float(node, "horizontal"), prop_float(node, "vertical")
    else:
        value = get_float(block, ["scroll-factor"])
        if value is not None:
            device.scroll_factor = value
            device.scroll_factor_horizontal = None
        return
    if vertical is not None:
        device.scroll_factor = vertical
    if horizontal is not None and horizontal != vertical:
        device.scroll_factor_horizontal = horizontal


def write_pointer(w: KdlWriter, device: PointerSettings) -> None:
    w.optional_flag("off", device.off)
    w.optional_flag("natural-scroll", device.natural_scroll)
    w.optional_flag("left-handed", device.left_handed)
    w.optional_flag("middle-emulation", device.middle_emulation)
    w.node("accel-speed", round(device.accel_speed, 2))
    w.node("accel-profile", device.accel_profile.to_kdl())


def write_scroll(w: KdlWriter, device: PointerSettings) -> None:
    if device.scroll_method is not None:
        w.node("scroll-method", device.scroll_method.to_kdl())
    w.optional("scroll-button", device.scroll_button)
    w.optional_flag("scroll-button-lock", device.scroll_button_lock)


def write_scroll_factor(w: KdlWriter, device: MouseSettings | TouchpadSettings) -> None:
    vertical = round(device.scroll_factor, 2)
    if device.scroll_factor_horizontal is not None:
        w.node(
            "scroll-factor",
            props={"horizontal": round(device.scroll_factor_horizontal, 2), "vertical": vertical},
        )
    else:
        w.node("scroll-factor", vertical)


@register_section
class MouseSection(InputDeviceSection):
    category = SettingsCategory.MOUSE
    device = "mouse"

    def parse_device(self, block: Document, device: MouseSettings) -> None:
        parse_pointer(block, device)
        parse_scroll_factor(block, device)

    def render_device(self, w: KdlWriter, device: MouseSettings) -> None:
        write_pointer(w, device)
        write_scroll_factor(w, device)
        write_scroll(w, device)


_TOUCHPAD_FLAGS = (
    ("tap", "tap"),
    ("dwt", "dwt"),
    ("dwtp", "dwtp"),
    ("drag-lock", "drag_lock"),
    ("disabled-on-external-mouse", "disabled_on_external_mouse"),
)


@register_section
class TouchpadSection(InputDeviceSection):
    category = SettingsCategory.TOUCHPAD
    device = "touchpad"

    def parse_device(self, block: Document, device: TouchpadSettings) -> None:
        parse_pointer(block, device)
        for name, attr in _TOUCHPAD_FLAGS:
            setattr(device, attr, has_flag(block, [name]))
        device.drag = has_flag(block, ["drag"])
        parse_scroll_factor(block, device)
        load_enum(block, ["click-method"], device, "click_method", ClickMethod.from_kdl)
        load_enum(block, ["tap-button-map"], device, "tap_button_map", TapButtonMap.from_kdl)

    def render_device(self, w: KdlWriter, device: TouchpadSettings) -> None:
        w.optional_flag("off", device.off)
        for name, attr in _TOUCHPAD_FLAGS[:3]:
            w.optional_flag(name, getattr(device, attr))
        # niri wants an explicit boolean for drag
        w.node("drag", device.drag)
        for name, attr in _TOUCHPAD_FLAGS[3:]:
            w.optional_flag(name, getattr(device, attr))
        w.optional_flag("natural-scroll", device.natural_scroll)
        w.optional_flag("left-handed", device.left_handed)
        w.optional_flag("middle-emulation", device.middle_emulation)
        w.node("accel-speed", round(device.accel_speed, 2))
        w.node("accel-profile", device.accel_profile.to_kdl())
        write_scroll_factor(w, device)
        if device.tap_button_map is not None:
            w.node("tap-button-map", device.tap_button_map.to_kdl())
        if device.click_method is not None:
            w.node("click-method", device.click_method.to_kdl())
        write_scroll(w, device)


class PointerDeviceSection(InputDeviceSection):
    def parse_device(self, block: Document, device: PointerSettings) -> None:
        parse_pointer(block, device)

    def render_device(self, w: KdlWriter, device: PointerSettings) -> None:
        write_pointer(w, device)
        write_scroll(w, device)


@register_section
class TrackpointSection(PointerDeviceSection):
    category = SettingsCategory.TRACKPOINT
    device = "trackpoint"


@register_section
class TrackballSection(PointerDeviceSection):
    category = SettingsCategory.TRACKBALL
    device = "trackball"


# ---------------------------------------------------------------------------
# Tablet & touch
# ---------------------------------------------------------------------------

def parse_calibration_matrix(block: Document) -> list[float] | None:
    node = block.get("calibration-matrix")
    if node is None:
        return None
    values = [
        float(v) for v in node.args if isinstance(v, (int, float)) and not isinstance(v, bool)
    ]
    if len(values) != 6:
        logger.warning("calibration-matrix needs 6 numbers, got %d; ignoring", len(values))
        return None
    return values


def parse_mapped(block: Document, device: TabletSettings | TouchSettings) -> None:
    device.off = has_flag(block, ["off"])
    load_string(block, ["map-to-output"], device, "map_to_output")
    matrix = parse_calibration_matrix(block)
    if matrix is not None:
        device.calibration_matrix = matrix


def write_mapped(w: KdlWriter, device: TabletSettings | TouchSettings) -> None:
    w.optional_flag("off", device.off)
    if device.map_to_output:
        w.node("map-to-output", device.map_to_output)


@register_section
class TabletSection(InputDeviceSection):
    category = SettingsCategory.TABLET
    device = "tablet"

    def parse_device(self, block: Document, device: TabletSettings) -> None:
        parse_mapped(block, device)
        device.left_handed = has_flag(block, ["left-handed"])

    def render_device(self, w: KdlWriter, device: TabletSettings) -> None:
        write_mapped(w, device)
        w.optional_flag("left-handed", device.left_handed)
        if device.calibration_matrix:
            w.node("calibration-matrix", *[float(v) for v in device.calibration_matrix])


@register_section
class TouchSection(InputDeviceSection):
    category = SettingsCategory.TOUCH
    device = "touch"

    def parse_device(self, block: Document, device: TouchSettings) -> None:
        parse_mapped(block, device)

    def render_device(self, w: KdlWriter, device: TouchSettings) -> None:
        write_mapped(w, device)
        if device.calibration_matrix:
            w.node("calibration-matrix", *[float(v) for v in device.calibration_matrix])
