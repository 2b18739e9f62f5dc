"""Parsing and rendering pieces shared by several sections."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..document import Document, KdlWriter, Node
from ..fields import (
    get_float,
    get_integer,
    get_string,
    has_flag,
    load_color,
    load_flag,
    load_int,
    prop_float,
    prop_int,
    prop_string,
)
from ..models import LayoutOverride, ShadowSettings
from ..types import (
    CenterFocusedColumn,
    Color,
    ColorOrGradient,
    ColorSpace,
    Gradient,
    GradientRelativeTo,
    HueInterpolation,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Colors and gradients
# ---------------------------------------------------------------------------

def parse_gradient(node: Node) -> Gradient | None:
    """Build a gradient from ``from=``/``to=`` props; both are required."""
    start = Color.from_hex(prop_string(node, "from") or "")
    end = Color.from_hex(prop_string(node, "to") or "")
    if start is None or end is None:
        return None
    angle = prop_int(node, "angle")
    relative = GradientRelativeTo.from_kdl(prop_string(node, "relative-to") or "")
    color_space = ColorSpace.SRGB
    hue = None
    interp = prop_string(node, "in")
    if interp:
        space, _, rest = interp.partition(" ")
        color_space = ColorSpace.from_kdl(space) or ColorSpace.SRGB
        if "hue" in rest:
            hue = HueInterpolation.from_kdl(rest.strip())
    return Gradient(
        start=start,
        end=end,
        angle=(angle % 360) if angle is not None else 180,
        relative_to=relative or GradientRelativeTo.WINDOW,
        color_space=color_space,
        hue_interpolation=hue,
    )


def gradient_props(gradient: Gradient) -> dict[str, object]:
    props: dict[str, object] = {
        "from": gradient.start.to_hex(),
        "to": gradient.end.to_hex(),
    }
    if gradient.angle != 180:
        props["angle"] = gradient.angle
    if gradient.relative_to is not GradientRelativeTo.WINDOW:
        props["relative-to"] = gradient.relative_to.to_kdl()
    interp = gradient.interpolation()
    if interp is not None:
        props["in"] = interp
    return props


def load_color_or_gradient(children: Document, variant: str) -> ColorOrGradient | None:
    """Read ``<variant>-gradient`` or, failing that, ``<variant>-color``."""
    node = children.get(f"{variant}-gradient")
    if node is not None:
        gradient = parse_gradient(node)
        if gradient is not None:
            return gradient
    hex_value = get_string(children, [f"{variant}-color"])
    if hex_value is not None:
        return Color.from_hex(hex_value)
    return None


def write_color_or_gradient(w: KdlWriter, variant: str, value: ColorOrGradient | None) -> None:
    if value is None:
        return
    if isinstance(value, Gradient):
        w.node(f"{variant}-gradient", props=gradient_props(value))
    else:
        w.node(f"{variant}-color", value.to_hex())


# ---------------------------------------------------------------------------
# Styled on/off blocks
# ---------------------------------------------------------------------------

@dataclass
class StyledFeature:
    enabled: bool
    width: int | None = None
    active: ColorOrGradient | None = None
    inactive: ColorOrGradient | None = None
    urgent: ColorOrGradient | None = None


def parse_styled_feature(children: Document, name: str) -> StyledFeature | None:
    """Parse a focus-ring or border block; ``None`` when the block is absent."""
    node = children.get(name)
    if node is None:
        return None
    block = node.children
    if has_flag(block, ["off"]):
        return StyledFeature(enabled=False)
    return StyledFeature(
        enabled=True,
        width=get_integer(block, ["width"]),
        active=load_color_or_gradient(block, "active"),
        inactive=load_color_or_gradient(block, "inactive"),
        urgent=load_color_or_gradient(block, "urgent"),
    )


def parse_offset(node: Node | None) -> tuple[int | None, int | None]:
    if node is None:
        return None, None
    return prop_int(node, "x"), prop_int(node, "y")


def parse_shadow_block(block: Document, shadow: ShadowSettings) -> None:
    """Fill *shadow* from the children of a ``shadow {}`` block."""
    if has_flag(block, ["off"]):
        shadow.enabled = False
        return
    shadow.enabled = True
    load_int(block, ["softness"], shadow, "softness")
    load_int(block, ["spread"], shadow, "spread")
    x, y = parse_offset(block.get("offset"))
    if x is not None:
        shadow.offset_x = x
    if y is not None:
        shadow.offset_y = y
    load_color(block, ["color"], shadow, "color")
    load_color(block, ["inactive-color"], shadow, "inactive_color")
    load_flag(block, ["draw-behind-window"], shadow, "draw_behind_window")


def write_shadow_body(w: KdlWriter, shadow: ShadowSettings) -> None:
    w.optional_flag("draw-behind-window", shadow.draw_behind_window)
    w.node("softness", shadow.softness)
    w.node("spread", shadow.spread)
    w.node("offset", props={"x": shadow.offset_x, "y": shadow.offset_y})
    w.node("color", shadow.color.to_hex())
    w.node("inactive-color", shadow.inactive_color.to_hex())


# ---------------------------------------------------------------------------
# Per-output and per-workspace layout overrides
# ---------------------------------------------------------------------------

def _number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def parse_layout_override(block: Document) -> LayoutOverride | None:
    layout = LayoutOverride()
    gaps = block.get("gaps")
    if gaps is not None:
        if gaps.props:
            layout.gaps_inner = prop_float(gaps, "inner")
            layout.gaps_outer = prop_float(gaps, "outer")
        else:
            value = _number(gaps.first_arg)
            layout.gaps_inner = layout.gaps_outer = value
    struts = block.get("struts")
    if struts is not None:
        for side in ("left", "right", "top", "bottom"):
            value = get_float(struts.children, [side])
            if value is None:
                value = prop_float(struts, side)
            setattr(layout, f"strut_{side}", value)
    cfc = get_string(block, ["center-focused-column"])
    if cfc is not None:
        layout.center_focused_column = CenterFocusedColumn.from_kdl(cfc)
    if block.get("always-center-single-column") is not None:
        layout.always_center_single_column = has_flag(block, ["always-center-single-column"])
    return None if layout.is_empty() else layout


def write_layout_override(w: KdlWriter, layout: LayoutOverride | None) -> None:
    if layout is None or layout.is_empty():
        return
    with w.block("layout"):
        if layout.gaps_inner is not None:
            w.node("gaps", round(layout.gaps_inner))
        sides = {
            side: getattr(layout, f"strut_{side}")
            for side in ("left", "right", "top", "bottom")
        }
        if any(v is not None for v in sides.values()):
            with w.block("struts"):
                for side, value in sides.items():
                    if value is not None:
                        w.node(side, round(value))
        if layout.center_focused_column is not None:
            w.node("center-focused-column", layout.center_focused_column.to_kdl())
        if layout.always_center_single_column:
            w.flag("always-center-single-column")
