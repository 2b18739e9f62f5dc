from __future__ import annotations

import logging

from ..document import Document, KdlWriter, Node, format_value
from ..fields import (
    get_float,
    get_integer,
    get_string,
    has_flag,
    load_color,
    load_flag,
    load_float,
    load_int,
    load_string,
    prop_bool,
    prop_float,
    prop_int,
)
from ..models import (
    ANIMATION_NAMES,
    DAMPING_RATIO_RANGE,
    EASING_CURVES,
    EASING_DURATION_RANGE,
    EPSILON_RANGE,
    STIFFNESS_RANGE,
    AnimationType,
    OutputConfig,
    OutputHotCorners,
    Settings,
    SingleAnimationConfig,
    SpringParams,
    WorkspaceShadow,
    clamp,
)
from ..registry import SettingsCategory
from ..types import Transform, VrrMode
from . import register_section
from .base import BaseSection
from .common import parse_layout_override, parse_offset, write_layout_override

logger = logging.getLogger(__name__)

_CORNERS = ("top-left", "top-right", "bottom-left", "bottom-right")


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

def parse_output_hot_corners(block: Document) -> OutputHotCorners:
    corners = OutputHotCorners()
    if has_flag(block, ["off"]):
        corners.enabled = False
        return corners
    for corner in _CORNERS:
        setattr(corners, corner.replace("-", "_"), has_flag(block, [corner]))
    return corners


def parse_output(node: Node) -> OutputConfig | None:
    name = node.first_arg
    if not isinstance(name, str) or not name:
        logger.warning("output without a name, skipping")
        return None
    output = OutputConfig(name=name)
    block = node.children
    if has_flag(block, ["off"]):
        output.enabled = False
    load_float(block, ["scale"], output, "scale")

    mode = block.get("mode")
    if mode is not None:
        if isinstance(mode.first_arg, str):
            output.mode = mode.first_arg
        output.mode_custom = prop_bool(mode, "custom") is True

    modeline = block.get("modeline")
    if modeline is not None and modeline.args:
        output.modeline = " ".join(format_value(a) for a in modeline.args)

    position = block.get("position")
    if position is not None:
        output.position_x = prop_int(position, "x")
        output.position_y = prop_int(position, "y")

    transform = get_string(block, ["transform"])
    if transform is not None:
        output.transform = Transform.from_kdl(transform) or Transform.NORMAL

    vrr = block.get("variable-refresh-rate")
    if vrr is not None:
        if prop_bool(vrr, "on-demand"):
            output.vrr = VrrMode.ON_DEMAND
        elif isinstance(vrr.first_arg, str):
            output.vrr = VrrMode.from_kdl(vrr.first_arg) or VrrMode.OFF
        else:
            output.vrr = VrrMode.ON if has_flag(block, ["variable-refresh-rate"]) else VrrMode.OFF

    load_flag(block, ["focus-at-startup"], output, "focus_at_startup")
    load_color(block, ["backdrop-color"], output, "backdrop_color")

    hot_corners = block.get("hot-corners")
    if hot_corners is not None:
        output.hot_corners = parse_output_hot_corners(hot_corners.children)
    layout = block.get("layout")
    if layout is not None:
        output.layout_override = parse_layout_override(layout.children)
    return output


def write_output(w: KdlWriter, output: OutputConfig) -> None:
    with w.block("output", output.name):
        if not output.enabled:
            w.flag("off")
            return
        if abs(output.scale - 1.0) > 0.001:
            w.node("scale", round(output.scale, 2))
        if output.mode:
            props = {"custom": True} if output.mode_custom else None
            w.node("mode", output.mode, props=props)
        if output.modeline:
            w.raw(f"modeline {output.modeline}")
        if output.position_x is not None or output.position_y is not None:
            w.node("position", props={"x": output.position_x or 0, "y": output.position_y or 0})
        if output.transform is not Transform.NORMAL:
            w.node("transform", output.transform.to_kdl())
        if output.vrr is VrrMode.ON:
            w.flag("variable-refresh-rate")
        elif output.vrr is VrrMode.ON_DEMAND:
            w.node("variable-refresh-rate", props={"on-demand": True})
        w.optional_flag("focus-at-startup", output.focus_at_startup)
        if output.backdrop_color is not None:
            w.node("backdrop-color", output.backdrop_color.to_hex())
        corners = output.hot_corners
        if corners is not None:
            with w.block("hot-corners"):
                if corners.enabled is False:
                    w.flag("off")
                else:
                    for corner in _CORNERS:
                        w.optional_flag(corner, getattr(corners, corner.replace("-", "_")))
        write_layout_override(w, output.layout_override)


@register_section
class OutputsSection(BaseSection):
    """``output`` nodes are appended, so imports collect outputs from every include."""

    category = SettingsCategory.OUTPUTS

    def parse(self, doc: Document, settings: Settings) -> None:
        for node in doc.all("output"):
            output = parse_output(node)
            if output is not None:
                settings.outputs.outputs.append(output)

    def render(self, settings: Settings) -> str:
        w = self.writer()
        outputs = settings.outputs.outputs
        if not outputs:
            w.comment("No outputs configured yet. Example:")
            w.comment('output "eDP-1" {')
            w.comment("    scale 1.0")
            w.comment("}")
            return w.build()
        for output in outputs:
            write_output(w, output)
            w.newline()
        return w.build()


# ---------------------------------------------------------------------------
# Animations
# ---------------------------------------------------------------------------

def parse_spring(node: Node) -> SpringParams:
    spring = SpringParams()
    damping = prop_float(node, "damping-ratio")
    if damping is not None:
        spring.damping_ratio = clamp(damping, DAMPING_RATIO_RANGE)
    stiffness = prop_int(node, "stiffness")
    if stiffness is not None:
        spring.stiffness = clamp(stiffness, STIFFNESS_RANGE)
    epsilon = prop_float(node, "epsilon")
    if epsilon is not None:
        spring.epsilon = clamp(epsilon, EPSILON_RANGE)
    return spring


def parse_single_animation(block: Document) -> SingleAnimationConfig:
    """Parse one named animation block; the first recognised kind wins."""
    config = SingleAnimationConfig()
    if has_flag(block, ["off"]):
        config.animation_type = AnimationType.OFF
        return config

    shader = get_string(block, ["custom-shader"])
    if shader is not None:
        config.animation_type = AnimationType.CUSTOM_SHADER
        config.custom_shader = shader
        return config

    spring = block.get("spring")
    if spring is not None:
        config.animation_type = AnimationType.SPRING
        config.spring = parse_spring(spring)
        return config

    duration = get_integer(block, ["duration-ms"])
    if duration is not None:
        config.animation_type = AnimationType.EASING
        config.easing.duration_ms = clamp(duration, EASING_DURATION_RANGE)
        curve = block.get("curve")
        if curve is not None and isinstance(curve.first_arg, str):
            name = curve.first_arg
            points = [
                float(a) for a in curve.args[1:]
                if isinstance(a, (int, float)) and not isinstance(a, bool)
            ]
            if name == "cubic-bezier" and len(points) >= 4:
                config.easing.curve = name
                config.easing.bezier = (points[0], points[1], points[2], points[3])
            elif name in EASING_CURVES:
                config.easing.curve = name
            else:
                logger.warning("unknown easing curve %r", name)
    return config


def write_single_animation(w: KdlWriter, name: str, config: SingleAnimationConfig) -> bool:
    kind = config.animation_type
    if kind is AnimationType.DEFAULT:
        return False
    if kind is AnimationType.CUSTOM_SHADER and config.custom_shader is None:
        return False
    w.newline()
    with w.block(name):
        if kind is AnimationType.OFF:
            w.flag("off")
        elif kind is AnimationType.SPRING:
            spring = config.spring
            w.node(
                "spring",
                props={
                    "damping-ratio": float(spring.damping_ratio),
                    "stiffness": int(spring.stiffness),
                    "epsilon": float(spring.epsilon),
                },
            )
        elif kind is AnimationType.EASING:
            easing = config.easing
            w.node("duration-ms", int(easing.duration_ms))
            if easing.bezier is not None:
                w.node("curve", "cubic-bezier", *easing.bezier)
            else:
                w.node("curve", easing.curve)
        else:
            w.node("custom-shader", config.custom_shader)
    return True


@register_section
class AnimationsSection(BaseSection):
    category = SettingsCategory.ANIMATIONS

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("animations")
        if node is None:
            return
        block = node.children
        animations = settings.animations
        if has_flag(block, ["off"]):
            animations.enabled = False
        load_float(block, ["slowdown"], animations, "slowdown")
        for name in ANIMATION_NAMES:
            anim = block.get(name)
            if anim is not None:
                animations.per_animation[name] = parse_single_animation(anim.children)

    def render(self, settings: Settings) -> str:
        animations = settings.animations
        w = self.writer()
        with w.block("animations"):
            w.optional_flag("off", not animations.enabled)
            if abs(animations.slowdown - 1.0) > 0.01:
                w.node("slowdown", round(animations.slowdown, 2))
            for name in ANIMATION_NAMES:
                config = animations.per_animation.get(name)
                if config is not None:
                    write_single_animation(w, name, config)
        return w.build()


# ---------------------------------------------------------------------------
# Cursor & overview
# ---------------------------------------------------------------------------

@register_section
class CursorSection(BaseSection):
    category = SettingsCategory.CURSOR

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("cursor")
        if node is None:
            return
        block = node.children
        cursor = settings.cursor
        load_string(block, ["xcursor-theme"], cursor, "theme")
        load_int(block, ["xcursor-size"], cursor, "size")
        load_flag(block, ["hide-when-typing"], cursor, "hide_when_typing")
        load_int(block, ["hide-after-inactive-ms"], cursor, "hide_after_inactive_ms")

    def render(self, settings: Settings) -> str:
        cursor = settings.cursor
        w = self.writer()
        with w.block("cursor"):
            if cursor.theme:
                w.node("xcursor-theme", cursor.theme)
            w.node("xcursor-size", cursor.size)
            w.optional_flag("hide-when-typing", cursor.hide_when_typing)
            w.optional("hide-after-inactive-ms", cursor.hide_after_inactive_ms)
        return w.build()


def parse_workspace_shadow(block: Document, current: WorkspaceShadow | None) -> WorkspaceShadow:
    shadow = current if current is not None else WorkspaceShadow()
    if has_flag(block, ["off"]):
        shadow.enabled = False
        return shadow
    shadow.enabled = True
    load_int(block, ["softness"], shadow, "softness")
    load_int(block, ["spread"], shadow, "spread")
    x, y = parse_offset(block.get("offset"))
    if x is not None:
        shadow.offset_x = x
    if y is not None:
        shadow.offset_y = y
    load_color(block, ["color"], shadow, "color")
    return shadow


@register_section
class OverviewSection(BaseSection):
    category = SettingsCategory.OVERVIEW

    def parse(self, doc: Document, settings: Settings) -> None:
        node = doc.get("overview")
        if node is None:
            return
        block = node.children
        overview = settings.overview
        zoom = get_float(block, ["zoom"])
        if zoom is not None:
            overview.zoom = zoom
        load_color(block, ["backdrop-color"], overview, "backdrop_color")
        shadow = block.get("workspace-shadow")
        if shadow is not None:
            overview.workspace_shadow = parse_workspace_shadow(
                shadow.children, overview.workspace_shadow
            )

    def render(self, settings: Settings) -> str:
        overview = settings.overview
        w = self.writer()
        with w.block("overview"):
            w.node("zoom", round(overview.zoom, 2))
            if overview.backdrop_color is not None:
                w.node("backdrop-color", overview.backdrop_color.to_hex())
            shadow = overview.workspace_shadow
            if shadow is not None:
                with w.block("workspace-shadow"):
                    if not shadow.enabled:
                        w.flag("off")
                    else:
                        w.node("softness", shadow.softness)
                        w.node("spread", shadow.spread)
                        w.node("offset", props={"x": shadow.offset_x, "y": shadow.offset_y})
                        w.node("color", shadow.color.to_hex())
        return w.build()
