"""Window and layer rules.

Rules are written one per block with the rule's display name as the comment
directly above it; loading reads that comment back as the name.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from ..document import Document, KdlWriter, Node
from ..fields import (
    clamp_opacity,
    get_bool,
    get_float,
    get_integer,
    get_string,
    has_flag,
    has_flag_in_node,
    load_color,
    load_string,
    prop_bool,
    prop_int,
    prop_string,
    safe_i32,
)
from ..models import (
    WINDOW_MATCH_FLAGS,
    BlockOutFrom,
    DefaultColumnDisplay,
    FloatingPosition,
    IdentifiedList,
    LayerRule,
    LayerRuleMatch,
    NamedRule,
    OpenBehavior,
    PositionRelativeTo,
    Settings,
    ShadowSettings,
    WindowRule,
    WindowRuleMatch,
)
from ..registry import SettingsCategory
from . import register_section
from .appearance import is_catch_all_rule
from .base import BaseSection
from .common import parse_shadow_block, write_shadow_body

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=NamedRule)


def load_rules(
    doc: Document,
    node_name: str,
    factory: Callable[[], R],
    parse_children: Callable[[Document, R], bool],
    name_prefix: str,
    target: IdentifiedList[R],
) -> int:
    """Append every *node_name* block in *doc* to *target*.

    *parse_children* fills a fresh rule and returns False to drop it.  The
    rule name comes from the comment above the block, falling back to
    ``"<name_prefix> <n>"``.  Returns the number of rules added.
    """
    added = 0
    for node in doc.all(node_name):
        rule = factory()
        if not parse_children(node.children, rule):
            continue
        target.add(rule)
        rule.name = node.leading_comment or f"{name_prefix} {rule.id + 1}"
        added += 1
    return added


def validate_regex(pattern: str, context: str) -> str | None:
    """Return *pattern* if it compiles, otherwise log and return None."""
    try:
        re.compile(pattern)
    except re.error as exc:
        logger.warning("invalid regex %r in %s: %s", pattern, context, exc)
        return None
    return pattern


def _regex_prop(node: Node, name: str, context: str) -> str | None:
    value = prop_string(node, name)
    if value is None:
        return None
    return validate_regex(value, context)


def _radius(block: Document, context: str) -> int | None:
    value = get_integer(block, ["geometry-corner-radius"])
    return safe_i32(value, context) if value is not None else None


def _opacity(block: Document, context: str) -> float | None:
    value = get_float(block, ["opacity"])
    return clamp_opacity(value, context) if value is not None else None


def _shadow_with_on(node: Node | None) -> ShadowSettings | None:
    """Rule shadows only count when the block says ``on`` or ``off``."""
    if node is None:
        return None
    block = node.children
    shadow = ShadowSettings()
    if has_flag(block, ["off"]):
        shadow.enabled = False
        return shadow
    if block.get("on") is None and not has_flag_in_node(node, "on"):
        return None
    parse_shadow_block(block, shadow)
    return shadow


def _write_rule_shadow(w: KdlWriter, shadow: ShadowSettings | None, write_off: bool) -> None:
    if shadow is None:
        return
    if not shadow.enabled:
        if write_off:
            with w.block("shadow"):
                w.flag("off")
        return
    with w.block("shadow"):
        w.flag("on")
        write_shadow_body(w, shadow)


# ---------------------------------------------------------------------------
# Layer rules
# ---------------------------------------------------------------------------

def parse_layer_rule(block: Document, rule: LayerRule) -> bool:
    context = "layer-rule"
    matches = []
    for node in block.all("match"):
        matches.append(
            LayerRuleMatch(
                namespace=_regex_prop(node, "namespace", context),
                at_startup=prop_bool(node, "at-startup"),
            )
        )
    # keep at least one (possibly empty) match so the rule stays editable
    if matches:
        rule.matches = matches

    block_out = get_string(block, ["block-out-from"])
    if block_out is not None:
        try:
            rule.block_out_from = BlockOutFrom(block_out)
        except ValueError:
            logger.warning("unknown block-out-from %r in %s", block_out, context)

    rule.opacity = _opacity(block, context)
    rule.geometry_corner_radius = _radius(block, context)
    rule.place_within_backdrop = has_flag(block, ["place-within-backdrop"])
    rule.baba_is_float = has_flag(block, ["baba-is-float"])
    shadow = _shadow_with_on(block.get("shadow"))
    if shadow is not None and shadow.enabled:
        rule.shadow = shadow
    return True


def write_layer_rule(w: KdlWriter, rule: LayerRule) -> None:
    w.comment(rule.name)
    with w.block("layer-rule"):
        for match in rule.matches:
            props: dict[str, object] = {}
            if match.namespace is not None:
                props["namespace"] = match.namespace
            if match.at_startup is not None:
                props["at-startup"] = match.at_startup
            if props:
                w.node("match", props=props)
        if rule.block_out_from is not None:
            w.node("block-out-from", rule.block_out_from.value)
        if rule.opacity is not None:
            w.node("opacity", round(rule.opacity, 2))
        w.optional("geometry-corner-radius", rule.geometry_corner_radius)
        w.optional_flag("place-within-backdrop", rule.place_within_backdrop)
        w.optional_flag("baba-is-float", rule.baba_is_float)
        _write_rule_shadow(w, rule.shadow, write_off=False)


@register_section
class LayerRulesSection(BaseSection):
    category = SettingsCategory.LAYER_RULES

    def parse(self, doc: Document, settings: Settings) -> None:
        load_rules(doc, "layer-rule", LayerRule, parse_layer_rule, "Layer Rule", settings.layer_rules)

    def render(self, settings: Settings) -> str:
        w = self.writer()
        w.comment("Rules for layer-shell surfaces (panels, notifications, etc.)")
        w.newline()
        rules = settings.layer_rules
        if not rules:
            w.comment("No layer rules configured yet. Example:")
            w.comment("layer-rule {")
            w.comment('    match namespace="^waybar$"')
            w.comment("    opacity 0.95")
            w.comment("}")
            return w.build()
        for rule in rules:
            write_layer_rule(w, rule)
            w.newline()
        return w.build()


# ---------------------------------------------------------------------------
# Window rules
# ---------------------------------------------------------------------------

def parse_window_match(node: Node, context: str) -> WindowRuleMatch:
    match = WindowRuleMatch(
        app_id=_regex_prop(node, "app-id", context),
        title=_regex_prop(node, "title", context),
    )
    for flag in WINDOW_MATCH_FLAGS:
        setattr(match, flag.replace("-", "_"), prop_bool(node, flag))
    return match


def _match_props(match: WindowRuleMatch) -> dict[str, object]:
    props: dict[str, object] = {}
    if match.app_id is not None:
        props["app-id"] = match.app_id
    if match.title is not None:
        props["title"] = match.title
    for flag in WINDOW_MATCH_FLAGS:
        value = getattr(match, flag.replace("-", "_"))
        if value is not None:
            props[flag] = value
    return props


def _proportion(block: Document, name: str) -> float | None:
    node = block.get(name)
    if node is None:
        return None
    return get_float(node.children, ["proportion"])


def _parse_rule_style(block: Document, name: str, rule: WindowRule, prefix: str) -> None:
    node = block.get(name)
    if node is None:
        return
    children = node.children
    width = get_integer(children, ["width"])
    if width is not None:
        setattr(rule, f"{prefix}_width", width)
    for state in ("active", "inactive", "urgent"):
        load_color(children, [f"{state}-color"], rule, f"{prefix}_{state}")


def _write_rule_style(w: KdlWriter, name: str, rule: WindowRule, prefix: str) -> None:
    width = getattr(rule, f"{prefix}_width")
    colors = [(s, getattr(rule, f"{prefix}_{s}")) for s in ("active", "inactive", "urgent")]
    if width is None and all(c is None for _, c in colors):
        return
    with w.block(name):
        w.optional("width", width)
        for state, value in colors:
            if value is not None:
                w.node(f"{state}-color", value.to_hex())


def parse_window_rule(block: Document, rule: WindowRule) -> bool:
    """Fill *rule* from a ``window-rule`` block.

    Catch-all rules hold the global corner radius and belong to appearance,
    so they are rejected here.
    """
    if is_catch_all_rule(block):
        return False
    context = "window-rule"
    matches = [parse_window_match(node, context) for node in block.all("match")]
    if matches:
        rule.matches = matches
    rule.excludes = [parse_window_match(node, context) for node in block.all("exclude")]

    for behavior in (OpenBehavior.MAXIMIZED, OpenBehavior.FULLSCREEN, OpenBehavior.FLOATING):
        if has_flag(block, [behavior.value]):
            rule.open_behavior = behavior
            break

    position = block.get("default-floating-position")
    if position is not None:
        relative = prop_string(position, "relative-to")
        try:
            relative_to = PositionRelativeTo(relative) if relative else PositionRelativeTo.TOP_LEFT
        except ValueError:
            logger.warning("unknown relative-to %r in %s", relative, context)
            relative_to = PositionRelativeTo.TOP_LEFT
        rule.default_floating_position = FloatingPosition(
            x=prop_int(position, "x") or 0,
            y=prop_int(position, "y") or 0,
            relative_to=relative_to,
        )

    rule.opacity = _opacity(block, context)
    rule.corner_radius = _radius(block, context)
    rule.clip_to_geometry = get_bool(block, ["clip-to-geometry"])
    block_out = block.get("block-out-from")
    rule.block_out_from_screencast = block_out is not None and has_flag_in_node(
        block_out, "screencast"
    )
    load_string(block, ["open-on-output"], rule, "open_on_output")
    load_string(block, ["open-on-workspace"], rule, "open_on_workspace")
    rule.open_focused = get_bool(block, ["open-focused"])
    rule.default_column_width = _proportion(block, "default-column-width")
    rule.default_window_height = _proportion(block, "default-window-height")
    if block.get("open-maximized-to-edges") is not None:
        rule.open_maximized_to_edges = has_flag(block, ["open-maximized-to-edges"])
    rule.scroll_factor = get_float(block, ["scroll-factor"])
    if block.get("draw-border-with-background") is not None:
        rule.draw_border_with_background = has_flag(block, ["draw-border-with-background"])

    for key in ("min-width", "max-width", "min-height", "max-height"):
        value = get_integer(block, [key])
        if value is not None:
            setattr(rule, key.replace("-", "_"), safe_i32(value, f"{context} {key}"))

    _parse_rule_style(block, "focus-ring", rule, "focus_ring")
    _parse_rule_style(block, "border", rule, "border")

    vrr = block.get("variable-refresh-rate")
    if vrr is not None:
        if vrr.first_arg == "on":
            rule.variable_refresh_rate = True
        elif vrr.first_arg == "off":
            rule.variable_refresh_rate = False
        else:
            rule.variable_refresh_rate = has_flag(block, ["variable-refresh-rate"])

    display = get_string(block, ["default-column-display"])
    if display is not None:
        try:
            rule.default_column_display = DefaultColumnDisplay(display)
        except ValueError:
            logger.warning("unknown default-column-display %r in %s", display, context)

    tiled = get_string(block, ["tiled-state"])
    if tiled == "tiled":
        rule.tiled_state = True
    elif tiled == "floating":
        rule.tiled_state = False

    if block.get("baba-is-float") is not None:
        rule.baba_is_float = has_flag(block, ["baba-is-float"])

    shadow = block.get("shadow")
    if shadow is not None:
        if shadow.first_arg == "off":
            rule.shadow = ShadowSettings(enabled=False)
        elif shadow.first_arg == "on" and not shadow.has_children:
            rule.shadow = ShadowSettings(enabled=True)
        else:
            rule.shadow = _shadow_with_on(shadow)
    return True


def write_window_rule(w: KdlWriter, rule: WindowRule) -> None:
    w.comment(rule.name)
    with w.block("window-rule"):
        wrote_match = False
        for match in rule.matches:
            props = _match_props(match)
            if props:
                w.node("match", props=props)
                wrote_match = True
        if not wrote_match:
            # an empty match keeps the rule from turning into a catch-all
            w.node("match", props={"app-id": ".*"})
        for exclude in rule.excludes:
            props = _match_props(exclude)
            if props:
                w.node("exclude", props=props)

        if rule.open_behavior is not OpenBehavior.NORMAL:
            w.node(rule.open_behavior.value, True)
        pos = rule.default_floating_position
        if pos is not None:
            w.node(
                "default-floating-position",
                props={"x": pos.x, "y": pos.y, "relative-to": pos.relative_to.value},
            )
        w.optional("open-focused", rule.open_focused)
        w.optional("open-on-output", rule.open_on_output)
        w.optional("open-on-workspace", rule.open_on_workspace)
        if rule.opacity is not None:
            w.node("opacity", round(rule.opacity, 2))
        w.optional("geometry-corner-radius", rule.corner_radius)
        w.optional("clip-to-geometry", rule.clip_to_geometry)
        if rule.block_out_from_screencast:
            w.node("block-out-from", "screencast")
        if rule.default_column_width is not None:
            with w.block("default-column-width"):
                w.node("proportion", round(rule.default_column_width, 5))
        if rule.default_window_height is not None:
            with w.block("default-window-height"):
                w.node("proportion", round(rule.default_window_height, 5))
        w.optional_flag("open-maximized-to-edges", rule.open_maximized_to_edges is True)
        if rule.scroll_factor is not None:
            w.node("scroll-factor", round(rule.scroll_factor, 2))
        w.optional_flag("draw-border-with-background", rule.draw_border_with_background is True)
        for key in ("min-width", "max-width", "min-height", "max-height"):
            w.optional(key, getattr(rule, key.replace("-", "_")))
        _write_rule_style(w, "focus-ring", rule, "focus_ring")
        _write_rule_style(w, "border", rule, "border")
        w.optional("variable-refresh-rate", rule.variable_refresh_rate)
        if rule.default_column_display is DefaultColumnDisplay.TABBED:
            w.node("default-column-display", "tabbed")
        if rule.tiled_state is not None:
            w.node("tiled-state", "tiled" if rule.tiled_state else "floating")
        w.optional_flag("baba-is-float", rule.baba_is_float is True)
        _write_rule_shadow(w, rule.shadow, write_off=True)


@register_section
class WindowRulesSection(BaseSection):
    category = SettingsCategory.WINDOW_RULES

    def parse(self, doc: Document, settings: Settings) -> None:
        load_rules(doc, "window-rule", WindowRule, parse_window_rule, "Rule", settings.window_rules)

    def render(self, settings: Settings) -> str:
        w = self.writer()
        rules = settings.window_rules
        if not rules:
            w.comment("No window rules configured yet. Example:")
            w.comment("window-rule {")
            w.comment('    match app-id="firefox"')
            w.comment("    open-maximized true")
            w.comment("}")
            return w.build()
        for rule in rules:
            write_window_rule(w, rule)
            w.newline()
        return w.build()
