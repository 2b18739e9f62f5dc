from __future__ import annotations

from ..document import Document
from ..fields import get_float, get_integer, load_color, load_enum, load_flag
from ..models import Settings
from ..registry import SettingsCategory
from ..types import CenterFocusedColumn, ColumnWidthType
from . import register_section
from .base import BaseSection
from .common import StyledFeature, parse_styled_feature, write_color_or_gradient


def _apply_styled(data: StyledFeature | None, target: object, prefix: str, width_attr: str) -> None:
    if data is None:
        return
    setattr(target, f"{prefix}_enabled", data.enabled)
    if data.width is not None:
        setattr(target, width_attr, float(data.width))
    for state in ("active", "inactive", "urgent"):
        value = getattr(data, state)
        if value is not None:
            setattr(target, f"{prefix}_{state}", value)


def parse_layout_children(block: Document, settings: Settings) -> None:
    """Parse a ``layout {}`` block; shared with output and import paths."""
    appearance = settings.appearance
    behavior = settings.behavior

    gaps = block.get("gaps")
    if gaps is not None:
        inner = gaps.props.get("inner")
        outer = gaps.props.get("outer")
        if isinstance(inner, (int, float)) and not isinstance(inner, bool):
            appearance.gaps_inner = float(inner)
        if isinstance(outer, (int, float)) and not isinstance(outer, bool):
            appearance.gaps_outer = float(outer)
        value = get_float(block, ["gaps"])
        if value is not None and not gaps.props:
            appearance.gaps_inner = appearance.gaps_outer = value

    _apply_styled(parse_styled_feature(block, "focus-ring"), appearance, "focus_ring", "focus_ring_width")
    _apply_styled(parse_styled_feature(block, "border"), appearance, "border", "border_thickness")

    struts = block.get("struts")
    if struts is not None:
        for side in ("left", "right", "top", "bottom"):
            value = get_float(struts.children, [side])
            if value is not None:
                setattr(behavior, f"strut_{side}", value)

    load_enum(block, ["center-focused-column"], behavior, "center_focused_column", CenterFocusedColumn.from_kdl)
    load_flag(block, ["always-center-single-column"], behavior, "always_center_single_column")
    load_flag(block, ["empty-workspace-above-first"], behavior, "empty_workspace_above_first")

    dcw = block.get("default-column-width")
    if dcw is not None:
        proportion = get_float(dcw.children, ["proportion"])
        fixed = get_integer(dcw.children, ["fixed"])
        if proportion is not None:
            behavior.default_column_width_type = ColumnWidthType.PROPORTION
            behavior.default_column_width_proportion = proportion
        elif fixed is not None:
            behavior.default_column_width_type = ColumnWidthType.FIXED
            behavior.default_column_width_fixed = float(fixed)

    load_color(block, ["background-color"], appearance, "background_color")


def is_catch_all_rule(block: Document) -> bool:
    return block.get("match") is None and block.get("exclude") is None


@register_section
class AppearanceSection(BaseSection):
    category = SettingsCategory.APPEARANCE

    def parse(self, doc: Document, settings: Settings) -> None:
        layout = doc.get("layout")
        if layout is not None:
            parse_layout_children(layout.children, settings)
        # the global corner radius lives in the first catch-all window rule
        for rule in doc.all("window-rule"):
            if not is_catch_all_rule(rule.children):
                continue
            radius = get_integer(rule.children, ["geometry-corner-radius"])
            if radius is not None:
                settings.appearance.corner_radius = float(radius)
                break

    def render(self, settings: Settings) -> str:
        appearance = settings.appearance
        behavior = settings.behavior
        w = self.writer()
        with w.block("layout"):
            w.node("gaps", round(appearance.gaps_inner))
            if appearance.focus_ring_enabled:
                with w.block("focus-ring"):
                    w.node("width", round(appearance.focus_ring_width))
                    write_color_or_gradient(w, "active", appearance.focus_ring_active)
                    write_color_or_gradient(w, "inactive", appearance.focus_ring_inactive)
                    write_color_or_gradient(w, "urgent", appearance.focus_ring_urgent)
            else:
                with w.block("focus-ring"):
                    w.flag("off")
            if appearance.border_enabled:
                with w.block("border"):
                    w.node("width", round(appearance.border_thickness))
                    write_color_or_gradient(w, "active", appearance.border_active)
                    write_color_or_gradient(w, "inactive", appearance.border_inactive)
                    write_color_or_gradient(w, "urgent", appearance.border_urgent)
            else:
                with w.block("border"):
                    w.flag("off")
            if appearance.background_color is not None:
                w.node("background-color", appearance.background_color.to_hex())
            # struts and column placement are behavior fields that niri reads from layout {}
            if behavior.has_struts():
                with w.block("struts"):
                    w.node("left", round(behavior.strut_left))
                    w.node("right", round(behavior.strut_right))
                    w.node("top", round(behavior.strut_top))
                    w.node("bottom", round(behavior.strut_bottom))
            if behavior.center_focused_column is not CenterFocusedColumn.NEVER:
                w.node("center-focused-column", behavior.center_focused_column.to_kdl())
            w.optional_flag("always-center-single-column", behavior.always_center_single_column)
            w.optional_flag("empty-workspace-above-first", behavior.empty_workspace_above_first)
            with w.block("default-column-width"):
                if behavior.default_column_width_type is ColumnWidthType.FIXED:
                    w.node("fixed", round(behavior.default_column_width_fixed))
                else:
                    w.node("proportion", round(behavior.default_column_width_proportion, 5))
        if appearance.corner_radius > 0:
            w.newline()
            with w.block("window-rule"):
                w.node("geometry-corner-radius", round(appearance.corner_radius))
        return w.build()
