from __future__ import annotations

import logging

from ..document import Document
from ..fields import load_enum, load_flag, load_string, prop_string
from ..models import Settings
from ..registry import SettingsCategory
from ..types import ModKey, WarpMouseMode
from . import register_section
from .base import BaseSection

logger = logging.getLogger(__name__)


def parse_input_globals(block: Document, settings: Settings) -> None:
    """Input-level behavior shared by the behavior file and imported configs."""
    behavior = settings.behavior
    load_enum(block, ["mod-key"], behavior, "mod_key", ModKey.from_kdl)
    load_enum(block, ["mod-key-nested"], behavior, "mod_key_nested", ModKey.from_kdl)
    load_flag(block, ["disable-power-key-handling"], behavior, "disable_power_key_handling")
    load_flag(block, ["workspace-auto-back-and-forth"], behavior, "workspace_auto_back_and_forth")

    ffm = block.get("focus-follows-mouse")
    if ffm is not None:
        behavior.focus_follows_mouse = ffm.first_arg is not False
        amount = prop_string(ffm, "max-scroll-amount")
        if amount is not None:
            try:
                behavior.focus_follows_mouse_max_scroll_amount = float(amount.rstrip("%"))
            except ValueError:
                logger.warning("invalid max-scroll-amount %r", amount)

    warp = block.get("warp-mouse-to-focus")
    if warp is not None:
        mode = prop_string(warp, "mode")
        if mode is None:
            behavior.warp_mouse_to_focus = WarpMouseMode.CENTER_XY
        else:
            behavior.warp_mouse_to_focus = WarpMouseMode.from_kdl(mode) or WarpMouseMode.OFF


@register_section
class BehaviorSection(BaseSection):
    category = SettingsCategory.BEHAVIOR

    def parse(self, doc: Document, settings: Settings) -> None:
        input_node = doc.get("input")
        if input_node is not None:
            parse_input_globals(input_node.children, settings)
        # older behavior files kept these at the top level
        parse_input_globals(doc, settings)
        hotkey = doc.get("hotkey-overlay")
        if hotkey is not None:
            load_flag(hotkey.children, ["skip-at-startup"], settings.miscellaneous, "hotkey_overlay_skip_at_startup")
        load_flag(doc, ["prefer-no-csd"], settings.miscellaneous, "prefer_no_csd")
        load_string(doc, ["screenshot-path"], settings.miscellaneous, "screenshot_path")

    def render(self, settings: Settings) -> str:
        behavior = settings.behavior
        w = self.writer()
        has_input = (
            behavior.mod_key is not ModKey.SUPER
            or behavior.mod_key_nested is not None
            or behavior.disable_power_key_handling
            or behavior.focus_follows_mouse
            or behavior.warp_mouse_to_focus is not WarpMouseMode.OFF
            or behavior.workspace_auto_back_and_forth
        )
        if not has_input:
            return w.build()
        with w.block("input"):
            if behavior.mod_key is not ModKey.SUPER:
                w.node("mod-key", behavior.mod_key.to_kdl())
            if behavior.mod_key_nested is not None:
                w.node("mod-key-nested", behavior.mod_key_nested.to_kdl())
            w.optional_flag("disable-power-key-handling", behavior.disable_power_key_handling)
            if behavior.focus_follows_mouse:
                amount = behavior.focus_follows_mouse_max_scroll_amount
                if amount is not None:
                    w.node("focus-follows-mouse", props={"max-scroll-amount": f"{int(amount)}%"})
                else:
                    w.flag("focus-follows-mouse")
            if behavior.warp_mouse_to_focus is not WarpMouseMode.OFF:
                w.node("warp-mouse-to-focus", props={"mode": behavior.warp_mouse_to_focus.to_kdl()})
            w.optional_flag("workspace-auto-back-and-forth", behavior.workspace_auto_back_and_forth)
        return w.build()
