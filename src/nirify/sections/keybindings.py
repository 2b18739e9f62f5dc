from __future__ import annotations

import logging

from ..document import Document, KdlWriter, Node
from ..fields import prop_bool, prop_int, prop_string, string_args
from ..models import (
    KeybindAction,
    KeybindActionKind,
    Keybinding,
    KeybindingsSettings,
    Settings,
)
from ..registry import SettingsCategory
from . import register_section
from .base import BaseSection

logger = logging.getLogger(__name__)


def parse_action(block: Document) -> KeybindAction | None:
    """Only the first node of a bind's body is the action."""
    if not block:
        return None
    node = block.nodes[0]
    if node.name == "spawn":
        return KeybindAction.spawn(*string_args(node))
    if node.name == "spawn-sh":
        command = node.first_arg if isinstance(node.first_arg, str) else ""
        return KeybindAction.spawn_sh(command)
    if node.has_children:
        logger.debug("ignoring nested arguments of action %s", node.name)
    return KeybindAction(
        kind=KeybindActionKind.ACTION,
        name=node.name,
        args=list(node.args),
        props=dict(node.props),
    )


def parse_binding(node: Node) -> Keybinding | None:
    action = parse_action(node.children)
    if action is None:
        logger.warning("bind %s has no action, skipping", node.name)
        return None
    binding = Keybinding(key_combo=node.name, action=action)
    binding.hotkey_overlay_title = prop_string(node, "hotkey-overlay-title")
    binding.allow_when_locked = prop_bool(node, "allow-when-locked") is True
    binding.cooldown_ms = prop_int(node, "cooldown-ms")
    repeat = prop_bool(node, "repeat")
    if repeat is not None:
        binding.repeat = repeat
    return binding


def parse_binds(doc: Document, target: KeybindingsSettings) -> int:
    """Append the binds of every ``binds {}`` block in *doc*; return the count."""
    added = 0
    for binds in doc.all("binds"):
        for node in binds.children:
            binding = parse_binding(node)
            if binding is not None:
                target.add(binding)
                added += 1
    return added


def write_binding(w: KdlWriter, binding: Keybinding) -> None:
    props: dict[str, object] = {}
    if binding.hotkey_overlay_title is not None:
        props["hotkey-overlay-title"] = binding.hotkey_overlay_title
    if binding.allow_when_locked:
        props["allow-when-locked"] = True
    if binding.cooldown_ms is not None:
        props["cooldown-ms"] = binding.cooldown_ms
    if not binding.repeat:
        props["repeat"] = False
    action = binding.action
    with w.block(binding.key_combo, props=props):
        if action.kind is KeybindActionKind.SPAWN:
            w.node("spawn", *action.args)
        elif action.kind is KeybindActionKind.SPAWN_SH:
            w.node("spawn-sh", *action.args[:1])
        else:
            w.node(action.name, *action.args, props=action.props)


@register_section
class KeybindingsSection(BaseSection):
    category = SettingsCategory.KEYBINDINGS

    def parse(self, doc: Document, settings: Settings) -> None:
        keybindings = settings.keybindings
        if parse_binds(doc, keybindings):
            keybindings.loaded = True

    def render(self, settings: Settings) -> str:
        w = self.writer()
        bindings = settings.keybindings
        if not bindings:
            w.comment("No keybindings configured yet.")
            return w.build()
        with w.block("binds"):
            for binding in bindings:
                write_binding(w, binding)
        return w.build()
