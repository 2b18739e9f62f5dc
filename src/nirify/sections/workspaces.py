from __future__ import annotations

import logging

from ..document import Document, Node
from ..fields import load_optional_string
from ..models import NamedWorkspace, Settings
from ..registry import SettingsCategory
from . import register_section
from .base import BaseSection
from .common import parse_layout_override, write_layout_override

logger = logging.getLogger(__name__)


def parse_workspace(node: Node) -> NamedWorkspace | None:
    name = node.first_arg
    if name is None:
        return None
    if not isinstance(name, str):
        logger.warning("workspace has non-string name %r, skipping", name)
        return None
    if not name:
        logger.warning("workspace has empty name, skipping")
        return None
    workspace = NamedWorkspace(name=name)
    load_optional_string(node.children, ["open-on-output"], workspace, "open_on_output")
    layout = node.get("layout")
    if layout is not None:
        workspace.layout_override = parse_layout_override(layout.children)
    return workspace


@register_section
class WorkspacesSection(BaseSection):
    category = SettingsCategory.WORKSPACES

    def parse(self, doc: Document, settings: Settings) -> None:
        for node in doc.all("workspace"):
            workspace = parse_workspace(node)
            if workspace is not None:
                settings.workspaces.add(workspace)

    def render(self, settings: Settings) -> str:
        w = self.writer()
        w.comment("Workspaces declared here will always exist.")
        w.newline()
        workspaces = settings.workspaces
        if not workspaces:
            w.comment("No named workspaces configured yet. Example:")
            w.comment('workspace "browser"')
            w.comment('workspace "coding" {')
            w.comment('    open-on-output "DP-1"')
            w.comment("}")
            return w.build()
        for workspace in workspaces:
            has_layout = workspace.layout_override is not None and not workspace.layout_override.is_empty()
            if workspace.open_on_output is None and not has_layout:
                w.node("workspace", workspace.name)
                continue
            with w.block("workspace", workspace.name):
                w.optional("open-on-output", workspace.open_on_output)
                write_layout_override(w, workspace.layout_override)
        return w.build()
