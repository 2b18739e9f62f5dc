"""Section registry: one parser/renderer per settings category."""
from __future__ import annotations

from ..errors import UnknownCategoryError
from ..registry import SettingsCategory
from .base import BaseSection

_REGISTRY: dict[SettingsCategory, BaseSection] = {}


def register_section(section: type[BaseSection]) -> type[BaseSection]:
    """Register a section class and return it for decorator use."""
    _REGISTRY[section.category] = section()
    return section


def get_section(category: SettingsCategory) -> BaseSection:
    section = _REGISTRY.get(category)
    if section is None:
        raise UnknownCategoryError(f"No section for {category.name}")
    return section


def all_sections() -> list[BaseSection]:
    """Registered sections in registry order."""
    return [_REGISTRY[c] for c in SettingsCategory if c in _REGISTRY]


# register default sections
from . import (  # noqa: F401,E402
    appearance,
    behavior,
    devices,
    display,
    keybindings,
    layout,
    rules,
    system,
    workspaces,
)
