"""Settings categories and the files that hold them."""
from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath

from .errors import UnknownCategoryError


class SettingsCategory(Enum):
    """One independently loadable and saveable slice of the settings model.

    Each member's value is the canonical path of its file relative to the
    managed directory.  Paths are unique across members.
    """

    APPEARANCE = "appearance.kdl"
    BEHAVIOR = "behavior.kdl"
    KEYBOARD = "input/keyboard.kdl"
    MOUSE = "input/mouse.kdl"
    TOUCHPAD = "input/touchpad.kdl"
    TRACKPOINT = "input/trackpoint.kdl"
    TRACKBALL = "input/trackball.kdl"
    TABLET = "input/tablet.kdl"
    TOUCH = "input/touch.kdl"
    OUTPUTS = "outputs.kdl"
    ANIMATIONS = "animations.kdl"
    CURSOR = "cursor.kdl"
    OVERVIEW = "overview.kdl"
    WORKSPACES = "workspaces.kdl"
    KEYBINDINGS = "keybindings.kdl"
    LAYOUT_EXTRAS = "advanced/layout-extras.kdl"
    GESTURES = "advanced/gestures.kdl"
    LAYER_RULES = "advanced/layer-rules.kdl"
    WINDOW_RULES = "advanced/window-rules.kdl"
    MISCELLANEOUS = "advanced/misc.kdl"
    STARTUP = "advanced/startup.kdl"
    ENVIRONMENT = "advanced/environment.kdl"
    DEBUG = "advanced/debug.kdl"
    SWITCH_EVENTS = "advanced/switch-events.kdl"
    RECENT_WINDOWS = "advanced/recent-windows.kdl"

    @property
    def relative_path(self) -> PurePosixPath:
        return PurePosixPath(self.value)

    @property
    def file_name(self) -> str:
        return self.relative_path.name

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.name.replace("_", " ").title())

    @property
    def attribute(self) -> str:
        """Name of the field on :class:`nirify.models.Settings`."""
        return self.name.lower()

    @classmethod
    def from_file_name(cls, name: str) -> SettingsCategory:
        for category in cls:
            if category.file_name == name:
                return category
        raise UnknownCategoryError(name)

    @classmethod
    def from_name(cls, name: str) -> SettingsCategory:
        key = name.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError as exc:
            raise UnknownCategoryError(name) from exc

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    SettingsCategory.LAYOUT_EXTRAS: "Layout Extras",
    SettingsCategory.LAYER_RULES: "Layer Rules",
    SettingsCategory.WINDOW_RULES: "Window Rules",
    SettingsCategory.SWITCH_EVENTS: "Switch Events",
    SettingsCategory.RECENT_WINDOWS: "Recent Windows",
}

ALL: tuple[SettingsCategory, ...] = tuple(SettingsCategory)

# Keybindings live in niri's own config, and the rarer input devices are
# optional, so their files are not part of the health check.
HEALTH_CHECK: tuple[SettingsCategory, ...] = tuple(
    c
    for c in SettingsCategory
    if c
    not in {
        SettingsCategory.KEYBINDINGS,
        SettingsCategory.TRACKPOINT,
        SettingsCategory.TRACKBALL,
        SettingsCategory.TABLET,
        SettingsCategory.TOUCH,
    }
)


def file_name(category: SettingsCategory) -> str:
    return category.file_name


__all__ = ["SettingsCategory", "ALL", "HEALTH_CHECK", "file_name"]
