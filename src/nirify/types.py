"""Value types shared by the settings model: colors, gradients and enums."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

_HEX = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True)
class Color:
    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255

    @classmethod
    def from_hex(cls, text: str) -> Color | None:
        """Parse ``#rgb``, ``#rgba``, ``#rrggbb`` or ``#rrggbbaa``.

        Short forms duplicate each nibble, so ``#abc`` equals ``#aabbcc``.
        Any other length returns ``None``.
        """
        digits = text.strip()
        if digits.startswith("#"):
            digits = digits[1:]
        if not digits or not _HEX.match(digits):
            return None
        if len(digits) in (3, 4):
            channels = [int(d, 16) * 17 for d in digits]
        elif len(digits) in (6, 8):
            channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        else:
            return None
        if len(channels) == 3:
            channels.append(255)
        return cls(*channels)

    def to_hex(self) -> str:
        if self.a == 255:
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"

    def __str__(self) -> str:
        return self.to_hex()


def color(text: str) -> Color:
    """Parse a hex color that is known to be valid."""
    parsed = Color.from_hex(text)
    if parsed is None:
        raise ValueError(f"invalid color: {text!r}")
    return parsed


class KdlEnum(Enum):
    """Enum whose values are the strings niri uses in its config."""

    @classmethod
    def from_kdl(cls, text: str):
        for member in cls:
            if member.value == text:
                return member
        return None

    def to_kdl(self) -> str:
        return self.value


class ModKey(KdlEnum):
    SUPER = "Super"
    ALT = "Alt"
    CTRL = "Ctrl"
    SHIFT = "Shift"
    MOD3 = "Mod3"
    MOD5 = "Mod5"

    @classmethod
    def from_kdl(cls, text: str):
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


MOD_KEYS: tuple[ModKey, ...] = tuple(ModKey)


class AccelProfile(KdlEnum):
    ADAPTIVE = "adaptive"
    FLAT = "flat"


class ScrollMethod(KdlEnum):
    TWO_FINGER = "two-finger"
    EDGE = "edge"
    ON_BUTTON_DOWN = "on-button-down"
    NO_SCROLL = "no-scroll"


class ClickMethod(KdlEnum):
    BUTTON_AREAS = "button-areas"
    CLICKFINGER = "clickfinger"


class TapButtonMap(KdlEnum):
    LEFT_RIGHT_MIDDLE = "left-right-middle"
    LEFT_MIDDLE_RIGHT = "left-middle-right"


class WarpMouseMode(KdlEnum):
    OFF = "off"
    CENTER_XY = "center-xy"
    CENTER_XY_ALWAYS = "center-xy-always"


class CenterFocusedColumn(KdlEnum):
    NEVER = "never"
    ON_OVERFLOW = "on-overflow"
    ALWAYS = "always"


class Transform(KdlEnum):
    NORMAL = "normal"
    ROTATE_90 = "90"
    ROTATE_180 = "180"
    ROTATE_270 = "270"
    FLIPPED = "flipped"
    FLIPPED_90 = "flipped-90"
    FLIPPED_180 = "flipped-180"
    FLIPPED_270 = "flipped-270"


class VrrMode(KdlEnum):
    OFF = "off"
    ON = "on"
    ON_DEMAND = "on-demand"


class ColumnWidthType(KdlEnum):
    PROPORTION = "proportion"
    FIXED = "fixed"


class ColorSpace(KdlEnum):
    SRGB = "srgb"
    SRGB_LINEAR = "srgb-linear"
    OKLAB = "oklab"
    OKLCH = "oklch"


class HueInterpolation(KdlEnum):
    SHORTER = "shorter hue"
    LONGER = "longer hue"
    INCREASING = "increasing hue"
    DECREASING = "decreasing hue"


class GradientRelativeTo(KdlEnum):
    WINDOW = "window"
    WORKSPACE_VIEW = "workspace-view"


@dataclass(frozen=True)
class Gradient:
    start: Color
    end: Color
    angle: int = 180
    relative_to: GradientRelativeTo = GradientRelativeTo.WINDOW
    color_space: ColorSpace = ColorSpace.SRGB
    hue_interpolation: HueInterpolation | None = None

    def interpolation(self) -> str | None:
        """Value of the ``in=`` property, or ``None`` for plain srgb."""
        if self.color_space is ColorSpace.SRGB:
            return None
        if self.color_space is ColorSpace.OKLCH and self.hue_interpolation is not None:
            return f"{self.color_space.to_kdl()} {self.hue_interpolation.to_kdl()}"
        return self.color_space.to_kdl()


ColorOrGradient = Union[Color, Gradient]


__all__ = [
    "Color",
    "Gradient",
    "ColorOrGradient",
    "ModKey",
    "MOD_KEYS",
    "AccelProfile",
    "ScrollMethod",
    "ClickMethod",
    "TapButtonMap",
    "WarpMouseMode",
    "CenterFocusedColumn",
    "Transform",
    "VrrMode",
    "ColumnWidthType",
    "ColorSpace",
    "HueInterpolation",
    "GradientRelativeTo",
    "color",
]
