"""Typed in-memory model of every settings category.

Each category owns one dataclass.  Defaults double as the fallback used when
a category file is missing or corrupted.
"""
from __future__ import annotations

import copy
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from .registry import SettingsCategory
from .types import (
    AccelProfile,
    CenterFocusedColumn,
    ClickMethod,
    Color,
    ColorOrGradient,
    ColumnWidthType,
    ModKey,
    ScrollMethod,
    TapButtonMap,
    Transform,
    VrrMode,
    WarpMouseMode,
    color as parse_color,
)

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

FOCUS_RING_WIDTH_RANGE = (1.0, 16.0)
BORDER_WIDTH_RANGE = (1.0, 8.0)
GAP_RANGE = (0.0, 64.0)
CORNER_RADIUS_RANGE = (0.0, 32.0)
COLUMN_PROPORTION_RANGE = (0.1, 1.0)
COLUMN_FIXED_RANGE = (200.0, 4000.0)
STRUT_RANGE = (0.0, 500.0)
REPEAT_DELAY_RANGE = (100, 2000)
REPEAT_RATE_RANGE = (1, 100)
ACCEL_SPEED_RANGE = (-1.0, 1.0)
SCROLL_FACTOR_RANGE = (0.1, 10.0)
CURSOR_SIZE_RANGE = (16, 64)
HIDE_INACTIVE_RANGE = (100, 10000)
OVERVIEW_ZOOM_RANGE = (0.1, 1.0)
SLOWDOWN_RANGE = (0.1, 10.0)
DAMPING_RATIO_RANGE = (0.1, 3.0)
STIFFNESS_RANGE = (50, 2000)
EPSILON_RANGE = (0.00001, 0.1)
EASING_DURATION_RANGE = (50, 1000)


def clamp(value, bounds):
    low, high = bounds
    return min(max(value, low), high)


# ---------------------------------------------------------------------------
# Appearance & behavior
# ---------------------------------------------------------------------------

@dataclass
class AppearanceSettings:
    focus_ring_enabled: bool = True
    focus_ring_width: float = 4.0
    focus_ring_active: ColorOrGradient = parse_color("#7fc8ff")
    focus_ring_inactive: ColorOrGradient = parse_color("#505050")
    focus_ring_urgent: ColorOrGradient = parse_color("#eb6f92")
    border_enabled: bool = False
    border_thickness: float = 2.0
    border_active: ColorOrGradient = parse_color("#ffc87f")
    border_inactive: ColorOrGradient = parse_color("#808080")
    border_urgent: ColorOrGradient = parse_color("#eb6f92")
    gaps_inner: float = 16.0
    gaps_outer: float = 16.0
    corner_radius: float = 12.0
    background_color: Color | None = None


@dataclass
class BehaviorSettings:
    focus_follows_mouse: bool = False
    focus_follows_mouse_max_scroll_amount: float | None = None
    warp_mouse_to_focus: WarpMouseMode = WarpMouseMode.OFF
    workspace_auto_back_and_forth: bool = False
    mod_key: ModKey = ModKey.SUPER
    mod_key_nested: ModKey | None = None
    disable_power_key_handling: bool = False
    strut_left: float = 0.0
    strut_right: float = 0.0
    strut_top: float = 0.0
    strut_bottom: float = 0.0
    center_focused_column: CenterFocusedColumn = CenterFocusedColumn.NEVER
    always_center_single_column: bool = False
    empty_workspace_above_first: bool = False
    default_column_width_type: ColumnWidthType = ColumnWidthType.PROPORTION
    default_column_width_proportion: float = 0.5
    default_column_width_fixed: float = 800.0

    def has_struts(self) -> bool:
        return any(
            v > 0
            for v in (self.strut_left, self.strut_right, self.strut_top, self.strut_bottom)
        )


# ---------------------------------------------------------------------------
# Input devices
# ---------------------------------------------------------------------------

@dataclass
class KeyboardSettings:
    off: bool = False
    xkb_layout: str = "us"
    xkb_variant: str = ""
    xkb_model: str = ""
    xkb_rules: str = ""
    xkb_options: str = ""
    xkb_file: str = ""
    repeat_delay: int = 600
    repeat_rate: int = 25
    numlock: bool = False
    track_layout: str = "global"


@dataclass
class PointerSettings:
    """Fields common to every pointer device."""

    off: bool = False
    natural_scroll: bool = False
    left_handed: bool = False
    middle_emulation: bool = False
    scroll_button_lock: bool = False
    accel_speed: float = 0.0
    accel_profile: AccelProfile = AccelProfile.ADAPTIVE
    scroll_method: ScrollMethod | None = None
    scroll_button: int | None = None


@dataclass
class MouseSettings(PointerSettings):
    scroll_factor: float = 1.0
    scroll_factor_horizontal: float | None = None


@dataclass
class TouchpadSettings(PointerSettings):
    natural_scroll: bool = True
    tap: bool = True
    dwt: bool = True
    dwtp: bool = False
    drag: bool = True
    drag_lock: bool = False
    disabled_on_external_mouse: bool = False
    click_method: ClickMethod | None = None
    tap_button_map: TapButtonMap | None = None
    scroll_factor: float = 1.0
    scroll_factor_horizontal: float | None = None


@dataclass
class TrackpointSettings(PointerSettings):
    pass


@dataclass
class TrackballSettings(PointerSettings):
    pass


@dataclass
class TabletSettings:
    off: bool = False
    left_handed: bool = False
    map_to_output: str = ""
    calibration_matrix: list[float] | None = None


@dataclass
class TouchSettings:
    off: bool = False
    map_to_output: str = ""
    calibration_matrix: list[float] | None = None


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

@dataclass
class LayoutOverride:
    gaps_inner: float | None = None
    gaps_outer: float | None = None
    strut_left: float | None = None
    strut_right: float | None = None
    strut_top: float | None = None
    strut_bottom: float | None = None
    center_focused_column: CenterFocusedColumn | None = None
    always_center_single_column: bool | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class OutputHotCorners:
    enabled: bool | None = None
    top_left: bool = False
    top_right: bool = False
    bottom_left: bool = False
    bottom_right: bool = False


@dataclass
class OutputConfig:
    name: str = ""
    enabled: bool = True
    scale: float = 1.0
    mode: str = ""
    mode_custom: bool = False
    modeline: str | None = None
    position_x: int | None = None
    position_y: int | None = None
    transform: Transform = Transform.NORMAL
    vrr: VrrMode = VrrMode.OFF
    focus_at_startup: bool = False
    backdrop_color: Color | None = None
    hot_corners: OutputHotCorners | None = None
    layout_override: LayoutOverride | None = None


@dataclass
class OutputsSettings:
    outputs: list[OutputConfig] = field(default_factory=list)

    def find(self, name: str) -> OutputConfig | None:
        for output in self.outputs:
            if output.name == name:
                return output
        return None

    def __len__(self) -> int:
        return len(self.outputs)

    def __iter__(self):
        return iter(self.outputs)


class AnimationType(Enum):
    DEFAULT = "default"
    OFF = "off"
    SPRING = "spring"
    EASING = "easing"
    CUSTOM_SHADER = "custom-shader"


EASING_CURVES = ("linear", "ease-out-quad", "ease-out-cubic", "ease-out-expo")


@dataclass
class SpringParams:
    damping_ratio: float = 1.0
    stiffness: int = 800
    epsilon: float = 0.0001


@dataclass
class EasingParams:
    duration_ms: int = 150
    curve: str = "ease-out-cubic"
    bezier: tuple[float, float, float, float] | None = None


@dataclass
class SingleAnimationConfig:
    animation_type: AnimationType = AnimationType.DEFAULT
    spring: SpringParams = field(default_factory=SpringParams)
    easing: EasingParams = field(default_factory=EasingParams)
    custom_shader: str | None = None


ANIMATION_NAMES: tuple[str, ...] = (
    "workspace-switch",
    "window-open",
    "window-close",
    "horizontal-view-movement",
    "window-movement",
    "window-resize",
    "config-notification-open-close",
    "exit-confirmation-open-close",
    "screenshot-ui-open",
    "overview-open-close",
    "recent-windows-close",
)


@dataclass
class AnimationSettings:
    enabled: bool = True
    slowdown: float = 1.0
    per_animation: dict[str, SingleAnimationConfig] = field(
        default_factory=lambda: {name: SingleAnimationConfig() for name in ANIMATION_NAMES}
    )


@dataclass
class CursorSettings:
    theme: str = ""
    size: int = 24
    hide_when_typing: bool = False
    hide_after_inactive_ms: int | None = None


@dataclass
class WorkspaceShadow:
    enabled: bool = True
    softness: int = 40
    spread: int = 10
    offset_x: int = 0
    offset_y: int = 10
    color: Color = parse_color("#00000050")


@dataclass
class OverviewSettings:
    zoom: float = 0.5
    backdrop_color: Color | None = None
    workspace_shadow: WorkspaceShadow | None = None


# ---------------------------------------------------------------------------
# Identified lists
# ---------------------------------------------------------------------------

class Identified(Protocol):
    id: int


class NamedRule(Identified, Protocol):
    name: str


E = TypeVar("E", bound=Identified)


@dataclass
class IdentifiedList(Generic[E]):
    """Ordered entries with identifiers drawn from a counter that only grows."""

    items: list[E] = field(default_factory=list)
    next_id: int = 0

    def allocate_id(self) -> int:
        issued = self.next_id
        self.next_id += 1
        return issued

    def add(self, item: E) -> E:
        item.id = self.allocate_id()
        self.items.append(item)
        return item

    def remove(self, item_id: int) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.id != item_id]
        return len(self.items) < before

    def find(self, item_id: int) -> E | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def replace_all(self, items: Iterable[E], next_id: int | None = None) -> None:
        self.items = list(items)
        floor = max((item.id for item in self.items), default=-1) + 1
        self.next_id = max(floor, next_id if next_id is not None else 0)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


@dataclass
class NamedWorkspace:
    id: int = 0
    name: str = ""
    open_on_output: str | None = None
    layout_override: LayoutOverride | None = None


@dataclass
class WorkspacesSettings(IdentifiedList[NamedWorkspace]):
    def add_named(self, name: str, open_on_output: str | None = None) -> NamedWorkspace:
        return self.add(NamedWorkspace(name=name, open_on_output=open_on_output))


class KeybindActionKind(Enum):
    SPAWN = "spawn"
    SPAWN_SH = "spawn-sh"
    ACTION = "action"


@dataclass
class KeybindAction:
    """What a binding does.

    ``spawn`` keeps the argv in *args*, ``spawn-sh`` keeps the single shell
    command there.  Other niri actions keep their scalar arguments and
    properties with their KDL types so numbers stay numbers.
    """

    kind: KeybindActionKind = KeybindActionKind.ACTION
    name: str = ""
    args: list[Any] = field(default_factory=list)
    props: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def spawn(cls, *argv: str) -> KeybindAction:
        return cls(KeybindActionKind.SPAWN, "spawn", list(argv))

    @classmethod
    def spawn_sh(cls, command: str) -> KeybindAction:
        return cls(KeybindActionKind.SPAWN_SH, "spawn-sh", [command])

    def display(self) -> str:
        parts = [self.name] + [str(a) for a in self.args]
        parts += [f"{k}={v}" for k, v in self.props.items()]
        return " ".join(p for p in parts if p)


@dataclass
class Keybinding:
    id: int = 0
    key_combo: str = ""
    hotkey_overlay_title: str | None = None
    allow_when_locked: bool = False
    cooldown_ms: int | None = None
    repeat: bool = True
    action: KeybindAction = field(default_factory=KeybindAction)


@dataclass
class KeybindingsSettings(IdentifiedList[Keybinding]):
    loaded: bool = False
    source_file: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Layout extras & gestures
# ---------------------------------------------------------------------------

@dataclass
class ShadowSettings:
    enabled: bool = False
    softness: int = 30
    spread: int = 5
    offset_x: int = 0
    offset_y: int = 5
    draw_behind_window: bool = False
    color: Color = parse_color("#00000070")
    inactive_color: Color = parse_color("#00000050")


class TabIndicatorPosition(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass
class TabIndicatorSettings:
    enabled: bool = False
    hide_when_single_tab: bool = False
    place_within_column: bool = False
    gap: int = 5
    width: int = 4
    position: TabIndicatorPosition = TabIndicatorPosition.LEFT
    gaps_between_tabs: int = 0
    corner_radius: int = 0
    active: ColorOrGradient | None = None
    inactive: ColorOrGradient | None = None
    urgent: ColorOrGradient | None = None


@dataclass
class InsertHintSettings:
    enabled: bool = True
    color: ColorOrGradient = parse_color("#ffc87f80")


@dataclass
class PresetSize:
    """A preset column width or window height."""

    kind: ColumnWidthType = ColumnWidthType.PROPORTION
    value: float = 0.5


def _thirds() -> list[PresetSize]:
    return [PresetSize(value=0.33333), PresetSize(value=0.5), PresetSize(value=0.66667)]


class DefaultColumnDisplay(Enum):
    NORMAL = "normal"
    TABBED = "tabbed"


@dataclass
class LayoutExtrasSettings:
    shadow: ShadowSettings = field(default_factory=ShadowSettings)
    tab_indicator: TabIndicatorSettings = field(default_factory=TabIndicatorSettings)
    insert_hint: InsertHintSettings = field(default_factory=InsertHintSettings)
    preset_column_widths: list[PresetSize] = field(default_factory=_thirds)
    preset_window_heights: list[PresetSize] = field(default_factory=_thirds)
    default_column_display: DefaultColumnDisplay = DefaultColumnDisplay.NORMAL


@dataclass
class HotCornersSettings:
    enabled: bool = True
    top_left: bool = False
    top_right: bool = False
    bottom_left: bool = False
    bottom_right: bool = False


@dataclass
class EdgeScrollSettings:
    enabled: bool = True
    trigger_size: int = 30
    delay_ms: int = 100
    max_speed: int = 1500


@dataclass
class GestureSettings:
    hot_corners: HotCornersSettings = field(default_factory=HotCornersSettings)
    dnd_edge_view_scroll: EdgeScrollSettings = field(default_factory=EdgeScrollSettings)
    dnd_edge_workspace_switch: EdgeScrollSettings = field(
        default_factory=lambda: EdgeScrollSettings(trigger_size=50)
    )


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

class BlockOutFrom(Enum):
    SCREENCAST = "screencast"
    SCREEN_CAPTURE = "screen-capture"


@dataclass
class LayerRuleMatch:
    namespace: str | None = None
    at_startup: bool | None = None


@dataclass
class LayerRule:
    id: int = 0
    name: str = "New Layer Rule"
    matches: list[LayerRuleMatch] = field(default_factory=lambda: [LayerRuleMatch()])
    block_out_from: BlockOutFrom | None = None
    opacity: float | None = None
    shadow: ShadowSettings | None = None
    geometry_corner_radius: int | None = None
    place_within_backdrop: bool = False
    baba_is_float: bool = False


@dataclass
class LayerRulesSettings(IdentifiedList[LayerRule]):
    pass


WINDOW_MATCH_FLAGS = (
    "is-floating",
    "is-active",
    "is-focused",
    "is-active-in-column",
    "is-window-cast-target",
    "is-urgent",
    "at-startup",
)


@dataclass
class WindowRuleMatch:
    app_id: str | None = None
    title: str | None = None
    is_floating: bool | None = None
    is_active: bool | None = None
    is_focused: bool | None = None
    is_active_in_column: bool | None = None
    is_window_cast_target: bool | None = None
    is_urgent: bool | None = None
    at_startup: bool | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


class OpenBehavior(Enum):
    NORMAL = "normal"
    MAXIMIZED = "open-maximized"
    FULLSCREEN = "open-fullscreen"
    FLOATING = "open-floating"


class PositionRelativeTo(Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass
class FloatingPosition:
    x: int = 0
    y: int = 0
    relative_to: PositionRelativeTo = PositionRelativeTo.TOP_LEFT


@dataclass
class WindowRule:
    id: int = 0
    name: str = "New Rule"
    matches: list[WindowRuleMatch] = field(default_factory=lambda: [WindowRuleMatch()])
    excludes: list[WindowRuleMatch] = field(default_factory=list)
    open_behavior: OpenBehavior = OpenBehavior.NORMAL
    opacity: float | None = None
    block_out_from_screencast: bool = False
    corner_radius: int | None = None
    clip_to_geometry: bool | None = None
    open_focused: bool | None = None
    open_on_output: str | None = None
    open_on_workspace: str | None = None
    default_floating_position: FloatingPosition | None = None
    default_column_width: float | None = None
    default_window_height: float | None = None
    open_maximized_to_edges: bool | None = None
    scroll_factor: float | None = None
    draw_border_with_background: bool | None = None
    min_width: int | None = None
    max_width: int | None = None
    min_height: int | None = None
    max_height: int | None = None
    focus_ring_width: int | None = None
    focus_ring_active: Color | None = None
    focus_ring_inactive: Color | None = None
    focus_ring_urgent: Color | None = None
    border_width: int | None = None
    border_active: Color | None = None
    border_inactive: Color | None = None
    border_urgent: Color | None = None
    variable_refresh_rate: bool | None = None
    default_column_display: DefaultColumnDisplay | None = None
    shadow: ShadowSettings | None = None
    tiled_state: bool | None = None
    baba_is_float: bool | None = None


@dataclass
class WindowRulesSettings(IdentifiedList[WindowRule]):
    pass


# ---------------------------------------------------------------------------
# Miscellaneous & system
# ---------------------------------------------------------------------------

XWAYLAND_DEFAULT = "default"
XWAYLAND_OFF = "off"


@dataclass
class MiscSettings:
    prefer_no_csd: bool = False
    screenshot_path: str = "~/Pictures/Screenshots/Screenshot from %Y-%m-%d %H-%M-%S.png"
    disable_primary_clipboard: bool = False
    hotkey_overlay_skip_at_startup: bool = False
    hotkey_overlay_hide_not_bound: bool = False
    config_notification_disable_failed: bool = False
    spawn_sh_at_startup: bool = False
    # "default", "off" or a custom binary path
    xwayland_satellite: str = XWAYLAND_DEFAULT


@dataclass
class StartupCommand:
    id: int = 0
    command: list[str] = field(default_factory=list)

    def display(self) -> str:
        return " ".join(self.command)


@dataclass
class StartupSettings(IdentifiedList[StartupCommand]):
    def add_command(self, *argv: str) -> StartupCommand:
        return self.add(StartupCommand(command=list(argv)))


@dataclass
class EnvironmentVariable:
    id: int = 0
    name: str = ""
    value: str = ""


@dataclass
class EnvironmentSettings(IdentifiedList[EnvironmentVariable]):
    def set(self, name: str, value: str) -> EnvironmentVariable:
        for var in self.items:
            if var.name == name:
                var.value = value
                return var
        return self.add(EnvironmentVariable(name=name, value=value))


DEBUG_FLAGS: tuple[str, ...] = (
    "preview-render",
    "enable-overlay-planes",
    "disable-cursor-plane",
    "disable-direct-scanout",
    "wait-for-frame-completion-before-queueing",
    "disable-resize-throttling",
    "disable-transactions",
    "emulate-zero-presentation-time",
    "dbus-interfaces-in-non-session-instances",
    "keep-laptop-panel-on-when-lid-is-closed",
    "disable-monitor-names",
    "strict-new-window-focus-policy",
    "restrict-primary-scanout-to-matching-format",
    "skip-cursor-only-updates-during-vrr",
    "force-disable-connectors-on-resume",
    "honor-xdg-activation-with-invalid-serial",
    "deactivate-unfocused-windows",
    "force-pipewire-invalid-modifier",
)


@dataclass
class DebugSettings:
    """Debug toggles keyed by their KDL node names."""

    flags: dict[str, bool] = field(
        default_factory=lambda: {name: False for name in DEBUG_FLAGS}
    )
    render_drm_device: str | None = None
    ignore_drm_devices: list[str] = field(default_factory=list)

    def enabled_flags(self) -> list[str]:
        return [name for name in DEBUG_FLAGS if self.flags.get(name)]


SWITCH_EVENTS: tuple[str, ...] = ("lid-close", "lid-open", "tablet-mode-on", "tablet-mode-off")


@dataclass
class SwitchEventsSettings:
    """Spawn commands per switch event, keyed by event name."""

    events: dict[str, list[str]] = field(
        default_factory=lambda: {name: [] for name in SWITCH_EVENTS}
    )


@dataclass
class RecentWindowsHighlight:
    active_color: Color = parse_color("#7fc8ff")
    urgent_color: Color = parse_color("#eb6f92")
    padding: int = 8
    corner_radius: int = 12


@dataclass
class RecentWindowsPreviews:
    max_height: int = 200
    max_scale: float = 0.5


@dataclass
class RecentWindowsSettings:
    off: bool = False
    debounce_ms: int = 100
    open_delay_ms: int = 200
    highlight: RecentWindowsHighlight = field(default_factory=RecentWindowsHighlight)
    previews: RecentWindowsPreviews = field(default_factory=RecentWindowsPreviews)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

@dataclass
class Settings:
    appearance: AppearanceSettings = field(default_factory=AppearanceSettings)
    behavior: BehaviorSettings = field(default_factory=BehaviorSettings)
    keyboard: KeyboardSettings = field(default_factory=KeyboardSettings)
    mouse: MouseSettings = field(default_factory=MouseSettings)
    touchpad: TouchpadSettings = field(default_factory=TouchpadSettings)
    trackpoint: TrackpointSettings = field(default_factory=TrackpointSettings)
    trackball: TrackballSettings = field(default_factory=TrackballSettings)
    tablet: TabletSettings = field(default_factory=TabletSettings)
    touch: TouchSettings = field(default_factory=TouchSettings)
    outputs: OutputsSettings = field(default_factory=OutputsSettings)
    animations: AnimationSettings = field(default_factory=AnimationSettings)
    cursor: CursorSettings = field(default_factory=CursorSettings)
    overview: OverviewSettings = field(default_factory=OverviewSettings)
    workspaces: WorkspacesSettings = field(default_factory=WorkspacesSettings)
    keybindings: KeybindingsSettings = field(default_factory=KeybindingsSettings)
    layout_extras: LayoutExtrasSettings = field(default_factory=LayoutExtrasSettings)
    gestures: GestureSettings = field(default_factory=GestureSettings)
    layer_rules: LayerRulesSettings = field(default_factory=LayerRulesSettings)
    window_rules: WindowRulesSettings = field(default_factory=WindowRulesSettings)
    miscellaneous: MiscSettings = field(default_factory=MiscSettings)
    startup: StartupSettings = field(default_factory=StartupSettings)
    environment: EnvironmentSettings = field(default_factory=EnvironmentSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)
    switch_events: SwitchEventsSettings = field(default_factory=SwitchEventsSettings)
    recent_windows: RecentWindowsSettings = field(default_factory=RecentWindowsSettings)

    def get(self, category: SettingsCategory):
        return getattr(self, category.attribute)

    def set(self, category: SettingsCategory, value) -> None:
        setattr(self, category.attribute, value)

    def copy_categories(self, categories: Iterable[SettingsCategory]) -> Settings:
        """Return a new model holding deep copies of *categories* only.

        Every other category keeps its default.  Appearance also pulls in
        Behavior because the appearance file embeds the behavior struts.
        """
        wanted = set(categories)
        if SettingsCategory.APPEARANCE in wanted:
            wanted.add(SettingsCategory.BEHAVIOR)
        clone = Settings()
        for category in wanted:
            clone.set(category, copy.deepcopy(self.get(category)))
        return clone

    def validate(self) -> None:
        """Clamp numeric fields into the ranges niri accepts."""
        a = self.appearance
        a.focus_ring_width = clamp(a.focus_ring_width, FOCUS_RING_WIDTH_RANGE)
        a.border_thickness = clamp(a.border_thickness, BORDER_WIDTH_RANGE)
        a.gaps_inner = clamp(a.gaps_inner, GAP_RANGE)
        a.gaps_outer = clamp(a.gaps_outer, GAP_RANGE)
        a.corner_radius = clamp(a.corner_radius, CORNER_RADIUS_RANGE)

        b = self.behavior
        b.default_column_width_proportion = clamp(
            b.default_column_width_proportion, COLUMN_PROPORTION_RANGE
        )
        b.default_column_width_fixed = clamp(b.default_column_width_fixed, COLUMN_FIXED_RANGE)
        b.strut_left = clamp(b.strut_left, STRUT_RANGE)
        b.strut_right = clamp(b.strut_right, STRUT_RANGE)
        b.strut_top = clamp(b.strut_top, STRUT_RANGE)
        b.strut_bottom = clamp(b.strut_bottom, STRUT_RANGE)

        k = self.keyboard
        k.repeat_delay = clamp(k.repeat_delay, REPEAT_DELAY_RANGE)
        k.repeat_rate = clamp(k.repeat_rate, REPEAT_RATE_RANGE)

        for device in (self.mouse, self.touchpad, self.trackpoint, self.trackball):
            device.accel_speed = clamp(device.accel_speed, ACCEL_SPEED_RANGE)
        for device in (self.mouse, self.touchpad):
            device.scroll_factor = clamp(device.scroll_factor, SCROLL_FACTOR_RANGE)

        c = self.cursor
        c.size = clamp(c.size, CURSOR_SIZE_RANGE)
        if c.hide_after_inactive_ms is not None:
            c.hide_after_inactive_ms = clamp(c.hide_after_inactive_ms, HIDE_INACTIVE_RANGE)

        self.overview.zoom = clamp(self.overview.zoom, OVERVIEW_ZOOM_RANGE)
        self.animations.slowdown = clamp(self.animations.slowdown, SLOWDOWN_RANGE)

        for rule in self.window_rules.items:
            if rule.opacity is not None:
                rule.opacity = clamp(rule.opacity, (0.0, 1.0))
        for rule in self.layer_rules.items:
            if rule.opacity is not None:
                rule.opacity = clamp(rule.opacity, (0.0, 1.0))


__all__ = [
    "Settings",
    "AppearanceSettings",
    "BehaviorSettings",
    "KeyboardSettings",
    "MouseSettings",
    "TouchpadSettings",
    "TrackpointSettings",
    "TrackballSettings",
    "TabletSettings",
    "TouchSettings",
    "OutputsSettings",
    "OutputConfig",
    "AnimationSettings",
    "CursorSettings",
    "OverviewSettings",
    "WorkspacesSettings",
    "NamedWorkspace",
    "KeybindingsSettings",
    "Keybinding",
    "LayoutExtrasSettings",
    "GestureSettings",
    "LayerRulesSettings",
    "LayerRule",
    "WindowRulesSettings",
    "WindowRule",
    "MiscSettings",
    "StartupSettings",
    "EnvironmentSettings",
    "DebugSettings",
    "SwitchEventsSettings",
    "RecentWindowsSettings",
    "IdentifiedList",
    "NamedRule",
]
