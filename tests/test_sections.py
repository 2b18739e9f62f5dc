from __future__ import annotations

import pytest

from nirify.document import parse_document
from nirify.models import Settings, ShadowSettings
from nirify.registry import ALL, SettingsCategory
from nirify.sections import all_sections, get_section
from nirify.sections.devices import InputDeviceSection
from nirify.types import CenterFocusedColumn, Color
from tests.utils import parse_into, round_trip


def test_every_category_has_a_section():
    assert [s.category for s in all_sections()] == list(ALL)


@pytest.mark.parametrize("category", ALL)
def test_defaults_render_and_parse(category):
    settings = Settings()
    text = get_section(category).render(settings)
    assert text.startswith(f"// {category.display_name} settings - managed by nirify")
    parse_document(text)


def test_appearance_round_trip_keeps_behavior_layout_fields():
    settings = Settings()
    settings.appearance.focus_ring_width = 6
    settings.appearance.border_enabled = True
    settings.appearance.corner_radius = 8
    settings.behavior.strut_left = 40
    settings.behavior.center_focused_column = CenterFocusedColumn.ALWAYS
    loaded = round_trip(SettingsCategory.APPEARANCE, settings)
    assert loaded.appearance.focus_ring_width == 6
    assert loaded.appearance.border_enabled is True
    assert loaded.appearance.corner_radius == 8
    assert loaded.behavior.strut_left == 40
    assert loaded.behavior.center_focused_column is CenterFocusedColumn.ALWAYS


def test_disabled_feature_keeps_sub_fields():
    settings = Settings()
    settings.appearance.focus_ring_width = 9
    text = "layout {\n    focus-ring {\n        off\n        width 2\n    }\n}\n"
    parse_into(SettingsCategory.APPEARANCE, text, settings)
    assert settings.appearance.focus_ring_enabled is False
    assert settings.appearance.focus_ring_width == 9


def test_partial_document_leaves_other_fields_unchanged():
    settings = Settings()
    settings.appearance.gaps_inner = 4
    parse_into(SettingsCategory.APPEARANCE, 'layout {\n    background-color "#112233"\n}\n', settings)
    assert settings.appearance.gaps_inner == 4
    assert settings.appearance.background_color == Color(0x11, 0x22, 0x33, 255)


def test_keyboard_flags_round_trip():
    settings = Settings()
    settings.keyboard.numlock = True
    settings.keyboard.xkb_layout = "us,de"
    settings.keyboard.xkb_options = "grp:alt_shift_toggle"
    settings.keyboard.repeat_delay = 250
    loaded = round_trip(SettingsCategory.KEYBOARD, settings)
    assert loaded.keyboard == settings.keyboard

    settings.keyboard.numlock = False
    assert round_trip(SettingsCategory.KEYBOARD, settings).keyboard.numlock is False


def test_explicit_false_flag_wins():
    text = "input {\n    touchpad {\n        tap false\n        dwt\n    }\n}\n"
    settings = parse_into(SettingsCategory.TOUCHPAD, text)
    assert settings.touchpad.tap is False
    assert settings.touchpad.dwt is True


def test_touchpad_round_trip_all_flag_states():
    settings = Settings()
    touchpad = settings.touchpad
    touchpad.tap = False
    touchpad.dwtp = True
    touchpad.natural_scroll = False
    touchpad.drag_lock = True
    loaded = round_trip(SettingsCategory.TOUCHPAD, settings)
    assert loaded.touchpad == touchpad


def test_workspaces_round_trip():
    settings = Settings()
    settings.workspaces.add_named("browser")
    settings.workspaces.add_named("chat", open_on_output="DP-1")
    loaded = round_trip(SettingsCategory.WORKSPACES, settings)
    assert [(w.name, w.open_on_output) for w in loaded.workspaces] == [
        ("browser", None),
        ("chat", "DP-1"),
    ]


def test_workspace_without_name_is_skipped():
    settings = parse_into(SettingsCategory.WORKSPACES, 'workspace\nworkspace ""\nworkspace "ok"\n')
    assert [w.name for w in settings.workspaces] == ["ok"]


def test_startup_and_environment_round_trip():
    settings = Settings()
    settings.startup.add_command("waybar")
    settings.startup.add_command("sh", "-c", "echo hi")
    settings.environment.set("QT_QPA_PLATFORM", "wayland")
    loaded = round_trip(SettingsCategory.STARTUP, settings)
    assert [c.command for c in loaded.startup] == [["waybar"], ["sh", "-c", "echo hi"]]
    loaded = round_trip(SettingsCategory.ENVIRONMENT, settings)
    assert [(v.name, v.value) for v in loaded.environment] == [("QT_QPA_PLATFORM", "wayland")]


def test_debug_round_trip():
    settings = Settings()
    settings.debug.flags["disable-cursor-plane"] = True
    settings.debug.ignore_drm_devices = ["/dev/dri/card1"]
    loaded = round_trip(SettingsCategory.DEBUG, settings)
    assert loaded.debug.enabled_flags() == ["disable-cursor-plane"]
    assert loaded.debug.ignore_drm_devices == ["/dev/dri/card1"]


def test_switch_events_round_trip():
    settings = Settings()
    settings.switch_events.events["lid-close"] = ["swaylock -f"]
    loaded = round_trip(SettingsCategory.SWITCH_EVENTS, settings)
    assert loaded.switch_events.events["lid-close"] == ["swaylock -f"]
    assert loaded.switch_events.events["lid-open"] == []


def test_recent_windows_off_round_trip():
    settings = Settings()
    settings.recent_windows.off = True
    text = get_section(SettingsCategory.RECENT_WINDOWS).render(settings)
    assert text.rstrip().endswith("}")
    assert round_trip(SettingsCategory.RECENT_WINDOWS, settings).recent_windows.off is True


def test_integer_settings_load_from_plain_literals():
    settings = parse_into(
        SettingsCategory.KEYBOARD,
        "input {\n    keyboard {\n        repeat-delay 250\n        repeat-rate 40\n    }\n}\n",
    )
    parse_into(SettingsCategory.CURSOR, "cursor {\n    xcursor-size 32\n}\n", settings)
    assert settings.keyboard.repeat_delay == 250
    assert settings.keyboard.repeat_rate == 40
    assert settings.cursor.size == 32


def test_shadow_color_defaults():
    shadow = ShadowSettings()
    assert shadow.color == Color(0, 0, 0, 0x70)
    assert shadow.inactive_color == Color(0, 0, 0, 0x50)


def test_device_sections_must_implement_hooks():
    with pytest.raises(TypeError):
        InputDeviceSection()


def test_numlock_is_only_ever_switched_on():
    settings = parse_into(SettingsCategory.KEYBOARD, "input {\n    keyboard {\n        numlock\n    }\n}\n")
    assert settings.keyboard.numlock is True
    parse_into(SettingsCategory.KEYBOARD, "input {\n    keyboard {\n        repeat-rate 30\n    }\n}\n", settings)
    assert settings.keyboard.numlock is True
    assert settings.keyboard.repeat_rate == 30
