from __future__ import annotations

from nirify.loader import load_settings
from nirify.models import Settings
from nirify.registry import ALL, SettingsCategory
from nirify.storage import save_settings
from tests.utils import write


def test_load_after_save_matches(config_home):
    settings = Settings()
    settings.keyboard.xkb_layout = "fr"
    settings.cursor.size = 40
    settings.workspaces.add_named("web")
    save_settings(config_home, settings)
    loaded, result = load_settings(config_home)
    assert result.is_ok()
    assert loaded.keyboard.xkb_layout == "fr"
    assert loaded.cursor.size == 40
    assert [w.name for w in loaded.workspaces] == ["web"]


def test_missing_files_fall_back_to_defaults(config_home):
    loaded, result = load_settings(config_home)
    assert loaded.keyboard == Settings().keyboard
    assert set(result.missing) == set(ALL)
    assert result.summary().startswith("0 loaded")


def test_broken_file_only_affects_its_category(config_home):
    settings = Settings()
    settings.keyboard.repeat_rate = 50
    settings.cursor.size = 40
    save_settings(config_home, settings)
    write(config_home.path_for(SettingsCategory.CURSOR), "cursor {")
    loaded, result = load_settings(config_home)
    assert loaded.keyboard.repeat_rate == 50
    assert loaded.cursor.size == 24
    assert result.failed[0][0] is SettingsCategory.CURSOR
    assert "cursor.kdl" in result.warnings[0]
    assert result.health().corrupted_files() == ["cursor.kdl"]


def test_values_are_clamped_on_load(config_home):
    write(
        config_home.path_for(SettingsCategory.KEYBOARD),
        "input {\n    keyboard {\n        repeat-rate 500\n    }\n}\n",
    )
    loaded, _ = load_settings(config_home)
    assert loaded.keyboard.repeat_rate == 100


def test_keybindings_fall_back_to_niri_config(config_home):
    base = config_home.niri_config.parent
    write(base / "binds.kdl", 'binds {\n    Mod+E { spawn "nautilus"; }\n}\n')
    write(
        config_home.niri_config,
        'binds {\n    Mod+T { spawn "foot"; }\n}\ninclude "binds.kdl"\n',
    )
    loaded, _ = load_settings(config_home)
    bindings = loaded.keybindings
    assert [b.key_combo for b in bindings] == ["Mod+T", "Mod+E"]
    assert bindings.loaded is True
    assert bindings.source_file == str(config_home.niri_config)


def test_managed_keybindings_win(config_home):
    write(config_home.niri_config, 'binds {\n    Mod+T { spawn "foot"; }\n}\n')
    write(
        config_home.path_for(SettingsCategory.KEYBINDINGS),
        'binds {\n    Mod+K { spawn "kitty"; }\n}\n',
    )
    loaded, _ = load_settings(config_home)
    assert [b.key_combo for b in loaded.keybindings] == ["Mod+K"]
    assert loaded.keybindings.source_file.endswith("keybindings.kdl")
