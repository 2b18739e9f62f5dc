from __future__ import annotations

import os

import pytest

from nirify.errors import SandboxViolation
from nirify.importer import import_from_niri_config
from nirify.includes import MAX_INCLUDE_DEPTH, resolve_include_path
from tests.utils import write

CONFIG = """
input {
    keyboard {
        xkb {
            layout "de"
        }
        repeat-rate 40
    }
}

layout {
    gaps 8
}

window-rule {
    geometry-corner-radius 10
    clip-to-geometry true
}

// Firefox
window-rule {
    match app-id="^firefox$"
    open-maximized true
}

binds {
    Mod+Return { spawn "foot"; }
}

spawn-at-startup "waybar"
"""


def niri_dir(paths):
    return paths.niri_config.parent


def test_import_single_file(config_home):
    write(config_home.niri_config, CONFIG)
    result = import_from_niri_config(config_home.niri_config)
    settings = result.settings
    assert settings.keyboard.xkb_layout == "de"
    assert settings.keyboard.repeat_rate == 40
    assert settings.appearance.gaps_inner == 8
    assert settings.appearance.corner_radius == 10
    (rule,) = settings.window_rules
    assert rule.name == "Firefox"
    assert settings.keybindings.loaded is True
    assert settings.keybindings.source_file == str(config_home.niri_config)
    assert [c.command for c in settings.startup] == [["waybar"]]

    assert result.has_imports()
    assert "keyboard" in result.imported_sections
    assert "window-rules (1)" in result.imported_sections
    assert "mouse" in result.defaulted_sections
    assert result.summary().startswith(f"Imported {len(result.imported_sections)} sections: ")


def test_missing_config_uses_defaults(config_home):
    result = import_from_niri_config(config_home.niri_config)
    assert not result.has_imports()
    assert result.summary() == "No settings imported, using defaults"
    assert result.warnings


def test_includes_are_followed(config_home):
    base = niri_dir(config_home)
    write(base / "extra" / "input.kdl", "input {\n    keyboard {\n        repeat-delay 250\n    }\n}\n")
    write(config_home.niri_config, 'include "extra/input.kdl"\n')
    result = import_from_niri_config(config_home.niri_config)
    assert result.settings.keyboard.repeat_delay == 250
    assert result.includes_processed == 1
    assert result.warnings == []


def test_home_relative_include_inside_sandbox(config_home):
    base = niri_dir(config_home)
    home = config_home.niri_config.parent.parent.parent / "home"
    # ~/ expands to HOME; link ~/.config/niri to the sandbox
    (home / ".config").mkdir()
    os.symlink(base, home / ".config" / "niri")
    write(base / "cursor.kdl", "cursor {\n    xcursor-size 32\n}\n")
    write(config_home.niri_config, 'include "~/.config/niri/cursor.kdl"\n')
    result = import_from_niri_config(config_home.niri_config)
    assert result.settings.cursor.size == 32


def test_dotdot_escape_is_rejected(config_home, tmp_path):
    write(tmp_path / "outside.kdl", "cursor {\n    xcursor-size 48\n}\n")
    write(config_home.niri_config, 'include "../../outside.kdl"\n')
    result = import_from_niri_config(config_home.niri_config)
    assert result.settings.cursor.size == 24
    assert any("security" in w for w in result.warnings)


def test_symlink_escape_is_rejected(config_home, tmp_path):
    outside = write(tmp_path / "outside.kdl", "cursor {\n    xcursor-size 48\n}\n")
    link = niri_dir(config_home) / "linked.kdl"
    os.symlink(outside, link)
    with pytest.raises(SandboxViolation):
        resolve_include_path("linked.kdl", niri_dir(config_home))
    write(config_home.niri_config, 'include "linked.kdl"\n')
    result = import_from_niri_config(config_home.niri_config)
    assert result.settings.cursor.size == 24


def test_absolute_include_outside_is_rejected(config_home):
    with pytest.raises(SandboxViolation):
        resolve_include_path("/etc/passwd", niri_dir(config_home))


def test_include_chain_is_bounded(config_home):
    base = niri_dir(config_home)
    levels = MAX_INCLUDE_DEPTH + 2
    for i in range(levels):
        body = f"workspace \"ws{i}\"\n"
        if i + 1 < levels:
            body += f'include "level{i + 1}.kdl"\n'
        write(base / f"level{i}.kdl", body)
    write(config_home.niri_config, 'include "level0.kdl"\n')

    result = import_from_niri_config(config_home.niri_config)
    names = [w.name for w in result.settings.workspaces]
    # config.kdl is depth 0, so level{n} sits at depth n + 1
    assert names == [f"ws{i}" for i in range(MAX_INCLUDE_DEPTH)]
    assert any("depth exceeded" in w for w in result.warnings)


def test_cyclic_includes_terminate(config_home):
    base = niri_dir(config_home)
    write(base / "a.kdl", 'workspace "a"\ninclude "b.kdl"\n')
    write(base / "b.kdl", 'workspace "b"\ninclude "a.kdl"\n')
    write(config_home.niri_config, 'include "a.kdl"\n')
    result = import_from_niri_config(config_home.niri_config)
    assert [w.name for w in result.settings.workspaces] == ["a", "b"]


def test_to_dict(config_home):
    write(config_home.niri_config, CONFIG)
    data = import_from_niri_config(config_home.niri_config).to_dict()
    assert data["includes_processed"] == 0
    assert "keyboard" in data["imported"]
