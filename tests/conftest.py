from __future__ import annotations

import pytest

from nirify.paths import ConfigPaths


@pytest.fixture
def config_home(tmp_path, monkeypatch) -> ConfigPaths:
    """Point XDG_CONFIG_HOME and HOME into *tmp_path* and return the paths."""
    xdg = tmp_path / "config"
    home = tmp_path / "home"
    (xdg / "niri").mkdir(parents=True)
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("NIRI_SOCKET", raising=False)
    monkeypatch.delenv("NIRIFY_DEBOUNCE_MS", raising=False)
    monkeypatch.delenv("NIRIFY_APP_NAME", raising=False)
    return ConfigPaths.from_niri_dir(xdg / "niri")
