from __future__ import annotations

from nirify.paths import ConfigPaths, niri_config_dir, user_config_dir
from nirify.registry import SettingsCategory
from tests.utils import write


def test_user_dirs_absolute() -> None:
    assert user_config_dir().is_absolute()


def test_layout(tmp_path):
    paths = ConfigPaths.from_niri_dir(tmp_path)
    assert paths.niri_config == tmp_path / "config.kdl"
    assert paths.main_kdl == tmp_path / "nirify" / "main.kdl"
    assert paths.path_for(SettingsCategory.TOUCHPAD) == tmp_path / "nirify" / "input" / "touchpad.kdl"
    assert paths.path_for(SettingsCategory.DEBUG).parent == paths.advanced_dir
    assert paths.include_target == "nirify/main.kdl"


def test_paths_are_unique(tmp_path):
    paths = ConfigPaths.from_niri_dir(tmp_path).all_paths()
    assert len(set(paths.values())) == len(SettingsCategory)


def test_default_uses_xdg(config_home, tmp_path):
    assert niri_config_dir() == tmp_path / "config" / "niri"
    assert ConfigPaths.default() == config_home


def test_first_run_and_include_detection(config_home):
    assert config_home.is_first_run()
    config_home.ensure_directories()
    assert config_home.backup_dir.is_dir()
    write(config_home.niri_config, '// include "nirify/main.kdl"\n')
    assert not config_home.has_include_line()
    write(config_home.niri_config, 'include "nirify/main.kdl"\n')
    assert config_home.has_include_line()
