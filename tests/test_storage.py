from __future__ import annotations

import os
import stat

import pytest

from nirify import storage
from nirify.compat import FeatureCompat
from nirify.errors import AtomicWriteError, ConfigWriteError
from nirify.models import Settings
from nirify.registry import ALL, SettingsCategory
from nirify.storage import (
    Loaded,
    Missing,
    ParseError,
    add_include_line,
    atomic_write,
    generate_main_kdl,
    read_kdl_file_with_status,
    save_dirty,
    save_settings,
)
from tests.utils import write


def test_atomic_write_creates_parents(tmp_path):
    target = tmp_path / "a" / "b" / "file.kdl"
    atomic_write(target, "x 1\n")
    assert target.read_text() == "x 1\n"
    assert os.listdir(target.parent) == ["file.kdl"]


@pytest.mark.skipif(os.name != "posix", reason="permissions are POSIX only")
def test_atomic_write_sets_private_mode(tmp_path):
    target = tmp_path / "file.kdl"
    atomic_write(target, "x 1\n")
    assert stat.S_IMODE(target.stat().st_mode) == 0o600


def test_failed_replace_keeps_old_content(tmp_path, monkeypatch):
    target = write(tmp_path / "file.kdl", "old\n")

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(storage.os, "replace", boom)
    with pytest.raises(AtomicWriteError):
        atomic_write(target, "new\n")
    assert target.read_text() == "old\n"
    assert os.listdir(tmp_path) == ["file.kdl"]


def test_read_status(tmp_path):
    assert isinstance(read_kdl_file_with_status(tmp_path / "nope.kdl"), Missing)
    bad = write(tmp_path / "bad.kdl", "layout {\n")
    assert isinstance(read_kdl_file_with_status(bad), ParseError)
    good = write(tmp_path / "good.kdl", "layout {\n}\n")
    assert isinstance(read_kdl_file_with_status(good), Loaded)


def test_main_kdl_respects_feature_compat():
    full = generate_main_kdl(FeatureCompat.all_enabled())
    assert 'include "advanced/recent-windows.kdl"' in full
    old = generate_main_kdl(FeatureCompat())
    assert "recent-windows" not in old
    assert 'include "appearance.kdl"' in old


def test_save_settings_writes_every_file(config_home):
    written = save_settings(config_home, Settings(), FeatureCompat.all_enabled())
    assert written == len(ALL) + 1
    for category in ALL:
        assert config_home.path_for(category).is_file()
    assert config_home.main_kdl.is_file()


def test_save_dirty_writes_only_dirty(config_home):
    settings = Settings()
    settings.cursor.size = 32
    assert save_dirty(config_home, settings, {SettingsCategory.CURSOR}) == 1
    assert config_home.path_for(SettingsCategory.CURSOR).is_file()
    assert not config_home.path_for(SettingsCategory.MOUSE).exists()
    assert save_dirty(config_home, settings, set()) == 0


def test_write_failures_are_collected(config_home, monkeypatch):
    real = storage.atomic_write

    def flaky(path, content):
        if path.name == "mouse.kdl":
            raise AtomicWriteError("nope")
        real(path, content)

    monkeypatch.setattr(storage, "atomic_write", flaky)
    with pytest.raises(ConfigWriteError, match="mouse.kdl"):
        save_dirty(config_home, Settings(), {SettingsCategory.MOUSE, SettingsCategory.CURSOR})
    assert config_home.path_for(SettingsCategory.CURSOR).is_file()


def test_add_include_line_backs_up_and_is_idempotent(config_home):
    write(config_home.niri_config, "input {\n}")
    assert add_include_line(config_home) is True
    text = config_home.niri_config.read_text()
    assert text.startswith("input {\n}\n")
    assert 'include "nirify/main.kdl"' in text
    backups = list(config_home.backup_dir.glob("config.kdl.*.bak"))
    assert len(backups) == 1
    assert backups[0].read_text() == "input {\n}"
    assert add_include_line(config_home) is False
    assert config_home.niri_config.read_text() == text
