"""The editor's own preferences, kept in ``settings.ini``."""
from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .compat import NiriVersion
from .errors import ConfigReadError
from .paths import DEFAULT_MANAGED_DIR, user_config_dir

logger = logging.getLogger(__name__)

SECTION = "nirify"
SETTINGS_FILE = "settings.ini"
DEBOUNCE_ENV = "NIRIFY_DEBOUNCE_MS"


def config_path() -> Path:
    return user_config_dir() / SETTINGS_FILE


def read_sections(path: Path) -> dict[str, dict[str, str]]:
    """Raises :class:`ConfigReadError` when *path* exists but is malformed."""
    parser = configparser.ConfigParser(strict=False)
    data: dict[str, dict[str, str]] = {}
    if path.exists():
        try:
            parser.read(path, encoding="utf-8")
        except (configparser.Error, OSError, UnicodeDecodeError) as exc:
            raise ConfigReadError(f"{path}: {exc}") from exc
        for section in parser.sections():
            data[section] = dict(parser.items(section))
    return data


def write_sections(path: Path, data: dict[str, dict[str, str]]) -> None:
    parser = configparser.ConfigParser()
    for section in sorted(data):
        parser.add_section(section)
        for key, value in sorted(data[section].items()):
            parser.set(section, key, str(value))
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        parser.write(fh)
    tmp.replace(path)


def _as_bool(raw: str, default: bool) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    logger.warning("invalid boolean %r in %s, using %s", raw, SETTINGS_FILE, default)
    return default


def _as_int(raw: str, default: int, name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("invalid %s %r, using %d", name, raw, default)
        return default


@dataclass
class EditorConfig:
    debounce_ms: int = 300
    reload_after_save: bool = True
    managed_dir_name: str = DEFAULT_MANAGED_DIR
    niri_version: NiriVersion | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> EditorConfig:
        path = path or config_path()
        section = read_sections(path).get(SECTION, {})
        cfg = cls()
        if "debounce_ms" in section:
            cfg.debounce_ms = _as_int(section["debounce_ms"], cfg.debounce_ms, "debounce_ms")
        if "reload_after_save" in section:
            cfg.reload_after_save = _as_bool(section["reload_after_save"], cfg.reload_after_save)
        if section.get("managed_dir_name", "").strip():
            cfg.managed_dir_name = section["managed_dir_name"].strip()
        if section.get("niri_version", "").strip():
            cfg.niri_version = NiriVersion.parse(section["niri_version"])
            if cfg.niri_version is None:
                logger.warning("ignoring unparsable niri_version %r", section["niri_version"])

        env = os.getenv(DEBOUNCE_ENV)
        if env:
            cfg.debounce_ms = _as_int(env, cfg.debounce_ms, DEBOUNCE_ENV)
        cfg.debounce_ms = max(cfg.debounce_ms, 0)
        logger.debug("editor config from %s: %s", path, cfg)
        return cfg

    def save(self, path: Path | None = None) -> None:
        path = path or config_path()
        data = read_sections(path)
        section = data.setdefault(SECTION, {})
        section["debounce_ms"] = str(self.debounce_ms)
        section["reload_after_save"] = "true" if self.reload_after_save else "false"
        section["managed_dir_name"] = self.managed_dir_name
        if self.niri_version is not None:
            section["niri_version"] = str(self.niri_version)
        else:
            section.pop("niri_version", None)
        write_sections(path, data)


__all__ = ["EditorConfig", "config_path", "read_sections", "write_sections"]
