from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir as _uc

from .errors import ManagedDirectoryError
from .registry import SettingsCategory

logger = logging.getLogger(__name__)

DEFAULT_MANAGED_DIR = "nirify"
MAIN_KDL_NAME = "main.kdl"

# ---------------------------------------------------------------------------
# User directories
# ---------------------------------------------------------------------------

def _app_name(default: str) -> str:
    return os.getenv("NIRIFY_APP_NAME", default)


def user_config_dir(app_name: str = "nirify") -> Path:
    """Directory holding the editor's own preferences."""
    app = _app_name(app_name)
    return Path(_uc(appname=app)).resolve()


def config_home() -> Path:
    """Per-user config root, honouring ``XDG_CONFIG_HOME``."""
    return Path(_uc()).expanduser()


def niri_config_dir() -> Path:
    """The sandbox root: the only directory includes may resolve into."""
    return config_home() / "niri"


# ---------------------------------------------------------------------------
# Managed layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigPaths:
    """Resolved locations of every file the editor reads or writes."""

    niri_config: Path
    managed_dir: Path
    input_dir: Path
    advanced_dir: Path
    backup_dir: Path
    main_kdl: Path

    @classmethod
    def from_niri_dir(
        cls, niri_dir: str | Path, managed_dir_name: str = DEFAULT_MANAGED_DIR
    ) -> ConfigPaths:
        niri_dir = Path(niri_dir)
        managed = niri_dir / managed_dir_name
        return cls(
            niri_config=niri_dir / "config.kdl",
            managed_dir=managed,
            input_dir=managed / "input",
            advanced_dir=managed / "advanced",
            backup_dir=managed / ".backup",
            main_kdl=managed / MAIN_KDL_NAME,
        )

    @classmethod
    def default(cls, managed_dir_name: str = DEFAULT_MANAGED_DIR) -> ConfigPaths:
        return cls.from_niri_dir(niri_config_dir(), managed_dir_name)

    def path_for(self, category: SettingsCategory) -> Path:
        return self.managed_dir.joinpath(*category.relative_path.parts)

    def all_paths(self) -> dict[SettingsCategory, Path]:
        return {c: self.path_for(c) for c in SettingsCategory}

    @property
    def include_target(self) -> str:
        """Include path of ``main.kdl`` relative to niri's config."""
        return f"{self.managed_dir.name}/{MAIN_KDL_NAME}"

    def ensure_directories(self) -> None:
        """Create the managed directory tree.

        Raises
        ------
        ManagedDirectoryError
            If any directory cannot be created.
        """
        for directory in (
            self.managed_dir,
            self.input_dir,
            self.advanced_dir,
            self.backup_dir,
        ):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ManagedDirectoryError(
                    f"cannot create {directory}: {exc}"
                ) from exc

    def is_first_run(self) -> bool:
        return not self.main_kdl.exists()

    def has_include_line(self) -> bool:
        try:
            text = self.niri_config.read_text(encoding="utf-8")
        except OSError:
            return False
        target = self.include_target
        for line in text.splitlines():
            stripped = line.strip()
            if stripped.startswith("//"):
                continue
            if stripped.startswith("include") and target in stripped:
                return True
        return False


__all__ = [
    "ConfigPaths",
    "config_home",
    "niri_config_dir",
    "user_config_dir",
    "DEFAULT_MANAGED_DIR",
    "MAIN_KDL_NAME",
]
