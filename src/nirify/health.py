"""Health checks and repair of the managed files."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .errors import AtomicWriteError
from .models import Settings
from .paths import ConfigPaths
from .registry import HEALTH_CHECK, SettingsCategory
from .storage import (
    BACKUP_TIMESTAMP,
    FileLoadStatus,
    Loaded,
    Missing,
    ParseError,
    atomic_write,
    read_kdl_file_with_status,
    render_category,
    save_settings,
    supported_categories,
)

if TYPE_CHECKING:
    from .compat import FeatureCompat

logger = logging.getLogger(__name__)


class HealthState(Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPTED = "corrupted"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class FileHealth:
    state: HealthState
    detail: str | None = None

    @classmethod
    def from_status(cls, status: FileLoadStatus) -> FileHealth:
        if isinstance(status, Loaded):
            return cls(HealthState.OK)
        if isinstance(status, Missing):
            return cls(HealthState.MISSING)
        if isinstance(status, ParseError):
            return cls(HealthState.CORRUPTED, status.message)
        return cls(HealthState.UNREADABLE, getattr(status, "message", None))

    def __str__(self) -> str:
        if self.detail:
            return f"{self.state.value}: {self.detail}"
        return self.state.value


class ConfigHealthReport:
    """Immutable snapshot of every health-checked file's state."""

    def __init__(self, statuses: Mapping[SettingsCategory, FileHealth]) -> None:
        self._statuses = MappingProxyType(dict(statuses))

    @classmethod
    def from_load_statuses(
        cls, statuses: Mapping[SettingsCategory, FileLoadStatus]
    ) -> ConfigHealthReport:
        return cls(
            {c: FileHealth.from_status(statuses[c]) for c in HEALTH_CHECK if c in statuses}
        )

    @property
    def statuses(self) -> Mapping[SettingsCategory, FileHealth]:
        return self._statuses

    def status(self, category: SettingsCategory) -> FileHealth:
        return self._statuses.get(category, FileHealth(HealthState.MISSING))

    def _files(self, state: HealthState) -> list[str]:
        return [c.file_name for c, h in self._statuses.items() if h.state is state]

    def corrupted_files(self) -> list[str]:
        return self._files(HealthState.CORRUPTED)

    def unreadable_files(self) -> list[str]:
        return self._files(HealthState.UNREADABLE)

    def missing_files(self) -> list[str]:
        return self._files(HealthState.MISSING)

    def is_healthy(self) -> bool:
        return not self.corrupted_files() and not self.unreadable_files()

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.is_healthy(),
            "files": {
                c.value: {"state": h.state.value, "detail": h.detail}
                for c, h in self._statuses.items()
            },
        }


def check_config_health(paths: ConfigPaths) -> ConfigHealthReport:
    statuses = {c: read_kdl_file_with_status(paths.path_for(c)) for c in HEALTH_CHECK}
    return ConfigHealthReport.from_load_statuses(statuses)


def ensure_required_files_exist(
    paths: ConfigPaths,
    settings: Settings,
    feature_compat: FeatureCompat | None = None,
) -> list[str]:
    """Write every missing category file from *settings*; return their names.

    Files a newer editor version introduced are backfilled this way.
    Categories the running niri does not support are skipped.
    """
    created: list[str] = []
    for category in supported_categories(feature_compat):
        path = paths.path_for(category)
        if path.exists():
            continue
        try:
            atomic_write(path, render_category(category, settings))
        except AtomicWriteError as exc:
            logger.warning("could not create %s: %s", category.file_name, exc)
            continue
        logger.info("created missing %s", category.file_name)
        created.append(category.file_name)
    return created


def repair_corrupted_configs(
    paths: ConfigPaths,
    settings: Settings,
    feature_compat: FeatureCompat | None = None,
) -> list[str]:
    """Back up each corrupted file, then regenerate the managed tree.

    *settings* is expected to come from a load in which the corrupted files
    already fell back to defaults.  A file whose backup fails is skipped.
    Returns the names of the files repaired.

    Raises
    ------
    ConfigWriteError
        If regenerating the files fails after backups were taken.
    """
    report = check_config_health(paths)
    corrupted = [c for c, h in report.statuses.items() if h.state is HealthState.CORRUPTED]
    if not corrupted:
        logger.debug("no corrupted config files to repair")
        return []

    stamp = datetime.now().strftime(BACKUP_TIMESTAMP)
    repaired: list[str] = []
    for category in corrupted:
        path = paths.path_for(category)
        backup = paths.backup_dir / f"{category.file_name}.{stamp}.corrupted.bak"
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("failed to read %s for backup: %s", path, exc)
            continue
        try:
            atomic_write(backup, content)
        except AtomicWriteError as exc:
            logger.warning("failed to write backup %s: %s", backup, exc)
            continue
        logger.info("backed up corrupted %s to %s", category.file_name, backup.name)
        repaired.append(category.file_name)

    if repaired:
        save_settings(paths, settings, feature_compat)
        logger.info("regenerated %d corrupted config file(s)", len(repaired))
    return repaired


__all__ = [
    "HealthState",
    "FileHealth",
    "ConfigHealthReport",
    "check_config_health",
    "ensure_required_files_exist",
    "repair_corrupted_configs",
]
