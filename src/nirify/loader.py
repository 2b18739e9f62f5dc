"""Loading the managed files into a :class:`Settings` model."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .health import ConfigHealthReport
from .includes import IncludeWalk
from .models import Settings
from .paths import ConfigPaths
from .registry import ALL, SettingsCategory
from .sections import get_section
from .sections.keybindings import parse_binds
from .storage import FileLoadStatus, Loaded, Missing, ParseError, read_kdl_file_with_status

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Per-category outcome of one load; consumed by the status bar."""

    loaded: list[SettingsCategory] = field(default_factory=list)
    missing: list[SettingsCategory] = field(default_factory=list)
    failed: list[tuple[SettingsCategory, str]] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statuses: dict[SettingsCategory, FileLoadStatus] = field(default_factory=dict)

    def track(self, category: SettingsCategory, status: FileLoadStatus) -> None:
        self.statuses[category] = status
        if isinstance(status, Loaded):
            self.loaded.append(category)
        elif isinstance(status, Missing):
            self.missing.append(category)
        else:
            kind = "parse error" if isinstance(status, ParseError) else "read error"
            self.failed.append((category, status.message))
            self.warnings.append(f"{category.file_name}: {kind}: {status.message}")

    def is_ok(self) -> bool:
        return not self.failed

    def health(self) -> ConfigHealthReport:
        """Health report built from this load without reading files again."""
        return ConfigHealthReport.from_load_statuses(self.statuses)

    def summary(self) -> str:
        parts = [f"{len(self.loaded)} loaded"]
        if self.missing:
            parts.append(f"{len(self.missing)} using defaults")
        if self.failed:
            names = ", ".join(c.file_name for c, _ in self.failed)
            parts.append(f"{len(self.failed)} failed ({names})")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "loaded": [c.file_name for c in self.loaded],
            "missing": [c.file_name for c in self.missing],
            "failed": {c.file_name: msg for c, msg in self.failed},
            "warnings": list(self.warnings),
        }


def load_keybindings_from_niri(
    niri_config: str | Path,
    settings: Settings,
    sandbox_root: str | Path | None = None,
) -> list[str]:
    """Collect binds from niri's own config and its includes.

    Returns the warnings raised while walking the include tree.
    """
    keybindings = settings.keybindings
    walk = IncludeWalk(
        Path(niri_config),
        sandbox_root=Path(sandbox_root) if sandbox_root is not None else None,
    )
    found = 0
    for _, _, doc in walk:
        found += parse_binds(doc, keybindings)
    keybindings.source_file = str(niri_config)
    keybindings.loaded = found > 0
    if not found:
        keybindings.error = "No keybindings found in niri config"
    logger.debug("loaded %d keybindings from %s", found, niri_config)
    return walk.warnings


def load_settings(
    paths: ConfigPaths,
    categories: Iterable[SettingsCategory] = ALL,
    sandbox_root: str | Path | None = None,
) -> tuple[Settings, LoadResult]:
    """Read each category file once and fold it into a fresh model.

    A missing or broken file leaves its category at defaults; loading
    always succeeds.
    """
    settings = Settings()
    result = LoadResult()
    for category in categories:
        path = paths.path_for(category)
        status = read_kdl_file_with_status(path)
        result.track(category, status)
        if isinstance(status, Loaded):
            get_section(category).parse(status.document, settings)
            logger.debug("parsed %s", category.file_name)

    keybindings_status = result.statuses.get(SettingsCategory.KEYBINDINGS)
    if isinstance(keybindings_status, Loaded):
        settings.keybindings.source_file = str(paths.path_for(SettingsCategory.KEYBINDINGS))
        settings.keybindings.loaded = True
    elif keybindings_status is not None:
        result.warnings.extend(
            load_keybindings_from_niri(paths.niri_config, settings, sandbox_root)
        )

    settings.validate()
    logger.info("loaded settings: %s", result.summary())
    return settings, result


__all__ = ["LoadResult", "load_settings", "load_keybindings_from_niri"]
