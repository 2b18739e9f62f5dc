"""Import settings from an existing, user-owned niri config."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .includes import MAX_INCLUDE_DEPTH, IncludeWalk
from .models import Settings
from .sections import all_sections

logger = logging.getLogger(__name__)

# Categories reported as imported or defaulted by comparing with defaults.
COMPARED_SECTIONS = (
    "appearance",
    "behavior",
    "keyboard",
    "mouse",
    "touchpad",
    "animations",
    "cursor",
    "miscellaneous",
    "debug",
    "switch_events",
)

# List categories, reported with their item counts.
COUNTED_SECTIONS = (
    "outputs",
    "window_rules",
    "layer_rules",
    "workspaces",
    "keybindings",
    "startup",
    "environment",
)


def _label(attribute: str) -> str:
    return attribute.replace("_", "-")


@dataclass
class ImportResult:
    settings: Settings
    imported_sections: list[str] = field(default_factory=list)
    defaulted_sections: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    includes_processed: int = 0

    def has_imports(self) -> bool:
        return bool(self.imported_sections)

    def summary(self) -> str:
        if not self.imported_sections:
            return "No settings imported, using defaults"
        return (
            f"Imported {len(self.imported_sections)} sections: "
            + ", ".join(self.imported_sections)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "imported": list(self.imported_sections),
            "defaulted": list(self.defaulted_sections),
            "warnings": list(self.warnings),
            "includes_processed": self.includes_processed,
        }


def import_document(doc, settings: Settings) -> None:
    """Fold one document into *settings* through every registered section."""
    for section in all_sections():
        section.parse(doc, settings)


def classify(settings: Settings) -> tuple[list[str], list[str]]:
    defaults = Settings()
    imported: list[str] = []
    defaulted: list[str] = []
    for attribute in COMPARED_SECTIONS:
        if getattr(settings, attribute) != getattr(defaults, attribute):
            imported.append(_label(attribute))
        else:
            defaulted.append(_label(attribute))
    for attribute in COUNTED_SECTIONS:
        count = len(getattr(settings, attribute))
        if count:
            imported.append(f"{_label(attribute)} ({count})")
    return imported, defaulted


def import_from_niri_config(
    path: str | Path,
    *,
    sandbox_root: str | Path | None = None,
    max_depth: int = MAX_INCLUDE_DEPTH,
) -> ImportResult:
    """Build a fresh :class:`Settings` from *path* and the files it includes.

    Unreadable files, includes escaping the sandbox and includes nested too
    deeply are skipped and reported in :attr:`ImportResult.warnings`.
    """
    path = Path(path)
    logger.info("importing settings from %s", path)
    settings = Settings()
    walk = IncludeWalk(
        path,
        sandbox_root=Path(sandbox_root) if sandbox_root is not None else None,
        max_depth=max_depth,
    )
    for source, depth, doc in walk:
        logger.debug("importing %s (depth %d)", source, depth)
        import_document(doc, settings)

    if settings.keybindings.loaded:
        settings.keybindings.source_file = str(path)
    settings.validate()

    imported, defaulted = classify(settings)
    logger.info(
        "import complete: %d sections imported, %d includes processed",
        len(imported),
        walk.includes_processed,
    )
    return ImportResult(
        settings=settings,
        imported_sections=imported,
        defaulted_sections=defaulted,
        warnings=list(walk.warnings),
        includes_processed=walk.includes_processed,
    )


__all__ = [
    "ImportResult",
    "import_document",
    "import_from_niri_config",
    "classify",
]
