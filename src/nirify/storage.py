"""Reading and writing the managed KDL files."""
from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .document import Document, KdlWriter, parse_document
from .errors import AtomicWriteError, ConfigWriteError, DocumentParseError
from .models import Settings
from .paths import ConfigPaths
from .registry import ALL, SettingsCategory
from .sections import get_section

if TYPE_CHECKING:
    from .compat import FeatureCompat

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP = "%Y-%m-%dT%H-%M-%S"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------

def atomic_write(path: str | Path, content: str) -> None:
    """Replace *path* with *content* so readers see old or new, never half.

    Raises
    ------
    AtomicWriteError
        If the temporary file cannot be written or moved into place.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise AtomicWriteError(f"cannot create {path.parent}: {exc}") from exc
    tmp = path.with_name(f"{path.name}.tmp.{os.getpid()}.{time.time_ns()}")
    try:
        with tmp.open("x", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except OSError as exc:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        except OSError as cleanup:
            logger.warning("could not remove temporary file %s: %s", tmp, cleanup)
        raise AtomicWriteError(f"failed to write {path}: {exc}") from exc
    if os.name == "posix":
        try:
            os.chmod(path, 0o600)
        except OSError as exc:
            logger.warning("could not set permissions on %s: %s", path, exc)


def backup_path(paths: ConfigPaths, name: str, suffix: str) -> Path:
    stamp = datetime.now().strftime(BACKUP_TIMESTAMP)
    return paths.backup_dir / f"{name}.{stamp}.{suffix}"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

class FileLoadStatus:
    """Outcome of reading one file; produced once per file per load."""


@dataclass(frozen=True)
class Loaded(FileLoadStatus):
    document: Document


@dataclass(frozen=True)
class Missing(FileLoadStatus):
    pass


@dataclass(frozen=True)
class ParseError(FileLoadStatus):
    message: str


@dataclass(frozen=True)
class ReadError(FileLoadStatus):
    message: str


def read_kdl_file_with_status(path: str | Path) -> FileLoadStatus:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Missing()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("could not read %s: %s", path, exc)
        return ReadError(str(exc))
    try:
        document = parse_document(text)
    except DocumentParseError as exc:
        logger.warning("could not parse %s: %s", path, exc)
        return ParseError(str(exc))
    logger.debug("loaded %s", path)
    return Loaded(document)


def read_kdl_file(path: str | Path) -> Document | None:
    status = read_kdl_file_with_status(path)
    return status.document if isinstance(status, Loaded) else None


# ---------------------------------------------------------------------------
# Generating
# ---------------------------------------------------------------------------

def supported_categories(
    feature_compat: FeatureCompat | None = None,
) -> list[SettingsCategory]:
    """Categories the running niri understands, in registry order."""
    if feature_compat is None:
        return list(ALL)
    return [
        c
        for c in ALL
        if c is not SettingsCategory.RECENT_WINDOWS or feature_compat.recent_windows
    ]


def generate_main_kdl(feature_compat: FeatureCompat | None = None) -> str:
    """The entry point niri includes; it pulls in every category file."""
    w = KdlWriter(header="nirify managed configuration")
    w.comment("Do not edit manually - changes will be overwritten")
    w.newline()
    for category in supported_categories(feature_compat):
        w.node("include", category.value)
    return w.build()


def render_category(category: SettingsCategory, settings: Settings) -> str:
    return get_section(category).render(settings)


def _write_categories(
    paths: ConfigPaths, settings: Settings, categories: Iterable[SettingsCategory]
) -> int:
    written = 0
    failures: list[str] = []
    for category in categories:
        path = paths.path_for(category)
        try:
            atomic_write(path, render_category(category, settings))
        except AtomicWriteError as exc:
            logger.error("failed to save %s: %s", category.file_name, exc)
            failures.append(f"{category.file_name}: {exc}")
            continue
        written += 1
    if failures:
        raise ConfigWriteError("; ".join(failures))
    return written


def save_settings(
    paths: ConfigPaths,
    settings: Settings,
    feature_compat: FeatureCompat | None = None,
) -> int:
    """Write ``main.kdl`` and every category file; return files written.

    Raises
    ------
    ManagedDirectoryError
        If the managed tree cannot be created.
    ConfigWriteError
        If any file could not be written; the others are still attempted.
    """
    paths.ensure_directories()
    try:
        atomic_write(paths.main_kdl, generate_main_kdl(feature_compat))
    except AtomicWriteError as exc:
        raise ConfigWriteError(str(exc)) from exc
    written = 1 + _write_categories(paths, settings, supported_categories(feature_compat))
    logger.info("saved %d files to %s", written, paths.managed_dir)
    return written


def save_dirty(
    paths: ConfigPaths,
    settings: Settings,
    dirty: Iterable[SettingsCategory],
) -> int:
    """Write only the *dirty* category files; return files written."""
    wanted = set(dirty)
    categories = [c for c in ALL if c in wanted]
    if not categories:
        return 0
    paths.ensure_directories()
    written = _write_categories(paths, settings, categories)
    logger.info("saved %s", ", ".join(c.file_name for c in categories))
    return written


# ---------------------------------------------------------------------------
# niri's config.kdl
# ---------------------------------------------------------------------------

def add_include_line(paths: ConfigPaths) -> bool:
    """Append ``include "<managed>/main.kdl"`` to niri's config if missing.

    The original file is backed up first.  Returns True when the line was
    added.
    """
    if paths.has_include_line():
        return False
    try:
        original = paths.niri_config.read_text(encoding="utf-8")
    except FileNotFoundError:
        original = ""
    if original:
        paths.ensure_directories()
        backup = backup_path(paths, paths.niri_config.name, "bak")
        atomic_write(backup, original)
        logger.info("backed up %s to %s", paths.niri_config, backup)
    if original and not original.endswith("\n"):
        original += "\n"
    addition = (
        "\n// Settings managed by nirify\n"
        f'include "{paths.include_target}"\n'
    )
    atomic_write(paths.niri_config, original + addition)
    logger.info("added include line to %s", paths.niri_config)
    return True


__all__ = [
    "atomic_write",
    "read_kdl_file",
    "read_kdl_file_with_status",
    "FileLoadStatus",
    "Loaded",
    "Missing",
    "ParseError",
    "ReadError",
    "generate_main_kdl",
    "save_settings",
    "save_dirty",
    "add_include_line",
]
