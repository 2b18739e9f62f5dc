"""Following ``include`` directives inside niri's own config tree.

Every include target is canonicalized before it is checked against the
sandbox root, so ``..`` segments and symlinks cannot escape it.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .document import Document
from .errors import IncludeDepthExceeded, SandboxViolation
from .paths import niri_config_dir
from .storage import Loaded, Missing, read_kdl_file_with_status

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 10


def resolve_include_path(
    include: str, base_dir: str | Path, sandbox_root: str | Path | None = None
) -> Path:
    """Resolve *include* as written in a file living in *base_dir*.

    ``~/`` expands to the home directory, a leading ``/`` is absolute and
    anything else is relative to *base_dir*.

    Raises
    ------
    SandboxViolation
        If the target does not exist or lies outside *sandbox_root*.
    """
    if include.startswith("~/"):
        candidate = Path.home() / include[2:]
    elif include.startswith("/"):
        candidate = Path(include)
    else:
        candidate = Path(base_dir) / include
    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise SandboxViolation(f"include {include!r} cannot be resolved: {exc}") from exc

    root = Path(sandbox_root) if sandbox_root is not None else niri_config_dir()
    try:
        root = root.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise SandboxViolation(f"config root {root} is not accessible: {exc}") from exc
    if not resolved.is_relative_to(root):
        raise SandboxViolation(f"include {include!r} escapes {root}")
    return resolved


def include_targets(doc: Document) -> list[str]:
    return [
        node.first_arg
        for node in doc.all("include")
        if isinstance(node.first_arg, str) and node.first_arg
    ]


@dataclass
class IncludeWalk:
    """Depth-first traversal of a config file and everything it includes.

    Iterating yields ``(path, depth, document)`` for every readable file,
    parent before children.  Problems are collected in :attr:`warnings`;
    they never stop the walk.
    """

    root: Path
    sandbox_root: Path | None = None
    max_depth: int = MAX_INCLUDE_DEPTH
    warnings: list[str] = field(default_factory=list)
    includes_processed: int = 0
    _visited: set[Path] = field(default_factory=set, repr=False)

    def _warn(self, message: str) -> None:
        logger.warning("%s", message)
        self.warnings.append(message)

    def __iter__(self) -> Iterator[tuple[Path, int, Document]]:
        yield from self._walk(Path(self.root), 0)

    def _walk(self, path: Path, depth: int) -> Iterator[tuple[Path, int, Document]]:
        try:
            self._enter(path, depth)
        except IncludeDepthExceeded as exc:
            self._warn(str(exc))
            return

        status = read_kdl_file_with_status(path)
        if not isinstance(status, Loaded):
            if depth == 0:
                message = "Could not read niri config for import, using defaults"
                if isinstance(status, Missing):
                    logger.info("%s", message)
                    self.warnings.append(message)
                else:
                    self._warn(f"{message}: {status.message}")
            else:
                self._warn(f"Could not read included file: {path}")
            return

        key = path.resolve()
        if key in self._visited:
            logger.debug("already visited %s, skipping", path)
            return
        self._visited.add(key)
        yield path, depth, status.document

        for include in include_targets(status.document):
            try:
                target = resolve_include_path(include, path.parent, self.sandbox_root)
            except SandboxViolation as exc:
                self._warn(f"Skipped include (security): {include}: {exc}")
                continue
            logger.debug("following include (depth %d): %s -> %s", depth, include, target)
            self.includes_processed += 1
            yield from self._walk(target, depth + 1)

    def _enter(self, path: Path, depth: int) -> None:
        if depth > self.max_depth:
            raise IncludeDepthExceeded(
                f"Include depth exceeded maximum of {self.max_depth}, "
                f"not reading {path}"
            )


__all__ = [
    "MAX_INCLUDE_DEPTH",
    "IncludeWalk",
    "include_targets",
    "resolve_include_path",
]
