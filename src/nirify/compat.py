"""Which niri features the installed compositor understands."""
from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering

logger = logging.getLogger(__name__)

VERSION_TIMEOUT = 2.0

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


@total_ordering
@dataclass(frozen=True)
class NiriVersion:
    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> NiriVersion | None:
        """Parse ``25.08`` or a git-describe form such as ``25.08-12-gabc``."""
        head = text.strip().split("-", 1)[0]
        parts = head.split(".")
        if len(parts) < 2:
            return None
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError:
            return None

    def at_least(self, major: int, minor: int) -> bool:
        return (self.major, self.minor) >= (major, minor)

    def __lt__(self, other: NiriVersion) -> bool:
        if not isinstance(other, NiriVersion):
            return NotImplemented
        return (self.major, self.minor) < (other.major, other.minor)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor:02d}"


class NiriFeature(Enum):
    RECENT_WINDOWS = ("Recent Windows (Alt-Tab) Switcher", NiriVersion(25, 11))

    def __init__(self, display_name: str, min_version: NiriVersion) -> None:
        self.display_name = display_name
        self.min_version = min_version

    def is_supported_by(self, version: NiriVersion) -> bool:
        return version >= self.min_version


def unsupported_features(version: NiriVersion) -> list[NiriFeature]:
    return [f for f in NiriFeature if not f.is_supported_by(version)]


@dataclass(frozen=True)
class FeatureCompat:
    recent_windows: bool = False

    @classmethod
    def from_version(cls, version: NiriVersion | None) -> FeatureCompat:
        """Flags for *version*; an unknown version enables nothing."""
        if version is None:
            return cls()
        return cls(recent_windows=NiriFeature.RECENT_WINDOWS.is_supported_by(version))

    @classmethod
    def all_enabled(cls) -> FeatureCompat:
        return cls(recent_windows=True)


def parse_version_output(output: str) -> NiriVersion | None:
    """Extract the version from ``niri --version`` output."""
    for token in output.split():
        if _VERSION_RE.match(token):
            return NiriVersion.parse(token)
    return None


def detect_niri_version(timeout: float = VERSION_TIMEOUT) -> NiriVersion | None:
    """Ask the installed ``niri`` binary for its version; None on any failure."""
    try:
        proc = subprocess.run(
            ["niri", "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("could not run niri --version: %s", exc)
        return None
    if proc.returncode != 0:
        logger.debug("niri --version exited with %d", proc.returncode)
        return None
    version = parse_version_output(proc.stdout)
    if version is None:
        logger.warning("unrecognised niri version output: %r", proc.stdout.strip())
    return version


__all__ = [
    "NiriVersion",
    "NiriFeature",
    "FeatureCompat",
    "detect_niri_version",
    "parse_version_output",
    "unsupported_features",
]
