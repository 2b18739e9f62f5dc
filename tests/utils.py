from __future__ import annotations

from pathlib import Path

from nirify.document import parse_document
from nirify.models import Settings
from nirify.registry import SettingsCategory
from nirify.sections import get_section


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def parse_into(category: SettingsCategory, text: str, settings: Settings | None = None) -> Settings:
    """Run one section's parser over *text* and return the model."""
    settings = settings if settings is not None else Settings()
    get_section(category).parse(parse_document(text), settings)
    return settings


def round_trip(category: SettingsCategory, settings: Settings) -> Settings:
    """Render *category* from *settings* and parse it into a fresh model."""
    text = get_section(category).render(settings)
    return parse_into(category, text)
