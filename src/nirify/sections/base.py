from __future__ import annotations

from abc import ABC, abstractmethod

from ..document import Document, KdlWriter, parse_document
from ..models import Settings
from ..registry import SettingsCategory


class BaseSection(ABC):
    """Parse and render one settings category.

    ``parse`` folds a document into the model and leaves fields the document
    does not mention untouched.  ``render`` produces the full content of the
    category's managed file.
    """

    category: SettingsCategory

    @abstractmethod
    def parse(self, doc: Document, settings: Settings) -> None:
        pass

    @abstractmethod
    def render(self, settings: Settings) -> str:
        pass

    def writer(self) -> KdlWriter:
        return KdlWriter(header=f"{self.category.display_name} settings - managed by nirify")

    def parse_text(self, text: str, settings: Settings) -> None:
        self.parse(parse_document(text), settings)
