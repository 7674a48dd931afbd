"""Document rendering: component pages, the component index, and link tooling."""

from __future__ import annotations

from .index_builder import ComponentIndexBuilder
from .models import DocumentSection, IndexEntry, RecognizedSection, RenderedDocument
from .renderer import TemplateRenderer

__all__ = [
    "ComponentIndexBuilder",
    "DocumentSection",
    "IndexEntry",
    "RecognizedSection",
    "RenderedDocument",
    "TemplateRenderer",
]
