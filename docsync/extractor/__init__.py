"""Source metadata extraction for component packages.

Examples
--------
>>> from docsync.categories import CategoryAssignment
>>> from docsync.config import LibraryConfig
>>> from docsync.extractor import MetadataExtractor
>>> extractor = MetadataExtractor(LibraryConfig(root=Path("lib")), CategoryAssignment([]))  # doctest: +SKIP
>>> extractor.extract(package).descriptor.props  # doctest: +SKIP
"""

from __future__ import annotations

from .core import ExtractionResult, MetadataExtractor

__all__ = ["ExtractionResult", "MetadataExtractor"]
