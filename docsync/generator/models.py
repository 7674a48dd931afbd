"""Shared dataclasses used by the document rendering pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from docsync._constants import REMOVED_MARKER
from docsync.models import CustomSection


@dc.dataclass(frozen=True, slots=True)
class RecognizedSection:
    """A template section whose body is owned by the renderer.

    Attributes
    ----------
    heading : str
        Canonical heading text (for example ``"Props Reference"``).
    body : str
        Markdown below the heading; generated tables and examples, or the
        preserved prose of a prior document.
    """

    heading: str
    body: str


DocumentSection: typ.TypeAlias = RecognizedSection | CustomSection


@dc.dataclass(frozen=True, slots=True)
class RenderedDocument:
    """Rendered Markdown for one component and where it belongs.

    Attributes
    ----------
    component_name : str
        Component the document describes.
    relative_path : str
        POSIX destination relative to the docs root, or relative to the
        escalation directory when ``escalated`` is set.
    text : str
        Full document text ending in a single newline.
    category : str | None
        Resolved category, ``None`` for escalated renders.
    escalated : bool
        ``True`` when the document needs a human category decision.
    """

    component_name: str
    relative_path: str
    text: str
    category: str | None
    escalated: bool = False


@dc.dataclass(frozen=True, slots=True)
class IndexEntry:
    """One component line in the component index."""

    name: str
    category: str
    href: str
    removed: bool = False

    @property
    def suffix(self) -> str:
        """Return the trailing marker for removed components."""
        return f" {REMOVED_MARKER}" if self.removed else ""


__all__ = ["DocumentSection", "IndexEntry", "RecognizedSection", "RenderedDocument"]
