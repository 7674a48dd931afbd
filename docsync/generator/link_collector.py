"""Collect and resolve Markdown link targets with a Python-Markdown extension."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import unquote, urlsplit

from markdown import Markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any


class LinkCollectorExtension(Extension):
    """Record every ``<a href>`` produced while converting Markdown.

    The hrefs are appended to ``sink`` in document order. The rendered HTML
    is discarded by callers; only the link targets matter.
    """

    def __init__(self, sink: list[str]) -> None:
        super().__init__()
        self.sink = sink

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the link-collecting treeprocessor on the Markdown instance."""
        processor = LinkCollectorTreeprocessor(md, self.sink)
        md.treeprocessors.register(processor, "docsync_link_collector", 15)


class LinkCollectorTreeprocessor(Treeprocessor):
    """Append anchor targets found in the parsed tree to a sink list."""

    def __init__(self, md: Markdown, sink: list[str]) -> None:
        super().__init__(md)
        self.sink = sink

    def run(self, root: Element) -> None:
        """Collect ``href`` attributes without modifying the tree."""
        for element in root.iter():
            if element.tag == "a":
                href = element.get("href")
                if href:
                    self.sink.append(href)


def collect_links(markdown_text: str) -> list[str]:
    """Return link targets in ``markdown_text`` in document order.

    Examples
    --------
    >>> collect_links("- [Index](../index.md)\\n- [Site](https://example.com)")
    ['../index.md', 'https://example.com']
    """
    sink: list[str] = []
    Markdown(extensions=[LinkCollectorExtension(sink), "sane_lists"]).convert(markdown_text)
    return sink


def is_relative_link(target: str) -> bool:
    """Return ``True`` for links that point at a path inside the docs tree."""
    lower = target.lower()
    if lower.startswith(("http://", "https://", "mailto:", "tel:", "data:", "javascript:")):
        return False
    if target.startswith(("#", "//")) or "://" in target:
        return False
    parsed = urlsplit(target)
    return not (parsed.scheme or parsed.netloc or not parsed.path or parsed.path.startswith("/"))


def resolve_link(base_dir: str, target: str) -> str | None:
    """Return the docs-root-relative path a relative link points at.

    Parameters
    ----------
    base_dir : str
        POSIX directory of the linking document, relative to the docs root.
    target : str
        Link target as written.

    Returns
    -------
    str | None
        Normalized path, or ``None`` when the link is not relative or climbs
        above the docs root.
    """
    if not is_relative_link(target):
        return None
    path = unquote(urlsplit(target).path)
    joined = posixpath.normpath(posixpath.join(base_dir, path))
    if joined == ".." or joined.startswith("../") or joined in (".", ""):
        return None
    return joined


def relative_href(from_path: str, to_path: str) -> str:
    """Return the relative link from document ``from_path`` to ``to_path``.

    Examples
    --------
    >>> relative_href("components/buttons/button.md", "components/index.md")
    '../index.md'
    """
    start = posixpath.dirname(from_path) or "."
    return posixpath.relpath(to_path, start)


__all__ = [
    "LinkCollectorExtension",
    "LinkCollectorTreeprocessor",
    "collect_links",
    "is_relative_link",
    "relative_href",
    "resolve_link",
]
