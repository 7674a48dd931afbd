"""Build the component index listing every document in the final tree.

The index lives at ``<components_dir>/<index_file>`` and groups component
documents by category folder. Components whose source disappeared are still
listed, flagged as removed, until a human deletes their document.

Example
-------
>>> from pathlib import Path
>>> from docsync.config import DocsConfig
>>> from docsync.generator import ComponentIndexBuilder
>>> builder = ComponentIndexBuilder(DocsConfig(root=Path("docs")))
>>> print(builder.render({"components/inputs/widget.md": "Widget"}), end="")
# Component Index
<BLANKLINE>
## inputs
<BLANKLINE>
- [Widget](inputs/widget.md)
"""

from __future__ import annotations

import posixpath
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docsync._constants import INDEX_TEMPLATE, INDEX_TITLE
from docsync.corpus import category_for_path

from .models import IndexEntry

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docsync.config import DocsConfig


class ComponentIndexBuilder:
    """Render the component index from the documents of a tree."""

    def __init__(self, docs: DocsConfig, *, templates_dir: Path | None = None) -> None:
        """Initialize the index builder.

        Parameters
        ----------
        docs : DocsConfig
            Layout of the documentation tree.
        templates_dir : Path, optional
            Directory containing the Jinja templates. Defaults to the
            ``docsync/templates`` directory when ``None``.
        """
        self.docs = docs
        self.templates_dir = templates_dir or Path(__file__).resolve().parents[1] / "templates"
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(INDEX_TEMPLATE)

    @property
    def index_path(self) -> str:
        """Return the index location relative to the docs root."""
        return posixpath.join(self.docs.components_dir, self.docs.index_file)

    def entries(
        self,
        documents: cabc.Mapping[str, str],
        removed: cabc.Collection[str] = (),
    ) -> list[IndexEntry]:
        """Return index entries sorted by category then component name.

        Parameters
        ----------
        documents : Mapping[str, str]
            Component name keyed by docs-root relative document path.
        removed : Collection[str]
            Names of components whose source no longer exists.
        """
        base = posixpath.dirname(self.index_path) or "."
        entries = [
            IndexEntry(
                name=name,
                category=category_for_path(path, self.docs.components_dir) or "",
                href=posixpath.relpath(path, base),
                removed=name in removed,
            )
            for path, name in documents.items()
        ]
        entries.sort(key=lambda entry: (entry.category, entry.name, entry.href))
        return entries

    def render(
        self,
        documents: cabc.Mapping[str, str],
        removed: cabc.Collection[str] = (),
    ) -> str:
        """Return the index Markdown for ``documents``."""
        groups: dict[str, list[IndexEntry]] = {}
        for entry in self.entries(documents, removed):
            groups.setdefault(entry.category, []).append(entry)
        context = {
            "title": INDEX_TITLE,
            "groups": [
                {"category": category or "uncategorized", "entries": items}
                for category, items in groups.items()
            ],
        }
        return self.template.render(**context).rstrip("\n") + "\n"


__all__ = ["ComponentIndexBuilder"]
