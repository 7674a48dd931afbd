"""Render component documents from descriptors with Jinja templates.

Generated sections (metadata, Props Reference, Slots, Examples) are rebuilt
from the :class:`~docsync.models.ComponentDescriptor` on every render. Prose
sections and hand-written custom sections are carried over from the prior
:class:`~docsync.models.DocDescriptor` verbatim. Nothing time-dependent is
rendered, so rendering the parse of a render reproduces it exactly.

Example
-------
>>> from pathlib import Path
>>> from docsync.config import DocsConfig, LibraryConfig
>>> from docsync.generator import TemplateRenderer
>>> from docsync.models import ComponentDescriptor
>>> renderer = TemplateRenderer(LibraryConfig(root=Path("lib")), DocsConfig(root=Path("docs")))
>>> widget = ComponentDescriptor("@x/react-widget", "Widget", "inputs")
>>> renderer.render(widget).relative_path
'components/inputs/widget.md'
"""

from __future__ import annotations

import posixpath
import re
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docsync._constants import (
    COMPONENT_TEMPLATE,
    EXAMPLE_LANGUAGE,
    HEADING_ACCESSIBILITY,
    HEADING_BEST_PRACTICES,
    HEADING_EXAMPLES,
    HEADING_OVERVIEW,
    HEADING_PROPS,
    HEADING_SEE_ALSO,
    HEADING_SLOTS,
    INDEX_LINK_LABEL,
    META_CATEGORY,
    META_EXPORTS,
    META_IMPORT,
    META_PACKAGE,
    NO_DEFAULT,
    OVERVIEW_PLACEHOLDER,
    PROPS_TABLE_HEADER,
    SLOTS_TABLE_HEADER,
    UNASSIGNED_CATEGORY,
)
from docsync.errors import CategoryAmbiguity
from docsync.naming import kebab_case

from .link_collector import relative_href
from .models import DocumentSection, RecognizedSection, RenderedDocument

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docsync.config import DocsConfig, LibraryConfig
    from docsync.models import (
        ComponentDescriptor,
        DocDescriptor,
        ExampleSnippet,
        PropDescriptor,
        SlotDescriptor,
    )

_BACKTICK_RUN = re.compile(r"`+")
_LIST_ITEM = re.compile(r"^[-*+]\s")


def escape_cell(text: str) -> str:
    r"""Return ``text`` safe for a table cell: pipes escaped, newlines folded.

    Examples
    --------
    >>> escape_cell("a | b")
    'a \\| b'
    """
    return " ".join(text.split()).replace("|", "\\|")


def code_span(text: str) -> str:
    """Wrap ``text`` in a code span long enough for any backticks it holds.

    Examples
    --------
    >>> code_span("Slot<'div'>")
    "`Slot<'div'>`"
    >>> code_span("`${number}px`")
    '`` `${number}px` ``'
    """
    runs = _BACKTICK_RUN.findall(text)
    if not runs:
        return f"`{text}`"
    fence = "`" * (max(len(run) for run in runs) + 1)
    return f"{fence} {text} {fence}"


def _fence_for(code: str) -> str:
    runs = [len(run) for run in _BACKTICK_RUN.findall(code)]
    return "`" * max(3, max(runs, default=0) + 1)


def _table(header: cabc.Sequence[str], rows: cabc.Iterable[cabc.Sequence[str]]) -> str:
    lines = [
        "| " + " | ".join(header) + " |",
        "| " + " | ".join("---" for _ in header) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)


def props_table(props: cabc.Sequence[PropDescriptor]) -> str:
    """Return the Props Reference table for ``props``."""
    rows = []
    for prop in props:
        name = prop.name if prop.required else f"{prop.name}?"
        default = NO_DEFAULT if prop.default_value is None else prop.default_value
        rows.append(
            (
                escape_cell(code_span(name)),
                escape_cell(code_span(prop.type_expression)),
                escape_cell(default if default == NO_DEFAULT else code_span(default)),
                escape_cell(prop.description),
            )
        )
    return _table(PROPS_TABLE_HEADER, rows)


def slots_table(slots: cabc.Sequence[SlotDescriptor]) -> str:
    """Return the Slots table for ``slots``."""
    rows = [
        (
            escape_cell(code_span(slot.name)),
            escape_cell(code_span(slot.element_type)),
            escape_cell(slot.description),
        )
        for slot in slots
    ]
    return _table(SLOTS_TABLE_HEADER, rows)


def examples_body(examples: cabc.Sequence[ExampleSnippet]) -> str:
    """Return the Examples section body, one ``###`` block per snippet."""
    blocks = []
    for example in examples:
        fence = _fence_for(example.source_text)
        blocks.append(
            f"### {example.title}\n\n{fence}{EXAMPLE_LANGUAGE}\n{example.source_text}\n{fence}"
        )
    return "\n\n".join(blocks)


class TemplateRenderer:
    """Turn descriptors into Markdown documents and decide where they go."""

    def __init__(
        self,
        library: LibraryConfig,
        docs: DocsConfig,
        *,
        templates_dir: Path | None = None,
        category_dirs: cabc.Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        library : LibraryConfig
            Supplies the module used in the rendered import statement.
        docs : DocsConfig
            Supplies the components directory and index file name.
        templates_dir : Path, optional
            Directory containing the Jinja templates; defaults to the package
            templates.
        category_dirs : Mapping[str, str], optional
            Existing category folder names keyed by category (``"buttons"``
            to ``"02-buttons"``) so new documents join numbered folders.
        """
        self.library = library
        self.docs = docs
        self.templates_dir = templates_dir or Path(__file__).resolve().parents[1] / "templates"
        self.category_dirs = dict(category_dirs or {})
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.get_template(COMPONENT_TEMPLATE)

    @property
    def index_path(self) -> str:
        """Return the component index path relative to the docs root."""
        return posixpath.join(self.docs.components_dir, self.docs.index_file)

    def import_statement(self, component: ComponentDescriptor) -> str:
        """Return the import line shown in the metadata block."""
        return f"import {{ {component.component_name} }} from '{self.library.import_module}';"

    def place(self, component: ComponentDescriptor, prior: DocDescriptor | None = None) -> str:
        """Return the destination of ``component``'s document, docs-root relative.

        A prior document in the same category keeps its path.

        Raises
        ------
        CategoryAmbiguity
            If the component has no category.
        """
        category = component.category
        if category is None:
            raise CategoryAmbiguity(component.package_name)
        if prior is not None and prior.category == category:
            return prior.path
        folder = self.category_dirs.get(category, category)
        filename = f"{kebab_case(component.component_name)}.md"
        return posixpath.join(self.docs.components_dir, folder, filename)

    def sections(
        self, component: ComponentDescriptor, prior: DocDescriptor | None, path: str
    ) -> list[DocumentSection]:
        """Return the ordered sections of the document at ``path``."""
        sections: list[DocumentSection] = []
        overview = prior.prose(HEADING_OVERVIEW) if prior else None
        if not overview:
            overview = OVERVIEW_PLACEHOLDER.format(component=component.component_name)
        sections.append(RecognizedSection(HEADING_OVERVIEW, overview))
        sections.append(RecognizedSection(HEADING_PROPS, props_table(component.props)))
        if component.slots:
            sections.append(RecognizedSection(HEADING_SLOTS, slots_table(component.slots)))
        if component.examples:
            sections.append(
                RecognizedSection(HEADING_EXAMPLES, examples_body(component.examples))
            )
        for heading in (HEADING_ACCESSIBILITY, HEADING_BEST_PRACTICES):
            body = prior.prose(heading) if prior else None
            if body is not None:
                sections.append(RecognizedSection(heading, body))
        if prior is not None:
            sections.extend(prior.custom_sections)
        sections.append(RecognizedSection(HEADING_SEE_ALSO, self._see_also(prior, path)))
        return sections

    def _see_also(self, prior: DocDescriptor | None, path: str) -> str:
        """Return the index link followed by the prior See Also content."""
        index_link = f"- [{INDEX_LINK_LABEL}]({relative_href(path, self.index_path)})"
        rest = prior.see_also if prior else ""
        if not rest:
            return index_link
        # A leading list item continues the index link's list.
        separator = "\n" if _LIST_ITEM.match(rest.splitlines()[0]) else "\n\n"
        return f"{index_link}{separator}{rest}"

    def render(
        self, component: ComponentDescriptor, prior: DocDescriptor | None = None
    ) -> RenderedDocument:
        """Render ``component`` against its prior document.

        Returns
        -------
        RenderedDocument
            Text and docs-root relative destination.

        Raises
        ------
        CategoryAmbiguity
            If the component has no category. The exception's ``document``
            carries the render, addressed relative to the escalation area.
        """
        try:
            path = self.place(component, prior)
        except CategoryAmbiguity as exc:
            filename = f"{kebab_case(component.component_name)}.md"
            text = self._render_text(component, prior, UNASSIGNED_CATEGORY, filename)
            exc.document = RenderedDocument(
                component.component_name, filename, text, None, escalated=True
            )
            raise
        text = self._render_text(component, prior, typ.cast("str", component.category), path)
        return RenderedDocument(component.component_name, path, text, component.category)

    def _render_text(
        self,
        component: ComponentDescriptor,
        prior: DocDescriptor | None,
        category: str,
        path: str,
    ) -> str:
        metadata = [
            (META_PACKAGE, code_span(component.package_name)),
            (META_IMPORT, code_span(self.import_statement(component))),
            (META_CATEGORY, category),
        ]
        if component.exported_symbols:
            names = ", ".join(code_span(name) for name in sorted(component.exported_symbols))
            metadata.append((META_EXPORTS, names))
        if prior is not None:
            metadata.extend(prior.extra_metadata)
        text = self.template.render(
            title=component.component_name,
            metadata=metadata,
            lead=prior.lead if prior else "",
            sections=self.sections(component, prior, path),
        )
        return text.rstrip("\n") + "\n"


__all__ = [
    "TemplateRenderer",
    "code_span",
    "escape_cell",
    "examples_body",
    "props_table",
    "slots_table",
]
