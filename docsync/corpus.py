"""Load previously generated component documents into descriptors.

The corpus is every ``*.md`` file below ``<docs_root>/<components_dir>``
except the component index. Documents are parsed in parallel; one that lacks
a title or ``Package`` metadata is reported as a
:class:`~docsync.errors.CorpusParseFailure` and treated as absent.

Example
-------
>>> from pathlib import Path
>>> from docsync.config import DocsConfig
>>> from docsync.corpus import CorpusLoader
>>> corpus = CorpusLoader(DocsConfig(root=Path("docs"))).load()  # doctest: +SKIP
>>> sorted(corpus.by_component())  # doctest: +SKIP
['Button', 'Widget']
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from concurrent.futures import ThreadPoolExecutor
from pathlib import PurePosixPath

from ._constants import (
    HEADING_EXAMPLES,
    HEADING_PROPS,
    HEADING_SEE_ALSO,
    HEADING_SLOTS,
    INDEX_LINK_LABEL,
    META_CATEGORY,
    META_EXPORTS,
    META_IMPORT,
    META_PACKAGE,
    NO_DEFAULT,
    PROSE_HEADINGS,
    RECOGNIZED_HEADINGS,
)
from .errors import CorpusParseFailure
from .logging import get_logger
from .markdown_parser import (
    first_code_block,
    parse_document,
    parse_table,
    split_subsections,
    unwrap_code_span,
)
from .models import (
    CustomSection,
    DocDescriptor,
    ExampleSnippet,
    PropDescriptor,
    SlotDescriptor,
)
from .naming import strip_numeric_prefix

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .config import DocsConfig
    from .models import ValidationIssue

logger = get_logger("corpus")

_CODE_SPANS = re.compile(r"`([^`]+)`")
_LIST_ITEM = re.compile(r"^\s*[-*+]\s+(?P<item>.*)$")
_RECOGNIZED = {heading.casefold(): heading for heading in RECOGNIZED_HEADINGS}
_GENERATED_METADATA = frozenset({META_PACKAGE, META_IMPORT, META_CATEGORY, META_EXPORTS})


@dc.dataclass(slots=True)
class CorpusResult:
    """Parsed documents plus the warnings raised while loading them."""

    documents: list[DocDescriptor] = dc.field(default_factory=list)
    issues: list[ValidationIssue] = dc.field(default_factory=list)

    def by_component(self) -> dict[str, list[DocDescriptor]]:
        """Return documents grouped by component name, in path order."""
        grouped: dict[str, list[DocDescriptor]] = {}
        for document in self.documents:
            grouped.setdefault(document.component_name, []).append(document)
        return grouped


class CorpusLoader:
    """Parse the existing documentation tree."""

    def __init__(self, docs: DocsConfig, *, workers: int = 4) -> None:
        self.docs = docs
        self.workers = max(workers, 1)

    def document_paths(self) -> list[Path]:
        """Return component document paths, sorted, excluding the index."""
        root = self.docs.components_root
        if not root.is_dir():
            return []
        index = self.docs.index_path
        return sorted(path for path in root.rglob("*.md") if path.is_file() and path != index)

    def load(self) -> CorpusResult:
        """Parse every component document under the components directory."""
        paths = self.document_paths()
        result = CorpusResult()
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            for outcome in executor.map(self._load_one, paths):
                if isinstance(outcome, DocDescriptor):
                    result.documents.append(outcome)
                else:
                    result.issues.append(outcome)
        logger.info(
            "loaded %d documents from %s", len(result.documents), self.docs.components_root
        )
        return result

    def _load_one(self, path: Path) -> DocDescriptor | ValidationIssue:
        relative = path.relative_to(self.docs.root).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
            return parse_component_doc(relative, text, self.docs.components_dir)
        except OSError as exc:
            failure = CorpusParseFailure(f"Could not read document: {exc}", path=relative)
        except CorpusParseFailure as exc:
            failure = exc
        logger.warning("%s: %s", failure.path, failure.message)
        return failure.to_issue()


def category_for_path(relative_path: str, components_dir: str) -> str | None:
    """Return the category folder of a document path, numeric prefix removed.

    Examples
    --------
    >>> category_for_path("components/02-buttons/button.md", "components")
    'buttons'
    """
    parts = PurePosixPath(relative_path).parts
    base = PurePosixPath(components_dir).parts
    if parts[: len(base)] != base:
        return None
    rest = parts[len(base) :]
    if len(rest) < 2:
        return None
    return strip_numeric_prefix(rest[0])


def parse_component_doc(relative_path: str, text: str, components_dir: str) -> DocDescriptor:
    """Parse one component document.

    Parameters
    ----------
    relative_path : str
        POSIX path relative to the docs root.
    text : str
        Document contents.
    components_dir : str
        Components directory (relative to the docs root) used to derive the
        category from the path.

    Returns
    -------
    DocDescriptor
        Structural model of the document.

    Raises
    ------
    CorpusParseFailure
        If the document has no title or no ``Package`` metadata line.
    """
    parsed = parse_document(text)
    if not parsed.title:
        msg = "Document has no '# Title' line; treated as absent."
        raise CorpusParseFailure(msg, path=relative_path)
    package = unwrap_code_span(parsed.metadata.get(META_PACKAGE, ""))
    if not package:
        msg = f"Document has no '{META_PACKAGE}' metadata; treated as absent."
        raise CorpusParseFailure(msg, path=relative_path)

    category = category_for_path(relative_path, components_dir)
    if category is None:
        category = unwrap_code_span(parsed.metadata.get(META_CATEGORY, "")) or None

    props: tuple[PropDescriptor, ...] = ()
    slots: tuple[SlotDescriptor, ...] = ()
    examples: tuple[ExampleSnippet, ...] = ()
    see_also = ""
    prose: list[CustomSection] = []
    custom: list[CustomSection] = []
    seen: set[str] = set()
    for section in parsed.sections:
        heading = _RECOGNIZED.get(section.title.casefold())
        if heading is None or heading in seen:
            custom.append(CustomSection(section.title, section.markdown))
            continue
        seen.add(heading)
        if heading == HEADING_PROPS:
            props = _parse_props(section.markdown)
        elif heading == HEADING_SLOTS:
            slots = _parse_slots(section.markdown)
        elif heading == HEADING_EXAMPLES:
            examples = _parse_examples(section.markdown)
        elif heading == HEADING_SEE_ALSO:
            see_also = _parse_see_also(section.markdown)
        elif heading in PROSE_HEADINGS:
            prose.append(CustomSection(heading, section.markdown))

    extra_metadata = tuple(
        (key, value) for key, value in parsed.metadata.items() if key not in _GENERATED_METADATA
    )
    return DocDescriptor(
        path=relative_path,
        package_name=package,
        component_name=parsed.title,
        category=category,
        import_statement=unwrap_code_span(parsed.metadata.get(META_IMPORT, "")),
        props=props,
        slots=slots,
        exported_symbols=_parse_exports(parsed.metadata.get(META_EXPORTS, "")),
        examples=examples,
        prose_sections=tuple(prose),
        lead=parsed.preamble,
        extra_metadata=extra_metadata,
        see_also=see_also,
        custom_sections=tuple(custom),
    )


def _cells(row: list[str], width: int) -> list[str]:
    return (row + [""] * width)[:width]


def _parse_props(body: str) -> tuple[PropDescriptor, ...]:
    props: list[PropDescriptor] = []
    for row in parse_table(body):
        name_cell, type_cell, default_cell, description = _cells(row, 4)
        name = unwrap_code_span(name_cell)
        optional = name.endswith("?")
        name = name.rstrip("?")
        if not name:
            continue
        default = unwrap_code_span(default_cell)
        props.append(
            PropDescriptor(
                name=name,
                type_expression=unwrap_code_span(type_cell),
                default_value=None if default in ("", NO_DEFAULT) else default,
                description=description,
                required=not optional,
            )
        )
    return tuple(props)


def _parse_slots(body: str) -> tuple[SlotDescriptor, ...]:
    slots: list[SlotDescriptor] = []
    for row in parse_table(body):
        name_cell, element_cell, description = _cells(row, 3)
        name = unwrap_code_span(name_cell)
        if name:
            slots.append(SlotDescriptor(name, unwrap_code_span(element_cell), description))
    return tuple(slots)


def _parse_examples(body: str) -> tuple[ExampleSnippet, ...]:
    _intro, subsections = split_subsections(body)
    examples: list[ExampleSnippet] = []
    for subsection in subsections:
        block = first_code_block(subsection.markdown)
        if block is not None:
            examples.append(ExampleSnippet(subsection.title, block[1]))
    return tuple(examples)


def _parse_see_also(body: str) -> str:
    """Return the See Also body without its component index link line."""
    kept = []
    for line in body.splitlines():
        match = _LIST_ITEM.match(line)
        if match and match.group("item").strip().startswith(f"[{INDEX_LINK_LABEL}]"):
            continue
        kept.append(line)
    return "\n".join(kept).strip("\n")


def _parse_exports(value: str) -> frozenset[str]:
    names = _CODE_SPANS.findall(value)
    if not names:
        names = [part.strip() for part in value.split(",")]
    return frozenset(name for name in names if name and name != NO_DEFAULT)


__all__ = ["CorpusLoader", "CorpusResult", "category_for_path", "parse_component_doc"]
