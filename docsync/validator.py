"""Structural and cross-reference checks over a documentation tree.

Validation runs against a :class:`VirtualTree`: the documents on disk with
staged renders laid over them. Nothing is written. Every rule runs to
completion and all issues are returned, so one run reports everything that
needs fixing.

Rules
-----
``missing-section`` (Error)
    Title, Package / Import / Category metadata, Overview, Props Reference
    and See Also are present.
``broken-link`` (Error)
    Relative links in See Also (and in the index) resolve inside the tree.
``index-missing-entry`` (Error)
    The component index exists and links every component document.
``duplicate-category`` (Error)
    A component is documented under one category only.
``filename-convention`` (Warning)
    Document filenames are lowercase kebab-case ``.md``.
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ

from ._constants import HEADING_SEE_ALSO, MANDATORY_METADATA, MANDATORY_SECTIONS
from .corpus import category_for_path
from .errors import StructuralValidationError
from .generator.link_collector import collect_links, is_relative_link, resolve_link
from .logging import get_logger
from .markdown_parser import parse_document
from .models import Severity, ValidationIssue
from .naming import KEBAB_FILENAME

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .config import DocsConfig
    from .markdown_parser import ParsedDocument

logger = get_logger("validator")

RULE_MISSING_SECTION = "missing-section"
RULE_BROKEN_LINK = "broken-link"
RULE_INDEX_MISSING_ENTRY = "index-missing-entry"
RULE_DUPLICATE_CATEGORY = "duplicate-category"
RULE_FILENAME_CONVENTION = "filename-convention"


@dc.dataclass(frozen=True, slots=True)
class VirtualTree:
    """The docs tree as it would look after promotion.

    Attributes
    ----------
    root : Path
        Docs root on disk.
    components_dir : str
        Components directory relative to ``root``.
    index_file : str
        Index filename inside ``components_dir``.
    overlay : Mapping[str, str]
        Staged document text keyed by docs-root relative path.
    """

    root: Path
    components_dir: str
    index_file: str
    overlay: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    @classmethod
    def from_config(
        cls, docs: DocsConfig, overlay: cabc.Mapping[str, str] | None = None
    ) -> VirtualTree:
        """Return the tree described by ``docs`` with ``overlay`` applied."""
        return cls(docs.root, docs.components_dir, docs.index_file, dict(overlay or {}))

    @property
    def index_path(self) -> str:
        """Return the index path relative to the docs root."""
        return posixpath.join(self.components_dir, self.index_file)

    def with_overlay(self, extra: cabc.Mapping[str, str]) -> VirtualTree:
        """Return a copy with ``extra`` laid over the current overlay."""
        return dc.replace(self, overlay={**self.overlay, **extra})

    def without(self, paths: cabc.Collection[str]) -> VirtualTree:
        """Return a copy whose overlay no longer holds ``paths``."""
        return dc.replace(
            self, overlay={key: value for key, value in self.overlay.items() if key not in paths}
        )

    def exists(self, path: str) -> bool:
        """Return ``True`` when ``path`` is staged or present on disk."""
        if path in self.overlay:
            return True
        return (self.root / path).exists()

    def read(self, path: str) -> str:
        """Return the staged text of ``path`` or its contents on disk."""
        if path in self.overlay:
            return self.overlay[path]
        return (self.root / path).read_text(encoding="utf-8")

    def documents(self) -> list[str]:
        """Return component document paths in the tree, sorted, index excluded."""
        found: set[str] = set()
        components = self.root / self.components_dir
        if components.is_dir():
            found.update(
                path.relative_to(self.root).as_posix()
                for path in components.rglob("*.md")
                if path.is_file()
            )
        prefix = f"{self.components_dir.rstrip('/')}/"
        found.update(
            path for path in self.overlay if path.startswith(prefix) and path.endswith(".md")
        )
        found.discard(self.index_path)
        return sorted(found)


class StructuralValidator:
    """Run every validation rule over a :class:`VirtualTree`."""

    def __init__(self, tree: VirtualTree) -> None:
        self.tree = tree

    def validate(self) -> list[ValidationIssue]:
        """Return every issue in the tree sorted by (path, rule id)."""
        issues: list[ValidationIssue] = []
        titles: dict[str, list[tuple[str, str | None]]] = {}
        documents = self.tree.documents()
        for path in documents:
            try:
                parsed = parse_document(self.tree.read(path))
            except OSError as exc:
                issues.append(
                    _error(path, f"Unreadable document: {exc}", RULE_MISSING_SECTION)
                )
                continue
            issues.extend(self.check_document(path, parsed))
            if parsed.title:
                category = category_for_path(path, self.tree.components_dir)
                titles.setdefault(parsed.title, []).append((path, category))
        issues.extend(_duplicate_categories(titles))
        issues.extend(self.check_index(documents))
        issues.sort(key=lambda issue: (issue.document_path, issue.rule_id, issue.message))
        logger.debug("validated %d documents, %d issues", len(documents), len(issues))
        return issues

    def check_document(self, path: str, parsed: ParsedDocument) -> list[ValidationIssue]:
        """Return section, link and filename issues for one document."""
        issues: list[ValidationIssue] = []
        if not parsed.title:
            issues.append(
                _error(path, "Missing '# Title' line.", RULE_MISSING_SECTION)
            )
        for key in MANDATORY_METADATA:
            if not parsed.metadata.get(key):
                issues.append(
                    _error(
                        path,
                        f"Missing '{key}' metadata line.",
                        RULE_MISSING_SECTION,
                    )
                )
        for heading in MANDATORY_SECTIONS:
            if parsed.section(heading) is None:
                issues.append(
                    _error(
                        path,
                        f"Missing mandatory section '{heading}'.",
                        RULE_MISSING_SECTION,
                    )
                )
        see_also = parsed.section(HEADING_SEE_ALSO)
        if see_also is not None:
            issues.extend(self._broken_links(path, see_also.markdown))
        filename = posixpath.basename(path)
        if not KEBAB_FILENAME.match(filename):
            issues.append(
                _warning(
                    path,
                    f"Filename '{filename}' is not lowercase kebab-case.",
                    RULE_FILENAME_CONVENTION,
                )
            )
        return issues

    def check_index(self, documents: cabc.Sequence[str]) -> list[ValidationIssue]:
        """Return issues about the component index."""
        index_path = self.tree.index_path
        if not self.tree.exists(index_path):
            return [
                _error(
                    index_path,
                    "Component index is missing.",
                    RULE_INDEX_MISSING_ENTRY,
                )
            ]
        parsed = parse_document(self.tree.read(index_path))
        base = posixpath.dirname(index_path)
        listed: dict[str, set[str]] = {}
        issues: list[ValidationIssue] = []
        for section in parsed.sections:
            for target in collect_links(section.markdown):
                resolved = resolve_link(base, target)
                if resolved is None:
                    continue
                listed.setdefault(resolved, set()).add(section.title)
            issues.extend(self._broken_links(index_path, section.markdown))
        for path in documents:
            if path not in listed:
                issues.append(
                    _error(
                        path,
                        f"Document is not listed in {index_path}.",
                        RULE_INDEX_MISSING_ENTRY,
                    )
                )
            elif len(listed[path]) > 1:
                categories = ", ".join(sorted(listed[path]))
                issues.append(
                    _error(
                        path,
                        f"Document is listed under several categories in the index: {categories}.",
                        RULE_DUPLICATE_CATEGORY,
                    )
                )
        return issues

    def _broken_links(self, path: str, markdown_text: str) -> list[ValidationIssue]:
        base = posixpath.dirname(path)
        issues: list[ValidationIssue] = []
        for target in collect_links(markdown_text):
            if not is_relative_link(target):
                continue
            resolved = resolve_link(base, target)
            if resolved is None or not self.tree.exists(resolved):
                issues.append(
                    _error(
                        path,
                        f"Link target '{target}' does not exist in the docs tree.",
                        RULE_BROKEN_LINK,
                    )
                )
        return issues


def _duplicate_categories(
    titles: cabc.Mapping[str, list[tuple[str, str | None]]],
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for name, placements in titles.items():
        categories = {category for _path, category in placements}
        if len(categories) < 2:
            continue
        labels = ", ".join(sorted(category or "(none)" for category in categories))
        for path, _category in placements:
            issues.append(
                _error(
                    path,
                    f"Component '{name}' is documented in several categories: {labels}.",
                    RULE_DUPLICATE_CATEGORY,
                )
            )
    return issues


def _error(path: str, message: str, rule_id: str) -> ValidationIssue:
    return StructuralValidationError(message, path=path, rule_id=rule_id).to_issue()


def _warning(path: str, message: str, rule_id: str) -> ValidationIssue:
    return ValidationIssue(
        severity=Severity.WARNING, document_path=path, message=message, rule_id=rule_id
    )


__all__ = [
    "RULE_BROKEN_LINK",
    "RULE_DUPLICATE_CATEGORY",
    "RULE_FILENAME_CONVENTION",
    "RULE_INDEX_MISSING_ENTRY",
    "RULE_MISSING_SECTION",
    "StructuralValidator",
    "VirtualTree",
]
