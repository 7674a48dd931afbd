r"""Split component documents into title, metadata and ordered sections.

Component documents follow a small grammar: a ``# Title`` line, a
blockquote of ``> **Key**: value`` metadata lines, then ``##`` sections.
Headings inside fenced code blocks are ignored so examples containing
Markdown do not split the document. Section bodies are kept verbatim apart
from surrounding blank lines.

Example
-------
>>> from docsync.markdown_parser import parse_document
>>> doc = parse_document("# Button\n\n> **Package**: `@x/react-button`\n\n## Overview\nText")
>>> doc.title, doc.metadata["Package"], doc.sections[0].title
('Button', '`@x/react-button`', 'Overview')
"""

from __future__ import annotations

import dataclasses as dc
import re

TITLE_PATTERN = re.compile(r"^#\s+(.*?)\s*#*\s*$")
SECTION_PATTERN = re.compile(r"^##\s+(.*?)\s*#*\s*$")
SUBSECTION_PATTERN = re.compile(r"^###\s+(.*?)\s*#*\s*$")
FENCE_PATTERN = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
METADATA_PATTERN = re.compile(r"^>\s*\*\*(?P<key>[^*:]+):?\*\*:?\s*(?P<value>.*?)\s*$")
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?$")
CODE_SPAN_PATTERN = re.compile(r"^(`+)\s?(.*?)\s?\1$", re.DOTALL)


@dc.dataclass(slots=True)
class Section:
    """Second-level heading and its verbatim Markdown body.

    Attributes
    ----------
    title : str
        Heading text with escapes removed.
    markdown : str
        Body below the heading, without leading or trailing blank lines.
    order : int
        1-based position of the section in the document.
    """

    title: str
    markdown: str
    order: int


@dc.dataclass(slots=True)
class ParsedDocument:
    """Title, metadata and sections of one component document.

    ``preamble`` holds every other line between the title and the first
    section, such as a lead paragraph, with surrounding blank lines removed.
    """

    title: str | None
    metadata: dict[str, str]
    sections: list[Section]
    preamble: str = ""

    def section(self, title: str) -> Section | None:
        """Return the first section whose heading matches ``title`` case-insensitively."""
        wanted = title.casefold()
        for section in self.sections:
            if section.title.casefold() == wanted:
                return section
        return None


def _trim_blank_lines(lines: list[str]) -> str:
    """Join ``lines`` without the blank lines at either end."""
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def _clean_heading(text: str) -> str:
    """Return a cleaned heading, removing escapes and whitespace."""
    return text.replace("\\", "").strip()


def _heading_lines(lines: list[str]) -> list[tuple[int, str, str]]:
    """Return ``(line_no, level, text)`` for headings outside fenced code."""
    headings: list[tuple[int, str, str]] = []
    fenced = _fenced_lines(lines)
    for number, line in enumerate(lines):
        if fenced[number]:
            continue
        section_match = SECTION_PATTERN.match(line)
        if section_match:
            headings.append((number, "##", _clean_heading(section_match.group(1))))
            continue
        title_match = TITLE_PATTERN.match(line)
        if title_match:
            headings.append((number, "#", _clean_heading(title_match.group(1))))
    return headings


def parse_document(markdown_text: str) -> ParsedDocument:
    """Parse ``markdown_text`` into a :class:`ParsedDocument`.

    Parameters
    ----------
    markdown_text : str
        Full document text.

    Returns
    -------
    ParsedDocument
        ``title`` is ``None`` when no ``#`` heading precedes the first
        section. ``metadata`` holds the first line for each key between the
        title and the first section; repeated keys and any other text there
        go to ``preamble``.
    """
    lines = markdown_text.splitlines()
    headings = _heading_lines(lines)
    section_starts = [entry for entry in headings if entry[1] == "##"]
    first_section = section_starts[0][0] if section_starts else len(lines)

    title: str | None = None
    title_line = -1
    for number, level, text in headings:
        if level == "#" and number < first_section:
            title, title_line = text, number
            break

    metadata: dict[str, str] = {}
    preamble: list[str] = []
    if title is not None:
        for line in lines[title_line + 1 : first_section]:
            match = METADATA_PATTERN.match(line.strip())
            if match is None or match.group("key").strip() in metadata:
                preamble.append(line)
                continue
            metadata[match.group("key").strip()] = match.group("value")

    sections: list[Section] = []
    for index, (number, _level, text) in enumerate(section_starts):
        end = section_starts[index + 1][0] if index + 1 < len(section_starts) else len(lines)
        body = "\n".join(lines[number + 1 : end]).strip("\n")
        sections.append(Section(title=text, markdown=body, order=index + 1))
    return ParsedDocument(
        title=title,
        metadata=metadata,
        sections=sections,
        preamble=_trim_blank_lines(preamble),
    )


@dc.dataclass(slots=True)
class Subsection:
    """Third-level heading and the Markdown below it."""

    title: str
    markdown: str


def _fenced_lines(lines: list[str]) -> list[bool]:
    """Return, per line, whether it sits inside (or opens/closes) a fence."""
    flags: list[bool] = []
    fence: str | None = None
    for line in lines:
        match = FENCE_PATTERN.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            flags.append(True)
            continue
        flags.append(fence is not None)
    return flags


def split_subsections(body: str) -> tuple[str, list[Subsection]]:
    """Return intro text and ``###`` subsections of a section body."""
    lines = body.splitlines()
    fenced = _fenced_lines(lines)
    starts = [
        number
        for number, line in enumerate(lines)
        if not fenced[number] and SUBSECTION_PATTERN.match(line)
    ]
    if not starts:
        return body.strip("\n"), []
    intro = "\n".join(lines[: starts[0]]).strip("\n")
    subsections: list[Subsection] = []
    for index, number in enumerate(starts):
        end = starts[index + 1] if index + 1 < len(starts) else len(lines)
        match = SUBSECTION_PATTERN.match(lines[number])
        heading = _clean_heading(match.group(1)) if match else ""
        chunk = "\n".join(lines[number + 1 : end]).strip("\n")
        subsections.append(Subsection(title=heading, markdown=chunk))
    return intro, subsections


def first_code_block(markdown_text: str) -> tuple[str, str] | None:
    """Return ``(language, code)`` of the first fenced block, if any."""
    lines = markdown_text.splitlines()
    for number, line in enumerate(lines):
        match = FENCE_PATTERN.match(line)
        if match is None:
            continue
        marker = match.group(1)
        language = line.strip()[len(marker) :].strip()
        body: list[str] = []
        for inner in lines[number + 1 :]:
            closing = FENCE_PATTERN.match(inner)
            if (
                closing
                and closing.group(1)[0] == marker[0]
                and len(closing.group(1)) >= len(marker)
                and not inner.strip()[len(closing.group(1)) :].strip()
            ):
                return language, "\n".join(body)
            body.append(inner)
        return language, "\n".join(body)
    return None


def split_row(line: str) -> list[str]:
    r"""Split a table row on unescaped pipes and unescape ``\|`` in each cell."""
    text = line.strip()
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]
    cells: list[str] = []
    current: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text) and text[index + 1] == "|":
            current.append("|")
            index += 2
            continue
        if char == "|":
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        index += 1
    cells.append("".join(current).strip())
    return cells


def parse_table(body: str) -> list[list[str]]:
    """Return the data rows of the first pipe table in ``body``.

    The header row and its ``---`` separator are dropped. Returns an empty
    list when ``body`` holds no table.
    """
    rows: list[list[str]] = []
    in_table = False
    seen_separator = False
    for line in body.splitlines():
        stripped = line.strip()
        if not stripped.startswith("|"):
            if in_table:
                break
            continue
        in_table = True
        if not seen_separator:
            seen_separator = bool(TABLE_SEPARATOR_PATTERN.match(stripped))
            continue
        rows.append(split_row(stripped))
    return rows if seen_separator else []


def unwrap_code_span(cell: str) -> str:
    """Return the contents of a cell written as a single code span."""
    match = CODE_SPAN_PATTERN.match(cell.strip())
    if match is None:
        return cell.strip()
    return match.group(2)


__all__ = [
    "ParsedDocument",
    "Section",
    "Subsection",
    "first_code_block",
    "parse_document",
    "parse_table",
    "split_row",
    "split_subsections",
    "unwrap_code_span",
]
