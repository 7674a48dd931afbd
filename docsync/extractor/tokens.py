"""Pygments-backed masking of TypeScript sources for structural scanning.

Declaration, export and default parsing all need to find braces, separators
and keywords without tripping over string literals or comments. The lexer
marks those spans once; :class:`MaskedSource` then offers three aligned views
of the same text:

``text``
    The original source.
``code``
    Comments blanked (newlines kept), strings intact. Used for slicing
    member, type and default text.
``mask``
    Comments and strings blanked. Used for bracket matching and splitting.

Example
-------
>>> from docsync.extractor.tokens import mask_source
>>> masked = mask_source("const a = '{'; // }\\n")
>>> masked.mask.count("{"), masked.code.count("'{'")
(0, 1)
"""

from __future__ import annotations

import dataclasses as dc
import re

from pygments.lexers import get_lexer_by_name
from pygments.token import Comment, String
from pygments.util import ClassNotFound

_OPENERS = {"{": "}", "(": ")", "[": "]", "<": ">"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}
_MEMBER_START = re.compile(r"(?:readonly\s+)?(?:[\w$'\"]+\s*\??\s*[:(<]|\[)")
_CONTINUATION_CHARS = frozenset("|&:,(<{=>?")


@dc.dataclass(frozen=True, slots=True)
class DocComment:
    """A ``/** ... */`` comment and its position in the source."""

    start: int
    end: int
    raw: str

    @property
    def text(self) -> str:
        """Return the comment body without markers, stopping at the first tag."""
        body = self.raw[3:]
        if body.endswith("*/"):
            body = body[:-2]
        lines: list[str] = []
        for line in body.splitlines():
            stripped = line.strip()
            if stripped.startswith("*"):
                stripped = stripped[1:].strip()
            if stripped.startswith("@"):
                break
            if stripped:
                lines.append(stripped)
        return " ".join(lines)


@dc.dataclass(frozen=True, slots=True)
class MaskedSource:
    """Aligned original, comment-free, and fully masked views of a source file."""

    text: str
    code: str
    mask: str
    doc_comments: tuple[DocComment, ...] = ()

    def doc_comment_before(self, position: int, floor: int = 0) -> DocComment | None:
        """Return the doc comment ending right before ``position``.

        Only whitespace may separate the comment from ``position`` and the
        comment must start at or after ``floor``.
        """
        for comment in reversed(self.doc_comments):
            if comment.end > position:
                continue
            if comment.start < floor:
                return None
            if self.text[comment.end : position].strip():
                return None
            return comment
        return None

    def segment(self, start: int, end: int) -> str:
        """Return the comment-free code between ``start`` and ``end``."""
        return self.code[start:end]


def _lexer_for(language: str) -> object:
    """Return a Pygments lexer for ``language``, falling back to TypeScript."""
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return get_lexer_by_name("typescript")


def _blank(value: str, fill: str) -> str:
    return "".join(char if char == "\n" else fill for char in value)


def mask_source(text: str, *, language: str = "typescript") -> MaskedSource:
    """Tokenize ``text`` and return its aligned views.

    Parameters
    ----------
    text : str
        TypeScript (or TSX) source.
    language : str, optional
        Pygments lexer alias; unknown aliases fall back to ``typescript``.

    Returns
    -------
    MaskedSource
        Views with identical lengths so positions are interchangeable.
    """
    lexer = _lexer_for(language)
    code = list(text)
    mask = list(text)
    comments: list[DocComment] = []
    for index, token, value in lexer.get_tokens_unprocessed(text):  # type: ignore[attr-defined]
        end = index + len(value)
        if token in Comment:
            blanked = _blank(value, " ")
            code[index:end] = blanked
            mask[index:end] = blanked
            if value.startswith("/**"):
                comments.append(DocComment(index, end, value))
        elif token in String:
            mask[index:end] = _blank(value, "_")
    return MaskedSource(
        text=text, code="".join(code), mask="".join(mask), doc_comments=tuple(comments)
    )


def find_matching(mask: str, open_index: int) -> int:
    """Return the index of the bracket closing the one at ``open_index``.

    Returns ``-1`` when the bracket is never closed.
    """
    opener = mask[open_index]
    closer = _OPENERS[opener]
    depth = 0
    for index in range(open_index, len(mask)):
        char = mask[index]
        if char == opener:
            depth += 1
        elif char == closer:
            if closer == ">" and index > 0 and mask[index - 1] == "=":
                continue
            depth -= 1
            if depth == 0:
                return index
    return -1


def split_top_level(
    mask: str,
    start: int,
    end: int,
    separators: str = ";,",
    *,
    angles: bool = True,
    newline_members: bool = False,
) -> list[tuple[int, int]]:
    """Split ``mask[start:end]`` on separators that sit at bracket depth zero.

    Parameters
    ----------
    mask : str
        Fully masked source.
    start, end : int
        Bounds of the region to split.
    separators : str, optional
        Characters that end an entry at depth zero.
    angles : bool, optional
        Treat ``<``/``>`` as brackets (type contexts); ``=>`` never closes.
    newline_members : bool, optional
        Also split on a newline when the next line starts a new member and
        the current line cannot continue onto it (members without ``;``).

    Returns
    -------
    list[tuple[int, int]]
        ``(start, end)`` ranges of non-blank entries.
    """
    ranges: list[tuple[int, int]] = []
    depth = 0
    entry_start = start
    for index in range(start, end):
        char = mask[index]
        if char in _OPENERS and (angles or char != "<"):
            depth += 1
        elif char in _CLOSERS and (angles or char != ">"):
            if char == ">" and index > start and mask[index - 1] == "=":
                continue
            depth = max(depth - 1, 0)
        elif depth == 0 and char in separators:
            ranges.append((entry_start, index))
            entry_start = index + 1
        elif depth == 0 and char == "\n" and newline_members:
            if _starts_new_member(mask, entry_start, index, end):
                ranges.append((entry_start, index))
                entry_start = index + 1
    ranges.append((entry_start, end))
    return [(s, e) for s, e in ranges if mask[s:e].strip()]


def _starts_new_member(mask: str, entry_start: int, newline: int, end: int) -> bool:
    before = mask[entry_start:newline].rstrip()
    if not before or before[-1] in _CONTINUATION_CHARS:
        return False
    following = mask[newline + 1 : end].lstrip()
    return bool(_MEMBER_START.match(following))


def collapse_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(value.split())


__all__ = [
    "DocComment",
    "MaskedSource",
    "collapse_whitespace",
    "find_matching",
    "mask_source",
    "split_top_level",
]
