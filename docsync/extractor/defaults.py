"""Find prop default values in a component's hook module.

Three patterns are recognized:

* destructuring defaults, ``const { size = 'medium', as: tag = 'div' } = props``
  (also on a parameter typed ``...Props``);
* fallback assignments, ``const size = props.size ?? 'medium'`` (or ``||``);
* ``X.defaultProps = { size: 'medium' }`` object literals.

The first default found for a name wins. Callers decide which names are
props; this module reports everything it sees.
"""

from __future__ import annotations

import re

from .tokens import MaskedSource, collapse_whitespace, find_matching, split_top_level

_DESTRUCTURE_OPEN = re.compile(r"(?:\b(?:const|let|var)\s*|\(\s*)\{")
_DESTRUCTURE_SOURCE = re.compile(
    r"\s*(?:=\s*(?:this\.)?props\b|:\s*[\w$.]*Props\b(?:<[^>]*>)?)"
)
_DESTRUCTURE_ENTRY = re.compile(
    r"^(?P<name>[A-Za-z_$][\w$]*)\s*(?::\s*[A-Za-z_$][\w$]*\s*)?=\s*(?P<value>.+)$",
    re.DOTALL,
)
_FALLBACK = re.compile(
    r"\b(?:const|let|var)\s+[A-Za-z_$][\w$]*\s*=\s*props\.(?P<name>[A-Za-z_$][\w$]*)"
    r"\s*(?:\?\?|\|\|)\s*"
)
_DEFAULT_PROPS = re.compile(r"\bdefaultProps\s*(?::[^=]+)?=\s*\{")
_OBJECT_ENTRY = re.compile(
    r"^(?P<name>[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")\s*:\s*(?P<value>.+)$", re.DOTALL
)


def find_defaults(source: MaskedSource) -> dict[str, str]:
    """Return default expressions keyed by prop name.

    Examples
    --------
    >>> from docsync.extractor.tokens import mask_source
    >>> find_defaults(mask_source("const { size = 'medium' } = props;"))
    {'size': "'medium'"}
    """
    defaults: dict[str, str] = {}
    for name, value in _destructured(source):
        defaults.setdefault(name, value)
    for name, value in _fallbacks(source):
        defaults.setdefault(name, value)
    for name, value in _default_props(source):
        defaults.setdefault(name, value)
    return defaults


def _destructured(source: MaskedSource) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    mask = source.mask
    for match in _DESTRUCTURE_OPEN.finditer(mask):
        open_index = match.end() - 1
        close_index = find_matching(mask, open_index)
        if close_index < 0 or not _DESTRUCTURE_SOURCE.match(mask, close_index + 1):
            continue
        for start, end in split_top_level(mask, open_index + 1, close_index, ",", angles=False):
            entry = source.segment(start, end).strip()
            entry_match = _DESTRUCTURE_ENTRY.match(entry)
            if entry_match:
                found.append(
                    (entry_match.group("name"), collapse_whitespace(entry_match.group("value")))
                )
    return found


def _fallbacks(source: MaskedSource) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    for match in _FALLBACK.finditer(source.mask):
        end = _expression_end(source.mask, match.end())
        value = collapse_whitespace(source.segment(match.end(), end))
        if value:
            found.append((match.group("name"), value))
    return found


def _default_props(source: MaskedSource) -> list[tuple[str, str]]:
    found: list[tuple[str, str]] = []
    mask = source.mask
    for match in _DEFAULT_PROPS.finditer(mask):
        open_index = match.end() - 1
        close_index = find_matching(mask, open_index)
        if close_index < 0:
            continue
        for start, end in split_top_level(mask, open_index + 1, close_index, ",", angles=False):
            entry = source.segment(start, end).strip()
            entry_match = _OBJECT_ENTRY.match(entry)
            if entry_match:
                name = entry_match.group("name").strip("'\"")
                found.append((name, collapse_whitespace(entry_match.group("value"))))
    return found


def _expression_end(mask: str, start: int) -> int:
    """Return the end of the expression starting at ``start``.

    The expression stops at ``;`` or a newline at bracket depth zero.
    """
    depth = 0
    for index in range(start, len(mask)):
        char = mask[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            if depth == 0:
                return index
            depth -= 1
        elif depth == 0 and char in ";\n":
            return index
    return len(mask)


__all__ = ["find_defaults"]
