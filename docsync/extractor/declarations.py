"""Parse ``<Component>Props`` and ``<Component>Slots`` declarations.

Both ``export interface X { ... }`` and ``export type X = A & { ... }`` are
understood. Every object-literal body at the top level of the declaration
contributes members; named operands such as ``ComponentProps<...>`` are not
followed.
"""

from __future__ import annotations

import dataclasses as dc
import re

from docsync._constants import UNKNOWN_TYPE
from docsync.errors import ParseFailure
from docsync.models import PropDescriptor, SlotDescriptor

from .tokens import MaskedSource, collapse_whitespace, find_matching, split_top_level

_DECLARATION = re.compile(
    r"\bexport\s+(?:declare\s+)?(?P<kind>interface|type)\s+(?P<name>[A-Za-z_$][\w$]*)"
)
_PROPERTY = re.compile(
    r"^(?:readonly\s+)?(?P<name>[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")"
    r"\s*(?P<optional>\?)?\s*:\s*(?P<type>.+)$",
    re.DOTALL,
)
_METHOD = re.compile(
    r"^(?P<name>[A-Za-z_$][\w$]*)\s*(?P<optional>\?)?\s*(?P<generics><[^(]*>)?"
    r"\s*\((?P<params>.*)\)\s*:\s*(?P<returns>.+)$",
    re.DOTALL,
)
_INDEX_SIGNATURE = re.compile(r"^(?:readonly\s+)?\[[^\]]*\]\s*\??\s*:")
_NULLABLE_OPERANDS = frozenset({"undefined", "null"})
_SLOT_ARGUMENT = re.compile(r"\bSlot\s*<")
_STATEMENT_START = re.compile(
    r"\n\s*(?:export|import|type|interface|const|let|function|class|declare)\b"
)


@dc.dataclass(frozen=True, slots=True)
class Member:
    """A parsed declaration member before it is classified as prop or slot."""

    name: str
    type_expression: str
    required: bool
    description: str = ""


@dc.dataclass(slots=True)
class DeclarationMembers:
    """Members found for one declaration plus the failures met on the way."""

    members: list[Member] = dc.field(default_factory=list)
    failures: list[ParseFailure] = dc.field(default_factory=list)
    found: bool = False


def parse_declaration(source: MaskedSource, name: str, *, path: str = "") -> DeclarationMembers:
    """Return the members of the exported declaration called ``name``.

    Parameters
    ----------
    source : MaskedSource
        Masked types file.
    name : str
        Declaration name, for example ``ButtonProps``.
    path : str, optional
        Display path used in failure messages.

    Returns
    -------
    DeclarationMembers
        ``found`` is ``False`` when no such declaration exists.
    """
    result = DeclarationMembers()
    seen: set[str] = set()
    for match in _DECLARATION.finditer(source.mask):
        if match.group("name") != name:
            continue
        result.found = True
        for body_start, body_end in _declaration_bodies(source.mask, match):
            for start, end in split_top_level(
                source.mask, body_start, body_end, newline_members=True
            ):
                member = _parse_member(source, start, end, body_start, result, path)
                if member is None:
                    continue
                if member.name in seen:
                    msg = f"{name}: duplicate member '{member.name}' ignored."
                    result.failures.append(ParseFailure(msg, path=path))
                    continue
                seen.add(member.name)
                result.members.append(member)
    return result


def _declaration_bodies(mask: str, match: re.Match[str]) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans inside each object-literal body."""
    position = _skip_generics(mask, match.end())
    if match.group("kind") == "interface":
        open_index = mask.find("{", position)
        if open_index < 0:
            return []
        close_index = find_matching(mask, open_index)
        if close_index < 0:
            return []
        return [(open_index + 1, close_index)]

    equals = mask.find("=", position)
    if equals < 0:
        return []
    end = _type_alias_end(mask, equals + 1)
    bodies: list[tuple[int, int]] = []
    depth = 0
    index = equals + 1
    while index < end:
        char = mask[index]
        if char == "{" and depth == 0:
            close_index = find_matching(mask, index)
            if close_index < 0:
                break
            bodies.append((index + 1, close_index))
            index = close_index + 1
            continue
        if char in "(<[":
            depth += 1
        elif char in ")]" or (char == ">" and mask[index - 1] != "="):
            depth = max(depth - 1, 0)
        index += 1
    return bodies


def _skip_generics(mask: str, position: int) -> int:
    """Return the position after any ``<...>`` parameter list at ``position``."""
    index = position
    while index < len(mask) and mask[index].isspace():
        index += 1
    if index < len(mask) and mask[index] == "<":
        close_index = find_matching(mask, index)
        if close_index > 0:
            return close_index + 1
    return position


def _type_alias_end(mask: str, start: int) -> int:
    """Return the end of a type alias starting at ``start``."""
    ranges = split_top_level(mask, start, len(mask), ";")
    if not ranges:
        return start
    first_start, first_end = ranges[0]
    if first_end < len(mask) and mask[first_end] == ";":
        return first_end
    following = _STATEMENT_START.search(mask, first_start)
    return following.start() if following else len(mask)


def _parse_member(
    source: MaskedSource,
    start: int,
    end: int,
    floor: int,
    result: DeclarationMembers,
    path: str,
) -> Member | None:
    segment = source.mask[start:end]
    offset = len(segment) - len(segment.lstrip())
    member_start = start + offset
    text = source.segment(member_start, end).strip().rstrip(",;").strip()
    if not text or _INDEX_SIGNATURE.match(text):
        return None
    comment = source.doc_comment_before(member_start, floor)
    description = comment.text if comment else ""

    match = _PROPERTY.match(text)
    if match:
        type_expression = _normalise_type(match.group("type"))
        optional = bool(match.group("optional"))
    else:
        match = _METHOD.match(text)
        if match is None:
            name = text.split(None, 1)[0].strip("'\"?:") or text
            msg = f"Could not parse declaration member '{collapse_whitespace(text)}'."
            result.failures.append(ParseFailure(msg, path=path))
            return Member(name, UNKNOWN_TYPE, required=False, description=description)
        params = collapse_whitespace(match.group("params"))
        returns = _normalise_type(match.group("returns"))
        type_expression = f"({params}) => {returns}"
        optional = bool(match.group("optional"))

    name = match.group("name").strip("'\"")
    required = not optional and not _is_nullable(type_expression)
    return Member(name, type_expression, required=required, description=description)


def _is_nullable(type_expression: str) -> bool:
    """Return ``True`` when a top-level union operand is ``undefined`` or ``null``.

    Operands after a top-level ``=>`` belong to a function's return type and
    do not make the member optional.

    Examples
    --------
    >>> _is_nullable("string | undefined")
    True
    >>> _is_nullable("() => string | undefined")
    False
    >>> _is_nullable("((ev: Event) => void) | null")
    True
    """
    operands: list[str] = []
    depth = 0
    quote = ""
    start = 0
    index = 0
    while index < len(type_expression):
        char = type_expression[index]
        if quote:
            if char == quote:
                quote = ""
        elif char in "'\"`":
            quote = char
        elif char == "=" and type_expression.startswith("=>", index):
            if depth == 0:
                break
            index += 1
        elif char in "(<[{":
            depth += 1
        elif char in ")>]}":
            depth = max(depth - 1, 0)
        elif char == "|" and depth == 0:
            operands.append(type_expression[start:index])
            start = index + 1
        index += 1
    else:
        operands.append(type_expression[start:])
    return any(operand.strip() in _NULLABLE_OPERANDS for operand in operands)


def _normalise_type(value: str) -> str:
    text = collapse_whitespace(value).rstrip(",;").strip()
    if text.startswith("|"):
        text = text[1:].lstrip()
    return text


def is_slot_type(type_expression: str, pattern: re.Pattern[str]) -> bool:
    """Return ``True`` when a member type denotes a renderable element."""
    return bool(pattern.search(type_expression))


def slot_element_type(type_expression: str) -> str:
    """Return the element type carried by a slot's type text.

    The first type argument of ``Slot<...>`` is returned with quotes
    stripped; any other type text is returned unchanged.

    Examples
    --------
    >>> slot_element_type("Slot<'button', 'a'>")
    'button'
    >>> slot_element_type("React.ReactElement")
    'React.ReactElement'
    """
    match = _SLOT_ARGUMENT.search(type_expression)
    if match is None:
        return type_expression
    depth = 0
    start = match.end()
    for index in range(start, len(type_expression)):
        char = type_expression[index]
        if char in "<({[":
            depth += 1
        elif char in ")}]" or (char == ">" and type_expression[index - 1] != "="):
            if depth == 0:
                return _unquote(type_expression[start:index])
            depth -= 1
        elif char == "," and depth == 0:
            return _unquote(type_expression[start:index])
    return type_expression


def _unquote(value: str) -> str:
    return value.strip().strip("'\"`")


def to_prop(member: Member, default_value: str | None = None) -> PropDescriptor:
    """Build the prop descriptor for ``member``."""
    return PropDescriptor(
        name=member.name,
        type_expression=member.type_expression,
        default_value=default_value,
        description=member.description,
        required=member.required,
    )


def to_slot(member: Member) -> SlotDescriptor:
    """Build the slot descriptor for ``member``."""
    return SlotDescriptor(
        name=member.name,
        element_type=slot_element_type(member.type_expression),
        description=member.description,
    )


__all__ = [
    "DeclarationMembers",
    "Member",
    "is_slot_type",
    "parse_declaration",
    "slot_element_type",
    "to_prop",
    "to_slot",
]
