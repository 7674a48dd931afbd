"""Lift top-level example snippets out of story files.

Each ``export const`` / ``export function`` statement that starts at column
zero is one snippet; it runs until the next column-zero statement. Follow-up
assignments on the same story (``Default.parameters = {...}``) stay with it.
``export default`` blocks (story metadata) are never snippets.
"""

from __future__ import annotations

import re
import typing as typ

from docsync.logging import get_logger
from docsync.models import ExampleSnippet
from docsync.naming import humanize

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = get_logger("extractor.examples")

BASIC_TITLE = "Basic"

_SNIPPET_START = re.compile(
    r"^export\s+(?!default\b)(?:const|let|(?:async\s+)?function)\s+(?P<name>[A-Za-z_$][\w$]*)"
)
_CONTINUATION_LINE = re.compile(r"^(?:[}\])]|//|/\*|\*)")
_COMMENT_LINE = re.compile(r"^\s*(?://|/\*|\*)")


def extract_examples(files: cabc.Sequence[Path], root: Path) -> tuple[ExampleSnippet, ...]:
    """Return the snippets found in ``files`` with the smallest first.

    Parameters
    ----------
    files : Sequence[Path]
        Story or example files in the order they should be read.
    root : Path
        Package directory; ``origin_file`` is recorded relative to it.

    Returns
    -------
    tuple[ExampleSnippet, ...]
        The smallest snippet titled ``Basic``, then all others in file order.
    """
    found: list[tuple[str, str, str]] = []
    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("could not read example file %s: %s", path, exc)
            continue
        origin = _relative(path, root)
        found.extend((name, body, origin) for name, body in _snippets(text))
    if not found:
        return ()

    smallest = min(range(len(found)), key=lambda index: len(found[index][1]))
    name, body, origin = found[smallest]
    examples = [ExampleSnippet(BASIC_TITLE, body, origin)]
    for index, (name, body, origin) in enumerate(found):
        if index != smallest:
            examples.append(ExampleSnippet(humanize(name), body, origin))
    return tuple(examples)


def _snippets(text: str) -> list[tuple[str, str]]:
    lines = text.splitlines()
    snippets: list[tuple[str, str]] = []
    current_name: str | None = None
    current: list[str] = []

    def close() -> None:
        if current_name is not None:
            while current and (not current[-1].strip() or _COMMENT_LINE.match(current[-1])):
                current.pop()
            body = "\n".join(current)
            if body.strip():
                snippets.append((current_name, body))

    for line in lines:
        starts_statement = bool(line) and not line[0].isspace()
        if not starts_statement or _CONTINUATION_LINE.match(line):
            if current_name is not None:
                current.append(line)
            continue
        match = _SNIPPET_START.match(line)
        if match:
            close()
            current_name = match.group("name")
            current = [line]
        elif current_name is not None and line.startswith(f"{current_name}."):
            current.append(line)
        else:
            close()
            current_name = None
            current = []
    close()
    return snippets


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


__all__ = ["BASIC_TITLE", "extract_examples"]
