"""Collect the public names exported by a package's index module."""

from __future__ import annotations

import re
import typing as typ

from docsync.logging import get_logger

from .tokens import mask_source

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger("extractor.exports")

_EXPORT_LIST = re.compile(
    r"\bexport\s+(?:type\s+)?\{(?P<names>[^}]*)\}"
    r"(?:\s*from\s*(?P<quote>['\"])(?P<source>[^'\"]+)(?P=quote))?"
)
_EXPORT_DECLARATION = re.compile(
    r"\bexport\s+(?!default\b)(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
    r"(?:const|let|var|function\s*\*?|class|interface|type|enum|namespace)\s+"
    r"(?P<name>[A-Za-z_$][\w$]*)"
)
_EXPORT_STAR = re.compile(
    r"\bexport\s+(?:type\s+)?\*\s*(?:as\s+(?P<alias>[A-Za-z_$][\w$]*)\s*)?"
    r"from\s*(?P<quote>['\"])(?P<source>[^'\"]+)(?P=quote)"
)
_MODULE_SUFFIXES = (".ts", ".tsx", ".d.ts")
_INDEX_NAMES = ("index.ts", "index.tsx")


def collect_exports(index_file: Path) -> frozenset[str]:
    """Return every name exported by ``index_file``.

    ``export * from './x'`` re-exports are followed through relative modules;
    each file is visited once so cyclic re-exports terminate. Re-exports from
    other packages cannot be resolved and are skipped.
    """
    names: set[str] = set()
    _collect(index_file, names, set())
    return frozenset(names)


def _collect(path: Path, names: set[str], visited: set[Path]) -> None:
    resolved = path.resolve()
    if resolved in visited:
        return
    visited.add(resolved)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("could not read %s: %s", path, exc)
        return
    language = "tsx" if path.suffix == ".tsx" else "typescript"
    code = mask_source(text, language=language).code

    for match in _EXPORT_LIST.finditer(code):
        names.update(_list_names(match.group("names")))
    for match in _EXPORT_DECLARATION.finditer(code):
        names.add(match.group("name"))
    for match in _EXPORT_STAR.finditer(code):
        alias = match.group("alias")
        if alias:
            names.add(alias)
            continue
        source = match.group("source")
        target = _resolve_module(path.parent, source)
        if target is None:
            logger.debug("cannot follow re-export of '%s' from %s", source, path)
            continue
        _collect(target, names, visited)


def _list_names(body: str) -> list[str]:
    """Return exported names from the body of an ``export { ... }`` list."""
    exported: list[str] = []
    for raw in body.split(","):
        entry = " ".join(raw.split())
        if entry.startswith("type "):
            entry = entry[5:]
        if not entry:
            continue
        local, _, alias = entry.partition(" as ")
        name = (alias or local).strip()
        if name and name != "default":
            exported.append(name)
    return exported


def _resolve_module(base: Path, source: str) -> Path | None:
    if not source.startswith("."):
        return None
    target = base / source
    if target.is_file():
        return target
    for suffix in _MODULE_SUFFIXES:
        candidate = target.with_name(target.name + suffix)
        if candidate.is_file():
            return candidate
    for name in _INDEX_NAMES:
        candidate = target / name
        if candidate.is_file():
            return candidate
    return None


__all__ = ["collect_exports"]
