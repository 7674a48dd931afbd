"""Name conversions shared by the scanner, renderer and validator."""

from __future__ import annotations

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_NUMERIC_PREFIX = re.compile(r"^\d+-")
KEBAB_FILENAME = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*\.md$")


def pascal_case(value: str) -> str:
    """Convert ``widget-pro`` style names into ``WidgetPro``."""
    parts = [part for part in _SEPARATORS.split(value) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def kebab_case(value: str) -> str:
    """Convert ``WidgetPro`` style names into ``widget-pro``."""
    spaced = _WORD_BOUNDARY.sub("-", value)
    return _SEPARATORS.sub("-", spaced).strip("-").lower()


def humanize(value: str) -> str:
    """Turn an identifier such as ``WithIcon`` into ``With Icon``."""
    spaced = _SEPARATORS.sub(" ", _WORD_BOUNDARY.sub(" ", value)).strip()
    return spaced[:1].upper() + spaced[1:]


def strip_numeric_prefix(folder_name: str) -> str:
    """Drop a leading ``NN-`` ordering prefix from a folder name."""
    return _NUMERIC_PREFIX.sub("", folder_name)


__all__ = [
    "KEBAB_FILENAME",
    "humanize",
    "kebab_case",
    "pascal_case",
    "strip_numeric_prefix",
]
