"""Utility helpers shared by the docsync configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from docsync.errors import ConfigError

from .models import ApplyMode, CategoryRule, RoleCandidates


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_mapping(value: object, *, section: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` as a mapping, treating ``None`` as empty."""
    if value is None:
        return {}
    if not isinstance(value, typ.Mapping):
        msg = f"'{section}' must be a mapping."
        raise ConfigError(msg)
    return value


def _as_str_list(value: object, *, section: str) -> list[str]:
    """Normalize a scalar or sequence into a list of non-empty strings."""
    match value:
        case None:
            return []
        case str():
            return [value] if value.strip() else []
        case list() | tuple():
            return [str(item).strip() for item in value if str(item).strip()]
        case _:
            msg = f"'{section}' must be a string or a list of strings."
            raise ConfigError(msg)


def _resolve_path(base: Path, value: object, *, default: str) -> Path:
    """Resolve ``value`` relative to ``base`` unless it is already absolute."""
    text = _optional_str(value) or default
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def _build_roles(payload: typ.Mapping[str, typ.Any]) -> RoleCandidates:
    """Build role candidates, keeping defaults for roles that are not overridden."""
    roles = RoleCandidates()
    for role in ("types", "hooks", "index", "examples"):
        if role in payload:
            candidates = _as_str_list(payload[role], section=f"library.roles.{role}")
            if role == "types" and not candidates:
                msg = "'library.roles.types' needs at least one candidate."
                raise ConfigError(msg)
            setattr(roles, role, candidates)
    return roles


def _build_category_rules(value: object) -> list[CategoryRule]:
    """Parse the ordered ``categories.rules`` table."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = "'categories.rules' must be a list of {pattern, category} entries."
        raise ConfigError(msg)
    rules: list[CategoryRule] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, typ.Mapping):
            msg = f"categories.rules[{index}] must be a mapping."
            raise ConfigError(msg)
        pattern = _optional_str(entry.get("pattern"))
        category = _optional_str(entry.get("category"))
        if not pattern or not category:
            msg = f"categories.rules[{index}] needs both 'pattern' and 'category'."
            raise ConfigError(msg)
        rules.append(CategoryRule(pattern=pattern, category=category))
    return rules


def _parse_apply_mode(value: object) -> ApplyMode:
    """Return the ApplyMode named by ``value`` (default: batch)."""
    text = _optional_str(value)
    if text is None:
        return ApplyMode.BATCH
    try:
        return ApplyMode(text.lower())
    except ValueError as exc:
        choices = ", ".join(mode.value for mode in ApplyMode)
        msg = f"'run.apply' must be one of: {choices}."
        raise ConfigError(msg) from exc


def _parse_workers(value: object) -> int:
    """Return a positive worker count (default 4)."""
    if value is None:
        return 4
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = "'run.workers' must be a positive integer."
        raise ConfigError(msg)
    return value


__all__ = [
    "_as_mapping",
    "_as_str_list",
    "_build_category_rules",
    "_build_roles",
    "_optional_str",
    "_parse_apply_mode",
    "_parse_workers",
    "_resolve_path",
]
