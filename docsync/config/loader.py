"""Load synchronization configuration YAML into typed dataclasses."""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from docsync.errors import ConfigError

from .helpers import (
    _as_mapping,
    _build_category_rules,
    _build_roles,
    _optional_str,
    _parse_apply_mode,
    _parse_workers,
    _resolve_path,
)
from .models import (
    DEFAULT_SLOT_TYPE_PATTERN,
    CategoryConfig,
    DocsConfig,
    LibraryConfig,
    RunConfig,
    SyncConfig,
)


def load_sync_config(path: Path) -> SyncConfig:
    """Load the YAML configuration describing library and docs layout.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/docsync.yaml``). Relative paths inside the file resolve
        against the file's directory.

    Returns
    -------
    SyncConfig
        Parsed configuration with library, docs, category and run settings.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    ConfigError
        If required sections or fields are missing or invalid (for example,
        no ``library.root`` or an unknown ``run.apply`` mode).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docsync.config import load_sync_config
    >>> config = load_sync_config(Path("config/docsync.yaml"))  # doctest: +SKIP
    >>> config.docs.components_dir  # doctest: +SKIP
    '02-components'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    base = path.resolve().parent

    library_raw = _as_mapping(raw.get("library"), section="library")
    if not _optional_str(library_raw.get("root")):
        msg = "'library.root' is required."
        raise ConfigError(msg)
    docs_raw = _as_mapping(raw.get("docs"), section="docs")
    if not _optional_str(docs_raw.get("root")):
        msg = "'docs.root' is required."
        raise ConfigError(msg)

    library = _build_library_config(library_raw, base)
    docs = DocsConfig(
        root=_resolve_path(base, docs_raw.get("root"), default="docs"),
        components_dir=_optional_str(docs_raw.get("components_dir")) or "components",
        index_file=_optional_str(docs_raw.get("index_file")) or "index.md",
    )

    categories_raw = _as_mapping(raw.get("categories"), section="categories")
    categories = CategoryConfig(
        rules=_build_category_rules(categories_raw.get("rules")),
        default=_optional_str(categories_raw.get("default")),
    )

    run_raw = _as_mapping(raw.get("run"), section="run")
    run = RunConfig(
        state_dir=_resolve_path(base, run_raw.get("state_dir"), default=".docsync"),
        workers=_parse_workers(run_raw.get("workers")),
        apply=_parse_apply_mode(run_raw.get("apply")),
        force=bool(run_raw.get("force", False)),
        dry_run=bool(run_raw.get("dry_run", False)),
    )

    return SyncConfig(
        root=base,
        library=library,
        docs=docs,
        run=run,
        categories=categories,
    )


def _build_library_config(payload: typ.Mapping[str, typ.Any], base: Path) -> LibraryConfig:
    """Build the LibraryConfig for the ``library`` section."""
    names_raw = _as_mapping(payload.get("component_names"), section="library.component_names")
    slot_pattern = _optional_str(payload.get("slot_type_pattern")) or DEFAULT_SLOT_TYPE_PATTERN
    try:
        re.compile(slot_pattern)
    except re.error as exc:
        msg = f"'library.slot_type_pattern' is not a valid regex: {exc}"
        raise ConfigError(msg) from exc

    prefix = payload.get("component_prefix", "react-")
    return LibraryConfig(
        root=_resolve_path(base, payload.get("root"), default="."),
        package_glob=_optional_str(payload.get("package_glob")) or "react-*",
        component_prefix="" if prefix is None else str(prefix),
        component_names={str(key): str(value) for key, value in names_raw.items()},
        import_module=_optional_str(payload.get("import_module"))
        or "@fluentui/react-components",
        props_suffix=_optional_str(payload.get("props_suffix")) or "Props",
        slots_suffix=_optional_str(payload.get("slots_suffix")) or "Slots",
        slot_type_pattern=slot_pattern,
        roles=_build_roles(_as_mapping(payload.get("roles"), section="library.roles")),
    )


__all__ = ["load_sync_config"]
