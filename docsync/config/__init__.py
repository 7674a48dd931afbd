"""Load and validate the docsync configuration YAML.

This subpackage parses the project's ``docsync.yaml`` file and produces typed
dataclasses (:class:`SyncConfig`, :class:`LibraryConfig`, etc.) that the
scanner, renderer and pipeline consume. The primary entry point is
:func:`load_sync_config`, which resolves relative paths against the config
file, applies defaults, and rejects malformed sections with
:class:`~docsync.errors.ConfigError`.

Examples
--------
>>> from pathlib import Path
>>> from docsync.config import load_sync_config
>>> config = load_sync_config(Path("config/docsync.yaml"))  # doctest: +SKIP
>>> [rule.category for rule in config.categories.rules][:1]  # doctest: +SKIP
['buttons']
"""

from .loader import load_sync_config
from .models import (
    DEFAULT_SLOT_TYPE_PATTERN,
    ApplyMode,
    CategoryConfig,
    CategoryRule,
    DocsConfig,
    LibraryConfig,
    RoleCandidates,
    RunConfig,
    SyncConfig,
)

__all__ = [
    "DEFAULT_SLOT_TYPE_PATTERN",
    "ApplyMode",
    "CategoryConfig",
    "CategoryRule",
    "DocsConfig",
    "LibraryConfig",
    "RoleCandidates",
    "RunConfig",
    "SyncConfig",
    "load_sync_config",
]
