"""Typed dataclasses describing docsync configuration structures."""

from __future__ import annotations

import dataclasses as dc
import enum
from pathlib import Path

from docsync._constants import ESCALATION_DIRNAME, STAGING_DIRNAME

DEFAULT_SLOT_TYPE_PATTERN = r"\bSlot<|\bReact\.ReactElement\b|\bJSX\.Element\b"

DEFAULT_TYPES_CANDIDATES = (
    "library/src/components/{component}/{component}.types.ts",
    "src/components/{component}/{component}.types.ts",
)
DEFAULT_HOOKS_CANDIDATES = (
    "library/src/components/{component}/use{component}.ts",
    "library/src/components/{component}/use{component}.tsx",
    "src/components/{component}/use{component}.ts",
    "src/components/{component}/use{component}.tsx",
)
DEFAULT_INDEX_CANDIDATES = (
    "library/src/index.ts",
    "src/index.ts",
)
DEFAULT_EXAMPLES_CANDIDATES = (
    "stories/src/{component}/*.stories.tsx",
    "stories/{component}/*.stories.tsx",
    "src/stories/{component}/*.stories.tsx",
    "src/stories/*.stories.tsx",
)


class ApplyMode(enum.StrEnum):
    """How staged documents are promoted into the docs tree."""

    BATCH = "batch"
    PER_COMPONENT = "per-component"


@dc.dataclass(slots=True)
class RoleCandidates:
    """Ordered path-pattern candidates for each component file role.

    Patterns are relative to a package directory and may use the
    ``{component}``, ``{package}`` and ``{slug}`` placeholders as well as
    glob characters. Earlier candidates win.
    """

    types: list[str] = dc.field(default_factory=lambda: list(DEFAULT_TYPES_CANDIDATES))
    hooks: list[str] = dc.field(default_factory=lambda: list(DEFAULT_HOOKS_CANDIDATES))
    index: list[str] = dc.field(default_factory=lambda: list(DEFAULT_INDEX_CANDIDATES))
    examples: list[str] = dc.field(
        default_factory=lambda: list(DEFAULT_EXAMPLES_CANDIDATES)
    )


@dc.dataclass(slots=True)
class LibraryConfig:
    """Where the component library lives and how to read it."""

    root: Path
    package_glob: str = "react-*"
    component_prefix: str = "react-"
    component_names: dict[str, str] = dc.field(default_factory=dict)
    import_module: str = "@fluentui/react-components"
    props_suffix: str = "Props"
    slots_suffix: str = "Slots"
    slot_type_pattern: str = DEFAULT_SLOT_TYPE_PATTERN
    roles: RoleCandidates = dc.field(default_factory=RoleCandidates)


@dc.dataclass(slots=True)
class DocsConfig:
    """Layout of the generated documentation tree."""

    root: Path
    components_dir: str = "components"
    index_file: str = "index.md"

    @property
    def components_root(self) -> Path:
        """Return the directory holding per-category component documents."""
        return self.root / self.components_dir

    @property
    def index_path(self) -> Path:
        """Return the path of the component index document."""
        return self.components_root / self.index_file


@dc.dataclass(slots=True)
class CategoryRule:
    """Map a package-name glob to a category label."""

    pattern: str
    category: str


@dc.dataclass(slots=True)
class CategoryConfig:
    """Ordered category rules plus an optional fallback."""

    rules: list[CategoryRule] = dc.field(default_factory=list)
    default: str | None = None


@dc.dataclass(slots=True)
class RunConfig:
    """Execution knobs for a synchronization run."""

    state_dir: Path
    workers: int = 4
    apply: ApplyMode = ApplyMode.BATCH
    force: bool = False
    dry_run: bool = False

    @property
    def staging_dir(self) -> Path:
        """Return the directory where renders wait for promotion."""
        return self.state_dir / STAGING_DIRNAME

    @property
    def escalation_dir(self) -> Path:
        """Return the directory holding renders that need a human decision."""
        return self.state_dir / ESCALATION_DIRNAME


@dc.dataclass(slots=True)
class SyncConfig:
    """Fully resolved configuration for one docsync invocation."""

    root: Path
    library: LibraryConfig
    docs: DocsConfig
    run: RunConfig
    categories: CategoryConfig = dc.field(default_factory=CategoryConfig)


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
]
