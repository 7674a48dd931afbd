"""Walk a component library and resolve each package's module files.

Every package directory under the library root that matches the configured
glob is treated as one component. For each file role the scanner tries an
ordered list of path-pattern candidates (newer layout first, older layout as
fallback) and keeps the first one that exists. Packages without a types file
are skipped with a :class:`~docsync.errors.ScanFailure`; the scan carries on.

Example
-------
>>> from pathlib import Path
>>> from docsync.config import load_sync_config
>>> from docsync.scanner import SourceScanner
>>> config = load_sync_config(Path("config/docsync.yaml"))  # doctest: +SKIP
>>> for package in SourceScanner(config.library).scan():  # doctest: +SKIP
...     print(package.component_name, package.files.types)
"""

from __future__ import annotations

import dataclasses as dc
import json
import tomllib
import typing as typ
from pathlib import Path

from .errors import ConfigError, ScanFailure
from .logging import get_logger
from .naming import kebab_case, pascal_case

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import LibraryConfig

logger = get_logger("scanner")

_GLOB_CHARS = frozenset("*?[")


@dc.dataclass(frozen=True, slots=True)
class ModuleFiles:
    """Resolved source files for one component, keyed by role."""

    types: Path
    hooks: Path | None = None
    index: Path | None = None
    examples: tuple[Path, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class ScannedPackage:
    """A package directory whose required files were resolved."""

    package_name: str
    component_name: str
    package_dir: Path
    files: ModuleFiles
    source_version: str | None = None

    @property
    def slug(self) -> str:
        """Return the kebab-case document slug for the component."""
        return kebab_case(self.component_name)


@dc.dataclass(frozen=True, slots=True)
class _PackageManifest:
    name: str | None = None
    version: str | None = None


class SourceScanner:
    """Resolve component module files under a library root."""

    def __init__(self, library: LibraryConfig) -> None:
        """Initialize the scanner.

        Parameters
        ----------
        library : LibraryConfig
            Library section of the config: root directory, package glob,
            naming rules, and role candidates.
        """
        self.library = library
        self.failures: list[ScanFailure] = []

    def package_dirs(self) -> cabc.Iterator[Path]:
        """Yield package directories matching the configured glob, sorted by name."""
        root = self.library.root
        if not root.is_dir():
            msg = f"Library root '{root}' does not exist or is not a directory."
            raise ConfigError(msg)
        for candidate in sorted(root.glob(self.library.package_glob)):
            if candidate.is_dir():
                yield candidate

    def scan(self) -> cabc.Iterator[ScannedPackage]:
        """Lazily yield scanned packages, recording failures on ``self.failures``."""
        for package_dir in self.package_dirs():
            try:
                yield self.scan_package(package_dir)
            except ScanFailure as exc:
                logger.warning("%s", exc.message)
                self.failures.append(exc)

    def scan_package(self, package_dir: Path) -> ScannedPackage:
        """Resolve the module files of a single package directory.

        Raises
        ------
        ScanFailure
            If no candidate resolves for the required ``types`` role.
        """
        manifest = _read_manifest(package_dir)
        component_name = self.component_name_for(package_dir.name)
        context = {
            "component": component_name,
            "package": package_dir.name,
            "slug": kebab_case(component_name),
        }
        roles = self.library.roles
        types = self._resolve(package_dir, roles.types, context)
        if not types:
            tried = ", ".join(roles.types)
            msg = (
                f"Package '{package_dir.name}' has no types declaration file "
                f"(tried: {tried}); skipped."
            )
            raise ScanFailure(msg, path=self._display_path(package_dir))
        hooks = self._resolve(package_dir, roles.hooks, context)
        index = self._resolve(package_dir, roles.index, context)
        examples = self._resolve(package_dir, roles.examples, context)
        files = ModuleFiles(
            types=types[0],
            hooks=hooks[0] if hooks else None,
            index=index[0] if index else None,
            examples=tuple(examples),
        )
        logger.debug("scanned %s -> %s", package_dir.name, files.types)
        return ScannedPackage(
            package_name=manifest.name or package_dir.name,
            component_name=component_name,
            package_dir=package_dir,
            files=files,
            source_version=manifest.version,
        )

    def component_name_for(self, directory_name: str) -> str:
        """Return the component name for a package directory."""
        override = self.library.component_names.get(directory_name)
        if override:
            return override
        prefix = self.library.component_prefix
        stem = directory_name
        if prefix and stem.startswith(prefix) and len(stem) > len(prefix):
            stem = stem[len(prefix) :]
        return pascal_case(stem)

    def _resolve(
        self, package_dir: Path, patterns: cabc.Sequence[str], context: dict[str, str]
    ) -> list[Path]:
        """Return the files matched by the first candidate that matches anything."""
        for pattern in patterns:
            try:
                relative = pattern.format(**context)
            except (KeyError, IndexError, ValueError) as exc:
                msg = f"Invalid role candidate '{pattern}': {exc}"
                raise ConfigError(msg) from exc
            if _GLOB_CHARS.intersection(relative):
                matches = sorted(p for p in package_dir.glob(relative) if p.is_file())
            else:
                target = package_dir / relative
                matches = [target] if target.is_file() else []
            if matches:
                return matches
        return []

    def _display_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.library.root).as_posix()
        except ValueError:
            return path.as_posix()


def _read_manifest(package_dir: Path) -> _PackageManifest:
    """Return the package name and version from package.json or pyproject.toml."""
    package_json = package_dir / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("unreadable manifest %s", package_json)
            data = None
        if isinstance(data, dict):
            return _PackageManifest(
                name=_manifest_str(data.get("name")),
                version=_manifest_str(data.get("version")),
            )
    pyproject = package_dir / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            logger.warning("unreadable manifest %s", pyproject)
            return _PackageManifest()
        project = data.get("project") or {}
        return _PackageManifest(
            name=_manifest_str(project.get("name")),
            version=_manifest_str(project.get("version")),
        )
    return _PackageManifest()


def _manifest_str(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = ["ModuleFiles", "ScannedPackage", "SourceScanner"]
