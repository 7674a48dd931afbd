"""Assemble a :class:`~docsync.models.ComponentDescriptor` from scanned files."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

from docsync.errors import ExtractionFailure, ParseFailure, ScanFailure
from docsync.logging import get_logger
from docsync.models import ComponentDescriptor, PropDescriptor, SlotDescriptor

from .declarations import is_slot_type, parse_declaration, to_prop, to_slot
from .defaults import find_defaults
from .examples import extract_examples
from .exports import collect_exports
from .tokens import mask_source

if typ.TYPE_CHECKING:
    from pathlib import Path

    from docsync.categories import CategoryAssignment
    from docsync.config import LibraryConfig
    from docsync.models import ValidationIssue
    from docsync.scanner import ScannedPackage

logger = get_logger("extractor")


@dc.dataclass(slots=True)
class ExtractionResult:
    """Descriptor for one component and the warnings raised while building it."""

    descriptor: ComponentDescriptor
    issues: list[ValidationIssue] = dc.field(default_factory=list)


class MetadataExtractor:
    """Read a scanned package's sources and build its descriptor."""

    def __init__(self, library: LibraryConfig, categories: CategoryAssignment) -> None:
        self.library = library
        self.categories = categories
        self._slot_pattern = re.compile(library.slot_type_pattern)

    def extract(self, package: ScannedPackage) -> ExtractionResult:
        """Extract props, slots, exports, defaults and examples for ``package``.

        Parameters
        ----------
        package : ScannedPackage
            Output of :class:`~docsync.scanner.SourceScanner`.

        Returns
        -------
        ExtractionResult
            The descriptor and any :class:`~docsync.errors.ParseFailure`
            warnings. ``descriptor.category`` is ``None`` when no category
            rule applies.

        Raises
        ------
        ScanFailure
            If the types file cannot be read.
        ExtractionFailure
            If the types file has no ``<Component>Props`` declaration.
        """
        files = package.files
        types_path = self._display(files.types, package)
        try:
            types_text = files.types.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Could not read types file '{types_path}': {exc}"
            raise ScanFailure(msg, path=types_path) from exc

        issues: list[ValidationIssue] = []
        types_source = mask_source(types_text, language=_language(files.types))
        component = package.component_name
        props_name = f"{component}{self.library.props_suffix}"
        slots_name = f"{component}{self.library.slots_suffix}"

        props_decl = parse_declaration(types_source, props_name, path=types_path)
        slots_decl = parse_declaration(types_source, slots_name, path=types_path)
        if not props_decl.found:
            msg = f"{component}: no exported declaration named '{props_name}'."
            raise ExtractionFailure(msg, path=types_path)
        issues.extend(failure.to_issue() for failure in props_decl.failures)
        issues.extend(failure.to_issue() for failure in slots_decl.failures)

        defaults = self._defaults(files.hooks, package, issues)
        props: list[PropDescriptor] = []
        slots: list[SlotDescriptor] = []
        slot_names: set[str] = set()
        for member in slots_decl.members:
            slots.append(to_slot(member))
            slot_names.add(member.name)
        for member in props_decl.members:
            if is_slot_type(member.type_expression, self._slot_pattern):
                if member.name not in slot_names:
                    slots.append(to_slot(member))
                    slot_names.add(member.name)
                continue
            props.append(to_prop(member, defaults.get(member.name)))

        exports: frozenset[str] = frozenset()
        if files.index is not None:
            exports = collect_exports(files.index)

        descriptor = ComponentDescriptor(
            package_name=package.package_name,
            component_name=component,
            category=self.categories.try_resolve(package.package_name),
            props=tuple(props),
            slots=tuple(slots),
            exported_symbols=exports,
            examples=extract_examples(files.examples, package.package_dir),
            source_version=package.source_version,
        )
        logger.debug(
            "extracted %s: %d props, %d slots, %d exports, %d examples",
            component,
            len(descriptor.props),
            len(descriptor.slots),
            len(descriptor.exported_symbols),
            len(descriptor.examples),
        )
        return ExtractionResult(descriptor, issues)

    def _defaults(
        self, hooks: Path | None, package: ScannedPackage, issues: list[ValidationIssue]
    ) -> dict[str, str]:
        if hooks is None:
            return {}
        try:
            text = hooks.read_text(encoding="utf-8")
        except OSError as exc:
            display = self._display(hooks, package)
            msg = f"Could not read hooks file '{display}': {exc}"
            issues.append(ParseFailure(msg, path=display).to_issue())
            return {}
        return find_defaults(mask_source(text, language=_language(hooks)))

    def _display(self, path: Path, package: ScannedPackage) -> str:
        try:
            return path.relative_to(self.library.root).as_posix()
        except ValueError:
            return f"{package.package_dir.name}/{path.name}"


def _language(path: Path) -> str:
    return "tsx" if path.suffix == ".tsx" else "typescript"


__all__ = ["ExtractionResult", "MetadataExtractor"]
