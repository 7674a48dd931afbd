"""Descriptor records shared by every stage of a synchronization run.

Source-derived (:class:`ComponentDescriptor`) and documentation-derived
(:class:`DocDescriptor`) records share the same prop and slot shapes so the
differencer can compare them field by field. Every record is frozen: a run
builds them once and only ever reads them afterwards.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ


class ChangeStatus(enum.StrEnum):
    """Classification of a component between source and prior docs."""

    NEW = "New"
    UPDATED = "Updated"
    UNCHANGED = "Unchanged"
    REMOVED = "Removed"


class Severity(enum.StrEnum):
    """Severity attached to every issue surfaced in the run report."""

    ERROR = "Error"
    WARNING = "Warning"


@dc.dataclass(frozen=True, slots=True)
class PropDescriptor:
    """A single property declared on a component's props type.

    Attributes
    ----------
    name : str
        Member name, unique within its component.
    type_expression : str
        Declared type text with whitespace collapsed, or ``"unknown"`` when
        the member could not be parsed.
    default_value : str | None
        Default bound in the component's hook file, if any.
    description : str
        JSDoc text (source) or table cell text (docs).
    required : bool
        ``True`` when the member carries no optional or nullable marker.
    """

    name: str
    type_expression: str
    default_value: str | None = None
    description: str = ""
    required: bool = True


@dc.dataclass(frozen=True, slots=True)
class SlotDescriptor:
    """A renderable insertion point exposed by a component."""

    name: str
    element_type: str
    description: str = ""


@dc.dataclass(frozen=True, slots=True)
class ExampleSnippet:
    """A top-level usage snippet lifted from a story or example file."""

    title: str
    source_text: str
    origin_file: str = ""


@dc.dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """Structural metadata extracted from a component's source files."""

    package_name: str
    component_name: str
    category: str | None
    props: tuple[PropDescriptor, ...] = ()
    slots: tuple[SlotDescriptor, ...] = ()
    exported_symbols: frozenset[str] = frozenset()
    examples: tuple[ExampleSnippet, ...] = ()
    source_version: str | None = None

    def prop_map(self) -> dict[str, PropDescriptor]:
        """Return props keyed by name, preserving declaration order."""
        return {prop.name: prop for prop in self.props}

    def slot_map(self) -> dict[str, SlotDescriptor]:
        """Return slots keyed by name, preserving declaration order."""
        return {slot.name: slot for slot in self.slots}


@dc.dataclass(frozen=True, slots=True)
class CustomSection:
    """A hand-authored section the template does not recognize."""

    heading: str
    body: str


@dc.dataclass(frozen=True, slots=True)
class DocDescriptor:
    """Structural model of a previously generated document.

    Attributes
    ----------
    path : str
        POSIX path of the document relative to the docs root.
    prose_sections : tuple[CustomSection, ...]
        Bodies of the recognized prose sections (Overview, Accessibility,
        Best Practices), kept verbatim.
    lead : str
        Hand-written text between the metadata block and the first section.
    extra_metadata : tuple[tuple[str, str], ...]
        Metadata lines whose keys are not generated, as ``(key, value)``.
    see_also : str
        See Also body without the component index link, kept verbatim.
    custom_sections : tuple[CustomSection, ...]
        Unrecognized sections in document order.
    """

    path: str
    package_name: str
    component_name: str
    category: str | None
    import_statement: str = ""
    props: tuple[PropDescriptor, ...] = ()
    slots: tuple[SlotDescriptor, ...] = ()
    exported_symbols: frozenset[str] = frozenset()
    examples: tuple[ExampleSnippet, ...] = ()
    prose_sections: tuple[CustomSection, ...] = ()
    lead: str = ""
    extra_metadata: tuple[tuple[str, str], ...] = ()
    see_also: str = ""
    custom_sections: tuple[CustomSection, ...] = ()

    def prop_map(self) -> dict[str, PropDescriptor]:
        """Return props keyed by name, preserving table order."""
        return {prop.name: prop for prop in self.props}

    def slot_map(self) -> dict[str, SlotDescriptor]:
        """Return slots keyed by name, preserving table order."""
        return {slot.name: slot for slot in self.slots}

    def custom_section_map(self) -> dict[str, str]:
        """Return custom section bodies keyed by heading text."""
        return {section.heading: section.body for section in self.custom_sections}

    def prose(self, heading: str) -> str | None:
        """Return the preserved body of a recognized prose section."""
        for section in self.prose_sections:
            if section.heading == heading:
                return section.body
        return None


@dc.dataclass(frozen=True, slots=True)
class FieldDiff:
    """Old and new value of one descriptor field."""

    field: str
    old: typ.Any
    new: typ.Any


@dc.dataclass(frozen=True, slots=True)
class MemberChange:
    """A prop or slot that persisted under the same name but changed."""

    name: str
    diffs: tuple[FieldDiff, ...]


@dc.dataclass(frozen=True, slots=True)
class ExportDelta:
    """Exported symbols gained and lost since the prior document."""

    added: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


@dc.dataclass(frozen=True, slots=True)
class ChangeRecord:
    """Outcome of comparing one component against its prior document."""

    component_name: str
    status: ChangeStatus
    added_props: tuple[str, ...] = ()
    removed_props: tuple[str, ...] = ()
    changed_props: tuple[MemberChange, ...] = ()
    added_slots: tuple[str, ...] = ()
    removed_slots: tuple[str, ...] = ()
    changed_slots: tuple[MemberChange, ...] = ()
    export_delta: ExportDelta = ExportDelta()


@dc.dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A Warning or Error recorded against a document or source path."""

    severity: Severity
    document_path: str
    message: str
    rule_id: str

    @property
    def is_error(self) -> bool:
        """Return ``True`` for Error-level issues."""
        return self.severity is Severity.ERROR


__all__ = [
    "ChangeRecord",
    "ChangeStatus",
    "ComponentDescriptor",
    "CustomSection",
    "DocDescriptor",
    "ExampleSnippet",
    "ExportDelta",
    "FieldDiff",
    "MemberChange",
    "PropDescriptor",
    "Severity",
    "SlotDescriptor",
    "ValidationIssue",
]
