"""Classify components by comparing source descriptors with prior documents.

Only structural fields take part in the comparison: prop type, requiredness
and default; slot element type; and the exported-symbol set. Descriptions
are carried through rendering but never make a component ``Updated``.

Example
-------
>>> from docsync.differ import classify
>>> from docsync.models import ComponentDescriptor
>>> classify(ComponentDescriptor("@x/react-widget", "Widget", "inputs"), None).status
<ChangeStatus.NEW: 'New'>
"""

from __future__ import annotations

import typing as typ

from .models import (
    ChangeRecord,
    ChangeStatus,
    ExportDelta,
    FieldDiff,
    MemberChange,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ComponentDescriptor, DocDescriptor

_PROP_FIELDS = ("type_expression", "required", "default_value")
_SLOT_FIELDS = ("element_type",)


def _member_changes(
    old: cabc.Mapping[str, typ.Any],
    new: cabc.Mapping[str, typ.Any],
    fields: tuple[str, ...],
) -> tuple[tuple[str, ...], tuple[str, ...], tuple[MemberChange, ...]]:
    """Return added names, removed names, and changed members."""
    added = tuple(name for name in new if name not in old)
    removed = tuple(name for name in old if name not in new)
    changed: list[MemberChange] = []
    for name, current in new.items():
        previous = old.get(name)
        if previous is None:
            continue
        diffs = tuple(
            FieldDiff(field, getattr(previous, field), getattr(current, field))
            for field in fields
            if getattr(previous, field) != getattr(current, field)
        )
        if diffs:
            changed.append(MemberChange(name, diffs))
    return added, removed, tuple(changed)


def classify(component: ComponentDescriptor, doc: DocDescriptor | None) -> ChangeRecord:
    """Return the change record for ``component`` against its prior ``doc``.

    Parameters
    ----------
    component : ComponentDescriptor
        Freshly extracted descriptor.
    doc : DocDescriptor | None
        Prior document with the same component name, if any.

    Returns
    -------
    ChangeRecord
        ``New`` without a prior document; ``Updated`` when props, slots or
        exports differ structurally; ``Unchanged`` otherwise.
    """
    if doc is None:
        return ChangeRecord(
            component_name=component.component_name,
            status=ChangeStatus.NEW,
            added_props=tuple(prop.name for prop in component.props),
            added_slots=tuple(slot.name for slot in component.slots),
            export_delta=ExportDelta(added=component.exported_symbols),
        )

    added_props, removed_props, changed_props = _member_changes(
        doc.prop_map(), component.prop_map(), _PROP_FIELDS
    )
    added_slots, removed_slots, changed_slots = _member_changes(
        doc.slot_map(), component.slot_map(), _SLOT_FIELDS
    )
    delta = ExportDelta(
        added=component.exported_symbols - doc.exported_symbols,
        removed=doc.exported_symbols - component.exported_symbols,
    )
    updated = any(
        (added_props, removed_props, changed_props, added_slots, removed_slots, changed_slots)
    ) or bool(delta)
    return ChangeRecord(
        component_name=component.component_name,
        status=ChangeStatus.UPDATED if updated else ChangeStatus.UNCHANGED,
        added_props=added_props,
        removed_props=removed_props,
        changed_props=changed_props,
        added_slots=added_slots,
        removed_slots=removed_slots,
        changed_slots=changed_slots,
        export_delta=delta,
    )


def removed(doc: DocDescriptor) -> ChangeRecord:
    """Return the record for a document whose component no longer exists."""
    return ChangeRecord(
        component_name=doc.component_name,
        status=ChangeStatus.REMOVED,
        removed_props=tuple(prop.name for prop in doc.props),
        removed_slots=tuple(slot.name for slot in doc.slots),
        export_delta=ExportDelta(removed=doc.exported_symbols),
    )


__all__ = ["classify", "removed"]
