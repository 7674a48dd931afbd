"""Per-component lifecycle tracking for a synchronization run.

Each scanned component moves through a fixed sequence of states::

    Scanned -> Extracted -> Matched | Unmatched -> Classified -> Rendered -> Validated

and may drop to ``Failed`` from any non-terminal state. Moving out of order
raises :class:`~docsync.errors.InvalidTransition`, which keeps the pipeline
honest about which stage produced which artefact.

Example
-------
>>> from docsync.state import ComponentRun, ComponentState
>>> run = ComponentRun("Widget")
>>> run.advance(ComponentState.EXTRACTED)
>>> run.state
<ComponentState.EXTRACTED: 'Extracted'>
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from .errors import InvalidTransition

if typ.TYPE_CHECKING:
    from .generator.models import RenderedDocument
    from .models import ChangeRecord, ComponentDescriptor, DocDescriptor
    from .scanner import ScannedPackage


class ComponentState(enum.StrEnum):
    """Lifecycle states of one component within a run."""

    SCANNED = "Scanned"
    EXTRACTED = "Extracted"
    MATCHED = "Matched"
    UNMATCHED = "Unmatched"
    CLASSIFIED = "Classified"
    RENDERED = "Rendered"
    VALIDATED = "Validated"
    FAILED = "Failed"


_TRANSITIONS: dict[ComponentState, frozenset[ComponentState]] = {
    ComponentState.SCANNED: frozenset({ComponentState.EXTRACTED}),
    ComponentState.EXTRACTED: frozenset({ComponentState.MATCHED, ComponentState.UNMATCHED}),
    ComponentState.MATCHED: frozenset({ComponentState.CLASSIFIED}),
    ComponentState.UNMATCHED: frozenset({ComponentState.CLASSIFIED}),
    ComponentState.CLASSIFIED: frozenset({ComponentState.RENDERED}),
    ComponentState.RENDERED: frozenset({ComponentState.VALIDATED}),
    ComponentState.VALIDATED: frozenset(),
    ComponentState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({ComponentState.VALIDATED, ComponentState.FAILED})


@dc.dataclass(slots=True)
class ComponentRun:
    """Mutable record of one component's progress through the pipeline."""

    component_name: str
    package: ScannedPackage | None = None
    state: ComponentState = ComponentState.SCANNED
    descriptor: ComponentDescriptor | None = None
    prior: DocDescriptor | None = None
    record: ChangeRecord | None = None
    document: RenderedDocument | None = None
    failure: str | None = None
    history: list[ComponentState] = dc.field(
        default_factory=lambda: [ComponentState.SCANNED]
    )

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` once the component is Validated or Failed."""
        return self.state in TERMINAL_STATES

    @property
    def is_failed(self) -> bool:
        """Return ``True`` when the component has failed."""
        return self.state is ComponentState.FAILED

    def advance(self, target: ComponentState) -> None:
        """Move to ``target``.

        Raises
        ------
        InvalidTransition
            If ``target`` does not follow the current state.
        """
        if target is ComponentState.FAILED:
            self.fail("failed")
            return
        if target not in _TRANSITIONS[self.state]:
            msg = (
                f"{self.component_name}: cannot move from {self.state.value} "
                f"to {target.value}."
            )
            raise InvalidTransition(msg)
        self.state = target
        self.history.append(target)

    def fail(self, reason: str) -> None:
        """Mark the component Failed with ``reason``.

        Raises
        ------
        InvalidTransition
            If the component already reached a terminal state.
        """
        if self.is_terminal:
            msg = f"{self.component_name}: already {self.state.value}; cannot fail."
            raise InvalidTransition(msg)
        self.state = ComponentState.FAILED
        self.failure = reason
        self.history.append(ComponentState.FAILED)


__all__ = ["TERMINAL_STATES", "ComponentRun", "ComponentState"]
