"""Aggregate run outcomes into a report for people and machines.

:class:`RunReport` collects one :class:`ComponentOutcome` per component
(including Removed ones), every :class:`~docsync.models.ValidationIssue`, and
the paths that were written, withheld or escalated. ``render_text`` produces
the console summary; ``to_json`` encodes a stable payload with
``msgspec.json`` for CI consumption.

Example
-------
>>> from docsync.report import RunReport
>>> report = RunReport()
>>> report.exit_code
0
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec

from .models import ChangeStatus
from .staging import write_text_atomic
from .state import ComponentState

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import ChangeRecord, MemberChange, ValidationIssue

UNCATEGORIZED = "(uncategorized)"


class FieldDiffPayload(msgspec.Struct, frozen=True):
    """JSON form of one changed field."""

    field: str
    old: str | bool | None
    new: str | bool | None


class MemberChangePayload(msgspec.Struct, frozen=True):
    """JSON form of a changed prop or slot."""

    name: str
    diffs: list[FieldDiffPayload]


class ComponentPayload(msgspec.Struct, frozen=True):
    """JSON form of one component outcome."""

    component_name: str
    category: str | None
    status: str | None
    state: str | None
    document_path: str | None
    added_props: list[str]
    removed_props: list[str]
    changed_props: list[MemberChangePayload]
    added_slots: list[str]
    removed_slots: list[str]
    changed_slots: list[MemberChangePayload]
    exports_added: list[str]
    exports_removed: list[str]


class IssuePayload(msgspec.Struct, frozen=True):
    """JSON form of one issue."""

    severity: str
    document_path: str
    rule_id: str
    message: str


class ReportPayload(msgspec.Struct, frozen=True):
    """Top-level JSON document written by ``--report-json``."""

    exit_code: int
    dry_run: bool
    cancelled: bool
    counts: dict[str, int]
    components: list[ComponentPayload]
    issues: list[IssuePayload]
    staged: list[str]
    written: list[str]
    withheld: list[str]
    escalated: list[str]


@dc.dataclass(slots=True)
class ComponentOutcome:
    """Final classification and state of one component."""

    component_name: str
    category: str | None
    record: ChangeRecord | None = None
    state: ComponentState | None = None
    document_path: str | None = None

    @property
    def status(self) -> ChangeStatus | None:
        """Return the change status, or ``None`` if classification never ran."""
        return self.record.status if self.record else None


def _changes(changes: tuple[MemberChange, ...]) -> list[MemberChangePayload]:
    return [
        MemberChangePayload(
            name=change.name,
            diffs=[FieldDiffPayload(diff.field, diff.old, diff.new) for diff in change.diffs],
        )
        for change in changes
    ]


@dc.dataclass(slots=True)
class RunReport:
    """Everything a run decided, sorted for stable output."""

    outcomes: list[ComponentOutcome] = dc.field(default_factory=list)
    issues: list[ValidationIssue] = dc.field(default_factory=list)
    staged: list[str] = dc.field(default_factory=list)
    written: list[str] = dc.field(default_factory=list)
    withheld: list[str] = dc.field(default_factory=list)
    escalated: list[str] = dc.field(default_factory=list)
    dry_run: bool = False
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        """Return ``True`` when any Error-level issue was recorded."""
        return any(issue.is_error for issue in self.issues)

    @property
    def exit_code(self) -> int:
        """Return ``1`` when any Error was recorded or the run was cancelled."""
        return 1 if self.has_errors or self.cancelled else 0

    def finalize(self) -> RunReport:
        """Sort outcomes, issues and path lists in place and return ``self``."""
        self.outcomes.sort(key=lambda item: (item.category or "", item.component_name))
        self.issues.sort(key=lambda issue: (issue.document_path, issue.rule_id, issue.message))
        self.staged = sorted(set(self.staged))
        self.written = sorted(set(self.written))
        self.withheld = sorted(set(self.withheld))
        self.escalated = sorted(set(self.escalated))
        return self

    def counts(self) -> dict[str, int]:
        """Return the number of components per status, plus Failed."""
        counts = {status.value: 0 for status in ChangeStatus}
        counts["Failed"] = 0
        for outcome in self.outcomes:
            if outcome.status is not None:
                counts[outcome.status.value] += 1
            if outcome.state is ComponentState.FAILED:
                counts["Failed"] += 1
        return counts

    def by_category(self) -> dict[str, list[ComponentOutcome]]:
        """Return outcomes grouped by category, in sorted order."""
        grouped: dict[str, list[ComponentOutcome]] = {}
        ordered = sorted(self.outcomes, key=lambda item: (item.category or "", item.component_name))
        for outcome in ordered:
            grouped.setdefault(outcome.category or UNCATEGORIZED, []).append(outcome)
        return grouped

    def render_text(self) -> str:
        """Return the human-readable summary printed by the CLI."""
        title = "docsync report"
        if self.dry_run:
            title += " (dry run)"
        if self.cancelled:
            title += " (cancelled)"
        summary = ", ".join(f"{name} {count}" for name, count in self.counts().items())
        lines = [title, f"Summary: {summary}"]
        for category, outcomes in self.by_category().items():
            lines.append(f"[{category}]")
            lines.extend(f"  {_describe(outcome)}" for outcome in outcomes)
        if self.issues:
            lines.append("Issues:")
            lines.extend(
                f"  {issue.severity.value} {issue.document_path or '-'} "
                f"[{issue.rule_id}] {issue.message}"
                for issue in self.issues
            )
        for label, paths in (
            ("Staged", self.staged),
            ("Written", self.written),
            ("Withheld", self.withheld),
            ("Escalated", self.escalated),
        ):
            if paths:
                lines.append(f"{label}:")
                lines.extend(f"  {path}" for path in paths)
        lines.append(f"Exit code: {self.exit_code}")
        return "\n".join(lines)

    def to_payload(self) -> ReportPayload:
        """Return the msgspec payload for this report."""
        components = []
        for category, outcomes in self.by_category().items():
            for outcome in outcomes:
                record = outcome.record
                components.append(
                    ComponentPayload(
                        component_name=outcome.component_name,
                        category=outcome.category if category != UNCATEGORIZED else None,
                        status=outcome.status.value if outcome.status else None,
                        state=outcome.state.value if outcome.state else None,
                        document_path=outcome.document_path,
                        added_props=list(record.added_props) if record else [],
                        removed_props=list(record.removed_props) if record else [],
                        changed_props=_changes(record.changed_props) if record else [],
                        added_slots=list(record.added_slots) if record else [],
                        removed_slots=list(record.removed_slots) if record else [],
                        changed_slots=_changes(record.changed_slots) if record else [],
                        exports_added=sorted(record.export_delta.added) if record else [],
                        exports_removed=sorted(record.export_delta.removed) if record else [],
                    )
                )
        issues = [
            IssuePayload(
                severity=issue.severity.value,
                document_path=issue.document_path,
                rule_id=issue.rule_id,
                message=issue.message,
            )
            for issue in sorted(
                self.issues, key=lambda item: (item.document_path, item.rule_id, item.message)
            )
        ]
        return ReportPayload(
            exit_code=self.exit_code,
            dry_run=self.dry_run,
            cancelled=self.cancelled,
            counts=self.counts(),
            components=components,
            issues=issues,
            staged=sorted(self.staged),
            written=sorted(self.written),
            withheld=sorted(self.withheld),
            escalated=sorted(self.escalated),
        )

    def to_json(self) -> bytes:
        """Encode the report payload as JSON."""
        return msgspec.json.encode(self.to_payload())

    def write_json(self, path: Path) -> Path:
        """Write the JSON payload to ``path``."""
        return write_text_atomic(path, self.to_json().decode("utf-8") + "\n")


def _describe(outcome: ComponentOutcome) -> str:
    status = outcome.status.value if outcome.status else "Not classified"
    text = f"{outcome.component_name}: {status}"
    if outcome.state is ComponentState.FAILED:
        text += " [Failed]"
    record = outcome.record
    if record is None:
        return text
    details = []
    for label, names in (
        ("+props", record.added_props),
        ("-props", record.removed_props),
        ("~props", tuple(change.name for change in record.changed_props)),
        ("+slots", record.added_slots),
        ("-slots", record.removed_slots),
        ("~slots", tuple(change.name for change in record.changed_slots)),
        ("+exports", tuple(sorted(record.export_delta.added))),
        ("-exports", tuple(sorted(record.export_delta.removed))),
    ):
        if names and record.status is ChangeStatus.UPDATED:
            details.append(f"{label}: {', '.join(names)}")
    if details:
        text += f" ({'; '.join(details)})"
    return text


__all__ = ["ComponentOutcome", "ReportPayload", "RunReport"]
