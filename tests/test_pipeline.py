"""Integration tests for full synchronization runs.

Every test drives :class:`~docsync.pipeline.SyncPipeline` over the temporary
library built by ``conftest.py`` and inspects both the report and the docs
tree on disk. The tree is the contract: a run may only change it through
promotion, never delete from it, and a second run over unchanged sources must
leave it byte-identical.
"""

from __future__ import annotations

import shutil
import typing as typ

import pytest

from docsync.errors import RunCancelled
from docsync.models import ChangeStatus
from docsync.pipeline import SyncPipeline
from docsync.state import ComponentState

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from conftest import SyncEnv
    from docsync.report import ComponentOutcome, RunReport

WIDGET_DOC = "components/inputs/widget.md"
INDEX_DOC = "components/index.md"
BUTTON_DOC = "components/buttons/button.md"


def _outcome(report: RunReport, name: str) -> ComponentOutcome:
    matches = [outcome for outcome in report.outcomes if outcome.component_name == name]
    assert len(matches) == 1, f"expected one outcome for {name}, got {matches}"
    return matches[0]


def _snapshot(env: SyncEnv) -> dict[str, str]:
    return {
        path.relative_to(env.docs_root).as_posix(): path.read_text(encoding="utf-8")
        for path in sorted(env.docs_root.rglob("*.md"))
    }


def test_first_run_writes_document_and_index(widget_env: SyncEnv) -> None:
    """A new component is rendered, validated and promoted with the index."""
    config = widget_env.config()

    report = SyncPipeline(config).run()

    assert report.exit_code == 0, report.render_text()
    assert report.issues == []
    widget = _outcome(report, "Widget")
    assert widget.status is ChangeStatus.NEW
    assert widget.state is ComponentState.VALIDATED
    assert widget.document_path == WIDGET_DOC
    assert report.written == [INDEX_DOC, WIDGET_DOC]
    assert "- [Widget](inputs/widget.md)" in widget_env.read_doc(INDEX_DOC)
    assert "| `disabled?` | `boolean` | `false` | Disables interaction. |" in (
        widget_env.read_doc(WIDGET_DOC)
    )
    assert not config.run.staging_dir.exists(), "staging is discarded after promotion"


def test_second_run_is_idempotent(widget_env: SyncEnv) -> None:
    """Unchanged sources leave the tree byte-identical and stage nothing."""
    SyncPipeline(widget_env.config()).run()
    before = _snapshot(widget_env)

    report = SyncPipeline(widget_env.config()).run()

    assert _outcome(report, "Widget").status is ChangeStatus.UNCHANGED
    assert report.staged == []
    assert report.written == []
    assert report.exit_code == 0
    assert _snapshot(widget_env) == before


def test_forced_run_keeps_custom_sections(widget_env: SyncEnv) -> None:
    """Re-rendering an Unchanged component keeps hand-written sections."""
    SyncPipeline(widget_env.config()).run()
    text = widget_env.read_doc(WIDGET_DOC).replace(
        "## See Also",
        "## Migration Notes\n\nRename `scale` to `size`.\n\n## See Also",
    )
    widget_env.write_doc(WIDGET_DOC, text)

    report = SyncPipeline(widget_env.config(force=True)).run()

    assert _outcome(report, "Widget").status is ChangeStatus.UNCHANGED
    assert report.staged == [], "the re-render matches the document on disk"
    assert widget_env.read_doc(WIDGET_DOC) == text


def test_updated_component_is_rewritten_around_prose(widget_env: SyncEnv) -> None:
    """An added prop updates the tables and keeps the authored overview."""
    widget_env.write_prior_widget()

    report = SyncPipeline(widget_env.config()).run()

    widget = _outcome(report, "Widget")
    assert widget.status is ChangeStatus.UPDATED
    assert widget.record is not None
    assert widget.record.added_props == ("disabled",)
    assert widget.record.changed_props == ()
    text = widget_env.read_doc(WIDGET_DOC)
    assert "Widgets collect small settings." in text
    assert "`disabled?`" in text
    assert report.written == [INDEX_DOC, WIDGET_DOC]


def test_update_keeps_lead_paragraph_metadata_and_see_also_prose(widget_env: SyncEnv) -> None:
    """Authored text outside the recognized sections outlives a regeneration."""
    path = widget_env.write_prior_widget()
    text = path.read_text(encoding="utf-8")
    path.write_text(
        text.replace(
            "`WidgetSlots`\n",
            "`WidgetSlots`\n> **Status**: Preview\n\nWidgets sit in settings panels.\n",
        ).replace(
            "- [Component Index](../index.md)\n",
            "- [Component Index](../index.md)\n\nRelated patterns live in the settings guide.\n",
        ),
        encoding="utf-8",
    )

    report = SyncPipeline(widget_env.config()).run()

    assert _outcome(report, "Widget").status is ChangeStatus.UPDATED
    assert report.exit_code == 0
    written = widget_env.read_doc(WIDGET_DOC)
    assert "> **Status**: Preview\n\nWidgets sit in settings panels.\n\n## Overview" in written
    assert written.endswith(
        "- [Component Index](../index.md)\n\n"
        "Related patterns live in the settings guide.\n"
    )
    assert "`disabled?`" in written


def test_removed_component_is_flagged_not_deleted(widget_env: SyncEnv) -> None:
    """A document whose source vanished stays and is marked in the index."""
    SyncPipeline(widget_env.config()).run()
    shutil.rmtree(widget_env.library_root / "react-widget")

    report = SyncPipeline(widget_env.config()).run()

    widget = _outcome(report, "Widget")
    assert widget.status is ChangeStatus.REMOVED
    assert widget.document_path == WIDGET_DOC
    assert (widget_env.docs_root / WIDGET_DOC).is_file()
    assert "- [Widget](inputs/widget.md) _(removed)_" in widget_env.read_doc(INDEX_DOC)
    assert report.counts()["Removed"] == 1
    assert report.exit_code == 0


def test_batch_mode_writes_nothing_when_any_document_fails(widget_env: SyncEnv) -> None:
    """One invalid document blocks the whole batch."""
    widget_env.write_prior_widget("[Gone](gone.md)")
    widget_env.add_component("react-button", "Button")
    before = _snapshot(widget_env)

    report = SyncPipeline(widget_env.config()).run()

    assert report.exit_code == 1
    assert {issue.rule_id for issue in report.issues if issue.is_error} == {"broken-link"}
    assert report.written == []
    assert report.withheld == [BUTTON_DOC, INDEX_DOC, WIDGET_DOC]
    assert _snapshot(widget_env) == before


def test_per_component_mode_promotes_the_valid_documents(widget_env: SyncEnv) -> None:
    """Only the failing document is withheld; the rest and the index land."""
    widget_env.write_config(apply="per-component")
    widget_env.write_prior_widget("[Gone](gone.md)")
    widget_env.add_component("react-button", "Button")

    report = SyncPipeline(widget_env.config()).run()

    assert report.exit_code == 1
    assert report.written == [BUTTON_DOC, INDEX_DOC]
    assert report.withheld == [WIDGET_DOC]
    assert _outcome(report, "Widget").state is ComponentState.FAILED
    assert _outcome(report, "Button").state is ComponentState.VALIDATED
    assert "`disabled?`" not in widget_env.read_doc(WIDGET_DOC)
    index = widget_env.read_doc(INDEX_DOC)
    assert "- [Button](buttons/button.md)" in index
    assert "- [Widget](inputs/widget.md)" in index


def test_ambiguous_category_is_escalated(widget_env: SyncEnv) -> None:
    """No rule for a package parks its render outside the docs tree."""
    widget_env.add_component("react-widget-pro", "WidgetPro")
    config = widget_env.config()

    report = SyncPipeline(config).run()

    assert report.exit_code == 1
    assert report.escalated == ["escalations/widget-pro.md"]
    assert [issue.rule_id for issue in report.issues] == ["category-ambiguity"]
    assert report.written == []
    assert _snapshot(widget_env) == {}
    escalated = config.run.escalation_dir / "widget-pro.md"
    assert "> **Category**: Unassigned" in escalated.read_text(encoding="utf-8")
    assert _outcome(report, "WidgetPro").state is ComponentState.FAILED


def test_category_move_needs_a_human(widget_env: SyncEnv) -> None:
    """Moving a documented component to a new category reports a duplicate."""
    SyncPipeline(widget_env.config()).run()
    config = widget_env.config()
    config.categories.rules[0].category = "forms"

    report = SyncPipeline(config).run()

    assert _outcome(report, "Widget").status is ChangeStatus.UNCHANGED
    duplicates = [issue for issue in report.issues if issue.rule_id == "duplicate-category"]
    assert {issue.document_path for issue in duplicates} == {
        WIDGET_DOC,
        "components/forms/widget.md",
    }
    assert report.written == []
    assert not (widget_env.docs_root / "components" / "forms").exists()


def test_dry_run_keeps_staging_and_leaves_tree(widget_env: SyncEnv) -> None:
    """A dry run validates and stages but promotes nothing."""
    config = widget_env.config(dry_run=True)

    report = SyncPipeline(config).run()

    assert report.dry_run
    assert report.exit_code == 0
    assert report.staged == [INDEX_DOC, WIDGET_DOC]
    assert report.written == []
    assert _snapshot(widget_env) == {}
    assert (config.run.staging_dir / WIDGET_DOC).is_file()


def test_cancelled_run_writes_nothing(widget_env: SyncEnv) -> None:
    """Cancelling before the run starts raises and leaves no staging behind."""
    config = widget_env.config()
    pipeline = SyncPipeline(config)
    pipeline.cancel()

    with pytest.raises(RunCancelled, match="before scanning"):
        pipeline.run()

    assert pipeline.cancelled
    assert _snapshot(widget_env) == {}
    assert not config.run.staging_dir.exists()


def test_interrupt_discards_staging(widget_env: SyncEnv, mocker: MockerFixture) -> None:
    """An interrupt during validation discards everything staged so far."""
    config = widget_env.config()
    pipeline = SyncPipeline(config)
    mocker.patch.object(pipeline, "_validate", side_effect=KeyboardInterrupt)

    with pytest.raises(RunCancelled, match="interrupted"):
        pipeline.run()

    assert not config.run.staging_dir.exists()
    assert _snapshot(widget_env) == {}


def test_validate_only_checks_the_tree_on_disk(widget_env: SyncEnv) -> None:
    """Validation without a sync reports problems already in the tree."""
    SyncPipeline(widget_env.config()).run()
    (widget_env.docs_root / INDEX_DOC).unlink()

    report = SyncPipeline(widget_env.config()).validate_only()

    assert report.exit_code == 1
    assert {issue.rule_id for issue in report.issues} == {
        "index-missing-entry",
        "broken-link",
    }


def test_missing_props_declaration_keeps_the_existing_document(widget_env: SyncEnv) -> None:
    """A renamed props declaration fails the component and leaves its document alone."""
    SyncPipeline(widget_env.config()).run()
    before = _snapshot(widget_env)
    types_path = widget_env.library_root / "react-widget/src/components/Widget/Widget.types.ts"
    types_path.write_text(
        types_path.read_text(encoding="utf-8").replace("WidgetProps", "WidgetPropz"),
        encoding="utf-8",
    )

    report = SyncPipeline(widget_env.config()).run()

    widget = _outcome(report, "Widget")
    assert widget.state is ComponentState.FAILED
    assert widget.status is None
    assert [issue.rule_id for issue in report.issues] == ["extraction-failure"]
    assert report.exit_code == 1
    assert report.written == []
    assert report.counts()["Removed"] == 0
    assert _snapshot(widget_env) == before
