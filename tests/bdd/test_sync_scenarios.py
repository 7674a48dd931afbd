"""Behaviour tests for end-to-end documentation synchronization.

These scenarios drive ``docsync sync`` through :class:`SyncPipeline` against a
temporary component library and docs tree built by ``tests/conftest.py``.
They cover the four outcomes a maintainer cares about: a first document for
a new component, an update when a prop is added, preservation of
hand-written sections, and escalation when no category rule applies.

Usage
-----
Run ``pytest tests/bdd/test_sync_scenarios.py -v``. No network access or
external tooling is needed; every file lives under pytest's ``tmp_path``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import markdown
import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from docsync.generator import TemplateRenderer
from docsync.pipeline import SyncPipeline

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from conftest import SyncEnv
    from docsync.generator import RenderedDocument
    from docsync.report import ComponentOutcome, RunReport

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "sync_scenarios.feature"
scenarios(FEATURE_FILE)

WIDGET_DOC = "components/inputs/widget.md"
MIGRATION_NOTES = "## Migration Notes\n\nRename `scale` to `size` before upgrading.\n"

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


def _report(scenario_state: ScenarioState) -> RunReport:
    return typ.cast("RunReport", scenario_state["report"])


def _outcome(scenario_state: ScenarioState, name: str) -> ComponentOutcome:
    for outcome in _report(scenario_state).outcomes:
        if outcome.component_name == name:
            return outcome
    msg = f"no outcome for {name}"
    raise AssertionError(msg)


@given("a library with the Widget component")
def given_widget_library(sync_env: SyncEnv, scenario_state: ScenarioState) -> None:
    """Lay out the reference ``react-widget`` package."""
    sync_env.add_widget()
    scenario_state["env"] = sync_env


@given("no prior document for Widget")
def given_no_prior_document(sync_env: SyncEnv) -> None:
    """Ensure the docs tree holds nothing yet."""
    assert list(sync_env.docs_root.rglob("*.md")) == []


@given("a prior Widget document that only lists the size prop")
def given_prior_document(sync_env: SyncEnv) -> None:
    """Write a document generated before ``disabled`` existed."""
    sync_env.write_prior_widget()


@given(parsers.parse('a current Widget document with a "{heading}" section'))
def given_current_document_with_custom_section(sync_env: SyncEnv, heading: str) -> None:
    """Generate the current document, then add a hand-written section to it."""
    SyncPipeline(sync_env.config()).run()
    assert heading in MIGRATION_NOTES
    text = sync_env.read_doc(WIDGET_DOC).replace(
        "## See Also", f"{MIGRATION_NOTES}\n## See Also"
    )
    sync_env.write_doc(WIDGET_DOC, text)


@given("a library with the WidgetPro component and no matching category rule")
def given_unmatched_library(sync_env: SyncEnv, scenario_state: ScenarioState) -> None:
    """Add ``react-widget-pro``, which none of the category rules match."""
    sync_env.add_component("react-widget-pro", "WidgetPro")
    scenario_state["env"] = sync_env


@when("I synchronize the documentation")
def when_synchronize(sync_env: SyncEnv, scenario_state: ScenarioState) -> None:
    """Run one synchronization pass in batch mode."""
    scenario_state["report"] = SyncPipeline(sync_env.config()).run()


@when("I synchronize the documentation with forced re-rendering")
def when_synchronize_forced(
    sync_env: SyncEnv, scenario_state: ScenarioState, mocker: MockerFixture
) -> None:
    """Run a forced pass and keep the document the renderer produced."""
    spy = mocker.spy(TemplateRenderer, "render")
    scenario_state["report"] = SyncPipeline(sync_env.config(force=True)).run()
    scenario_state["rendered"] = spy.spy_return


@then(parsers.parse("Widget is classified as {status}"))
def then_widget_status(scenario_state: ScenarioState, status: str) -> None:
    """Check the change status recorded for Widget."""
    outcome = _outcome(scenario_state, "Widget")
    assert outcome.status is not None
    assert outcome.status.value == status


@then(parsers.parse('the Props Reference table has the rows "{rows}"'))
def then_props_rows(sync_env: SyncEnv, rows: str) -> None:
    """Render the written document to HTML and read the props table."""
    html = markdown.markdown(sync_env.read_doc(WIDGET_DOC), extensions=["tables"])
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find("h2", string="Props Reference")
    assert heading is not None
    table = heading.find_next("table")
    assert table is not None
    names = [row.find("td").get_text() for row in table.select("tbody tr")]
    assert names == [name.strip() for name in rows.split(",")]


@then("the document is written to the docs tree")
def then_document_written(sync_env: SyncEnv, scenario_state: ScenarioState) -> None:
    """The document and the index were promoted."""
    report = _report(scenario_state)
    assert report.exit_code == 0, report.render_text()
    assert WIDGET_DOC in report.written
    assert (sync_env.docs_root / WIDGET_DOC).is_file()


@then(parsers.parse('the added props are "{names}"'))
def then_added_props(scenario_state: ScenarioState, names: str) -> None:
    """Compare the added props in the change record."""
    record = _outcome(scenario_state, "Widget").record
    assert record is not None
    assert list(record.added_props) == [name.strip() for name in names.split(",")]


@then(parsers.parse('the regenerated document still contains the "{heading}" section verbatim'))
def then_custom_section_kept(
    sync_env: SyncEnv, scenario_state: ScenarioState, heading: str
) -> None:
    """The render and the file on disk both hold the authored section."""
    rendered = typ.cast("RenderedDocument", scenario_state["rendered"])
    assert f"## {heading}" in MIGRATION_NOTES
    assert MIGRATION_NOTES in rendered.text
    assert MIGRATION_NOTES in sync_env.read_doc(WIDGET_DOC)
    assert rendered.text == sync_env.read_doc(WIDGET_DOC)


@then("a category-ambiguity Error is reported")
def then_ambiguity_reported(scenario_state: ScenarioState) -> None:
    """The report carries the escalation and exits non-zero."""
    report = _report(scenario_state)
    errors = [issue for issue in report.issues if issue.is_error]
    assert [issue.rule_id for issue in errors] == ["category-ambiguity"]
    assert "react-widget-pro" in errors[0].message
    assert report.escalated == ["escalations/widget-pro.md"]
    assert report.exit_code == 1


@then("no file is written to the docs tree")
def then_nothing_written(sync_env: SyncEnv, scenario_state: ScenarioState) -> None:
    """The docs tree is still empty."""
    assert _report(scenario_state).written == []
    assert list(sync_env.docs_root.rglob("*")) == []
