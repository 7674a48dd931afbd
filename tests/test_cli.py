"""Tests for the ``docsync`` Cyclopts commands."""

from __future__ import annotations

import typing as typ

import msgspec
import pytest

from docsync import cli
from docsync.errors import RunCancelled
from docsync.report import ReportPayload

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from conftest import SyncEnv


def test_sync_prints_report_and_succeeds(
    widget_env: SyncEnv, capsys: pytest.CaptureFixture[str]
) -> None:
    """A clean run prints the summary and returns normally."""
    cli.sync(config=widget_env.config_path)

    out = capsys.readouterr().out
    assert "Summary: New 1, Updated 0, Unchanged 0, Removed 0, Failed 0" in out
    assert out.rstrip().endswith("Exit code: 0")
    assert (widget_env.docs_root / "components" / "inputs" / "widget.md").is_file()


def test_sync_dry_run_writes_json_report(
    widget_env: SyncEnv, capsys: pytest.CaptureFixture[str]
) -> None:
    """``--dry-run`` leaves the tree alone; ``--report-json`` records the run."""
    report_path = widget_env.root / "report.json"

    cli.sync(config=widget_env.config_path, dry_run=True, report_json=report_path)

    payload = msgspec.json.decode(report_path.read_bytes(), type=ReportPayload)
    assert payload.dry_run
    assert payload.written == []
    assert payload.staged == ["components/index.md", "components/inputs/widget.md"]
    assert "docsync report (dry run)" in capsys.readouterr().out
    assert not (widget_env.docs_root / "components").exists()


def test_sync_exits_non_zero_on_errors(widget_env: SyncEnv) -> None:
    """An escalated component makes the command exit with status 1."""
    widget_env.add_component("react-widget-pro", "WidgetPro")

    with pytest.raises(SystemExit) as excinfo:
        cli.sync(config=widget_env.config_path)

    assert excinfo.value.code == 1


def test_apply_option_overrides_config(widget_env: SyncEnv) -> None:
    """``--apply per-component`` promotes the valid documents despite errors."""
    widget_env.add_component("react-widget-pro", "WidgetPro")

    with pytest.raises(SystemExit):
        cli.sync(config=widget_env.config_path, apply="per-component")

    assert (widget_env.docs_root / "components" / "inputs" / "widget.md").is_file()
    assert (widget_env.docs_root / "components" / "index.md").is_file()


def test_cancelled_sync_exits_130(
    widget_env: SyncEnv, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    """A cancelled run reports why and exits with the interrupt status."""
    mocker.patch(
        "docsync.cli.SyncPipeline.run",
        side_effect=RunCancelled("Run cancelled before rendering; no documents were written."),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.sync(config=widget_env.config_path)

    assert excinfo.value.code == cli.EXIT_CANCELLED
    assert "no documents were written" in capsys.readouterr().out


def test_validate_command_reports_existing_tree(widget_env: SyncEnv) -> None:
    """``docsync validate`` fails on a tree without its index."""
    with pytest.raises(SystemExit) as excinfo:
        cli.validate(config=widget_env.config_path)

    assert excinfo.value.code == 1
    cli.sync(config=widget_env.config_path)
    cli.validate(config=widget_env.config_path)


def test_scan_command_through_the_app(
    widget_env: SyncEnv, capsys: pytest.CaptureFixture[str]
) -> None:
    """Arguments are parsed by Cyclopts and each package is listed."""
    (widget_env.library_root / "react-empty").mkdir()

    try:
        cli.app(["scan", "--config", str(widget_env.config_path)])
    except SystemExit as exc:
        # Newer Cyclopts releases exit with the command result.
        assert not exc.code

    out = capsys.readouterr().out
    assert "Widget (@acme/react-widget)" in out
    assert "Widget.types.ts" in out
    assert "skipped react-empty:" in out
