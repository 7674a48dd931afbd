"""Cyclopts CLI entrypoint for synchronizing component documentation.

The ``docsync`` console script scans a component library, compares it with
the existing documentation tree, and regenerates the documents that drifted.
``docsync sync`` performs a full run, ``docsync validate`` checks the tree as
it stands, and ``docsync scan`` lists what the scanner resolved. Every option
can also be supplied through ``DOCSYNC_*`` environment variables, which suits
CI jobs.

Examples
--------
Run a full synchronization with the default configuration:

>>> from docsync.cli import main
>>> main()  # doctest: +SKIP

Preview the changes without touching the docs tree:

>>> from docsync.cli import app
>>> app(["sync", "--dry-run", "--report-json", "report.json"])  # doctest: +SKIP
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import ApplyMode, load_sync_config
from .errors import RunCancelled
from .logging import configure_logging
from .pipeline import SyncPipeline
from .scanner import SourceScanner

DEFAULT_CONFIG = Path("config/docsync.yaml")
EXIT_CANCELLED = 130

app = App(name="docsync", config=cyclopts.config.Env("DOCSYNC_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Regenerate component documents that drifted from the source.")
def sync(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to docsync config", env_var="DOCSYNC_CONFIG")
    ] = DEFAULT_CONFIG,
    dry_run: typ.Annotated[
        bool, Parameter(help="Stage and validate without writing the docs tree")
    ] = False,
    force: typ.Annotated[
        bool, Parameter(help="Re-render Unchanged components as well")
    ] = False,
    apply: typ.Annotated[
        typ.Literal["batch", "per-component"] | None,
        Parameter(help="Promote all-or-nothing (batch) or per component"),
    ] = None,
    report_json: typ.Annotated[
        Path | None, Parameter(help="Write the run report as JSON to this path")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Synchronize the documentation tree with the component library.

    Parameters
    ----------
    config : Path, optional
        Path to the ``docsync.yaml`` configuration (``DOCSYNC_CONFIG``).
    dry_run : bool, optional
        Stage and validate but never promote into the docs tree.
    force : bool, optional
        Re-render components classified Unchanged.
    apply : {"batch", "per-component"}, optional
        Override the configured apply mode.
    report_json : Path, optional
        Destination for the machine-readable report.
    verbose : bool, optional
        Log at debug level.

    Raises
    ------
    SystemExit
        With status 1 when any Error was recorded, or 130 when cancelled.
    """
    configure_logging(verbose=verbose)
    settings = load_sync_config(config)
    settings.run.dry_run = settings.run.dry_run or dry_run
    settings.run.force = settings.run.force or force
    if apply is not None:
        settings.run.apply = ApplyMode(apply)

    pipeline = SyncPipeline(settings)
    try:
        report = pipeline.run()
    except RunCancelled as exc:
        print(str(exc))
        raise SystemExit(EXIT_CANCELLED) from exc

    print(report.render_text())
    if report_json is not None:
        print(f"wrote {_format_path(report.write_json(report_json))}")
    if report.exit_code:
        raise SystemExit(report.exit_code)


@app.command(help="Validate the documentation tree as it is on disk.")
def validate(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to docsync config", env_var="DOCSYNC_CONFIG")
    ] = DEFAULT_CONFIG,
    report_json: typ.Annotated[
        Path | None, Parameter(help="Write the validation report as JSON to this path")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Run the structural validator over the existing docs tree.

    Raises
    ------
    SystemExit
        With status 1 when any Error was found.
    """
    configure_logging(verbose=verbose)
    report = SyncPipeline(load_sync_config(config)).validate_only()
    print(report.render_text())
    if report_json is not None:
        print(f"wrote {_format_path(report.write_json(report_json))}")
    if report.exit_code:
        raise SystemExit(report.exit_code)


@app.command(help="List scanned component packages and their resolved files.")
def scan(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to docsync config", env_var="DOCSYNC_CONFIG")
    ] = DEFAULT_CONFIG,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Print every package the scanner resolves, one block per component."""
    configure_logging(verbose=verbose)
    settings = load_sync_config(config)
    scanner = SourceScanner(settings.library)
    for package in scanner.scan():
        files = package.files
        print(f"{package.component_name} ({package.package_name})")
        print(f"  types: {_format_path(files.types)}")
        if files.hooks is not None:
            print(f"  hooks: {_format_path(files.hooks)}")
        if files.index is not None:
            print(f"  index: {_format_path(files.index)}")
        for example in files.examples:
            print(f"  example: {_format_path(example)}")
    for failure in scanner.failures:
        print(f"skipped {failure.path}: {failure.message}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``docsync`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
