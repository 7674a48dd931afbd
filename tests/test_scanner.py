"""Unit tests for resolving component packages and their module files."""

from __future__ import annotations

import typing as typ

import pytest

from docsync.errors import ConfigError
from docsync.scanner import SourceScanner

if typ.TYPE_CHECKING:
    from conftest import SyncEnv


def test_scan_resolves_every_role(widget_env: SyncEnv) -> None:
    """The reference package resolves types, hooks, index and stories."""
    scanner = SourceScanner(widget_env.config().library)
    packages = list(scanner.scan())

    assert [package.component_name for package in packages] == ["Widget"]
    package = packages[0]
    files = package.files
    assert package.package_name == "@acme/react-widget"
    assert package.source_version == "1.2.0"
    assert package.slug == "widget"
    assert files.types.name == "Widget.types.ts"
    assert files.hooks is not None and files.hooks.name == "useWidget.ts"
    assert files.index is not None and files.index.name == "index.ts"
    assert [path.name for path in files.examples] == ["Widget.stories.tsx"]
    assert scanner.failures == []


def test_missing_types_file_is_skipped_not_fatal(widget_env: SyncEnv) -> None:
    """A package without a types file is reported and the scan continues."""
    broken = widget_env.library_root / "react-broken"
    broken.mkdir()

    scanner = SourceScanner(widget_env.config().library)
    names = [package.component_name for package in scanner.scan()]

    assert names == ["Widget"], "the healthy package must still be scanned"
    assert len(scanner.failures) == 1
    failure = scanner.failures[0]
    assert failure.path == "react-broken"
    assert "no types declaration file" in failure.message


def test_newer_layout_wins_over_older_layout(sync_env: SyncEnv) -> None:
    """The ``library/`` layout is preferred when both layouts exist."""
    package_dir = sync_env.add_component("react-card", "Card")
    newer = package_dir / "library" / "src" / "components" / "Card"
    newer.mkdir(parents=True)
    (newer / "Card.types.ts").write_text("export interface CardProps {}\n", encoding="utf-8")

    package = SourceScanner(sync_env.config().library).scan_package(package_dir)

    assert package.files.types == newer / "Card.types.ts"


def test_component_names_strip_prefix_and_honour_overrides(sync_env: SyncEnv) -> None:
    """Directory names become PascalCase unless the config overrides them."""
    library = sync_env.config().library
    library.component_names["react-spinbutton"] = "SpinButton"
    scanner = SourceScanner(library)

    assert scanner.component_name_for("react-toggle-button") == "ToggleButton"
    assert scanner.component_name_for("react-spinbutton") == "SpinButton"
    assert scanner.component_name_for("react-") == "React"


def test_missing_library_root_is_a_config_error(sync_env: SyncEnv) -> None:
    """Scanning a library root that does not exist aborts with ConfigError."""
    library = sync_env.config().library
    library.root = sync_env.root / "nowhere"

    with pytest.raises(ConfigError, match="does not exist"):
        list(SourceScanner(library).scan())
