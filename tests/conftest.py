"""Shared fixtures that build a throwaway component library and docs tree.

The ``sync_env`` fixture lays out a minimal library under ``tmp_path`` with a
``react-widget`` package (types, hook, index and stories files), an empty
docs root, and a ``docsync.yaml`` pointing at both. Tests add further
packages with :meth:`SyncEnv.add_component` and load the config with
:meth:`SyncEnv.config`.
"""

from __future__ import annotations

import dataclasses as dc
import json
import typing as typ
from textwrap import dedent

import pytest

from docsync.config import load_sync_config

if typ.TYPE_CHECKING:
    from pathlib import Path

    from docsync.config import SyncConfig

WIDGET_TYPES = dedent(
    """
    import type { ComponentProps, Slot } from '@acme/react-utilities';

    export type WidgetSlots = {
      /** Root element of the widget. */
      root: Slot<'div'>;
      icon?: Slot<'span'>;
    };

    export type WidgetProps = ComponentProps<WidgetSlots> & {
      /**
       * Visual size of the widget.
       * @default 'small'
       */
      size: 'small' | 'large';
      /** Disables interaction. */
      disabled?: boolean;
    };

    export type WidgetState = WidgetProps;
    """
).lstrip()

WIDGET_HOOK = dedent(
    """
    import * as React from 'react';
    import type { WidgetProps, WidgetState } from './Widget.types';

    export const useWidget_unstable = (props: WidgetProps, ref: React.Ref<HTMLDivElement>): WidgetState => {
      const { size = 'small', disabled = false } = props;
      return { size, disabled, root: { ref } };
    };
    """
).lstrip()

WIDGET_INDEX = dedent(
    """
    export { Widget } from './components/Widget/Widget';
    export type { WidgetProps, WidgetSlots } from './components/Widget/Widget.types';
    """
).lstrip()

WIDGET_STORIES = dedent(
    """
    import * as React from 'react';
    import { Widget } from '@acme/react-widget';

    export default { title: 'Components/Widget' };

    export const Default = () => <Widget size="small" />;

    export const Disabled = () => (
      <Widget size="large" disabled />
    );
    """
).lstrip()

PRIOR_WIDGET_DOC = dedent(
    """
    # Widget

    > **Package**: `@acme/react-widget`
    > **Import**: `import {{ Widget }} from '@acme/components';`
    > **Category**: inputs
    > **Exports**: `Widget`, `WidgetProps`, `WidgetSlots`

    ## Overview

    Widgets collect small settings.

    ## Props Reference

    | Prop | Type | Default | Description |
    | --- | --- | --- | --- |
    | `size` | `'small' \\| 'large'` | `'small'` | Visual size of the widget. |

    ## Slots

    | Slot | Element | Description |
    | --- | --- | --- |
    | `root` | `div` | Root element of the widget. |
    | `icon` | `span` |  |

    ## See Also

    - [Component Index](../index.md){extra}
    """
).lstrip()

CONFIG_TEMPLATE = dedent(
    """
    library:
      root: packages
      import_module: "@acme/components"
    docs:
      root: docs
      components_dir: components
      index_file: index.md
    categories:
      rules:
        - pattern: "react-widget"
          category: inputs
        - pattern: "react-*button*"
          category: buttons
    run:
      state_dir: .docsync
      workers: 2
      apply: {apply}
    """
).lstrip()


@dc.dataclass(slots=True)
class SyncEnv:
    """Paths of a temporary library, docs tree and config file."""

    root: Path
    library_root: Path
    docs_root: Path
    config_path: Path

    @property
    def components_root(self) -> Path:
        """Return the directory holding component documents."""
        return self.docs_root / "components"

    def add_component(
        self,
        package: str,
        component: str,
        *,
        types: str | None = None,
        hook: str | None = None,
        index: str | None = None,
        stories: str | None = None,
        scope: str = "@acme",
    ) -> Path:
        """Write a package directory for ``component`` and return it."""
        package_dir = self.library_root / package
        source = package_dir / "src" / "components" / component
        source.mkdir(parents=True, exist_ok=True)
        (package_dir / "package.json").write_text(
            json.dumps({"name": f"{scope}/{package}", "version": "1.2.0"}) + "\n",
            encoding="utf-8",
        )
        (source / f"{component}.types.ts").write_text(
            types if types is not None else _default_types(component), encoding="utf-8"
        )
        if hook is not None:
            (source / f"use{component}.ts").write_text(hook, encoding="utf-8")
        if index is not None:
            (package_dir / "src" / "index.ts").write_text(index, encoding="utf-8")
        if stories is not None:
            story_dir = package_dir / "stories" / component
            story_dir.mkdir(parents=True, exist_ok=True)
            (story_dir / f"{component}.stories.tsx").write_text(stories, encoding="utf-8")
        return package_dir

    def add_widget(self) -> Path:
        """Write the reference ``react-widget`` package."""
        return self.add_component(
            "react-widget",
            "Widget",
            types=WIDGET_TYPES,
            hook=WIDGET_HOOK,
            index=WIDGET_INDEX,
            stories=WIDGET_STORIES,
        )

    def write_doc(self, relative_path: str, text: str) -> Path:
        """Write a document below the docs root."""
        path = self.docs_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def write_prior_widget(self, *see_also: str) -> Path:
        """Write a widget document that predates the ``disabled`` prop."""
        extra = "".join(f"\n- {item}" for item in see_also)
        return self.write_doc(
            "components/inputs/widget.md", PRIOR_WIDGET_DOC.format(extra=extra)
        )

    def read_doc(self, relative_path: str) -> str:
        """Return a document below the docs root."""
        return (self.docs_root / relative_path).read_text(encoding="utf-8")

    def write_config(self, *, apply: str = "batch") -> Path:
        """Rewrite the config file with the given apply mode."""
        self.config_path.write_text(CONFIG_TEMPLATE.format(apply=apply), encoding="utf-8")
        return self.config_path

    def config(self, **run_overrides: typ.Any) -> SyncConfig:
        """Load the config file, applying ``run`` overrides."""
        settings = load_sync_config(self.config_path)
        for key, value in run_overrides.items():
            setattr(settings.run, key, value)
        return settings


def _default_types(component: str) -> str:
    return dedent(
        f"""
        export interface {component}Props {{
          /** Text shown inside the {component.lower()}. */
          label: string;
        }}
        """
    ).lstrip()


@pytest.fixture
def sync_env(tmp_path: Path) -> SyncEnv:
    """Return an empty library and docs tree with a batch-mode config."""
    library_root = tmp_path / "packages"
    docs_root = tmp_path / "docs"
    library_root.mkdir()
    docs_root.mkdir()
    env = SyncEnv(
        root=tmp_path,
        library_root=library_root,
        docs_root=docs_root,
        config_path=tmp_path / "docsync.yaml",
    )
    env.write_config()
    return env


@pytest.fixture
def widget_env(sync_env: SyncEnv) -> SyncEnv:
    """Return the environment with the reference widget package in place."""
    sync_env.add_widget()
    return sync_env
