"""Unit tests for parsing the existing documentation corpus."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from docsync.corpus import CorpusLoader, category_for_path, parse_component_doc
from docsync.errors import CorpusParseFailure
from docsync.models import CustomSection, PropDescriptor, SlotDescriptor

if typ.TYPE_CHECKING:
    from conftest import SyncEnv

BUTTON_DOC = dedent(
    """
    # Button

    > **Package**: `@acme/react-button`
    > **Import**: `import { Button } from '@acme/components';`
    > **Category**: buttons
    > **Exports**: `Button`, `ButtonProps`

    ## Overview

    Buttons trigger actions.

    ## Props Reference

    | Prop | Type | Default | Description |
    | --- | --- | --- | --- |
    | `appearance?` | `'primary' \\| 'subtle'` | `'primary'` | Visual style. |
    | `onClick` | `(event: MouseEvent) => void` | - | Click handler. |

    ## Slots

    | Slot | Element | Description |
    | --- | --- | --- |
    | `icon` | `span` | Leading icon. |

    ## Examples

    ### Basic

    ```tsx
    export const Default = () => <Button>Save</Button>;
    ```

    ## Migration Notes

    ```md
    ## Not a section
    ```

    Rename `kind` to `appearance`.

    ## Overview

    A second overview is kept as written.

    ## See Also

    - [Component Index](../index.md)
    - [Link](../navigation/link.md)
    """
).lstrip()


def test_parse_component_doc_reads_every_section() -> None:
    """Metadata, tables, examples and See Also are parsed structurally."""
    doc = parse_component_doc("components/02-buttons/button.md", BUTTON_DOC, "components")

    assert doc.component_name == "Button"
    assert doc.package_name == "@acme/react-button"
    assert doc.category == "buttons", "the numeric folder prefix is dropped"
    assert doc.import_statement == "import { Button } from '@acme/components';"
    assert doc.exported_symbols == frozenset({"Button", "ButtonProps"})
    assert doc.props == (
        PropDescriptor(
            name="appearance",
            type_expression="'primary' | 'subtle'",
            default_value="'primary'",
            description="Visual style.",
            required=False,
        ),
        PropDescriptor(
            name="onClick",
            type_expression="(event: MouseEvent) => void",
            default_value=None,
            description="Click handler.",
            required=True,
        ),
    )
    assert doc.slots == (SlotDescriptor("icon", "span", "Leading icon."),)
    assert [example.title for example in doc.examples] == ["Basic"]
    assert doc.examples[0].source_text == "export const Default = () => <Button>Save</Button>;"
    assert doc.prose("Overview") == "Buttons trigger actions."
    assert doc.see_also == "- [Link](../navigation/link.md)"
    assert doc.lead == ""
    assert doc.extra_metadata == ()


def test_custom_sections_are_kept_verbatim_in_order() -> None:
    """Unknown headings and repeated recognized headings stay custom."""
    doc = parse_component_doc("components/buttons/button.md", BUTTON_DOC, "components")

    assert doc.custom_sections == (
        CustomSection(
            "Migration Notes",
            "```md\n## Not a section\n```\n\nRename `kind` to `appearance`.",
        ),
        CustomSection("Overview", "A second overview is kept as written."),
    )
    assert list(doc.custom_section_map()) == ["Migration Notes", "Overview"]


def test_missing_package_metadata_is_a_corpus_failure() -> None:
    """A document without Package metadata is treated as absent."""
    with pytest.raises(CorpusParseFailure, match="Package"):
        parse_component_doc("components/misc/odd.md", "# Odd\n\n## Overview\n", "components")


def test_missing_title_is_a_corpus_failure() -> None:
    """A document without a title line is treated as absent."""
    with pytest.raises(CorpusParseFailure, match="Title"):
        parse_component_doc("components/misc/odd.md", "## Overview\n\nText\n", "components")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("components/03-inputs/input.md", "inputs"),
        ("components/inputs/deep/input.md", "inputs"),
        ("components/input.md", None),
        ("guides/inputs/input.md", None),
    ],
)
def test_category_for_path(path: str, expected: str | None) -> None:
    """The first folder below the components directory is the category."""
    assert category_for_path(path, "components") == expected


def test_loader_skips_index_and_reports_broken_documents(sync_env: SyncEnv) -> None:
    """The index is never a component; broken documents become warnings."""
    sync_env.write_doc("components/index.md", "# Component Index\n")
    sync_env.write_doc("components/02-buttons/button.md", BUTTON_DOC)
    sync_env.write_doc("components/misc/notes.md", "Just some notes.\n")

    result = CorpusLoader(sync_env.config().docs, workers=2).load()

    assert [doc.path for doc in result.documents] == ["components/02-buttons/button.md"]
    assert list(result.by_component()) == ["Button"]
    assert [(issue.rule_id, issue.document_path) for issue in result.issues] == [
        ("corpus-parse-failure", "components/misc/notes.md")
    ]
    assert not result.issues[0].is_error


def test_hand_written_lead_metadata_and_see_also_prose_are_kept() -> None:
    """Text the generator does not own is captured for the next render."""
    text = (
        BUTTON_DOC.replace(
            "> **Exports**: `Button`, `ButtonProps`\n",
            "> **Exports**: `Button`, `ButtonProps`\n> **Status**: Preview\n\n"
            "Buttons are the primary call to action.\n",
        )
        .replace("- [Link](../navigation/link.md)\n", "")
        .rstrip("\n")
        + "\n\nPair with [Link](../navigation/link.md) for navigation.\n"
    )

    doc = parse_component_doc("components/02-buttons/button.md", text, "components")

    assert doc.lead == "Buttons are the primary call to action."
    assert doc.extra_metadata == (("Status", "Preview"),)
    assert doc.see_also == "Pair with [Link](../navigation/link.md) for navigation."
    assert doc.exported_symbols == frozenset({"Button", "ButtonProps"})
