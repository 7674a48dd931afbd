"""Common literal values used across docsync.

These constants keep section headings, metadata keys, and on-disk names
centralized so the loader, renderer, validator, and tests can import the same
values without drifting. Intended for internal use within the docsync package.

Examples
--------
>>> from docsync import _constants
>>> _constants.HEADING_PROPS
'Props Reference'
>>> "Overview" in _constants.MANDATORY_SECTIONS
True
"""

DEFAULT_CONFIG_NAME = "docsync.yaml"

HEADING_OVERVIEW = "Overview"
HEADING_PROPS = "Props Reference"
HEADING_SLOTS = "Slots"
HEADING_EXAMPLES = "Examples"
HEADING_ACCESSIBILITY = "Accessibility"
HEADING_BEST_PRACTICES = "Best Practices"
HEADING_SEE_ALSO = "See Also"

# Template order; custom sections are emitted between these and See Also.
RECOGNIZED_HEADINGS = (
    HEADING_OVERVIEW,
    HEADING_PROPS,
    HEADING_SLOTS,
    HEADING_EXAMPLES,
    HEADING_ACCESSIBILITY,
    HEADING_BEST_PRACTICES,
    HEADING_SEE_ALSO,
)
PROSE_HEADINGS = (HEADING_OVERVIEW, HEADING_ACCESSIBILITY, HEADING_BEST_PRACTICES)
MANDATORY_SECTIONS = (HEADING_OVERVIEW, HEADING_PROPS, HEADING_SEE_ALSO)

META_PACKAGE = "Package"
META_IMPORT = "Import"
META_CATEGORY = "Category"
META_EXPORTS = "Exports"
MANDATORY_METADATA = (META_PACKAGE, META_IMPORT, META_CATEGORY)

PROPS_TABLE_HEADER = ("Prop", "Type", "Default", "Description")
SLOTS_TABLE_HEADER = ("Slot", "Element", "Description")
NO_DEFAULT = "-"
UNKNOWN_TYPE = "unknown"

INDEX_TITLE = "Component Index"
INDEX_LINK_LABEL = "Component Index"
STAGING_DIRNAME = "staging"
ESCALATION_DIRNAME = "escalations"
UNASSIGNED_CATEGORY = "Unassigned"
REMOVED_MARKER = "_(removed)_"
OVERVIEW_PLACEHOLDER = (
    "_{component} has no overview yet. Describe what it is for and when to use it._"
)
EXAMPLE_LANGUAGE = "tsx"
COMPONENT_TEMPLATE = "component_doc.md.jinja"
INDEX_TEMPLATE = "component_index.md.jinja"
