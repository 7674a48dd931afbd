"""Resolve component categories from an ordered rule table.

Categories are data, not code: the config supplies ``(pattern, category)``
pairs and :class:`CategoryAssignment` returns the category of the first rule
whose glob matches the package name. Patterns are tried against the full
package name (``@fluentui/react-button``) and its unscoped form
(``react-button``).

Example
-------
>>> from docsync.categories import CategoryAssignment
>>> from docsync.config import CategoryRule
>>> rules = [CategoryRule("react-*button*", "buttons"), CategoryRule("react-*", "misc")]
>>> CategoryAssignment(rules).resolve("@fluentui/react-toggle-button")
'buttons'
"""

from __future__ import annotations

import typing as typ
from fnmatch import fnmatchcase

from .errors import CategoryAmbiguity

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import CategoryConfig, CategoryRule


class CategoryAssignment:
    """First-match-wins lookup over an ordered list of category rules."""

    def __init__(
        self, rules: cabc.Sequence[CategoryRule], default: str | None = None
    ) -> None:
        self.rules = tuple(rules)
        self.default = default

    @classmethod
    def from_config(cls, config: CategoryConfig) -> CategoryAssignment:
        """Build an assignment from the ``categories`` config section."""
        return cls(config.rules, config.default)

    def match(self, package_name: str) -> int | None:
        """Return the index of the first rule matching ``package_name``."""
        candidates = _name_forms(package_name)
        for index, rule in enumerate(self.rules):
            if any(fnmatchcase(name, rule.pattern) for name in candidates):
                return index
        return None

    def resolve(self, package_name: str) -> str:
        """Return the category for ``package_name``.

        Raises
        ------
        CategoryAmbiguity
            If no rule matches and no default category is configured.
        """
        index = self.match(package_name)
        if index is not None:
            return self.rules[index].category
        if self.default:
            return self.default
        raise CategoryAmbiguity(package_name)

    def try_resolve(self, package_name: str) -> str | None:
        """Return the category for ``package_name`` or ``None`` when ambiguous."""
        try:
            return self.resolve(package_name)
        except CategoryAmbiguity:
            return None


def _name_forms(package_name: str) -> tuple[str, ...]:
    """Return the full and unscoped spellings of a package name."""
    bare = package_name.rsplit("/", 1)[-1]
    if bare == package_name:
        return (package_name,)
    return (package_name, bare)


__all__ = ["CategoryAssignment"]
