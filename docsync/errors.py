"""Failure taxonomy for synchronization runs.

Each exception knows the rule id and severity it is reported under, so the
stage that catches it can turn it into a :class:`~docsync.models.ValidationIssue`
without re-deciding how serious it is. Only :class:`ConfigError` and
:class:`RunCancelled` abort a run; everything else is isolated to one
component or document.
"""

from __future__ import annotations

import typing as typ

from .models import Severity, ValidationIssue

if typ.TYPE_CHECKING:
    from .generator.models import RenderedDocument


class ConfigError(ValueError):
    """Raised when the synchronization config is invalid or incomplete."""


class DocsyncError(RuntimeError):
    """Base class for per-component failures recorded in the run report."""

    rule_id = "docsync-error"
    severity = Severity.ERROR

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def to_issue(self, document_path: str | None = None) -> ValidationIssue:
        """Return the report entry describing this failure."""
        return ValidationIssue(
            severity=self.severity,
            document_path=document_path if document_path is not None else self.path,
            message=self.message,
            rule_id=self.rule_id,
        )


class ScanFailure(DocsyncError):
    """A required file role could not be resolved for a package."""

    rule_id = "scan-failure"
    severity = Severity.WARNING


class ParseFailure(DocsyncError):
    """A declaration member could not be parsed."""

    rule_id = "parse-failure"
    severity = Severity.WARNING


class ExtractionFailure(DocsyncError):
    """A component's types file lacks its props declaration.

    The component is failed and its existing document is left untouched.
    """

    rule_id = "extraction-failure"


class CorpusParseFailure(DocsyncError):
    """An existing document is missing its title or metadata block."""

    rule_id = "corpus-parse-failure"
    severity = Severity.WARNING


class CategoryAmbiguity(DocsyncError):
    """No category rule matched a package and no default is configured."""

    rule_id = "category-ambiguity"

    def __init__(self, package_name: str, *, path: str = "") -> None:
        super().__init__(
            f"No category rule matches package '{package_name}'; "
            "a human decision is required.",
            path=path,
        )
        self.package_name = package_name
        # Set by the renderer so the document can be parked for review.
        self.document: RenderedDocument | None = None


class StructuralValidationError(DocsyncError):
    """A rendered document violates the template or cross-reference rules.

    The validator reports each broken rule under its own id, such as
    ``missing-section`` or ``broken-link``, and the document is withheld.
    """

    rule_id = "structural-validation"

    def __init__(self, message: str, *, path: str = "", rule_id: str | None = None) -> None:
        super().__init__(message, path=path)
        if rule_id is not None:
            self.rule_id = rule_id


class DestinationCollision(DocsyncError):
    """Two components resolved to the same destination document."""

    rule_id = "destination-collision"


class InvalidTransition(DocsyncError):
    """A component was moved between pipeline states out of order."""

    rule_id = "invalid-transition"


class RunCancelled(RuntimeError):
    """Raised when a run is aborted before promotion."""


__all__ = [
    "CategoryAmbiguity",
    "ConfigError",
    "CorpusParseFailure",
    "DestinationCollision",
    "DocsyncError",
    "ExtractionFailure",
    "InvalidTransition",
    "ParseFailure",
    "RunCancelled",
    "ScanFailure",
    "StructuralValidationError",
]
