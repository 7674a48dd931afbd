"""Orchestrate a documentation synchronization run.

:class:`SyncPipeline` wires the stages together:

1. scan packages and extract descriptors while the corpus loads, both on a
   shared thread pool;
2. match each component to its prior document and classify it;
3. render, park ambiguous components in the escalation area, and stage
   documents that need writing;
4. rebuild the component index and validate the virtual tree;
5. promote staged documents according to the apply mode.

Nothing touches the docs tree before step 5, so a cancelled or failing run
leaves it exactly as it was.

Example
-------
>>> from pathlib import Path
>>> from docsync.config import load_sync_config
>>> from docsync.pipeline import SyncPipeline
>>> config = load_sync_config(Path("config/docsync.yaml"))  # doctest: +SKIP
>>> report = SyncPipeline(config).run()  # doctest: +SKIP
>>> report.exit_code  # doctest: +SKIP
0
"""

from __future__ import annotations

import posixpath
import threading
import typing as typ
from concurrent.futures import ThreadPoolExecutor

from ._constants import ESCALATION_DIRNAME
from .categories import CategoryAssignment
from .config import ApplyMode
from .corpus import CorpusLoader
from .differ import classify, removed
from .errors import (
    CategoryAmbiguity,
    DestinationCollision,
    ExtractionFailure,
    RunCancelled,
    ScanFailure,
)
from .extractor import MetadataExtractor
from .generator import ComponentIndexBuilder, TemplateRenderer
from .logging import get_logger
from .markdown_parser import parse_document
from .models import ChangeStatus
from .naming import strip_numeric_prefix
from .report import ComponentOutcome, RunReport
from .scanner import SourceScanner
from .staging import StagingArea, write_text_atomic
from .state import ComponentRun, ComponentState
from .validator import StructuralValidator, VirtualTree

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from concurrent.futures import Future
    from pathlib import Path

    from .config import SyncConfig
    from .corpus import CorpusResult
    from .extractor import ExtractionResult
    from .generator import RenderedDocument
    from .models import DocDescriptor, ValidationIssue

logger = get_logger("pipeline")


class SyncPipeline:
    """Run one synchronization pass over a library and its documentation."""

    def __init__(self, config: SyncConfig, *, templates_dir: Path | None = None) -> None:
        """Initialize the pipeline.

        Parameters
        ----------
        config : SyncConfig
            Fully resolved configuration.
        templates_dir : Path, optional
            Override for the Jinja template directory.
        """
        self.config = config
        self.templates_dir = templates_dir
        self.categories = CategoryAssignment.from_config(config.categories)
        self.scanner = SourceScanner(config.library)
        self.extractor = MetadataExtractor(config.library, self.categories)
        self.corpus_loader = CorpusLoader(config.docs, workers=config.run.workers)
        self.index_builder = ComponentIndexBuilder(config.docs, templates_dir=templates_dir)
        self.staging = StagingArea(config.run.staging_dir)
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Request cancellation; the run stops at the next stage boundary."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        """Return ``True`` once cancellation was requested."""
        return self._cancel.is_set()

    def _checkpoint(self, stage: str) -> None:
        if self._cancel.is_set():
            msg = f"Run cancelled before {stage}; no documents were written."
            raise RunCancelled(msg)

    def run(self) -> RunReport:
        """Execute the full pipeline and return its report.

        Returns
        -------
        RunReport
            Finalized report; ``exit_code`` is ``1`` when any Error was
            recorded.

        Raises
        ------
        RunCancelled
            If :meth:`cancel` was called or the run was interrupted. Staging
            is discarded and the docs tree is left untouched.
        ConfigError
            If the library root does not exist.
        """
        settings = self.config.run
        report = RunReport(dry_run=settings.dry_run)
        try:
            self._checkpoint("scanning")
            runs, corpus = self._collect(report)
            self._checkpoint("classification")
            removed_names = self._classify(runs, corpus, report)
            self._checkpoint("rendering")
            self._render(runs, report)
            self._checkpoint("staging")
            self._stage(runs, report)
            self._checkpoint("validation")
            promotable = self._validate(runs, removed_names, report)
            self._checkpoint("promotion")
            self._promote(promotable, report)
        except KeyboardInterrupt as exc:
            self.staging.discard()
            msg = "Run interrupted; staging discarded and no documents were written."
            raise RunCancelled(msg) from exc
        except RunCancelled:
            self.staging.discard()
            raise
        if not settings.dry_run:
            self.staging.discard()

        report.outcomes.extend(
            ComponentOutcome(
                component_name=run.component_name,
                category=run.descriptor.category if run.descriptor else None,
                record=run.record,
                state=run.state,
                document_path=run.document.relative_path if run.document else None,
            )
            for run in runs
        )
        report.finalize()
        counts = report.counts()
        logger.info(
            "run finished: %s",
            ", ".join(f"{name.lower()}={count}" for name, count in counts.items()),
        )
        return report

    def validate_only(self) -> RunReport:
        """Validate the docs tree as it is on disk, without scanning sources."""
        tree = VirtualTree.from_config(self.config.docs)
        report = RunReport(dry_run=True)
        report.issues.extend(StructuralValidator(tree).validate())
        return report.finalize()

    def _collect(self, report: RunReport) -> tuple[list[ComponentRun], CorpusResult]:
        """Scan and extract sources while the corpus loads."""
        runs: list[ComponentRun] = []
        self.scanner.failures.clear()
        with ThreadPoolExecutor(max_workers=self.config.run.workers) as executor:
            corpus_future = executor.submit(self.corpus_loader.load)
            pending: list[tuple[ComponentRun, Future[ExtractionResult]]] = []
            for package in self.scanner.scan():
                self._checkpoint("extraction")
                run = ComponentRun(package.component_name, package=package)
                pending.append((run, executor.submit(self.extractor.extract, package)))
            for run, future in pending:
                try:
                    result = future.result()
                except (ScanFailure, ExtractionFailure) as exc:
                    logger.warning("%s", exc.message)
                    report.issues.append(exc.to_issue())
                    run.fail(exc.message)
                else:
                    run.descriptor = result.descriptor
                    report.issues.extend(result.issues)
                    run.advance(ComponentState.EXTRACTED)
                runs.append(run)
            corpus = corpus_future.result()
        report.issues.extend(failure.to_issue() for failure in self.scanner.failures)
        report.issues.extend(corpus.issues)
        logger.info("scanned %d components, %d documents", len(runs), len(corpus.documents))
        return runs, corpus

    def _classify(
        self, runs: list[ComponentRun], corpus: CorpusResult, report: RunReport
    ) -> frozenset[str]:
        """Match runs to prior documents, classify them, and record removals."""
        docs_by_name = corpus.by_component()
        for run in runs:
            if run.descriptor is None:
                continue
            candidates = docs_by_name.get(run.component_name, [])
            run.prior = _pick_prior(candidates, run.descriptor.category)
            run.advance(ComponentState.MATCHED if run.prior else ComponentState.UNMATCHED)
            run.record = classify(run.descriptor, run.prior)
            run.advance(ComponentState.CLASSIFIED)

        source_names = {run.component_name for run in runs}
        removed_names: set[str] = set()
        for name, documents in docs_by_name.items():
            if name in source_names:
                continue
            removed_names.add(name)
            for document in documents:
                logger.info("%s has no source; %s is kept", name, document.path)
                report.outcomes.append(
                    ComponentOutcome(
                        component_name=name,
                        category=document.category,
                        record=removed(document),
                        document_path=document.path,
                    )
                )
        return frozenset(removed_names)

    def _render(self, runs: list[ComponentRun], report: RunReport) -> None:
        """Render every classified component and fail colliding destinations."""
        renderer = TemplateRenderer(
            self.config.library,
            self.config.docs,
            templates_dir=self.templates_dir,
            category_dirs=self._category_dirs(),
        )
        for run in runs:
            if run.state is not ComponentState.CLASSIFIED or run.descriptor is None:
                continue
            try:
                run.document = renderer.render(run.descriptor, run.prior)
            except CategoryAmbiguity as exc:
                escalated = self._escalate(exc.document)
                report.escalated.append(escalated)
                report.issues.append(exc.to_issue(document_path=escalated))
                run.fail(exc.message)
                continue
            run.advance(ComponentState.RENDERED)

        owners: dict[str, list[ComponentRun]] = {}
        for run in runs:
            if run.state is ComponentState.RENDERED and run.document is not None:
                owners.setdefault(run.document.relative_path, []).append(run)
        for path, claimants in owners.items():
            if len(claimants) < 2:
                continue
            names = ", ".join(sorted(run.component_name for run in claimants))
            msg = f"Components {names} render to the same document '{path}'."
            for run in claimants:
                report.issues.append(DestinationCollision(msg, path=path).to_issue())
                run.fail(msg)
            report.withheld.append(path)

    def _escalate(self, document: RenderedDocument | None) -> str:
        """Write an escalated render outside the docs tree; return its display path."""
        if document is None:
            return ESCALATION_DIRNAME
        target = self.config.run.escalation_dir / document.relative_path
        write_text_atomic(target, document.text)
        logger.warning("escalated %s to %s", document.component_name, target)
        return posixpath.join(ESCALATION_DIRNAME, document.relative_path)

    def _stage(self, runs: list[ComponentRun], report: RunReport) -> None:
        """Stage rendered documents that differ from what is on disk."""
        self.staging.reset()
        docs_root = self.config.docs.root
        for run in runs:
            document = run.document
            if run.state is not ComponentState.RENDERED or document is None:
                continue
            if not self._needs_write(run):
                continue
            destination = docs_root / document.relative_path
            if destination.is_file() and destination.read_text(encoding="utf-8") == document.text:
                continue
            self.staging.stage(document.relative_path, document.text)
            report.staged.append(document.relative_path)

    def _needs_write(self, run: ComponentRun) -> bool:
        if self.config.run.force or run.record is None or run.document is None:
            return True
        if run.record.status in (ChangeStatus.NEW, ChangeStatus.UPDATED):
            return True
        return run.prior is None or run.prior.path != run.document.relative_path

    def _validate(
        self, runs: list[ComponentRun], removed_names: frozenset[str], report: RunReport
    ) -> list[str]:
        """Validate the virtual tree and return the staged paths fit for promotion."""
        staged = self.staging.documents
        index_path = self.index_builder.index_path
        candidates = set(staged)
        index_allowed = True
        dropped: set[str] = set()
        history: list[ValidationIssue] = []
        base = VirtualTree.from_config(self.config.docs)
        per_component = self.config.run.apply is ApplyMode.PER_COMPONENT

        while True:
            tree = base.with_overlay({path: staged[path] for path in candidates})
            index_text = self.index_builder.render(self._index_names(tree), removed_names)
            index_changed = not tree.exists(index_path) or tree.read(index_path) != index_text
            if index_allowed and index_changed:
                tree = tree.with_overlay({index_path: index_text})
            issues = StructuralValidator(tree).validate()
            if not per_component:
                break
            failing = {issue.document_path for issue in issues if issue.is_error}
            blocked = failing & candidates
            index_blocked = index_allowed and index_changed and index_path in failing
            if not blocked and not index_blocked:
                break
            history.extend(issue for issue in issues if issue.document_path in blocked)
            dropped |= blocked
            candidates -= blocked
            if index_blocked:
                index_allowed = False
                history.extend(issue for issue in issues if issue.document_path == index_path)

        final_issues = list(dict.fromkeys([*history, *issues]))
        report.issues.extend(final_issues)
        error_paths = {issue.document_path for issue in final_issues if issue.is_error}

        for run in runs:
            document = run.document
            if run.state is not ComponentState.RENDERED or document is None:
                continue
            path = document.relative_path
            if path in dropped or path in error_paths:
                run.fail(f"Validation failed for {path}.")
            else:
                run.advance(ComponentState.VALIDATED)

        if index_allowed and index_changed:
            self.staging.stage(index_path, index_text)
            report.staged.append(index_path)
            candidates.add(index_path)

        if per_component:
            promotable = sorted(candidates)
        elif report.has_errors:
            promotable = []
        else:
            promotable = sorted(candidates)
        report.withheld.extend(sorted(set(self.staging.documents) - set(promotable)))
        return promotable

    def _promote(self, promotable: cabc.Sequence[str], report: RunReport) -> None:
        if self.config.run.dry_run:
            for path in promotable:
                logger.info("dry run: would write %s", path)
            return
        if not promotable:
            return
        self.staging.promote(self.config.docs.root, promotable)
        report.written.extend(promotable)

    def _index_names(self, tree: VirtualTree) -> dict[str, str]:
        """Return component names keyed by document path for the index."""
        names: dict[str, str] = {}
        for path in tree.documents():
            try:
                title = parse_document(tree.read(path)).title
            except OSError:
                title = None
            names[path] = title or posixpath.splitext(posixpath.basename(path))[0]
        return names

    def _category_dirs(self) -> dict[str, str]:
        """Return existing category folders keyed by their unprefixed name."""
        root = self.config.docs.components_root
        if not root.is_dir():
            return {}
        folders: dict[str, str] = {}
        for child in sorted(root.iterdir()):
            if child.is_dir():
                folders.setdefault(strip_numeric_prefix(child.name), child.name)
        return folders


def _pick_prior(
    candidates: cabc.Sequence[DocDescriptor], category: str | None
) -> DocDescriptor | None:
    """Return the prior document to compare against, preferring the same category."""
    for candidate in candidates:
        if candidate.category == category:
            return candidate
    return candidates[0] if candidates else None


__all__ = ["SyncPipeline"]
