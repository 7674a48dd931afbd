"""Staging area where rendered documents wait for validation and promotion.

Renders are written below ``<state_dir>/staging`` mirroring their final
docs-root relative paths. Promotion copies selected files into the docs
tree; each file is written to a temporary sibling first and moved into place
so a reader never sees a half-written document.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import typing as typ

from .logging import get_logger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = get_logger("staging")


def write_text_atomic(path: Path, text: str) -> Path:
    """Write ``text`` to ``path`` through a temporary file in the same folder."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise
    return path


class StagingArea:
    """Hold rendered documents outside the docs tree until promotion."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self._documents: dict[str, str] = {}

    @property
    def documents(self) -> dict[str, str]:
        """Return staged text keyed by docs-root relative path."""
        return dict(self._documents)

    def reset(self) -> None:
        """Empty the staging directory and forget staged documents."""
        self.discard()
        self.directory.mkdir(parents=True, exist_ok=True)

    def stage(self, relative_path: str, text: str) -> Path:
        """Write ``text`` under the staging directory at ``relative_path``."""
        self._documents[relative_path] = text
        return write_text_atomic(self.directory / relative_path, text)

    def promote(self, docs_root: Path, paths: cabc.Iterable[str] | None = None) -> list[Path]:
        """Copy staged documents into ``docs_root``.

        Parameters
        ----------
        docs_root : Path
            Root of the documentation tree.
        paths : Iterable[str], optional
            Subset of staged paths to promote; all staged documents when
            ``None``.

        Returns
        -------
        list[Path]
            Written destination paths in sorted order.
        """
        selected = sorted(self._documents if paths is None else paths)
        written: list[Path] = []
        for relative in selected:
            destination = write_text_atomic(docs_root / relative, self._documents[relative])
            logger.info("promoted %s", relative)
            written.append(destination)
        return written

    def discard(self) -> None:
        """Delete the staging directory and its contents."""
        self._documents.clear()
        if self.directory.exists():
            shutil.rmtree(self.directory)


__all__ = ["StagingArea", "write_text_atomic"]
