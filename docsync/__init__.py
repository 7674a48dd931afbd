"""Keep component documentation in step with a component library.

This package exposes the CLI entry points used by the ``docsync`` console
script to scan component sources, compare them with the existing Markdown
docs, and regenerate the documents that drifted.

Exports
-------
- ``app``: Cyclopts application with the ``sync``, ``validate`` and ``scan``
  subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docsync import main
>>> main()  # doctest: +SKIP
>>> from docsync import app
>>> app(["scan", "--config", "config/docsync.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
