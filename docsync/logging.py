"""Logging helpers for docsync commands."""

from __future__ import annotations

import logging

_LOGGER_NAME = "docsync"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``docsync`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False) -> logging.Logger:
    """Send ``docsync`` log records to stderr with a ``[docsync]`` prefix.

    Parameters
    ----------
    verbose : bool, optional
        Emit debug records as well as info and above.

    Returns
    -------
    logging.Logger
        The configured ``docsync`` logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[docsync] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
