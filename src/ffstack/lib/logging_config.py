"""Logging setup shared by the ffstack commands."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOGGER_NAMESPACE = "ffstack"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the ffstack logger hierarchy.

    Diagnostics go to stderr so they never mix with the engine output that
    is forwarded on stdout.

    Args:
        verbose: Enable DEBUG level output
        quiet: Only report errors (takes precedence over verbose)
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    root = logging.getLogger(LOGGER_NAMESPACE)
    root.setLevel(level)

    # Reconfiguring replaces the handler instead of stacking a new one
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the ffstack namespace."""
    if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)
