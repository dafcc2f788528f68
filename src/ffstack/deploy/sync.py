"""Idempotent file replacement for the deployed compose definition."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from ffstack.lib.logging_config import get_logger

logger = get_logger(__name__)


def needs_update(path: Path, content: str) -> bool:
    """Return True when ``path`` is missing or differs from ``content``.

    The comparison is byte-for-byte on the UTF-8 encoding.
    """
    try:
        current = path.read_bytes()
    except FileNotFoundError:
        return True
    return current != content.encode("utf-8")


def atomic_write(path: Path, content: str, mode: int = 0o640) -> None:
    """Replace ``path`` with ``content`` without exposing a partial file.

    The content is written to a temporary file in the same directory and
    moved into place with ``os.replace``.

    Raises:
        OSError: If the temporary file cannot be written or moved
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(content.encode("utf-8"))
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_if_changed(path: Path, content: str) -> bool:
    """Write ``content`` to ``path`` only if it differs from what is there.

    Args:
        path: Target file; its parent directory must exist
        content: Desired file content

    Returns:
        True if the file was written, False if it already matched

    Raises:
        OSError: If reading or replacing the file fails
    """
    if not needs_update(path, content):
        logger.debug(f"{path} is up to date")
        return False

    atomic_write(path, content)
    logger.debug(f"Wrote {len(content)} bytes to {path}")
    return True
