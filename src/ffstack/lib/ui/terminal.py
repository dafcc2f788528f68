"""Terminal detection utilities."""

import sys
from typing import TextIO


def is_tty(stream: TextIO | None = None) -> bool:
    """Check if a stream is connected to a terminal.

    Used to decide whether severity tags are colored or emitted as plain
    text suitable for logs and pipes.

    Args:
        stream: Stream to inspect. Defaults to stdout.

    Returns:
        True if the stream is a TTY (interactive terminal), False otherwise.
    """
    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())
