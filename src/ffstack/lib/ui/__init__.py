"""UI utilities for terminal output.

- TTY detection for adaptive output formatting
- ANSI color support with graceful degradation
- Severity-tagged console messages
"""

from ffstack.lib.ui.colors import ANSIColors, colorize
from ffstack.lib.ui.console import Console
from ffstack.lib.ui.terminal import is_tty

__all__ = [
    "ANSIColors",
    "Console",
    "colorize",
    "is_tty",
]
