"""ANSI color utilities for terminal output.

Provides color constants and a helper for colorized terminal output with
graceful degradation in non-TTY environments.
"""

from ffstack.lib.ui.terminal import is_tty


class ANSIColors:
    """ANSI color escape codes for severity tags.

    Attributes:
        RED: Error tag color.
        GREEN: Success tag color.
        YELLOW: Warning tag color (bold).
        BLUE: Informational tag color.
        RESET: Reset code to restore default terminal color.
    """

    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    BLUE = "\033[0;34m"
    RESET = "\033[0m"


def colorize(text: str, color: str, force_tty: bool | None = None) -> str:
    """Apply ANSI color codes to text if in TTY mode.

    Args:
        text: Text to colorize.
        color: ANSI color code to apply (e.g., ANSIColors.GREEN).
        force_tty: Override TTY detection (for testing). None uses auto-detection.

    Returns:
        Colorized text if in TTY mode, plain text otherwise.
    """
    use_colors = force_tty if force_tty is not None else is_tty()
    if not use_colors:
        return text
    return f"{color}{text}{ANSIColors.RESET}"
