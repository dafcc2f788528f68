"""Severity-tagged console messages for the lifecycle commands."""

from __future__ import annotations

import sys

import click

from ffstack.lib.ui.colors import ANSIColors, colorize
from ffstack.lib.ui.terminal import is_tty


class Console:
    """Writes one-line messages prefixed with a colored severity tag.

    ``[ERROR]`` goes to stderr, every other tag to stdout. Colors are only
    applied when the target stream is a terminal unless ``force_tty`` says
    otherwise.
    """

    def __init__(self, force_tty: bool | None = None) -> None:
        self.force_tty = force_tty

    def _tag(self, label: str, color: str, err: bool) -> str:
        use_colors = self.force_tty
        if use_colors is None:
            use_colors = is_tty(sys.stderr if err else sys.stdout)
        return colorize(f"[{label}]", color, force_tty=use_colors)

    def info(self, message: str) -> None:
        click.echo(f"{self._tag('INFO', ANSIColors.BLUE, False)} {message}")

    def success(self, message: str) -> None:
        click.echo(f"{self._tag('OK', ANSIColors.GREEN, False)} {message}")

    def warn(self, message: str) -> None:
        click.echo(f"{self._tag('WARN', ANSIColors.YELLOW, False)} {message}")

    def error(self, message: str) -> None:
        click.echo(f"{self._tag('ERROR', ANSIColors.RED, True)} {message}", err=True)

    def echo(self, message: str = "") -> None:
        """Write an untagged line to stdout."""
        click.echo(message)
