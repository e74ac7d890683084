"""
Script transcript: gating by policy and console rendering.

The engine emits (category, text) events through a Transcript, which drops
whatever the current policy hides. The default reporter renders events on
the terminal with click.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from scriptshell._types import Category

if TYPE_CHECKING:
    from scriptshell._types import Reporter
    from scriptshell.context import ScriptContext

# Prefix and colour per category
_STYLES: dict[Category, tuple[str, str | None]] = {
    Category.COMMAND: ("$ ", "cyan"),
    Category.SKIPPED_COMMAND: ("# $ ", "blue"),
    Category.ECHO: ("# ", "yellow"),
    Category.ERROR: ("! ", "red"),
    Category.COMMAND_OUTPUT: ("", None),
    Category.PROMPT: ("", "magenta"),
}

HEADER_PREFIX = "### "
HEADER_SUFFIX = " ###"


class ConsoleReporter:
    """Renders events on stdout, one styled line per line of text."""

    def __init__(self, *, color: bool | None = None) -> None:
        self._color = color

    def __call__(self, category: Category, text: str) -> None:
        if category is Category.HEADER:
            self._header(text)
        elif category is Category.COMMAND_OUTPUT:
            click.echo(text, color=self._color)
        elif category is Category.PROMPT:
            click.secho(text, fg="magenta", nl=False, color=self._color)
        else:
            prefix, fg = _STYLES[category]
            for line in _lines(text):
                self._line(prefix + line if line else "", fg)

    def _header(self, text: str) -> None:
        lines = _lines(text)
        if lines == [""]:
            click.echo("", color=self._color)
            return
        click.echo("", color=self._color)
        width = max(len(line) for line in lines)
        for line in lines:
            if line:
                self._line(f"{HEADER_PREFIX}{line.ljust(width)}{HEADER_SUFFIX}", "green")
            else:
                click.echo("", color=self._color)

    def _line(self, text: str, fg: str | None) -> None:
        if text and fg:
            click.secho(text, fg=fg, color=self._color)
        else:
            click.echo(text, color=self._color)


def _lines(text: str) -> list[str]:
    """Split text into lines, keeping blank ones."""
    if text in ("", "\n"):
        return [""]
    return text.split("\n")


class Transcript:
    """
    Emits events for one script, honouring the context's current policy.

    Args:
        context: Script context whose baseline policy is consulted.
        reporter: Receives every event that passes the policy.
    """

    def __init__(self, context: ScriptContext, reporter: Reporter) -> None:
        self._context = context
        self.reporter = reporter

    def echo(self, text: str = "") -> None:
        if self._context.policy.show_echoes:
            self.reporter(Category.ECHO, text)

    def header(self, text: str = "") -> None:
        if self._context.policy.show_headers:
            self.reporter(Category.HEADER, text)

    def error(self, text: str = "", *, force: bool = False) -> None:
        """Report an error line; `force` shows it even when errors are hidden."""
        if force or self._context.policy.show_errors:
            self.reporter(Category.ERROR, text)

    def emit(self, category: Category, text: str) -> None:
        """Send an event unconditionally; the caller already applied its policy."""
        self.reporter(category, text)
