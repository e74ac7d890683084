"""
Operator prompts: ask for a single token, optionally with a timeout.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, TextIO

from scriptshell._types import Category

if TYPE_CHECKING:
    from scriptshell._types import InputReader
    from scriptshell.output import Transcript

logger = logging.getLogger(__name__)


class LineReader:
    """
    Reads lines from a stream on one long-lived daemon thread.

    Lines are queued on the event loop that is awaiting them, so a line
    typed after a prompt timed out is kept for the next prompt instead of
    being lost. Returns "" once the stream reaches end of input.

    Args:
        stream: Text stream to read. Defaults to sys.stdin when first used.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lines: asyncio.Queue[str] | None = None
        self._eof = False

    async def __call__(self) -> str:
        lines = self._attach()
        if self._eof and lines.empty():
            return ""
        return await lines.get()

    def _attach(self) -> asyncio.Queue[str]:
        loop = asyncio.get_running_loop()
        if self._lines is None or self._loop is not loop:
            self._loop = loop
            self._lines = asyncio.Queue()
        if self._thread is None:
            self._thread = threading.Thread(target=self._pump, name="scriptshell-stdin", daemon=True)
            self._thread.start()
        return self._lines

    def _pump(self) -> None:
        stream = self._stream or sys.stdin
        while True:
            try:
                line = stream.readline()
            except (OSError, ValueError):
                line = ""
            self._deliver(line)
            if not line:
                return

    def _deliver(self, line: str) -> None:
        loop, lines = self._loop, self._lines
        try:
            loop.call_soon_threadsafe(self._put, lines, line)
        except RuntimeError:
            logger.debug("Event loop closed, dropped input line %r", line)

    def _put(self, lines: asyncio.Queue[str], line: str) -> None:
        if not line:
            self._eof = True
        lines.put_nowait(line)


# Shared by every prompt that reads the terminal
read_stdin_line = LineReader()


class Prompter:
    """
    Asks the operator to pick one of a few short answers.

    Args:
        transcript: Where prompts, errors and notices are reported.
        reader: Coroutine function returning one line of input ("" at EOF).
    """

    def __init__(self, transcript: Transcript, reader: InputReader | None = None) -> None:
        self._transcript = transcript
        self._reader = reader or read_stdin_line

    async def get_input(
        self,
        prompt: str,
        choices: Sequence[str] = (),
        timeout: float = 0,
        default: str | None = None,
    ) -> str:
        """
        Prompt until the operator gives an accepted answer.

        Args:
            prompt: Question to show.
            choices: Accepted answers, matched case-insensitively. Empty
                     means any answer is accepted.
            timeout: Seconds to wait for each answer; 0 waits forever.
            default: Answer used for empty input, EOF or timeout. Defaults
                     to the first choice.

        Returns:
            The matching choice as listed, or the raw answer when there are
            no choices.
        """
        if default is None:
            default = choices[0] if choices else ""

        while True:
            self._show_prompt(prompt, choices, timeout, default)
            try:
                if timeout > 0:
                    raw = await asyncio.wait_for(self._reader(), timeout=timeout)
                else:
                    raw = await self._reader()
            except TimeoutError:
                self._transcript.emit(Category.PROMPT, "\n")
                self._transcript.echo(f"Timed out.  Using default value: {default}")
                return default

            answer = raw.strip()
            if not answer:
                return default
            if not choices:
                return answer
            for choice in choices:
                if choice.lower() == answer.lower():
                    return choice

            self._transcript.error(f"Invalid input: {answer}")
            self._transcript.echo(f"Enter one of: {', '.join(choices)}")

    def _show_prompt(
        self, prompt: str, choices: Sequence[str], timeout: float, default: str
    ) -> None:
        text = prompt
        if timeout > 0:
            text += f" (timeout in {timeout:g} secs.)"
        if choices:
            shown = [c.upper() if c == default else c for c in choices]
            text += f"\n[{'/'.join(shown)}]? "
        else:
            text += "\n? "
        self._transcript.emit(Category.PROMPT, text)
