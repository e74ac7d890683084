"""
Sections: named, nestable groups of commands that can fail or be aborted
without ending the script.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import TYPE_CHECKING

from scriptshell._types import AbortScope
from scriptshell.errors import CommandFailure

if TYPE_CHECKING:
    from scriptshell.context import ScriptContext
    from scriptshell.output import Transcript
    from scriptshell.router import AbortRouter

logger = logging.getLogger(__name__)


class Section:
    """
    Async context manager for one section.

    Example:
        >>> async with Section("Build", context, transcript, router):
        ...     await script.cmd("make")

    A failed command or a Ctrl-C inside the block ends the section and the
    script carries on after it. A script-level abort and any other
    exception pass through.
    """

    def __init__(
        self,
        name: str,
        context: ScriptContext,
        transcript: Transcript,
        router: AbortRouter,
    ) -> None:
        self.name = name
        self.aborted = False
        self.failed = False
        self._context = context
        self._transcript = transcript
        self._router = router
        self._depth = context.nested()

    async def __aenter__(self) -> Section:
        if self.name:
            self._transcript.header(self.name)
        self._depth.__enter__()
        logger.debug("Entered section %r at depth %d", self.name, self._context.depth)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self._depth.__exit__(None, None, None)

        if exc_type is None:
            self._transcript.echo(f"Done with {self.name}")
            return False

        if issubclass(exc_type, asyncio.CancelledError):
            if not self._router.claim(AbortScope.SECTION):
                return False
            self.aborted = True
            self._transcript.echo(f"\nAborting section: {self.name} (user pressed CTRL-C)")
            return True

        if issubclass(exc_type, CommandFailure):
            self.failed = True
            logger.debug("Section %r ended by failing command: %s", self.name, exc)
            self._transcript.error(f"\nA command had non-zero exit value in section: {self.name}")
            return True

        return False


async def run_section(
    name: str,
    body: Callable[[], Awaitable[object]],
    context: ScriptContext,
    transcript: Transcript,
    router: AbortRouter,
) -> Section:
    """Run `body` inside a section and return the finished section."""
    section = Section(name, context, transcript, router)
    async with section:
        await body()
    return section
