"""
Abort routing: turn operator interrupts into scoped cancellation.

SIGINT aborts the running command when no section is open, and the
innermost section otherwise. SIGQUIT aborts the whole script. Either way
the router cancels the task running the script body once and remembers
which scope the cancellation is for; the matching boundary claims it.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from scriptshell._types import AbortScope

if TYPE_CHECKING:
    from scriptshell.context import ScriptContext

logger = logging.getLogger(__name__)


class AbortRouter:
    """
    Maps interrupts to AbortScope values for one script context.

    The router only reads the context's depth; it never changes it.
    """

    def __init__(self, context: ScriptContext) -> None:
        self._context = context
        self._pending: AbortScope | None = None
        self._installed: list[signal.Signals] = []

    @property
    def pending(self) -> AbortScope | None:
        """Scope of a cancellation requested but not yet claimed."""
        return self._pending

    def scope_for_interrupt(self) -> AbortScope | None:
        """Scope a SIGINT would abort right now, or None if it is a no-op."""
        if self._context.depth > 0:
            return AbortScope.SECTION
        if self._context.command_in_flight:
            return AbortScope.COMMAND
        return None

    def interrupt(self) -> None:
        """Handle the soft interrupt (SIGINT)."""
        scope = self.scope_for_interrupt()
        if scope is None:
            logger.debug("Interrupt ignored: no command or section to abort")
            return
        self.request(scope)

    def quit(self) -> None:
        """Handle the hard interrupt (SIGQUIT)."""
        self.request(AbortScope.SCRIPT)

    def request(self, scope: AbortScope) -> None:
        """
        Ask for the body task to be cancelled on behalf of `scope`.

        While a request is pending a new one can only raise its severity;
        the task is cancelled once per claimed request.
        """
        task = self._context.task
        if task is None or task.done():
            logger.debug("Abort %s ignored: no script body running", scope.name)
            return

        if self._pending is not None:
            if scope.severity > self._pending.severity:
                logger.debug("Escalating pending abort %s -> %s", self._pending.name, scope.name)
                self._pending = scope
            return

        logger.debug("Aborting %s", scope.name.lower())
        self._pending = scope
        task.cancel()

    def claim(self, scope: AbortScope) -> bool:
        """
        Take ownership of a pending cancellation aimed at `scope`.

        Called from an `except asyncio.CancelledError` block. Returns True
        and uncancels the body task if the cancellation was for `scope`;
        returns False if it belongs to an outer scope and must propagate.
        """
        if self._pending is not scope:
            return False
        self._pending = None
        task = self._context.task
        if task is not None:
            task.uncancel()
        return True

    def install(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Route SIGINT and SIGQUIT on the running loop to this router."""
        loop = loop or asyncio.get_running_loop()
        handlers = [(signal.SIGINT, self.interrupt)]
        if hasattr(signal, "SIGQUIT"):
            handlers.append((signal.SIGQUIT, self.quit))

        for signum, handler in handlers:
            try:
                loop.add_signal_handler(signum, handler)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.warning("Cannot route %s, scoped aborts disabled: %s", signum.name, e)
                continue
            self._installed.append(signum)

    def uninstall(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Restore the default handling of the signals we took over."""
        loop = loop or asyncio.get_running_loop()
        while self._installed:
            loop.remove_signal_handler(self._installed.pop())
