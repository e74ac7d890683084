"""
Abstract base class for process launchers.

The executor decides whether and how a command runs; a launcher only knows
how to hand a literal command line to a shell and wait for it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from scriptshell._types import CommandResult

# Exit status reported when the shell itself could not be started.
LAUNCH_FAILURE_STATUS = 127


class ProcessLauncher(ABC):
    """
    Abstract base for all process launchers.

    Implementations must stay cancellable: cancelling the awaiting task
    stops the wait and makes a best-effort attempt to stop the child.
    """

    @abstractmethod
    async def run(self, command: str, *, capture: bool, cwd: Path) -> CommandResult:
        """
        Run a shell command line and wait for it to exit.

        Args:
            command: Literal command line, passed to the shell unmodified.
            capture: If True, buffer stdout and stderr separately. If False,
                     the child writes straight to our own stdout/stderr.
            cwd: Working directory for the child.

        Returns:
            CommandResult with the exit status. stdout/stderr are empty in
            streaming mode. A command that could not be launched reports
            LAUNCH_FAILURE_STATUS and the OS error as stderr.
        """
        ...
