"""
Per-run state shared by the executor, sections and the abort router.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from scriptshell.policy import ExecutionPolicy


@dataclass
class ScriptContext:
    """
    Mutable state owned by one script run.

    Attributes:
        policy: Script-wide baseline. Replaced (never mutated) when the
                operator answers "all" or "dry-run" at a prompt.
        cwd: Directory commands run in. Changed only by `cd`.
        depth: Number of sections currently open.
        command_in_flight: True while a command is being confirmed or
                           waited on.
        task: The task running the script body, target of abort requests.
    """

    policy: ExecutionPolicy = field(default_factory=ExecutionPolicy.resolve)
    cwd: Path = field(default_factory=Path.cwd)
    depth: int = 0
    command_in_flight: bool = False
    task: asyncio.Task | None = None

    @contextmanager
    def nested(self) -> Iterator[int]:
        """Open one section level for the duration of the block."""
        self.depth += 1
        try:
            yield self.depth
        finally:
            self.depth -= 1

    @contextmanager
    def running_command(self) -> Iterator[None]:
        """Mark the current command as confirmed or running."""
        self.command_in_flight = True
        try:
            yield
        finally:
            self.command_in_flight = False
