"""
Core type definitions for scriptshell.

Uses dataclasses, enums and Protocols for lightweight, typed abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Protocol


class Verbosity(IntEnum):
    """How much a script prints. Higher levels show everything lower ones do."""

    SILENT = 0  # Nothing at all
    ERRORS = 1  # Only errors
    ECHOES = 2  # Headers and echoes
    CMDS = 3  # Commands as they run, but not their output
    ALL = 4  # Command output too (default)
    DEBUG = 5  # Everything, plus options and timing

    @classmethod
    def parse(cls, value: str | int | Verbosity) -> Verbosity:
        """
        Parse a level given by name ("cmds") or number ("3").

        Raises:
            ValueError: If the value names no level.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text.isdigit():
            return cls(int(text))
        if text == "echos":
            return cls.ECHOES
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Invalid verbosity level: {value}") from None


class AbortScope(Enum):
    """Blast radius of an operator interrupt, ordered by severity."""

    COMMAND = 1
    SECTION = 2
    SCRIPT = 3

    @property
    def severity(self) -> int:
        return self.value


class Category(Enum):
    """Semantic category of one line-oriented output event."""

    COMMAND = "command"
    SKIPPED_COMMAND = "skipped_command"
    ECHO = "echo"
    HEADER = "header"
    ERROR = "error"
    COMMAND_OUTPUT = "command_output"
    PROMPT = "prompt"


class ScriptOutcome(Enum):
    """Terminal state of a script run."""

    COMPLETED = "completed"
    SCRIPT_ABORTED = "script_aborted"
    COMMAND_FAILED = "command_failed"
    INVALID_ARGUMENTS = "invalid_arguments"

    @property
    def exit_code(self) -> int:
        """Process exit status for this outcome."""
        return _EXIT_CODES[self]


_EXIT_CODES = {
    ScriptOutcome.COMPLETED: 0,
    ScriptOutcome.SCRIPT_ABORTED: 0,
    ScriptOutcome.COMMAND_FAILED: 1,
    ScriptOutcome.INVALID_ARGUMENTS: 2,
}


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Immutable result from command execution."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def success(self) -> bool:
        """Return True if command exited with code 0."""
        return self.exit_code == 0

    @classmethod
    def empty(cls) -> CommandResult:
        """Result of a command that was skipped or aborted."""
        return cls(stdout="", stderr="", exit_code=0)


class Reporter(Protocol):
    """Receives every line-oriented event the engine wants shown."""

    def __call__(self, category: Category, text: str) -> None: ...


class InputReader(Protocol):
    """Reads one line of operator input. Returns "" at end of input."""

    async def __call__(self) -> str: ...
