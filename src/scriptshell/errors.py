"""
Exceptions raised by scriptshell.
"""

from __future__ import annotations


class ScriptShellError(Exception):
    """Base exception for all scriptshell errors."""

    pass


class CommandFailure(ScriptShellError):
    """
    Raised when a command exits non-zero and errors are not tolerated.

    Attributes:
        command: The command line that failed.
        exit_code: Its exit status.
    """

    def __init__(self, command: str, exit_code: int) -> None:
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Command failed with exit code {exit_code}: {command}")


class ArgumentsNotValid(ScriptShellError):
    """Raised by an argument check to stop the script before its body runs."""

    pass
