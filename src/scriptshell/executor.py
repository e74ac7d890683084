"""
Command executor: decides whether a command runs, shows it, runs it and
handles its exit status.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

from scriptshell._types import AbortScope, Category, CommandResult
from scriptshell.errors import CommandFailure
from scriptshell.policy import CommandOptions, merge
from scriptshell.process import LocalLauncher

if TYPE_CHECKING:
    from scriptshell.context import ScriptContext
    from scriptshell.output import Transcript
    from scriptshell.process import ProcessLauncher
    from scriptshell.prompt import Prompter
    from scriptshell.router import AbortRouter

logger = logging.getLogger(__name__)

CONFIRM_CHOICES = ("y", "n", "a", "d", "q", "?")

CONFIRM_HELP = """ Y  Yes       Run this command (default)
 n  No        Don't run this command
 a  All       Run this and the rest of the script without asking
 d  Dry-Run   Run the rest of the script as a dry-run
 q  Quit      Stop the script
 ?  Help      Show this help"""


def chomp(text: str) -> str:
    """Remove one trailing line terminator, if there is one."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text


class CommandExecutor:
    """
    Runs shell commands on behalf of a script.

    Example:
        >>> result = await executor.execute("make", CommandOptions(force=True))
        >>> listing = await executor.cmd_output("ls")
    """

    def __init__(
        self,
        context: ScriptContext,
        transcript: Transcript,
        router: AbortRouter,
        prompter: Prompter,
        launcher: ProcessLauncher | None = None,
    ) -> None:
        self._context = context
        self._transcript = transcript
        self._router = router
        self._prompter = prompter
        self._launcher = launcher or LocalLauncher()

    async def execute(
        self, command: str, options: CommandOptions | None = None
    ) -> CommandResult:
        """
        Run one command under the current policy.

        Args:
            command: Literal shell command line.
            options: Overrides for this call only.

        Returns:
            CommandResult; stdout has one trailing newline removed. Skipped,
            dry-run and aborted commands return an empty result with exit
            status 0.

        Raises:
            CommandFailure: If the command exits non-zero and
                continue_on_error is off for this call.
        """
        options = options or CommandOptions()

        if self._context.policy.interactive and not options.skip:
            try:
                with self._context.running_command():
                    confirmed = await self._confirm(command)
            except asyncio.CancelledError:
                if not self._router.claim(AbortScope.COMMAND):
                    raise
                return self._aborted(command)
            if not confirmed:
                options = replace(options, skip=True)

        call = merge(self._context.policy, options)

        if not call.runs:
            if call.show_command:
                self._transcript.emit(Category.SKIPPED_COMMAND, command)
            logger.debug("Not running (skip=%s, dry_run=%s): %s", call.skip, call.dry_run, command)
            return CommandResult.empty()

        if call.show_command:
            self._transcript.emit(Category.COMMAND, command)

        try:
            with self._context.running_command():
                result = await self._launcher.run(
                    command, capture=call.capture_output, cwd=self._context.cwd
                )
        except asyncio.CancelledError:
            if not self._router.claim(AbortScope.COMMAND):
                raise
            return self._aborted(command)

        if not result.success:
            logger.debug("Exit status %s: %s", result.exit_code, command)
            if call.show_errors:
                self._transcript.error(f"Command ($ {command}) failed with code: {result.exit_code}")
                if result.stdout:
                    self._transcript.error(f"stdout:\n{result.stdout}")
                if result.stderr:
                    self._transcript.error(f"stderr:\n{result.stderr}")
            if not call.continue_on_error:
                raise CommandFailure(command, result.exit_code)

        if call.capture_output and call.show_command_output and result.stdout:
            self._transcript.emit(Category.COMMAND_OUTPUT, chomp(result.stdout))

        return CommandResult(
            stdout=chomp(result.stdout),
            stderr=result.stderr,
            exit_code=result.exit_code,
        )

    async def cmd(self, command: str, **overrides: Any) -> CommandResult:
        """Run a command with keyword overrides (skip=True, force=True, ...)."""
        return await self.execute(command, CommandOptions.from_kwargs(overrides))

    async def cmd_output(self, command: str, **overrides: Any) -> str:
        """
        Return a command's stdout without showing the command or its output.

        Runs even in dry-run, since the output usually drives the script.
        """
        options = CommandOptions.from_kwargs(overrides)
        options = options.with_defaults(
            capture_output=True, show_command=False, show_command_output=False, force=True
        )
        result = await self.execute(command, _harvest(options))
        return result.stdout

    async def cmd_status(self, command: str, **overrides: Any) -> int:
        """
        Return a command's exit status without showing it or failing on it.

        Runs even in dry-run.
        """
        options = CommandOptions.from_kwargs(overrides)
        options = options.with_defaults(
            capture_output=True,
            show_command=False,
            show_command_output=False,
            force=True,
            ignore_nonzero_exit=True,
        )
        result = await self.execute(command, _harvest(options))
        return result.exit_code

    def cd(self, path: str | Path = "~") -> Path:
        """
        Change the directory later commands run in.

        Always happens, even in dry-run, so the rest of the script can be
        followed. The process working directory is left alone.

        Raises:
            FileNotFoundError: If the target is not a directory.
        """
        if self._context.policy.show_command:
            self._transcript.emit(Category.COMMAND, f"cd {path}")

        target = Path(path).expanduser()
        if not target.is_absolute():
            target = self._context.cwd / target
        target = target.resolve()
        if not target.is_dir():
            raise FileNotFoundError(f"No such directory: {path}")

        self._context.cwd = target
        return target

    def _aborted(self, command: str) -> CommandResult:
        self._transcript.echo(f"\n\nAborted Command: {command} (user pressed CTRL-C)")
        return CommandResult.empty()

    async def _confirm(self, command: str) -> bool:
        """Ask whether to run `command`. Returns False to skip it."""
        while True:
            answer = await self._prompter.get_input(f"Run? $ {command}", CONFIRM_CHOICES)
            if answer == "y":
                return True
            if answer == "n":
                return False
            if answer == "a":
                self._context.policy = self._context.policy.without_prompting()
                return True
            if answer == "d":
                self._context.policy = self._context.policy.as_dry_run()
                return True
            if answer == "q":
                raise SystemExit(0)
            self._transcript.echo(CONFIRM_HELP)


def _harvest(options: CommandOptions) -> CommandOptions:
    return replace(options, harvest=True)
