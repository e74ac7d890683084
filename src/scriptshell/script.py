"""
ShellScript: the top-level driver a script author works with.

Example:
    >>> script = ShellScript("deploy", "Build and ship the site.")
    >>> script.set_defaults(continue_on_error=False)
    >>>
    >>> async def body(script: ShellScript) -> None:
    ...     async with script.section("Build"):
    ...         await script.cmd("make")
    ...     branch = await script.cmd_output("git branch --show-current")
    ...     script.echo(f"on {branch}")
    >>>
    >>> sys.exit(script.main(body))
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import stat
import sys
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from scriptshell._types import AbortScope, CommandResult, ScriptOutcome
from scriptshell.cli import ScriptOptions, build_command, format_help, parse_args
from scriptshell.context import ScriptContext
from scriptshell.errors import ArgumentsNotValid, CommandFailure
from scriptshell.executor import CommandExecutor
from scriptshell.log import configure_logging
from scriptshell.output import ConsoleReporter, Transcript
from scriptshell.prompt import Prompter
from scriptshell.router import AbortRouter
from scriptshell.section import Section, run_section

if TYPE_CHECKING:
    from scriptshell._types import InputReader, Reporter
    from scriptshell.policy import CommandOptions, ExecutionPolicy
    from scriptshell.process import ProcessLauncher

logger = logging.getLogger(__name__)

Body = Callable[["ShellScript"], Awaitable[object]]
Hook = Callable[["ShellScript"], object]


class ShellScript:
    """
    A shell-script style program with dry-run, sections and scoped aborts.

    Args:
        name: Program name shown in help. Defaults to argv[0].
        description: Help text for --help.
        reporter: Receives the transcript. Defaults to the console.
        launcher: Runs commands. Defaults to the local shell.
        input_reader: Reads operator answers. Defaults to stdin.
        cwd: Starting directory for commands. Defaults to the current one.
        stdin: Text to use instead of reading piped standard input.
    """

    def __init__(
        self,
        name: str | None = None,
        description: str | None = None,
        *,
        reporter: Reporter | None = None,
        launcher: ProcessLauncher | None = None,
        input_reader: InputReader | None = None,
        cwd: Path | str | None = None,
        stdin: str | None = None,
    ) -> None:
        self.name = name or Path(sys.argv[0]).name
        self.description = description
        self.options = ScriptOptions()
        self.arguments: tuple[str, ...] = ()

        self._extra_params: list[click.Parameter] = []
        self._defaults: dict[str, Any] = {}
        self._check_arguments: Hook | None = None
        self._process_stdin: Hook | None = None
        self._stdin = stdin

        self.context = ScriptContext(cwd=Path(cwd).resolve() if cwd else Path.cwd())
        self.transcript = Transcript(self.context, reporter or ConsoleReporter())
        self.router = AbortRouter(self.context)
        self.prompter = Prompter(self.transcript, input_reader)
        self.executor = CommandExecutor(
            self.context, self.transcript, self.router, self.prompter, launcher
        )

    # Authoring hooks, used before run()

    def add_option(self, *param_decls: str, **attrs: Any) -> None:
        """Add a click option; its value ends up as `script.options.<name>`."""
        self._extra_params.append(click.Option(param_decls, **attrs))

    def set_defaults(self, **defaults: Any) -> None:
        """Override built-in option defaults or set defaults for added options."""
        self._defaults.update(defaults)

    def check_arguments(self, hook: Hook) -> Hook:
        """Register the argument check. Raise ArgumentsNotValid to reject."""
        self._check_arguments = hook
        return hook

    def process_stdin(self, hook: Hook) -> Hook:
        """Register a hook that consumes `script.stdin` before the body runs."""
        self._process_stdin = hook
        return hook

    @property
    def stdin(self) -> str:
        """Piped standard input, read once. Empty for a terminal."""
        if self._stdin is None:
            self._stdin = _read_piped_stdin()
        return self._stdin

    @property
    def policy(self) -> ExecutionPolicy:
        return self.context.policy

    @property
    def cwd(self) -> Path:
        return self.context.cwd

    # Steps for the body

    async def execute(self, command: str, options: CommandOptions | None = None) -> CommandResult:
        return await self.executor.execute(command, options)

    async def cmd(self, command: str, **overrides: Any) -> CommandResult:
        return await self.executor.cmd(command, **overrides)

    async def cmd_output(self, command: str, **overrides: Any) -> str:
        return await self.executor.cmd_output(command, **overrides)

    async def cmd_status(self, command: str, **overrides: Any) -> int:
        return await self.executor.cmd_status(command, **overrides)

    def cd(self, path: str | Path = "~") -> Path:
        return self.executor.cd(path)

    def echo(self, text: str = "") -> None:
        self.transcript.echo(text)

    def header(self, text: str = "") -> None:
        self.transcript.header(text)

    def error(self, text: str = "") -> None:
        self.transcript.error(text)

    def section(self, name: str = "") -> Section:
        """Open a section: `async with script.section("Build"): ...`"""
        return Section(name, self.context, self.transcript, self.router)

    async def run_section(self, name: str, body: Callable[[], Awaitable[object]]) -> Section:
        return await run_section(name, body, self.context, self.transcript, self.router)

    async def get_input(
        self,
        prompt: str,
        choices: Sequence[str] = (),
        timeout: float = 0,
        default: str | None = None,
    ) -> str:
        return await self.prompter.get_input(prompt, choices, timeout, default)

    def require_platform(self, name: str) -> None:
        """Exit with status 1 unless sys.platform starts with `name`."""
        if not sys.platform.startswith(name):
            self.transcript.error(f"This script requires {name}.", force=True)
            raise SystemExit(1)

    # Running

    def main(self, body: Body, args: Sequence[str] | None = None) -> int:
        """Run the script on a fresh event loop and return its exit status."""
        return asyncio.run(self.run(body, args)).exit_code

    async def run(self, body: Body, args: Sequence[str] | None = None) -> ScriptOutcome:
        """
        Parse options, validate arguments, then run `body(self)`.

        Returns:
            The terminal state; `outcome.exit_code` is the process status.
        """
        command = build_command(self.name, self.description, self._extra_params)
        self.context.depth = 0

        try:
            self.options, self.arguments = parse_args(
                command, sys.argv[1:] if args is None else args, self._defaults
            )
            self.context.policy = self.options.to_policy()
            configure_logging(debug=self.context.policy.show_debug)
            if self._process_stdin is not None:
                await _call_hook(self._process_stdin, self)
            if self._check_arguments is not None:
                await _call_hook(self._check_arguments, self)
        except click.exceptions.Exit as e:
            return ScriptOutcome.COMPLETED if e.exit_code == 0 else ScriptOutcome.INVALID_ARGUMENTS
        except ArgumentsNotValid as e:
            self.transcript.error(f"\nArguments not valid: {e}\n", force=True)
            click.echo(format_help(command))
            return ScriptOutcome.INVALID_ARGUMENTS

        if self.context.policy.show_debug:
            self._show_options()

        loop = asyncio.get_running_loop()
        self.context.task = asyncio.current_task()
        self.router.install(loop)
        try:
            return await self._timed(body)
        finally:
            self.router.uninstall(loop)
            self.context.task = None

    async def _timed(self, body: Body) -> ScriptOutcome:
        show_times = self.context.policy.show_times
        started_at = datetime.now()
        started = time.monotonic()
        if show_times:
            self.header(f"Start at {started_at:%Y-%m-%d %H:%M:%S}")
            self.echo()

        outcome = await self._run_body(body)

        if show_times:
            elapsed = time.monotonic() - started
            self.header(f"Finish at {datetime.now():%Y-%m-%d %H:%M:%S}")
            self.header(f"Ran for {elapsed:.3f} seconds")
        return outcome

    async def _run_body(self, body: Body) -> ScriptOutcome:
        try:
            await body(self)
        except asyncio.CancelledError:
            if not self.router.claim(AbortScope.SCRIPT):
                raise
            self.echo("\n\nUser aborted the script (by pressing CTRL-\\).\n")
            return ScriptOutcome.SCRIPT_ABORTED
        except CommandFailure as e:
            logger.debug("Unhandled command failure: %s", e)
            self.error(f"\nScript aborted because this command failed:\n$ {e.command}\n")
            return ScriptOutcome.COMMAND_FAILED
        return ScriptOutcome.COMPLETED

    def _show_options(self) -> None:
        lines = ["Options:"]
        for name, value in self.context.policy.as_dict().items():
            lines.append(f"  {name} = {value}")
        for name, value in self.options.extras.items():
            lines.append(f"  {name} = {value}")
        lines.append(f"  arguments = {list(self.arguments)}")
        self.echo("\n".join(lines))


async def _call_hook(hook: Hook, script: ShellScript) -> None:
    result = hook(script)
    if inspect.isawaitable(result):
        await result


def _read_piped_stdin() -> str:
    """Read stdin if it is a pipe or a file; never wait on a terminal."""
    try:
        fd = sys.stdin.fileno()
        mode = os.fstat(fd).st_mode
    except (AttributeError, OSError, ValueError):
        return ""
    if os.isatty(fd) or not (stat.S_ISFIFO(mode) or stat.S_ISREG(mode)):
        return ""
    return sys.stdin.read()
