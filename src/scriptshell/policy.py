"""
Execution policy: what a script shows and how commands behave.

A script-wide ExecutionPolicy is resolved once from the verbosity level and
flags. Each command then merges it with a sparse CommandOptions record into
a CallPolicy that lives for that one invocation only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from scriptshell._types import Verbosity

# Display switches enabled at each verbosity level:
# (debug, command output, command, echoes/headers, errors)
_LEVEL_SWITCHES: dict[Verbosity, tuple[bool, bool, bool, bool, bool]] = {
    Verbosity.SILENT: (False, False, False, False, False),
    Verbosity.ERRORS: (False, False, False, False, True),
    Verbosity.ECHOES: (False, False, False, True, True),
    Verbosity.CMDS: (False, False, True, True, True),
    Verbosity.ALL: (False, True, True, True, True),
    Verbosity.DEBUG: (True, True, True, True, True),
}


@dataclass(frozen=True)
class ExecutionPolicy:
    """
    Script-wide baseline, never mutated by individual commands.

    Build one with `ExecutionPolicy.resolve()` so that the display switches
    always agree with the verbosity level.
    """

    verbosity: Verbosity = Verbosity.ALL
    show_debug: bool = False
    show_command_output: bool = True
    show_command: bool = True
    show_echoes: bool = True
    show_headers: bool = True
    show_errors: bool = True
    continue_on_error: bool = False
    dry_run: bool = False
    interactive: bool = False
    show_times: bool = False

    @classmethod
    def resolve(
        cls,
        verbosity: Verbosity | str | int = Verbosity.ALL,
        *,
        dry_run: bool = False,
        interactive: bool = False,
        continue_on_error: bool = False,
        show_times: bool = False,
    ) -> ExecutionPolicy:
        """
        Derive the display switches for a verbosity level.

        Dry-run raises the level to at least ALL so the operator sees every
        command that would have run. DEBUG also turns on timing.
        """
        level = Verbosity.parse(verbosity)
        if dry_run and level < Verbosity.ALL:
            level = Verbosity.ALL

        debug, cmd_output, cmd, echoes, errors = _LEVEL_SWITCHES[level]
        return cls(
            verbosity=level,
            show_debug=debug,
            show_command_output=cmd_output,
            show_command=cmd,
            show_echoes=echoes,
            show_headers=echoes,
            show_errors=errors,
            continue_on_error=continue_on_error,
            dry_run=dry_run,
            interactive=interactive,
            show_times=show_times or debug,
        )

    def without_prompting(self) -> ExecutionPolicy:
        """Baseline for "run the rest without asking"."""
        return replace(self, interactive=False)

    def as_dry_run(self) -> ExecutionPolicy:
        """Baseline for "run the rest as a dry-run"."""
        return ExecutionPolicy.resolve(
            self.verbosity,
            dry_run=True,
            interactive=False,
            continue_on_error=self.continue_on_error,
            show_times=self.show_times,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CommandOptions:
    """
    Per-call overrides for one command. None means "not given".

    Display overrides can only hide what the verbosity level shows.
    `ignore_nonzero_exit` sets both `show_errors` and `continue_on_error`
    and wins over either of them given in the same call.
    """

    skip: bool | None = None
    force: bool | None = None
    capture_output: bool | None = None
    show_command: bool | None = None
    show_command_output: bool | None = None
    show_errors: bool | None = None
    continue_on_error: bool | None = None
    ignore_nonzero_exit: bool | None = None
    silent: bool | None = None
    harvest: bool = False  # set by cmd_output / cmd_status

    @classmethod
    def from_kwargs(cls, overrides: dict[str, Any]) -> CommandOptions:
        """
        Build options from keyword overrides.

        Raises:
            TypeError: If an override name is unknown.
        """
        known = {f.name for f in fields(cls)} - {"harvest"}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown command option(s): {', '.join(sorted(unknown))}")
        return cls(**overrides)

    def with_defaults(self, **defaults: Any) -> CommandOptions:
        """Fill options the caller did not give."""
        missing = {k: v for k, v in defaults.items() if getattr(self, k) is None}
        return replace(self, **missing)


@dataclass(frozen=True)
class CallPolicy:
    """Effective switches for a single command invocation."""

    skip: bool
    force: bool
    dry_run: bool
    capture_output: bool
    show_command: bool
    show_command_output: bool
    show_errors: bool
    continue_on_error: bool

    @property
    def runs(self) -> bool:
        """True if the shell should actually be invoked."""
        return not self.skip and (not self.dry_run or self.force)


def merge(baseline: ExecutionPolicy, options: CommandOptions) -> CallPolicy:
    """Combine the script-wide baseline with one call's overrides."""
    show_command = baseline.show_command
    show_output = baseline.show_command_output

    # At debug level, display hints are ignored unless they are the quiet
    # defaults of cmd_output / cmd_status. `silent` always applies.
    if not baseline.show_debug or options.harvest:
        if options.show_command is not None:
            show_command = show_command and options.show_command
        if options.show_command_output is not None:
            show_output = show_output and options.show_command_output
    if options.silent:
        show_command = show_output = False

    show_errors = baseline.show_errors
    if options.show_errors is not None:
        show_errors = show_errors and options.show_errors

    continue_on_error = baseline.continue_on_error
    if options.continue_on_error is not None:
        continue_on_error = options.continue_on_error

    if options.ignore_nonzero_exit is not None:
        show_errors = baseline.show_errors and not options.ignore_nonzero_exit
        continue_on_error = options.ignore_nonzero_exit

    capture = options.capture_output
    if capture is None:
        capture = not show_output

    return CallPolicy(
        skip=bool(options.skip),
        force=bool(options.force),
        dry_run=baseline.dry_run,
        capture_output=capture,
        show_command=show_command,
        show_command_output=show_output,
        show_errors=show_errors,
        continue_on_error=continue_on_error,
    )
