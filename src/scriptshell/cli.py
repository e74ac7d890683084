"""
Command line options shared by every script.

Builds a click command with the standard flags plus any options the script
author adds, and resolves what was given into ScriptOptions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import click
from click.core import ParameterSource

from scriptshell._types import Verbosity
from scriptshell.errors import ArgumentsNotValid
from scriptshell.policy import ExecutionPolicy

VERBOSITY_HELP = """Control the level of output:
5 debug: everything, including timing and the parsed options;
4 all: output from commands (default);
3 cmds: commands as they run, but not their output;
2 echoes: headers and echoes from the script;
1 errors: only errors;
0 silent: nothing.
Use like -v3 or --verbosity=cmds."""

_BUILTIN_DEFAULTS: dict[str, Any] = {
    "verbosity": Verbosity.ALL,
    "dry_run": False,
    "interactive": False,
    "continue_on_error": False,
    "show_times": False,
}

_GIVEN = (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT)


class VerbosityType(click.ParamType):
    """Accepts a verbosity level by name or number."""

    name = "level"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Verbosity:
        try:
            return Verbosity.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


@dataclass
class ScriptOptions:
    """Resolved options for one run. Author options live in `extras`."""

    verbosity: Verbosity = Verbosity.ALL
    dry_run: bool = False
    interactive: bool = False
    continue_on_error: bool = False
    show_times: bool = False
    extras: dict[str, Any] = field(default_factory=dict)

    def to_policy(self) -> ExecutionPolicy:
        return ExecutionPolicy.resolve(
            self.verbosity,
            dry_run=self.dry_run,
            interactive=self.interactive,
            continue_on_error=self.continue_on_error,
            show_times=self.show_times,
        )

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["extras"][name]
        except KeyError:
            raise AttributeError(name) from None


def standard_params() -> list[click.Parameter]:
    """The flags every script understands."""
    return [
        click.Option(
            ["--dry-run"],
            is_flag=True,
            help="Only show the commands that would be run, don't actually run them.",
        ),
        click.Option(
            ["-i", "--interactive"],
            is_flag=True,
            help="Ask for confirmation before running each command.",
        ),
        click.Option(
            ["--time", "show_times"],
            is_flag=True,
            help="Show start, finish and elapsed time.",
        ),
        click.Option(
            ["-c/-C", "--continue-on-error/--stop-on-error"],
            default=False,
            help="Keep going (or stop) when a command returns a non-zero exit status.",
        ),
        click.Option(["--debug"], is_flag=True, help="Same as --verbosity=debug."),
        click.Option(["--verbose"], is_flag=True, help="Same as --verbosity=all."),
        click.Option(["--silent"], is_flag=True, help="Same as --verbosity=silent."),
        click.Option(
            ["-v", "--verbosity"],
            type=VerbosityType(),
            default=Verbosity.ALL,
            envvar="SCRIPTSHELL_VERBOSITY",
            help=VERBOSITY_HELP,
        ),
    ]


def build_command(
    name: str,
    description: str | None = None,
    extra_params: Sequence[click.Parameter] = (),
) -> click.Command:
    """Create the click command that parses a script's command line."""
    params = standard_params()
    params.extend(extra_params)
    params.append(click.Argument(["arguments"], nargs=-1))
    return click.Command(
        name,
        params=params,
        help=description,
        context_settings={"help_option_names": ["-h", "--help"]},
        add_help_option=True,
    )


def parse_args(
    command: click.Command,
    args: Sequence[str],
    defaults: Mapping[str, Any] | None = None,
) -> tuple[ScriptOptions, tuple[str, ...]]:
    """
    Resolve a command line into options and positional arguments.

    Precedence, lowest first: built-in defaults, `defaults` from the script
    author, then anything given on the command line or in the environment.

    Raises:
        ArgumentsNotValid: If the command line cannot be parsed.
        click.exceptions.Exit: If --help was given (help is already printed).
    """
    try:
        ctx = command.make_context(command.name, list(args))
    except click.UsageError as e:
        raise ArgumentsNotValid(e.format_message()) from e

    values = dict(ctx.params)
    arguments = tuple(values.pop("arguments", ()))
    given = {name for name in values if ctx.get_parameter_source(name) in _GIVEN}

    resolved = dict(_BUILTIN_DEFAULTS)
    extras: dict[str, Any] = {}
    for name, value in (defaults or {}).items():
        if name in resolved:
            resolved[name] = Verbosity.parse(value) if name == "verbosity" else value
        else:
            extras[name] = value

    for name in ("verbosity", "dry_run", "interactive", "continue_on_error", "show_times"):
        if name in given:
            resolved[name] = values.pop(name)
        else:
            values.pop(name)

    # Shorthand flags win over --verbosity, strongest last.
    for flag, level in (("silent", Verbosity.SILENT), ("verbose", Verbosity.ALL), ("debug", Verbosity.DEBUG)):
        if values.pop(flag):
            resolved["verbosity"] = level

    for name, value in values.items():
        if name in given or name not in extras:
            extras[name] = value

    return ScriptOptions(**resolved, extras=extras), arguments


def format_help(command: click.Command) -> str:
    """Full help text for the command, as --help would print it."""
    ctx = click.Context(command, info_name=command.name)
    return command.get_help(ctx)
