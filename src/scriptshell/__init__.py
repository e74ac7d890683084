"""
Top-level facade for scriptshell.
"""

from scriptshell._types import AbortScope, Category, CommandResult, ScriptOutcome, Verbosity
from scriptshell.cli import ScriptOptions
from scriptshell.context import ScriptContext
from scriptshell.errors import ArgumentsNotValid, CommandFailure, ScriptShellError
from scriptshell.executor import CommandExecutor
from scriptshell.output import ConsoleReporter, Transcript
from scriptshell.policy import CallPolicy, CommandOptions, ExecutionPolicy
from scriptshell.process import LAUNCH_FAILURE_STATUS, LocalLauncher, ProcessLauncher
from scriptshell.prompt import Prompter
from scriptshell.router import AbortRouter
from scriptshell.script import ShellScript
from scriptshell.section import Section

# Exports
__all__ = [
    "ShellScript",
    "ScriptOptions",
    "ScriptOutcome",
    "ScriptContext",
    "Section",
    "CommandExecutor",
    "CommandResult",
    "CommandOptions",
    "CallPolicy",
    "ExecutionPolicy",
    "Verbosity",
    "AbortScope",
    "AbortRouter",
    "Category",
    "ConsoleReporter",
    "Transcript",
    "Prompter",
    "ProcessLauncher",
    "LocalLauncher",
    "LAUNCH_FAILURE_STATUS",
    "ScriptShellError",
    "CommandFailure",
    "ArgumentsNotValid",
]
