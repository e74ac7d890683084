"""Pytest configuration and fixtures for scriptshell tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator, Iterable
from pathlib import Path
from typing import Any

import pytest

from scriptshell import (
    Category,
    CommandResult,
    ExecutionPolicy,
    ProcessLauncher,
    ShellScript,
    Verbosity,
)


class RecordingReporter:
    """Collects (category, text) events instead of printing them."""

    def __init__(self) -> None:
        self.events: list[tuple[Category, str]] = []

    def __call__(self, category: Category, text: str) -> None:
        self.events.append((category, text))

    def texts(self, category: Category) -> list[str]:
        return [text for cat, text in self.events if cat is category]

    def joined(self) -> str:
        return "\n".join(text for _, text in self.events)


class FakeLauncher(ProcessLauncher):
    """Records commands and answers with canned results."""

    def __init__(self, results: dict[str, CommandResult] | None = None) -> None:
        self.calls: list[tuple[str, bool, Path]] = []
        self._results = results or {}

    async def run(self, command: str, *, capture: bool, cwd: Path) -> CommandResult:
        self.calls.append((command, capture, cwd))
        return self._results.get(command, CommandResult(stdout="", stderr="", exit_code=0))

    @property
    def commands(self) -> list[str]:
        return [command for command, _, _ in self.calls]


def scripted_answers(answers: Iterable[str]) -> Callable[[], Any]:
    """Input reader that replays answers, then reports end of input."""
    remaining = list(answers)

    async def read() -> str:
        return remaining.pop(0) + "\n" if remaining else ""

    return read


@pytest.fixture(autouse=True)
def _no_verbosity_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SCRIPTSHELL_VERBOSITY", raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="scriptshell_test_") as tmp:
        yield Path(tmp).resolve()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def make_script(temp_dir: Path, reporter: RecordingReporter) -> Callable[..., ShellScript]:
    """
    Build a ShellScript wired to the recording reporter.

    `verbosity` and `dry_run` set the baseline policy directly, for tests
    that call steps without going through run().
    """

    def factory(
        verbosity: Verbosity | str = Verbosity.ALL,
        *,
        dry_run: bool = False,
        interactive: bool = False,
        continue_on_error: bool = False,
        answers: Iterable[str] = (),
        **kwargs: Any,
    ) -> ShellScript:
        kwargs.setdefault("cwd", temp_dir)
        kwargs.setdefault("stdin", "")
        kwargs.setdefault("input_reader", scripted_answers(answers))
        script = ShellScript(
            "test-script",
            reporter=reporter,
            **kwargs,
        )
        script.context.policy = ExecutionPolicy.resolve(
            verbosity,
            dry_run=dry_run,
            interactive=interactive,
            continue_on_error=continue_on_error,
        )
        return script

    return factory


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()
