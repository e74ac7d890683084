"""Tests for console rendering and transcript gating."""

from __future__ import annotations

import pytest
from conftest import RecordingReporter

from scriptshell import Category, ConsoleReporter, ExecutionPolicy, ScriptContext, Transcript, Verbosity


@pytest.fixture
def console() -> ConsoleReporter:
    return ConsoleReporter(color=False)


class TestConsoleReporter:
    """Tests for the plain-text layout of each category."""

    @pytest.mark.parametrize(
        ("category", "text", "expected"),
        [
            (Category.COMMAND, "make", "$ make\n"),
            (Category.SKIPPED_COMMAND, "make", "# $ make\n"),
            (Category.ECHO, "hello", "# hello\n"),
            (Category.ERROR, "bad", "! bad\n"),
            (Category.COMMAND_OUTPUT, "raw text", "raw text\n"),
        ],
    )
    def test_prefixes(
        self,
        console: ConsoleReporter,
        capsys: pytest.CaptureFixture[str],
        category: Category,
        text: str,
        expected: str,
    ) -> None:
        """Should prefix each category as on a terminal."""
        console(category, text)
        assert capsys.readouterr().out == expected

    def test_multiline_echo_keeps_blank_lines(
        self, console: ConsoleReporter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Should prefix each line and keep blank lines blank."""
        console(Category.ECHO, "first\n\nlast")
        assert capsys.readouterr().out == "# first\n\n# last\n"

    def test_empty_echo_is_blank_line(
        self, console: ConsoleReporter, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Should print an empty echo as a blank line."""
        console(Category.ECHO, "")
        assert capsys.readouterr().out == "\n"

    def test_header_is_padded(self, console: ConsoleReporter, capsys: pytest.CaptureFixture[str]) -> None:
        """Should pad header lines to the longest one."""
        console(Category.HEADER, "a\nlonger")
        assert capsys.readouterr().out == "\n### a      ###\n### longer ###\n"

    def test_prompt_stays_on_line(self, console: ConsoleReporter, capsys: pytest.CaptureFixture[str]) -> None:
        """Should leave the cursor after the prompt."""
        console(Category.PROMPT, "Run?\n[Y/n]? ")
        assert capsys.readouterr().out == "Run?\n[Y/n]? "


class TestTranscript:
    """Tests for policy gating of script output."""

    def _transcript(self, level: Verbosity, reporter: RecordingReporter) -> Transcript:
        return Transcript(ScriptContext(policy=ExecutionPolicy.resolve(level)), reporter)

    def test_errors_level(self, reporter: RecordingReporter) -> None:
        """Should pass only errors at ERRORS."""
        transcript = self._transcript(Verbosity.ERRORS, reporter)
        transcript.echo("hidden")
        transcript.header("hidden")
        transcript.error("shown")
        assert reporter.events == [(Category.ERROR, "shown")]

    def test_echoes_level(self, reporter: RecordingReporter) -> None:
        """Should pass headers and echoes at ECHOES."""
        transcript = self._transcript(Verbosity.ECHOES, reporter)
        transcript.header("Title")
        transcript.echo("note")
        assert reporter.events == [(Category.HEADER, "Title"), (Category.ECHO, "note")]

    def test_forced_error_when_silent(self, reporter: RecordingReporter) -> None:
        """Should pass forced errors at SILENT."""
        transcript = self._transcript(Verbosity.SILENT, reporter)
        transcript.error("dropped")
        transcript.error("kept", force=True)
        assert reporter.events == [(Category.ERROR, "kept")]

    def test_follows_replaced_policy(self, reporter: RecordingReporter) -> None:
        """Should follow the context's current policy."""
        context = ScriptContext(policy=ExecutionPolicy.resolve(Verbosity.SILENT))
        transcript = Transcript(context, reporter)
        transcript.echo("before")
        context.policy = ExecutionPolicy.resolve(Verbosity.ALL)
        transcript.echo("after")
        assert reporter.texts(Category.ECHO) == ["after"]
