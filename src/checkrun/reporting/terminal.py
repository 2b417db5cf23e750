"""Terminal reporter producing the line-oriented run log."""
from __future__ import annotations

from typing import IO, Optional, Sequence

from checkrun.core.models import Outcome, TestCase
from checkrun.core.results import CaseResult, CheckEvent, RunSummary

from .base import Reporter
from .output import OutputLine, Printer


STATUS_COLORS = {
    "OK": "green",
    "FAIL": "red",
    "XPASS": "red",
    "XFAIL": "yellow",
    "SKIP": "yellow",
    "?": "yellow",
}


def digit_count(number: int) -> int:
    return len(str(number)) if number > 0 else 0


class TerminalReporter(Reporter):
    """Human-readable reporter writing to a log and an error stream.

    Passing lines, skips, expected failures and the start banner go to the
    log stream; failures go to the error stream.
    """

    def __init__(
        self,
        log_output: Optional[IO[str]] = None,
        error_output: Optional[IO[str]] = None,
        *,
        color: Optional[bool] = None,
    ) -> None:
        self._log = Printer(log_output, color=color)
        self._error = Printer(error_output, color=color, err=True)
        self._width = 0

    def on_start(self, suite: str, cases: Sequence[TestCase]) -> None:
        self._width = digit_count(max((case.id for case in cases), default=0))
        line = OutputLine().write("Starting", suite, bold=True)
        line.write("with", len(cases), "test cases...")
        self._log.echo(line)

    def on_check(self, event: CheckEvent) -> None:
        line = self._case_header(event.kind, event.case_id, event.case_name)
        line.write("at", event.filename, "on line", event.line)
        line.break_line().extend(event.detail)
        printer = self._error if event.fatal else self._log
        printer.echo(line)

    def on_case_result(self, result: CaseResult) -> None:
        case = result.case
        if result.outcome is Outcome.OK:
            self._log.echo(self._case_header("OK", case.id, case.name))
        elif result.outcome is Outcome.EMPTY:
            self._log.echo(self._case_header("?", case.id, "<unknown>"))
        elif result.outcome is Outcome.SKIPPED:
            line = self._case_header("SKIP", case.id, case.name)
            line.break_line().write(result.skip_message or "")
            self._log.echo(line)

    def on_complete(self, summary: RunSummary) -> None:
        line = OutputLine().write("Finished", summary.suite, bold=True)
        line.write("with")
        line.write(f"{summary.errors} errors", fg="red" if summary.errors else None, bold=bool(summary.errors))
        line.write("out of", summary.checks, "checks.")
        if summary.empty:
            line.write(summary.empty, "test cases didn't contain any checks!", fg="yellow")
        printer = self._error if summary.errors else self._log
        printer.echo(line)

    def no_tests(self, suite: str) -> None:
        line = OutputLine().write("No tests to run in", suite)
        line.write("!", nospace=True)
        self._error.echo(line)

    def _case_header(self, label: str, case_id: int, name: str) -> OutputLine:
        bold_label = label in ("FAIL", "XPASS", "XFAIL")
        line = OutputLine()
        line.write(f"{label:>6}", fg=STATUS_COLORS[label], bold=bold_label)
        line.write("[", fg="blue")
        line.write(self.padded(case_id), fg="cyan", bold=True, nospace=True)
        line.write("]", fg="blue", nospace=True)
        line.write(f"{name}()", bold=True)
        return line

    def padded(self, case_id: int) -> str:
        return str(case_id).rjust(self._width)
