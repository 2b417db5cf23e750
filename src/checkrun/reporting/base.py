"""Reporter interface definitions."""
from __future__ import annotations

from typing import List, Sequence

from checkrun.core.models import TestCase
from checkrun.core.results import CaseResult, CheckEvent, RunSummary


class Reporter:
    """Interface for output renderers."""

    def on_start(self, suite: str, cases: Sequence[TestCase]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_check(self, event: CheckEvent) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_case_result(self, result: CaseResult) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def on_complete(self, summary: RunSummary) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ReportManager:
    """Dispatches lifecycle callbacks to multiple reporters."""

    def __init__(self, reporters: Sequence[Reporter]) -> None:
        self._reporters = list(reporters)

    def add(self, reporter: Reporter) -> None:
        self._reporters.append(reporter)

    def start(self, suite: str, cases: Sequence[TestCase]) -> None:
        for reporter in self._reporters:
            reporter.on_start(suite, cases)

    def check(self, event: CheckEvent) -> None:
        for reporter in self._reporters:
            reporter.on_check(event)

    def handle_result(self, result: CaseResult) -> None:
        for reporter in self._reporters:
            reporter.on_case_result(result)

    def complete(self, summary: RunSummary) -> None:
        for reporter in self._reporters:
            reporter.on_complete(summary)

    def reporters(self) -> List[Reporter]:
        return list(self._reporters)
