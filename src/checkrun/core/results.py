"""Result data structures produced by the run loop."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from checkrun.reporting.output import OutputLine

from .models import ExitStatus, Outcome, TestCase


@dataclass
class CheckEvent:
    """A check reported while its case was executing (FAIL, XFAIL or XPASS)."""

    kind: str
    case_id: int
    case_name: str
    filename: str
    line: int
    detail: OutputLine

    @property
    def fatal(self) -> bool:
        return self.kind != "XFAIL"


@dataclass
class CaseResult:
    """Outcome of executing a single test case."""

    case: TestCase
    outcome: Outcome
    checks: int = 0
    messages: List[str] = field(default_factory=list)
    skip_message: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILED


@dataclass
class RunSummary:
    """Totals emitted once every selected case has run."""

    suite: str
    checks: int
    errors: int
    results: List[CaseResult] = field(default_factory=list)
    exit_status: ExitStatus = ExitStatus.SUCCESS

    @property
    def empty(self) -> int:
        return sum(1 for result in self.results if result.outcome is Outcome.EMPTY)

    @property
    def skipped(self) -> int:
        return sum(1 for result in self.results if result.outcome is Outcome.SKIPPED)
