"""Signals raised by check primitives and harness misuse errors."""
from __future__ import annotations


class CaseSignal(BaseException):
    """Base for the non-local exits that end a single test case.

    Derived from ``BaseException`` so a case body catching ``Exception``
    cannot swallow them; the run loop catches them at the case boundary.
    """


class CheckFailure(CaseSignal):
    """A check failed, or passed while a failure was expected."""


class SkipCase(CaseSignal):
    """The case asked to be skipped."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(RuntimeError):
    """The harness API was used incorrectly."""
